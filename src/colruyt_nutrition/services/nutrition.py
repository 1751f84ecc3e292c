"""Nutrition lookups against the product info service with caching."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from colruyt_nutrition.adapters.productinfo_client import HttpResult, ProductInfoClient
from colruyt_nutrition.domain.nutrition import NutritionRecord
from colruyt_nutrition.services.cache import NutritionCache
from colruyt_nutrition.services.panel_parser import parse_nutrition_panel
from colruyt_nutrition.services.task_queue import RateLimitedTaskQueue

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class NutritionResolver:
    """Resolve product identifiers to nutrition records.

    Fresh cache entries are served without a request. Otherwise the product
    info page is fetched through the shared queue, parsed, and the outcome is
    cached: a full record when a calorie value is known, a negative entry when
    the page has no nutrition panel. A panel without a usable calorie value is
    not cached so that it is looked up again next time.
    """

    client: ProductInfoClient
    cache: NutritionCache
    queue: RateLimitedTaskQueue
    base_url: str = "https://fic.colruytgroup.com/productinfo/en/algc"
    ttl_seconds: float = 86400
    now: Callable[[], datetime] = field(default=_utc_now)

    async def resolve(self, identifier: int) -> NutritionRecord | None:
        """Return the nutrition record for a product, or ``None``."""
        if not _is_valid_identifier(identifier):
            return None

        cached = self.cache.get(identifier)
        if cached is not None and cached.is_fresh(self.now(), self.ttl_seconds):
            return cached if cached.is_usable else None

        url = f"{self.base_url.rstrip('/')}/{identifier}"
        response: HttpResult = await self.queue.enqueue(lambda: self.client.get(url))

        panel = parse_nutrition_panel(response.text)
        if panel is None:
            _logger.info("No nutrition panel: identifier=%s", identifier)
            self.cache.put(identifier, NutritionRecord(timestamp=self.now()))
            return None

        record = NutritionRecord(
            timestamp=self.now(), per_unit=panel.per_unit, **panel.values
        ).with_derived_energy()
        if not record.is_usable:
            _logger.info("Nutrition panel without energy: identifier=%s", identifier)
            return None

        self.cache.put(identifier, record)
        return record


def _is_valid_identifier(identifier: object) -> bool:
    return (
        isinstance(identifier, int)
        and not isinstance(identifier, bool)
        and identifier > 0
    )
