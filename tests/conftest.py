"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from colruyt_nutrition.adapters.productinfo_client import HttpResult, ProductInfoClient
from colruyt_nutrition.config import Settings
from colruyt_nutrition.services.cache import InMemoryValueStore, NutritionCache
from colruyt_nutrition.services.nutrition import NutritionResolver
from colruyt_nutrition.services.task_queue import RateLimitedTaskQueue

NO_PANEL_HTML = "<html><body><div id='productinfo'>No data</div></body></html>"


def productinfo_html(
    rows: list[tuple[str, str]], subtitle: str = "Nutritional values per 100g"
) -> str:
    """Build a product info page with a nutrition panel."""
    row_html = "".join(
        '<div class="value-detail">'
        f'<span class="val-name">{name}</span>'
        f'<span class="val-nbr">{value}</span>'
        "</div>"
        for name, value in rows
    )
    return (
        "<html><body>"
        '<div id="voedingswaarden"><div><div class="row values">'
        f'<div><p class="subtitle">{subtitle}</p>{row_html}</div>'
        '<div><p class="subtitle">per portion</p></div>'
        "</div></div></div>"
        "</body></html>"
    )


def tile_html(identifier: str, with_anchor: bool = True) -> str:
    """Build one product tile of the listing."""
    anchor = (
        '<div class="price-info"><span class="price-info__unit-price">'
        "€ 3,98/kg</span></div>"
        if with_anchor
        else '<div class="price-info"></div>'
    )
    return f'<a technicalarticlenumber="{identifier}" href="#">{anchor}</a>'


def listing_html(*tiles: str) -> str:
    """Build a product listing page holding ``tiles``."""
    return (
        "<html><body><div class='assortment-overview'><div class='grid'>"
        + "".join(tiles)
        + "</div></div></body></html>"
    )


@dataclass
class FakeProductInfoClient(ProductInfoClient):
    """Fake product info client serving pages by identifier."""

    pages: dict[int, str] = field(default_factory=dict)
    default_page: str = NO_PANEL_HTML
    error: Exception | None = None
    urls: list[str] = field(default_factory=list)

    @property
    def calls(self) -> int:
        return len(self.urls)

    async def get(self, url: str) -> HttpResult:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        identifier = int(url.rsplit("/", 1)[-1])
        return HttpResult(status=200, text=self.pages.get(identifier, self.default_page))


@dataclass
class FakeClock:
    """Manually advanced clock with an async sleep."""

    current: datetime = field(
        default_factory=lambda: datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    )
    seconds: float = 0.0
    sleeps: list[float] = field(default_factory=list)

    def now(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.seconds += seconds
        await asyncio.sleep(0)


@pytest.fixture
def settings() -> Settings:
    return Settings(request_delay_seconds=0, storage_backend="memory")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def value_store() -> InMemoryValueStore:
    return InMemoryValueStore()


@pytest.fixture
def productinfo_client() -> FakeProductInfoClient:
    return FakeProductInfoClient()


@pytest.fixture
def resolver(
    productinfo_client: FakeProductInfoClient,
    value_store: InMemoryValueStore,
    clock: FakeClock,
) -> NutritionResolver:
    return NutritionResolver(
        client=productinfo_client,
        cache=NutritionCache(value_store),
        queue=RateLimitedTaskQueue(delay_seconds=1.0, sleep=clock.sleep),
        now=clock.now,
    )
