"""Watch the product listing and write calorie readouts into it."""

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Protocol

from colruyt_nutrition.domain.nutrition import format_reading, parse_item_identifier
from colruyt_nutrition.services.nutrition import NutritionResolver

PENDING_TEXT = "..."
MISSING_TEXT = "—"

_logger = logging.getLogger(__name__)


class Indicator(Protocol):
    """Element holding the readout for one product."""

    def set_text(self, text: str) -> None:
        """Replace the content with plain text."""

    def set_reading(self, value: str, annotation: str) -> None:
        """Show ``value`` followed by a subscript ``annotation``."""


class PageElement(Protocol):
    """Element of the host page."""

    def get_attribute(self, name: str) -> str | None:
        """Return an attribute value, if set."""

    def add_marker(self, marker: str) -> None:
        """Tag the element so selectors can exclude it."""

    def align_right(self) -> None:
        """Right-align the element's content."""

    def prepend_indicator(self, text: str) -> Indicator:
        """Insert a new indicator as the first child and return it."""


class MutationStream(Protocol):
    """Subscription to the change batches of a page."""

    def __aiter__(self) -> AsyncIterator[object]:
        """Iterate over batches, one item per batch."""

    def close(self) -> None:
        """Stop receiving batches."""


class Page(Protocol):
    """Host page document and its stream of changes."""

    def query_all(self, selector: str) -> list[PageElement]:
        """Return every element matching ``selector``."""

    async def wait_for(self, selector: str, within: PageElement) -> PageElement:
        """Wait until ``within`` contains a match for ``selector``."""

    def mutations(self) -> MutationStream:
        """Subscribe now to the batches of changes."""


@dataclass
class DomWatcher:
    """Enrich product tiles as they appear on the page.

    Every tile is marked as soon as it is seen, so it is handled at most once
    even when several change batches report it.
    """

    page: Page
    resolver: NutritionResolver
    item_selector: str = ".assortment-overview > .grid > a"
    anchor_selector: str = ".price-info__unit-price"
    identifier_attribute: str = "technicalarticlenumber"
    marker: str = "DUNCANNAH_NUTRITIONAL_INFO"
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, init=False, repr=False)
    _observer: asyncio.Task[None] | None = field(default=None, init=False, repr=False)
    _subscription: MutationStream | None = field(default=None, init=False, repr=False)

    def start(self) -> None:
        """Handle tiles already on the page and subscribe to changes."""
        self.scan()
        if self._observer is None:
            self._subscription = self.page.mutations()
            self._observer = asyncio.get_running_loop().create_task(
                self._observe(self._subscription)
            )

    async def stop(self) -> None:
        """Stop observing and cancel every tile still in progress."""
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        pending = list(self._tasks)
        if self._observer is not None:
            pending.append(self._observer)
            self._observer = None
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    async def wait_idle(self, timeout: float | None = None) -> bool:
        """Wait for in-progress tiles; return False if ``timeout`` expired."""
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        while self._tasks:
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                return False
            await asyncio.wait(set(self._tasks), timeout=remaining)
        return True

    def scan(self) -> int:
        """Start handling every unmarked tile; return how many were started."""
        loop = asyncio.get_running_loop()
        started = 0
        for item in self.page.query_all(f"{self.item_selector}:not(.{self.marker})"):
            item.add_marker(self.marker)
            identifier = parse_item_identifier(
                item.get_attribute(self.identifier_attribute)
            )
            if identifier is None:
                continue
            task = loop.create_task(self._handle_item(item, identifier))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            started += 1
        return started

    async def _observe(self, batches: MutationStream) -> None:
        async for _ in batches:
            self.scan()

    async def _handle_item(self, item: PageElement, identifier: int) -> None:
        try:
            anchor = await self.page.wait_for(self.anchor_selector, within=item)
            anchor.align_right()
            indicator = anchor.prepend_indicator(PENDING_TEXT)
            record = await self.resolver.resolve(identifier)
        except Exception:
            _logger.exception("Nutrition lookup failed: identifier=%s", identifier)
            return

        if record is None or not record.is_usable:
            indicator.set_text(MISSING_TEXT)
            return
        value, annotation = format_reading(record)
        indicator.set_reading(value, annotation)
