"""Enrich a static product listing snapshot."""

import logging

from colruyt_nutrition.adapters.soup_page import SoupPage
from colruyt_nutrition.containers import AppContainer

_logger = logging.getLogger(__name__)


async def enrich_html(
    html: str, container: AppContainer, *, idle_timeout: float | None = None
) -> str:
    """Run a watcher over ``html`` and return the enriched document.

    Tiles whose price anchor never shows up keep waiting until
    ``idle_timeout`` expires, ``settings.page_idle_timeout_seconds`` by
    default; they are then left without a readout.
    """
    if idle_timeout is None:
        idle_timeout = container.settings.page_idle_timeout_seconds
    page = SoupPage(html)
    watcher = container.build_watcher(page)
    watcher.start()
    try:
        if not await watcher.wait_idle(timeout=idle_timeout):
            _logger.warning("Stopped with product tiles still pending")
    finally:
        await watcher.stop()
    return page.to_html()
