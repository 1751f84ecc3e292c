"""Dependency container wiring for the enrichment pipeline."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from colruyt_nutrition.adapters.json_file_value_store import JsonFileValueStore
from colruyt_nutrition.adapters.productinfo_client import (
    HttpxProductInfoClient,
    ProductInfoClient,
)
from colruyt_nutrition.adapters.supabase_value_store import SupabaseValueStore
from colruyt_nutrition.config import Settings
from colruyt_nutrition.services.cache import InMemoryValueStore, NutritionCache, ValueStore
from colruyt_nutrition.services.nutrition import NutritionResolver
from colruyt_nutrition.services.task_queue import RateLimitedTaskQueue
from colruyt_nutrition.services.watcher import DomWatcher, Page


@dataclass
class AppContainer:
    """Holds the process-wide services of one page session."""

    settings: Settings
    productinfo_client: ProductInfoClient
    value_store: ValueStore
    cache: NutritionCache
    queue: RateLimitedTaskQueue
    resolver: NutritionResolver
    close_resources: Callable[[], Awaitable[None]]

    def build_watcher(self, page: Page) -> DomWatcher:
        """Create a watcher for ``page`` sharing this container's resolver."""
        return DomWatcher(page=page, resolver=self.resolver)


def build_value_store(settings: Settings) -> ValueStore:
    """Create the value store selected by ``settings.storage_backend``."""
    if settings.storage_backend == "file":
        return JsonFileValueStore(Path(settings.storage_path))
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage requires supabase_url and supabase_service_key")
        return SupabaseValueStore(
            create_client(settings.supabase_url, settings.supabase_service_key)
        )
    return InMemoryValueStore()


def build_container(
    settings: Settings | None = None,
    *,
    productinfo_client: ProductInfoClient | None = None,
    value_store: ValueStore | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    http_client = productinfo_client
    if http_client is None:
        http_client = HttpxProductInfoClient.create(
            timeout_seconds=resolved_settings.request_timeout_seconds
        )
    store = value_store if value_store is not None else build_value_store(resolved_settings)
    cache = NutritionCache(store, key_prefix=resolved_settings.cache_key_prefix)
    queue = RateLimitedTaskQueue(delay_seconds=resolved_settings.request_delay_seconds)
    resolver = NutritionResolver(
        client=http_client,
        cache=cache,
        queue=queue,
        base_url=resolved_settings.productinfo_base_url,
        ttl_seconds=resolved_settings.cache_ttl_seconds,
    )

    async def close_resources() -> None:
        if isinstance(http_client, HttpxProductInfoClient):
            await http_client.close()

    return AppContainer(
        settings=resolved_settings,
        productinfo_client=http_client,
        value_store=store,
        cache=cache,
        queue=queue,
        resolver=resolver,
        close_resources=close_resources,
    )
