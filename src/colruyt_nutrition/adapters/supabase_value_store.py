"""Supabase-backed key-value store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from colruyt_nutrition.services.cache import ValueStore


@dataclass
class SupabaseValueStore(ValueStore):
    """Store string values as rows of a Supabase table."""

    client: Client
    table_name: str = "kv_store"

    def get_value(self, key: str, default: str) -> str:
        """Return the stored value for a key."""
        response = (
            self.client.table(self.table_name)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return default
        value = response.data[0].get("value")
        return value if isinstance(value, str) else default

    def set_value(self, key: str, value: str) -> None:
        """Insert or replace the value for a key."""
        self.client.table(self.table_name).upsert(
            {
                "key": key,
                "value": value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="key",
        ).execute()
