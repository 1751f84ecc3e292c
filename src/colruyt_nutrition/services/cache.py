"""Persistent nutrition cache on top of a string key-value store."""

import logging
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from colruyt_nutrition.domain.nutrition import NutritionRecord

_logger = logging.getLogger(__name__)


class ValueStore(Protocol):
    """Synchronous string storage shared by the whole process."""

    def get_value(self, key: str, default: str) -> str:
        """Return the stored value for ``key`` or ``default``."""

    def set_value(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""


@dataclass
class InMemoryValueStore(ValueStore):
    """Dictionary-backed store; lives as long as the process."""

    values: dict[str, str] = field(default_factory=dict)

    def get_value(self, key: str, default: str) -> str:
        return self.values.get(key, default)

    def set_value(self, key: str, value: str) -> None:
        self.values[key] = value


class CachedNutrition(BaseModel):
    """Stored shape of a cache entry."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    timestamp: datetime
    per_unit: str | None = Field(default=None, alias="perUnit")
    en_kj: float | None = Field(default=None, alias="enKj")
    en_kcal: float | None = Field(default=None, alias="enKcal")
    fat: float | None = None
    sat_fat: float | None = Field(default=None, alias="satFat")
    carbs: float | None = None
    sugars: float | None = None
    fibre: float | None = None
    protein: float | None = None
    salt: float | None = None

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


@dataclass
class NutritionCache:
    """Cache of nutrition records keyed by product identifier.

    Entries are returned whether fresh or stale; callers decide freshness.
    """

    store: ValueStore
    key_prefix: str = "cache_"

    def get(self, key: int) -> NutritionRecord | None:
        """Return the stored record, or ``None`` when missing or unreadable."""
        raw = self.store.get_value(self._key(key), "{}")
        try:
            entry = CachedNutrition.model_validate_json(raw)
        except ValidationError:
            _logger.debug("Ignoring unreadable cache entry: key=%s", key)
            return None
        return NutritionRecord(**entry.model_dump())

    def put(self, key: int, record: NutritionRecord) -> None:
        """Serialize and store ``record`` under ``key``."""
        entry = CachedNutrition(**asdict(record))
        self.store.set_value(
            self._key(key), entry.model_dump_json(by_alias=True, exclude_none=True)
        )

    def _key(self, key: int) -> str:
        return f"{self.key_prefix}{key}"
