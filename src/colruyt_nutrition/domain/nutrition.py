"""Nutrition domain models."""

import math
from dataclasses import dataclass, replace
from datetime import datetime

KJ_PER_KCAL = 4.184
DEFAULT_PER_UNIT = "100g"

NUTRIENT_LABELS = {
    "Energy kJ": "en_kj",
    "Energy kcal": "en_kcal",
    "Total fat": "fat",
    "Fat": "sat_fat",
    "Carbohydrate": "carbs",
    "Sugars": "sugars",
    "Fibre": "fibre",
    "Protein": "protein",
    "Salt": "salt",
}


@dataclass(frozen=True)
class NutritionRecord:
    """Nutrient values for a product, as fetched at ``timestamp``.

    A record with every nutrient absent is a negative marker: the upstream
    page had no nutrition panel for the product.
    """

    timestamp: datetime
    per_unit: str | None = None
    en_kj: float | None = None
    en_kcal: float | None = None
    fat: float | None = None
    sat_fat: float | None = None
    carbs: float | None = None
    sugars: float | None = None
    fibre: float | None = None
    protein: float | None = None
    salt: float | None = None

    @property
    def is_usable(self) -> bool:
        """Whether the record carries a calorie value to display."""
        return self.en_kcal is not None

    @property
    def is_negative(self) -> bool:
        return all(getattr(self, field) is None for field in NUTRIENT_LABELS.values())

    def with_derived_energy(self) -> "NutritionRecord":
        """Fill ``en_kcal`` from ``en_kj`` when only the latter is known."""
        if self.en_kj is not None and self.en_kcal is None:
            return replace(self, en_kcal=round_half_up(self.en_kj / KJ_PER_KCAL))
        return self

    def is_fresh(self, now: datetime, ttl_seconds: float) -> bool:
        return (now - self.timestamp).total_seconds() < ttl_seconds


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def parse_item_identifier(raw: str | None) -> int | None:
    """Parse a product identifier attribute.

    Returns ``None`` for missing, non-numeric and non-positive values.
    """
    if raw is None:
        return None
    cleaned = raw.strip()
    if not cleaned.isascii() or not cleaned.isdigit():
        return None
    value = int(cleaned)
    return value if value > 0 else None


def format_reading(record: NutritionRecord) -> tuple[str, str]:
    """Return the whole-number calorie text and its unit annotation."""
    kcal = "" if record.en_kcal is None else str(round_half_up(record.en_kcal))
    return kcal, f"kcal/{record.per_unit or DEFAULT_PER_UNIT}"

