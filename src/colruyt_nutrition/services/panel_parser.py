"""Extraction of nutrient values from the product info HTML page."""

import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from colruyt_nutrition.domain.nutrition import DEFAULT_PER_UNIT, NUTRIENT_LABELS

PANEL_SELECTOR = "#voedingswaarden > div > .row.values > div:first-child"

_PER_UNIT_PATTERN = re.compile(r"per.(.+)")
_NUMBER_PATTERN = re.compile(r"[-+]?\d+(?:[.,]\d+)?")


class NutritionPanelError(ValueError):
    """Raised when a nutrition panel is present but cannot be read."""


@dataclass(frozen=True)
class NutritionPanel:
    """Values read from a nutrition panel, keyed by record field name."""

    per_unit: str
    values: dict[str, float]


def parse_nutrition_panel(html: str) -> NutritionPanel | None:
    """Parse the product info page.

    Returns ``None`` when the page has no nutrition panel. Rows with unknown
    labels, missing parts, or values that are zero or unparseable are left out.
    """
    document = BeautifulSoup(html, "html.parser")
    panel = document.select_one(PANEL_SELECTOR)
    if panel is None:
        return None

    values: dict[str, float] = {}
    for row in panel.select(".value-detail"):
        name_el = row.select_one(".val-name")
        number_el = row.select_one(".val-nbr")
        if name_el is None or number_el is None:
            continue
        field_name = NUTRIENT_LABELS.get(_text(name_el))
        if field_name is None:
            continue
        value = parse_amount(_text(number_el))
        if not value:
            continue
        values[field_name] = value

    return NutritionPanel(per_unit=_per_unit(panel), values=values)


def parse_amount(text: str) -> float | None:
    """Return the first number in ``text``, accepting a decimal comma."""
    match = _NUMBER_PATTERN.search(text)
    if match is None:
        return None
    return float(match.group(0).replace(",", "."))


def _per_unit(panel: Tag) -> str:
    subtitle = panel.select_one(".subtitle")
    if subtitle is None:
        raise NutritionPanelError("Nutrition panel has no subtitle")
    match = _PER_UNIT_PATTERN.search(_text(subtitle))
    per_unit = match.group(1).strip() if match else ""
    return per_unit or DEFAULT_PER_UNIT


def _text(element: Tag) -> str:
    return " ".join(element.get_text(" ").split())
