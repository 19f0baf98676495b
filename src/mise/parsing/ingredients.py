"""
Mise - Ingredient Consolidation.

Merges ingredient lines from several recipes into one shopping list:
same name (case/whitespace-insensitive) becomes one line, quantities are
summed when their units agree.

Amount parsing understands a small English/Spanish unit vocabulary and
folds mass and volume to grams and milliliters so that "1/2 kg" and
"500g" add up.
"""

import logging
import re
from dataclasses import dataclass

from mise.models.entities import ConsolidatedIngredient, Ingredient

logger = logging.getLogger(__name__)


@dataclass
class ParsedAmount:
    """A quantity split into a number and a canonical unit."""

    value: float
    unit: str


# canonical unit -> (aliases, factor to canonical)
_UNIT_TABLE: dict[str, tuple[tuple[str, ...], float, str]] = {
    "g": (("g", "gr", "gram", "grams", "gramo", "gramos"), 1.0, "g"),
    "kg": (("kg", "kilo", "kilos", "kilogram", "kilograms", "kilogramo", "kilogramos"), 1000.0, "g"),
    "lb": (("lb", "lbs", "pound", "pounds", "libra", "libras"), 453.59, "g"),
    "oz": (("oz", "ounce", "ounces", "onza", "onzas"), 28.35, "g"),
    "ml": (("ml", "milliliter", "milliliters", "mililitro", "mililitros"), 1.0, "ml"),
    "l": (("l", "liter", "liters", "litre", "litres", "litro", "litros"), 1000.0, "ml"),
    "cup": (("cup", "cups", "taza", "tazas"), 1.0, "cup"),
    "tbsp": (("tbsp", "cda", "tablespoon", "tablespoons", "cucharada", "cucharadas"), 1.0, "tbsp"),
    "tsp": (("tsp", "cdta", "teaspoon", "teaspoons", "cucharadita", "cucharaditas"), 1.0, "tsp"),
    "unit": (
        ("item", "items", "unit", "units", "unidad", "unidades", "pieza", "piezas", "piece", "pieces"),
        1.0,
        "unit",
    ),
    "bunch": (("bunch", "bunches", "ramito", "ramitos"), 1.0, "bunch"),
}

# alias -> (factor, canonical unit)
UNIT_ALIASES: dict[str, tuple[float, str]] = {
    alias: (factor, canonical)
    for aliases, factor, canonical in _UNIT_TABLE.values()
    for alias in aliases
}

# A comma is a decimal separator only with one or two digits after it ("1,5");
# "1,000" is a thousands group and stays unparsed
_NUMBER = r"\d+(?:\.\d+|,\d{1,2})?"
_AMOUNT_RE = re.compile(
    rf"^(?P<num>{_NUMBER}(?:\s*/\s*{_NUMBER})?)\s*(?P<unit>[a-záéíóúñ]+)?\.?$",
    re.IGNORECASE,
)


def normalize_name(name: str) -> str:
    """
    Normalize an ingredient name for matching.

    Examples:
        normalize_name("  Olive   Oil ") -> "olive oil"
        normalize_name("TOMATO") -> "tomato"
    """
    return " ".join(name.lower().strip().split())


def _to_float(text: str) -> float:
    return float(text.replace(",", ".").strip())


def parse_amount(text: str) -> ParsedAmount:
    """
    Split a free-text amount into value and canonical unit.

    "1.5 kg" -> (1500, "g"), "1/2 cup" -> (0.5, "cup"), "3" -> (3, "").
    Anything that does not parse keeps its original text as the unit with
    value 0, e.g. "to taste" -> (0, "to taste").
    """
    raw = text or ""
    match = _AMOUNT_RE.match(raw.strip().lower())
    if not match:
        return ParsedAmount(value=0.0, unit=raw)

    unit_text = match.group("unit") or ""
    if unit_text and unit_text not in UNIT_ALIASES:
        return ParsedAmount(value=0.0, unit=raw)

    number = match.group("num")
    try:
        if "/" in number:
            numerator, denominator = number.split("/")
            value = _to_float(numerator) / _to_float(denominator)
        else:
            value = _to_float(number)
    except (ValueError, ZeroDivisionError):
        return ParsedAmount(value=0.0, unit=raw)

    if not unit_text:
        return ParsedAmount(value=value, unit="")

    factor, canonical = UNIT_ALIASES[unit_text]
    return ParsedAmount(value=value * factor, unit=canonical)


def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _format_scaled(value: float) -> str:
    return f"{value:.1f}".removesuffix(".0")


def format_amount(value: float, unit: str) -> str:
    """
    Render a consolidated amount.

    Grams and milliliters from 1000 upward are shown as kg / L with one
    decimal ("1.5 kg", "2 L"). A zero value renders as the bare unit, which
    is how unparsed amounts like "to taste" survive consolidation.
    """
    if value == 0:
        return unit
    if unit == "g" and value >= 1000:
        return f"{_format_scaled(value / 1000)} kg"
    if unit == "ml" and value >= 1000:
        return f"{_format_scaled(value / 1000)} L"
    return f"{_format_number(value)} {unit}".strip()


class IngredientConsolidator:
    """
    Incremental consolidation.

    Feeding batches one after another gives the same result as feeding
    their concatenation at once; lines keep first-seen order.
    """

    def __init__(self):
        self._entries: dict[str, ConsolidatedIngredient] = {}

    def add(self, items: list[Ingredient]) -> "IngredientConsolidator":
        for item in items:
            self._add_one(item)
        return self

    def _add_one(self, item: Ingredient) -> None:
        key = normalize_name(item.name)
        if not key:
            return
        parsed = parse_amount(item.amount)
        existing = self._entries.get(key)

        if existing is None:
            self._entries[key] = ConsolidatedIngredient(
                key=key,
                name=item.name.strip(),
                amount=item.amount,
                total_amount=parsed.value,
                unit=parsed.unit,
                sources=[item.recipe_title] if item.recipe_title else [],
                is_allergen=item.is_allergen,
                is_consolidated=False,
            )
            return

        if existing.unit == parsed.unit or not existing.unit or not parsed.unit:
            existing.total_amount += parsed.value
            if not existing.unit:
                existing.unit = parsed.unit
        else:
            logger.debug(f"Not summing {key}: {existing.unit!r} vs {parsed.unit!r}")

        if item.recipe_title and item.recipe_title not in existing.sources:
            existing.sources.append(item.recipe_title)
        existing.is_allergen = existing.is_allergen or item.is_allergen
        existing.is_consolidated = True
        existing.amount = format_amount(existing.total_amount, existing.unit)

    @property
    def results(self) -> list[ConsolidatedIngredient]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


def consolidate_ingredients(items: list[Ingredient]) -> list[ConsolidatedIngredient]:
    """One-shot consolidation of a list of ingredient lines."""
    return IngredientConsolidator().add(items).results
