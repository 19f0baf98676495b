"""
Mise - Recipe Ideas Parser.

Turns the model's ideas response (a JSON array, possibly wrapped in a code
fence or surrounded by chatter) into RecipeIdea records.

Never raises. Anything unusable yields an empty list and a warning in
the log; the caller reports that as a soft "no ideas" result.
"""

import json
import logging
import re
from typing import Any

from mise.models.entities import MealType, ProteinType, RecipeIdea

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?\s*```\s*$")


def strip_code_fence(text: str) -> str:
    """Remove a leading ```lang / trailing ``` pair if present."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def find_json_array(text: str) -> str | None:
    """
    Return the first balanced top-level [...] in text, or None.

    Brackets inside string literals (and escaped quotes inside those) do
    not count toward the balance.
    """
    start = text.find("[")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def normalize_protein(value: Any) -> ProteinType:
    if isinstance(value, str):
        try:
            return ProteinType(value.strip().lower())
        except ValueError:
            pass
    return ProteinType.NONE


def _is_valid_item(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    title = item.get("title")
    description = item.get("description")
    return (
        isinstance(title, str)
        and isinstance(description, str)
        and bool(title.strip())
        and bool(description.strip())
    )


def split_ingredients(ingredients: str | list[str]) -> list[str]:
    """Comma-separated ingredient text -> trimmed non-empty items."""
    if isinstance(ingredients, str):
        parts = ingredients.split(",")
    else:
        parts = ingredients
    return [p.strip() for p in parts if p and p.strip()]


def parse_ideas_response(
    content: str,
    meal_type: MealType | None = None,
    vibes: list[str] | None = None,
    ingredients: str | list[str] = "",
    servings: int = 2,
    *,
    default_meal_type: MealType = MealType.LUNCH,
) -> list[RecipeIdea]:
    """
    Parse a model response into recipe ideas.

    Args:
        content: Raw model output
        meal_type: Requested meal type; default_meal_type when None
        vibes: Requested preference tags, copied onto every idea
        ingredients: Requested ingredients (comma-separated text or list)
        servings: Requested servings

    Returns:
        Accepted ideas in response order; empty on any failure
    """
    try:
        cleaned = strip_code_fence(content or "")
        array_text = find_json_array(cleaned)
        if array_text is None:
            logger.warning("No JSON array found in ideas response")
            return []

        parsed = json.loads(array_text)
        if not isinstance(parsed, list):
            logger.warning("Ideas response root is not an array")
            return []

        ingredient_list = split_ingredients(ingredients)
        tags = list(vibes or [])
        resolved_meal = meal_type or default_meal_type

        ideas = [
            RecipeIdea(
                title=item["title"].strip(),
                description=item["description"].strip(),
                meal_type=resolved_meal,
                protein_type=normalize_protein(item.get("proteinType")),
                ingredients=list(ingredient_list),
                vibes=list(tags),
                servings=servings,
            )
            for item in parsed
            if _is_valid_item(item)
        ]
        skipped = len(parsed) - len(ideas)
        if skipped:
            logger.debug(f"Skipped {skipped} malformed idea entries")
        return ideas

    except Exception as e:
        logger.warning(f"Failed to parse ideas response: {e}")
        return []
