"""
Mise - Recipe Markdown Parser.

Extracts a structured Recipe from the markdown the chef prompt asks for:

    ## 🍽️ Title
    **⏱️ Prep**: 10 min | **🍳 Cook**: 20 min | **👥 Servings**: 2
    ### 📦 Ingredients
    - Tomato (500g)
    ### 👨‍🍳 Instructions
    1. ...
    ### 💡 Chef's Tip
    ### ⚠️ Notices

Models drift from the format, so every field has a fallback and both
English and Spanish labels are recognized.
"""

import logging
import re

from mise.core.errors import RecipeParseError
from mise.models.entities import Ingredient, NutritionalValues, Recipe
from mise.parsing.ingredients import UNIT_ALIASES

logger = logging.getLogger(__name__)

DEFAULT_PREP_TIME = 15
DEFAULT_COOK_TIME = 20
DEFAULT_SERVINGS = 2

_HEADING = re.compile(r"^(#{1,3})\s*(.+?)\s*#*\s*$")
_BULLET = re.compile(r"^[-*•]\s*")
_NUMBERED = re.compile(r"^\d+[.)]\s*(.+)$")
_ALLERGEN_MARK = re.compile(r"⚠️|⚠|alérgeno|alergeno|allergen", re.IGNORECASE)

_PREP_PATTERNS = [
    re.compile(r"preparaci[oó]n\W*(\d+)\s*(?:min|minutos?)", re.IGNORECASE),
    re.compile(r"prep(?:aration)?(?:\s*time)?\W*(\d+)\s*(?:min|minutes?)", re.IGNORECASE),
]
_COOK_PATTERNS = [
    re.compile(r"cocci[oó]n\W*(\d+)\s*(?:min|minutos?)", re.IGNORECASE),
    re.compile(r"cook(?:ing)?(?:\s*time)?\W*(\d+)\s*(?:min|minutes?)", re.IGNORECASE),
]
_TOTAL_PATTERN = re.compile(r"(?:tiempo\s*total|total\s*time)\W*(\d+)\s*(?:min|minutos?|minutes?)", re.IGNORECASE)
_SERVINGS_PATTERNS = [
    re.compile(r"(?:servings?|porciones?|raciones?|serves)\W*(\d+)", re.IGNORECASE),
    re.compile(r"(\d+)\s*(?:porciones?|raciones?|servings?|personas?|people)", re.IGNORECASE),
    re.compile(r"para\s*(\d+)\s*(?:personas?|porciones?)", re.IGNORECASE),
    re.compile(r"👥\D*(\d+)"),
]

_UNITS = "|".join(sorted((re.escape(u) for u in UNIT_ALIASES), key=len, reverse=True))
_QTY = r"\d+(?:[.,]\d+)?(?:\s*/\s*\d+)?"
_INGREDIENT_PATTERNS = [
    ("qty_unit_name", re.compile(rf"^({_QTY})\s*({_UNITS})\.?\s+(?:de\s+|of\s+)?(.+)$", re.IGNORECASE)),
    ("qty_name", re.compile(rf"^({_QTY})\s+(.+)$")),
    ("name_paren", re.compile(r"^(.+?)\s*\(([^()]+)\)$")),
    ("to_taste", re.compile(r"^(.+?)\s+(al gusto|to taste)$", re.IGNORECASE)),
]

_SECTION_KEYS = {
    "ingredients": ("ingredientes", "ingredients", "ingredient"),
    "instructions": ("instrucciones", "instructions", "preparación", "preparation", "pasos", "steps", "method"),
    "tips": ("consejo", "tip", "consejos", "tips", "notas", "notes"),
    "notices": ("avisos", "notices", "warnings", "alérgenos", "allergens"),
    "nutrition": ("nutrición", "nutrition", "valores nutricionales", "nutritional values"),
}

_NUTRIENT_PATTERNS = {
    "calories": re.compile(r"(?:calor[ií]as?|calories?|kcal)\W*(\d+)", re.IGNORECASE),
    "protein": re.compile(r"(?:prote[ií]nas?|protein)\W*(\d+)", re.IGNORECASE),
    "carbs": re.compile(r"(?:carbohidratos?|carbs?|carbohydrates?)\W*(\d+)", re.IGNORECASE),
    "fat": re.compile(r"(?:grasas?|fat)\W*(\d+)", re.IGNORECASE),
}

_NOTICE_PATTERNS = [
    re.compile(r"^\W*⚠️?\s*(?:alerta|warning|alérgeno|allergen)\w*[:\s]+(.+)$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^\W*(?:contiene|contains)[:\s]+(.+)$", re.IGNORECASE | re.MULTILINE),
]


def has_recipe_structure(markdown: str) -> bool:
    """True if the text mentions both an ingredient list and steps."""
    has_ingredients = re.search(r"ingredientes?|ingredients?", markdown, re.IGNORECASE)
    has_steps = re.search(
        r"instrucciones?|instructions?|pasos?|steps?|preparaci[oó]n|preparation", markdown, re.IGNORECASE
    )
    return bool(has_ingredients and has_steps)


def _heading_key(text: str) -> str:
    """Heading text without emoji, markup or punctuation, lowercased."""
    return " ".join(re.sub(r"[^\w\s]", " ", text).lower().split())


def _split_sections(markdown: str) -> list[tuple[str, list[str]]]:
    sections: list[tuple[str, list[str]]] = []
    for line in markdown.splitlines():
        match = _HEADING.match(line.strip())
        if match and len(match.group(1)) >= 2:
            sections.append((_heading_key(match.group(2)), []))
        elif sections:
            sections[-1][1].append(line)
    return sections


def _find_section(sections: list[tuple[str, list[str]]], kind: str) -> list[str] | None:
    keys = _SECTION_KEYS[kind]
    for heading, lines in sections:
        if any(k in heading for k in keys):
            return lines
    return None


def _extract_title(markdown: str) -> str:
    for line in markdown.splitlines():
        match = _HEADING.match(line.strip())
        if match and len(match.group(1)) <= 2:
            title = re.sub(r"^[^\w¡¿]+", "", match.group(2)).strip(" *")
            if title:
                return title

    bold = re.search(r"\*\*(?:Receta|Recipe|Título|Title)[:\s]*(.+?)\*\*", markdown, re.IGNORECASE)
    if bold:
        return bold.group(1).strip()

    for line in markdown.splitlines():
        stripped = re.sub(r"^#+\s*", "", line).strip(" *")
        if stripped:
            return stripped

    raise RecipeParseError("No title found in generated recipe")


def _first_int(patterns: list[re.Pattern[str]], text: str) -> int | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None


def _extract_times(markdown: str) -> tuple[int, int]:
    prep = _first_int(_PREP_PATTERNS, markdown)
    cook = _first_int(_COOK_PATTERNS, markdown)
    if prep is None and cook is None:
        total = _first_int([_TOTAL_PATTERN], markdown)
        if total is not None:
            return round(total * 0.3), round(total * 0.7)
    return (
        prep if prep is not None else DEFAULT_PREP_TIME,
        cook if cook is not None else DEFAULT_COOK_TIME,
    )


def parse_ingredient_line(line: str) -> Ingredient:
    """
    Parse one bullet into an Ingredient.

    "200g chicken", "1 taza de arroz", "Tomato (500g)", "Salt to taste",
    "2 eggs (⚠️ allergen)".
    """
    is_allergen = bool(_ALLERGEN_MARK.search(line))
    clean = re.sub(r"\([^()]*(?:⚠️|⚠|alérgeno|allergen)[^()]*\)", "", line, flags=re.IGNORECASE)
    clean = clean.replace("⚠️", "").replace("⚠", "").strip(" *")

    for kind, pattern in _INGREDIENT_PATTERNS:
        match = pattern.match(clean)
        if not match:
            continue
        if kind == "qty_unit_name":
            return Ingredient(
                name=match.group(3).strip(),
                amount=f"{match.group(1)} {match.group(2)}",
                is_allergen=is_allergen,
            )
        if kind == "qty_name":
            return Ingredient(name=match.group(2).strip(), amount=match.group(1), is_allergen=is_allergen)
        if kind == "name_paren":
            return Ingredient(name=match.group(1).strip(), amount=match.group(2).strip(), is_allergen=is_allergen)
        return Ingredient(name=match.group(1).strip(), amount=match.group(2).lower(), is_allergen=is_allergen)

    return Ingredient(name=clean, amount="", is_allergen=is_allergen)


def _extract_ingredients(lines: list[str] | None) -> list[Ingredient]:
    ingredients = []
    for line in lines or []:
        stripped = line.strip()
        if not _BULLET.match(stripped):
            continue
        content = _BULLET.sub("", stripped).strip()
        if content:
            ingredients.append(parse_ingredient_line(content))
    return ingredients


def _extract_instructions(lines: list[str] | None) -> list[str]:
    steps = []
    for line in lines or []:
        stripped = line.strip()
        if not stripped:
            continue
        numbered = _NUMBERED.match(stripped)
        if numbered:
            steps.append(numbered.group(1).strip())
        elif _BULLET.match(stripped):
            content = _BULLET.sub("", stripped).strip()
            if content:
                steps.append(content)
    return steps


def _join_section(lines: list[str] | None) -> str | None:
    if not lines:
        return None
    text = " ".join(_BULLET.sub("", line.strip()) for line in lines if line.strip())
    return text or None


def _extract_notice(sections: list[tuple[str, list[str]]], markdown: str) -> str | None:
    notice = _join_section(_find_section(sections, "notices"))
    if notice:
        return notice
    for pattern in _NOTICE_PATTERNS:
        match = pattern.search(markdown)
        if match:
            return match.group(1).strip()
    return None


def _extract_nutrients(lines: list[str] | None) -> NutritionalValues | None:
    if not lines:
        return None
    text = "\n".join(lines)
    values = {}
    for field, pattern in _NUTRIENT_PATTERNS.items():
        match = pattern.search(text)
        values[field] = int(match.group(1)) if match else 0
    if not any(values.values()):
        return None
    return NutritionalValues(**values)


def parse_recipe(markdown: str, provider: str, linked_message_id: str | None = None) -> Recipe:
    """
    Parse generated markdown into a Recipe.

    Raises:
        RecipeParseError: If no title can be found
    """
    title = _extract_title(markdown)
    # The title heading never doubles as a content section
    title_key = _heading_key(title)
    sections = [s for s in _split_sections(markdown) if s[0] != title_key]
    prep_time, cook_time = _extract_times(markdown)
    servings = _first_int(_SERVINGS_PATTERNS, markdown) or DEFAULT_SERVINGS

    recipe = Recipe(
        title=title,
        prep_time=prep_time,
        cook_time=cook_time,
        servings=servings,
        ingredients=_extract_ingredients(_find_section(sections, "ingredients")),
        instructions=_extract_instructions(_find_section(sections, "instructions")),
        tips=_join_section(_find_section(sections, "tips")),
        allergen_notice=_extract_notice(sections, markdown),
        nutrients=_extract_nutrients(_find_section(sections, "nutrition")),
        provider=provider,
        linked_message_id=linked_message_id,
    )
    for ingredient in recipe.ingredients:
        ingredient.recipe_title = recipe.title
    logger.debug(
        f"Parsed recipe '{recipe.title}': {len(recipe.ingredients)} ingredients, "
        f"{len(recipe.instructions)} steps"
    )
    return recipe
