"""
Mise - Output Parsing.

Post-processing of generated text: recipe ideas, structured recipes and
shopping-list consolidation.
"""

from mise.parsing.ideas import parse_ideas_response
from mise.parsing.ingredients import (
    IngredientConsolidator,
    ParsedAmount,
    consolidate_ingredients,
    format_amount,
    normalize_name,
    parse_amount,
)
from mise.parsing.recipe import has_recipe_structure, parse_recipe

__all__ = [
    "IngredientConsolidator",
    "ParsedAmount",
    "consolidate_ingredients",
    "format_amount",
    "has_recipe_structure",
    "normalize_name",
    "parse_amount",
    "parse_ideas_response",
    "parse_recipe",
]
