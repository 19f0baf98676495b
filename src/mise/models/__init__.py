"""
Mise - Models.
"""

from mise.models.entities import (
    ChatMessage,
    ChefProfile,
    ConsolidatedIngredient,
    Ingredient,
    MealType,
    NutritionalValues,
    ProteinType,
    ProviderKey,
    Recipe,
    RecipeIdea,
    UserPreferences,
)
from mise.models.status import (
    Completed,
    Connecting,
    Error,
    Idle,
    RequestStatus,
    Streaming,
    Validating,
)

__all__ = [
    "ChatMessage",
    "ChefProfile",
    "ConsolidatedIngredient",
    "Ingredient",
    "MealType",
    "NutritionalValues",
    "ProteinType",
    "ProviderKey",
    "Recipe",
    "RecipeIdea",
    "UserPreferences",
    "RequestStatus",
    "Idle",
    "Validating",
    "Connecting",
    "Streaming",
    "Completed",
    "Error",
]
