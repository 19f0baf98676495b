"""
Mise - Entity Models.

These models are what the persistence store holds. They are used for:
- Typed reads/writes of stored JSON
- Post-processing output (parsed recipes, recipe ideas)
- Prompt building (chef profile, pantry)
"""

from datetime import datetime
from enum import Enum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field


def new_id() -> str:
    return str(uuid4())


# =============================================================================
# Enumerations
# =============================================================================


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    DESSERT = "dessert"


class ProteinType(str, Enum):
    CHICKEN = "chicken"
    BEEF = "beef"
    PORK = "pork"
    FISH = "fish"
    SEAFOOD = "seafood"
    EGG = "egg"
    TOFU = "tofu"
    LEGUMES = "legumes"
    NONE = "none"  # Sentinel for missing/unknown protein


DietType = Literal["any", "omnivore", "vegetarian", "vegan", "keto", "paleo", "gluten-free"]
SkillLevel = Literal["novice", "home-cook", "pro"]


# =============================================================================
# User Entities
# =============================================================================


class ChefProfile(BaseModel):
    """The user's cooking profile, injected into system prompts."""

    name: str | None = None
    age: int | None = None
    gender: Literal["male", "female", "non-binary", "prefer-not-to-say"] = "prefer-not-to-say"
    allergies: list[str] = Field(default_factory=list)
    conditions: list[str] = Field(default_factory=list)
    diet: DietType = "any"
    location: str | None = None
    skill_level: SkillLevel = "home-cook"
    dislikes: list[str] = Field(default_factory=list)


class UserPreferences(BaseModel):
    theme: Literal["light", "dark", "system"] = "system"
    locale: Literal["en", "es"] = "en"
    remember_keys: bool = False


class ProviderKey(BaseModel):
    """A saved credential for one provider."""

    provider: str
    key: str
    validated: bool = False
    last_validated: datetime | None = None
    selected_model: str | None = None


# =============================================================================
# Conversation
# =============================================================================


class ChatMessage(BaseModel):
    id: str = Field(default_factory=new_id)
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)


# =============================================================================
# Recipes
# =============================================================================


class Ingredient(BaseModel):
    """One ingredient line. Amount is free text ("500g", "1/2 cup", "to taste")."""

    name: str
    amount: str = ""
    is_allergen: bool = False
    recipe_title: str | None = None  # Recipe this line came from (shopping list)


class NutritionalValues(BaseModel):
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0


class Recipe(BaseModel):
    """A structured recipe parsed from generated markdown."""

    id: str = Field(default_factory=lambda: f"recipe-{uuid4().hex[:12]}")
    title: str
    prep_time: int = 15
    cook_time: int = 20
    servings: int = 2
    ingredients: list[Ingredient] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    tips: str | None = None
    allergen_notice: str | None = None
    nutrients: NutritionalValues | None = None
    generated_at: datetime = Field(default_factory=datetime.now)
    provider: str
    linked_message_id: str | None = None  # User ChatMessage that produced this recipe


class RecipeIdea(BaseModel):
    """A lightweight suggestion (title + description) ahead of full generation."""

    id: str = Field(default_factory=new_id)
    title: str
    description: str
    meal_type: MealType
    protein_type: ProteinType = ProteinType.NONE
    ingredients: list[str] = Field(default_factory=list)
    vibes: list[str] = Field(default_factory=list)
    servings: int = 2
    created_at: datetime = Field(default_factory=datetime.now)
    is_used: bool = False
    linked_recipe_id: str | None = None


class ConsolidatedIngredient(BaseModel):
    """One shopping-list line after merging duplicates across recipes."""

    key: str  # Normalized name
    name: str  # First-seen display name
    amount: str  # Rendered total
    total_amount: float
    unit: str
    sources: list[str] = Field(default_factory=list)  # Recipe titles
    is_allergen: bool = False
    is_consolidated: bool = False
