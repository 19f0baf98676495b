"""
Mise - Persistence Store.

Typed, capped, deduplicated access to everything the app remembers between
runs: profile, credentials, chat, recipe history, recipe ideas, pantry and
shopping list.

Two rules hold for every public method:
- Without a backend (non-interactive context) it is a no-op. Reads return
  the empty value, writes do nothing.
- It never raises. Backend or validation failures are logged and the call
  degrades to the no-op result.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import TypeAdapter

from mise.models.entities import (
    ChatMessage,
    ChefProfile,
    Ingredient,
    MealType,
    ProteinType,
    ProviderKey,
    Recipe,
    RecipeIdea,
    UserPreferences,
)
from mise.storage.backends import StorageBackend

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "mise:"

MAX_CHAT_HISTORY = 20
MAX_RECIPE_HISTORY = 50
MAX_RECIPE_IDEAS = 200


class StorageKey(str, Enum):
    PROFILE = "profile"
    API_KEYS = "api-keys"
    PREFERENCES = "preferences"
    HISTORY = "history"
    CHAT_HISTORY = "chat-history"
    PANTRY = "pantry"
    SHOPPING_LIST = "shopping-list"
    LAST_PROVIDER = "last-provider"
    RECIPE_IDEAS = "recipe-ideas"


_ADAPTERS: dict[StorageKey, TypeAdapter] = {
    StorageKey.PROFILE: TypeAdapter(ChefProfile),
    StorageKey.API_KEYS: TypeAdapter(list[ProviderKey]),
    StorageKey.PREFERENCES: TypeAdapter(UserPreferences),
    StorageKey.HISTORY: TypeAdapter(list[Recipe]),
    StorageKey.CHAT_HISTORY: TypeAdapter(list[ChatMessage]),
    StorageKey.PANTRY: TypeAdapter(list[str]),
    StorageKey.SHOPPING_LIST: TypeAdapter(list[Ingredient]),
    StorageKey.LAST_PROVIDER: TypeAdapter(str),
    StorageKey.RECIPE_IDEAS: TypeAdapter(list[RecipeIdea]),
}


def normalize_title(title: str) -> str:
    """Case/whitespace-insensitive title key used for dedup."""
    return " ".join(title.lower().split())


class PersistenceStore:
    def __init__(self, backend: StorageBackend | None = None):
        self.backend = backend

    @property
    def available(self) -> bool:
        return self.backend is not None

    # =========================================================================
    # Typed primitives
    # =========================================================================

    def get(self, key: StorageKey, default: Any = None) -> Any:
        if self.backend is None:
            return default
        try:
            raw = self.backend.read(STORAGE_PREFIX + key.value)
            if raw is None:
                return default
            return _ADAPTERS[key].validate_json(raw)
        except Exception as e:
            logger.error(f"Failed to read {key.value}: {e}")
            return default

    def set(self, key: StorageKey, value: Any) -> None:
        if self.backend is None:
            return
        try:
            raw = _ADAPTERS[key].dump_json(value).decode("utf-8")
            self.backend.write(STORAGE_PREFIX + key.value, raw)
        except Exception as e:
            logger.error(f"Failed to write {key.value}: {e}")

    def remove(self, key: StorageKey) -> None:
        if self.backend is None:
            return
        try:
            self.backend.delete(STORAGE_PREFIX + key.value)
        except Exception as e:
            logger.error(f"Failed to remove {key.value}: {e}")

    def clear_all(self) -> None:
        """Remove every key this app owns, leaving foreign keys alone."""
        if self.backend is None:
            return
        try:
            for raw_key in self.backend.keys():
                if raw_key.startswith(STORAGE_PREFIX):
                    self.backend.delete(raw_key)
        except Exception as e:
            logger.error(f"Failed to clear store: {e}")

    def has_data(self) -> bool:
        if self.backend is None:
            return False
        try:
            return any(k.startswith(STORAGE_PREFIX) for k in self.backend.keys())
        except Exception as e:
            logger.error(f"Failed to list store keys: {e}")
            return False

    # =========================================================================
    # Profile & preferences
    # =========================================================================

    def get_profile(self) -> ChefProfile | None:
        return self.get(StorageKey.PROFILE)

    def set_profile(self, profile: ChefProfile) -> None:
        self.set(StorageKey.PROFILE, profile)

    def get_preferences(self) -> UserPreferences:
        return self.get(StorageKey.PREFERENCES) or UserPreferences()

    def update_preferences(self, **changes: Any) -> UserPreferences:
        current = self.get_preferences()
        try:
            updated = UserPreferences.model_validate({**current.model_dump(), **changes})
        except Exception as e:
            logger.error(f"Invalid preference update {changes}: {e}")
            return current
        self.set(StorageKey.PREFERENCES, updated)
        return updated

    # =========================================================================
    # API keys
    # =========================================================================

    def get_api_keys(self) -> list[ProviderKey]:
        return self.get(StorageKey.API_KEYS, [])

    def get_api_key(self, provider: str) -> ProviderKey | None:
        for entry in self.get_api_keys():
            if entry.provider == provider:
                return entry
        return None

    def set_api_key(
        self,
        provider: str,
        key: str,
        *,
        validated: bool = False,
        selected_model: str | None = None,
    ) -> None:
        """Insert or replace the credential for one provider."""
        entry = ProviderKey(
            provider=provider,
            key=key,
            validated=validated,
            last_validated=datetime.now() if validated else None,
            selected_model=selected_model,
        )
        keys = [k for k in self.get_api_keys() if k.provider != provider]
        keys.append(entry)
        self.set(StorageKey.API_KEYS, keys)

    def remove_api_key(self, provider: str) -> None:
        keys = self.get_api_keys()
        remaining = [k for k in keys if k.provider != provider]
        if len(remaining) != len(keys):
            self.set(StorageKey.API_KEYS, remaining)

    # =========================================================================
    # Session
    # =========================================================================

    def get_last_provider(self) -> str | None:
        return self.get(StorageKey.LAST_PROVIDER)

    def set_last_provider(self, provider: str) -> None:
        self.set(StorageKey.LAST_PROVIDER, provider)

    # =========================================================================
    # Pantry & shopping list
    # =========================================================================

    def get_pantry(self) -> list[str]:
        return self.get(StorageKey.PANTRY, [])

    def set_pantry(self, items: list[str]) -> None:
        cleaned: list[str] = []
        seen: set[str] = set()
        for item in items:
            name = item.strip()
            if name and name.lower() not in seen:
                seen.add(name.lower())
                cleaned.append(name)
        self.set(StorageKey.PANTRY, cleaned)

    def get_shopping_list(self) -> list[Ingredient]:
        return self.get(StorageKey.SHOPPING_LIST, [])

    def add_to_shopping_list(self, items: list[Ingredient]) -> None:
        if not items:
            return
        self.set(StorageKey.SHOPPING_LIST, self.get_shopping_list() + list(items))

    def remove_from_shopping_list(self, index: int) -> None:
        items = self.get_shopping_list()
        if 0 <= index < len(items):
            del items[index]
            self.set(StorageKey.SHOPPING_LIST, items)

    def clear_shopping_list(self) -> None:
        self.remove(StorageKey.SHOPPING_LIST)

    # =========================================================================
    # Recipe history (newest first, capped)
    # =========================================================================

    def get_history(self) -> list[Recipe]:
        return self.get(StorageKey.HISTORY, [])

    def add_to_history(self, recipe: Recipe) -> bool:
        """
        Put a recipe at the front of the history.

        A recipe whose normalized title is already stored is ignored.
        Returns True if the recipe was added.
        """
        history = self.get_history()
        key = normalize_title(recipe.title)
        if any(normalize_title(r.title) == key for r in history):
            logger.info(f"Duplicate recipe ignored: {recipe.title}")
            return False
        self.set(StorageKey.HISTORY, [recipe, *history][:MAX_RECIPE_HISTORY])
        return True

    def remove_from_history(self, recipe_id: str) -> None:
        history = self.get_history()
        remaining = [r for r in history if r.id != recipe_id]
        if len(remaining) != len(history):
            self.set(StorageKey.HISTORY, remaining)

    # =========================================================================
    # Chat history (oldest first, capped)
    # =========================================================================

    def get_chat_history(self) -> list[ChatMessage]:
        return self.get(StorageKey.CHAT_HISTORY, [])

    def add_to_chat_history(self, message: ChatMessage) -> None:
        """Append a message, skipping duplicate ids and evicting the oldest past the cap."""
        messages = self.get_chat_history()
        if any(m.id == message.id for m in messages):
            return
        messages.append(message)
        self.set(StorageKey.CHAT_HISTORY, messages[-MAX_CHAT_HISTORY:])

    def clear_chat_history(self) -> None:
        self.remove(StorageKey.CHAT_HISTORY)

    # =========================================================================
    # Recipe ideas (newest batch first, capped)
    # =========================================================================

    def get_recipe_ideas(self) -> list[RecipeIdea]:
        return self.get(StorageKey.RECIPE_IDEAS, [])

    def add_recipe_ideas(self, ideas: list[RecipeIdea]) -> list[RecipeIdea]:
        """
        Prepend a batch of ideas.

        Ideas whose normalized title already exists (stored or earlier in the
        same batch) are dropped. Returns the ideas actually added.
        """
        existing = self.get_recipe_ideas()
        seen = {normalize_title(i.title) for i in existing}
        added: list[RecipeIdea] = []
        for idea in ideas:
            key = normalize_title(idea.title)
            if not key or key in seen:
                continue
            seen.add(key)
            added.append(idea)
        if added:
            self.set(StorageKey.RECIPE_IDEAS, (added + existing)[:MAX_RECIPE_IDEAS])
        return added

    def filter_ideas(
        self,
        *,
        meal_type: MealType | None = None,
        protein_type: ProteinType | None = None,
        is_used: bool | None = None,
        vibes: list[str] | None = None,
    ) -> list[RecipeIdea]:
        """Ideas matching every given criterion. Vibes match on any overlap."""
        wanted_vibes = {v.lower() for v in vibes or []}
        result = []
        for idea in self.get_recipe_ideas():
            if meal_type is not None and idea.meal_type != meal_type:
                continue
            if protein_type is not None and idea.protein_type != protein_type:
                continue
            if is_used is not None and idea.is_used != is_used:
                continue
            if wanted_vibes and not wanted_vibes & {v.lower() for v in idea.vibes}:
                continue
            result.append(idea)
        return result

    def get_ideas_by_meal_type(self, meal_type: MealType) -> list[RecipeIdea]:
        return self.filter_ideas(meal_type=meal_type)

    def get_ideas_by_protein_type(self, protein_type: ProteinType) -> list[RecipeIdea]:
        return self.filter_ideas(protein_type=protein_type)

    def mark_idea_as_used(self, idea_id: str, recipe_id: str | None = None) -> None:
        ideas = self.get_recipe_ideas()
        for idea in ideas:
            if idea.id == idea_id:
                idea.is_used = True
                idea.linked_recipe_id = recipe_id
                self.set(StorageKey.RECIPE_IDEAS, ideas)
                return

    def remove_recipe_idea(self, idea_id: str) -> None:
        ideas = self.get_recipe_ideas()
        remaining = [i for i in ideas if i.id != idea_id]
        if len(remaining) != len(ideas):
            self.set(StorageKey.RECIPE_IDEAS, remaining)

    def clear_recipe_ideas(self) -> None:
        self.remove(StorageKey.RECIPE_IDEAS)
