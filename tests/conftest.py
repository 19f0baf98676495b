"""
Pytest configuration and fixtures for Mise tests.
"""

import asyncio
import os

import pytest

# Keep tests away from the user's real store and .env values
os.environ["MISE_ENV"] = "development"
os.environ.pop("MISE_API_KEY", None)

from mise.llm.adapters import ProviderAdapter, StreamChunk  # noqa: E402
from mise.llm.providers import PROVIDERS  # noqa: E402
from mise.llm.registry import AdapterRegistry  # noqa: E402
from mise.models.entities import ChefProfile, Ingredient  # noqa: E402
from mise.storage import MemoryBackend, PersistenceStore  # noqa: E402


class FakeAdapter(ProviderAdapter):
    """
    Scripted provider.

    Yields `chunks` then a done marker carrying `tail`. With `error` set,
    raises it instead: on every call when fail_times == 0, otherwise on
    the first fail_times calls.
    """

    def __init__(
        self,
        chunks: list[str] | None = None,
        *,
        provider_id: str = "groq",
        error: BaseException | None = None,
        fail_times: int = 0,
        tail: str = "",
    ):
        self.config = PROVIDERS[provider_id]
        self.chunks = chunks or []
        self.error = error
        self.fail_times = fail_times
        self.tail = tail
        self.calls: list[dict] = []
        self.yielded = 0

    async def generate_recipe(self, system_prompt, user_prompt, api_key, *, model=None, temperature=None):
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "api_key": api_key,
                "model": model,
                "temperature": temperature,
            }
        )
        if self.error is not None and (self.fail_times == 0 or len(self.calls) <= self.fail_times):
            raise self.error
        for text in self.chunks:
            await asyncio.sleep(0)
            self.yielded += 1
            yield StreamChunk(content=text)
        yield StreamChunk(content=self.tail, done=True)


@pytest.fixture
def store():
    """Persistence store over an in-memory backend."""
    return PersistenceStore(MemoryBackend())


@pytest.fixture
def fake_adapter():
    """Factory for scripted adapters."""
    return FakeAdapter


@pytest.fixture
def registry_for():
    """Build a registry holding the given adapters."""

    def _build(*adapters: ProviderAdapter) -> AdapterRegistry:
        return AdapterRegistry({a.id: a for a in adapters})

    return _build


@pytest.fixture
def sample_profile():
    return ChefProfile(
        name="Ana",
        allergies=["peanuts"],
        conditions=["diabetes"],
        diet="vegetarian",
        dislikes=["cilantro"],
        location="Lima",
    )


@pytest.fixture
def sample_recipe_markdown():
    return """## 🍽️ Tomato Rice Bowl
**⏱️ Prep**: 10 min | **🍳 Cook**: 25 min | **👥 Servings**: 3

### 📦 Ingredients
- 200g rice
- Tomato (500g)
- 2 eggs (⚠️ allergen)
- Salt to taste

### 👨‍🍳 Instructions
1. Rinse the rice.
2. Cook the rice with the tomato.
3. Top with fried eggs.

### 💡 Chef's Tip
Use ripe tomatoes.

### ⚠️ Notices
Contains egg.
"""


@pytest.fixture
def sample_ingredients():
    return [
        Ingredient(name="Tomato", amount="500g", recipe_title="Salad"),
        Ingredient(name="Onion", amount="1 unit", recipe_title="Salad"),
        Ingredient(name="tomato", amount="1/2 kg", recipe_title="Soup"),
    ]
