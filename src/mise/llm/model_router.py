"""
Mise - Model Router.

Picks the model and sampling settings for a generation flavor.

Flavors:
- recipe: one full markdown recipe, balanced creativity
- ideas: 15-20 short suggestions as JSON, more variety
"""

from typing import Literal, TypedDict

from mise.llm.providers import PROVIDERS

Flavor = Literal["recipe", "ideas"]


class ModelConfig(TypedDict, total=False):
    """Configuration for one provider call."""

    model: str
    temperature: float


# Lower = more deterministic, higher = more varied
FLAVOR_TEMPERATURE: dict[str, float] = {
    "recipe": 0.7,
    "ideas": 0.9,
}

DEFAULT_TEMPERATURE = 0.7


def get_model(provider_id: str, override: str | None = None) -> str | None:
    """
    Resolve the model for a provider.

    Args:
        provider_id: Catalogue id
        override: User-selected model, wins when set

    Returns:
        Model name, or None for providers outside the catalogue
    """
    if override:
        return override
    config = PROVIDERS.get(provider_id)
    return config.default_model if config else None


def get_flavor_config(
    flavor: Flavor | str,
    provider_id: str,
    *,
    model_override: str | None = None,
) -> ModelConfig:
    config: ModelConfig = {
        "temperature": FLAVOR_TEMPERATURE.get(flavor, DEFAULT_TEMPERATURE),
    }
    model = get_model(provider_id, model_override)
    if model:
        config["model"] = model
    return config
