"""
Mise - LLM Providers.

Provider adapters behind a registry built at startup.
"""

from mise.llm.adapters import ProviderAdapter, StreamChunk
from mise.llm.client import OpenAICompatibleAdapter
from mise.llm.model_router import get_flavor_config, get_model
from mise.llm.providers import PROVIDERS, ProviderConfig
from mise.llm.registry import AdapterRegistry, build_default_registry

__all__ = [
    "AdapterRegistry",
    "OpenAICompatibleAdapter",
    "PROVIDERS",
    "ProviderAdapter",
    "ProviderConfig",
    "StreamChunk",
    "build_default_registry",
    "get_flavor_config",
    "get_model",
]
