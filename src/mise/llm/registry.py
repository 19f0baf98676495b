"""
Mise - Adapter Registry.

Resolves a provider id to its adapter. Built once at startup; lookups of
unknown ids return None, which the orchestrator reports as
PROVIDER_NOT_FOUND rather than failing.
"""

from mise.llm.adapters import ProviderAdapter
from mise.llm.client import OpenAICompatibleAdapter
from mise.llm.providers import PROVIDERS, ProviderConfig


class AdapterRegistry:
    def __init__(self, adapters: dict[str, ProviderAdapter] | None = None):
        self._adapters: dict[str, ProviderAdapter] = dict(adapters or {})

    def register(self, adapter: ProviderAdapter) -> None:
        self._adapters[adapter.id] = adapter

    def get_adapter(self, provider_id: str) -> ProviderAdapter | None:
        return self._adapters.get(provider_id)

    def has_adapter(self, provider_id: str) -> bool:
        return provider_id in self._adapters

    def all_providers(self) -> list[ProviderConfig]:
        """Configs of every registered provider, sorted by display name."""
        return sorted((a.config for a in self._adapters.values()), key=lambda c: c.name)

    def free_providers(self) -> list[ProviderConfig]:
        return [c for c in self.all_providers() if c.is_free]

    def paid_providers(self) -> list[ProviderConfig]:
        return [c for c in self.all_providers() if not c.is_free]

    def recommended_provider(self) -> ProviderConfig | None:
        adapter = self._adapters.get("openrouter")
        if adapter is not None:
            return adapter.config
        free = self.free_providers()
        return free[0] if free else None


def build_default_registry() -> AdapterRegistry:
    """One OpenAI-compatible adapter per catalogued provider."""
    return AdapterRegistry(
        {provider_id: OpenAICompatibleAdapter(config) for provider_id, config in PROVIDERS.items()}
    )
