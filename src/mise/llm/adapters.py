"""
Mise - Provider Adapter Interface.

An adapter turns (system prompt, user prompt, credential) into a lazy,
finite stream of StreamChunk values. The stream is not restartable; the
consumer may stop early, and nothing follows a chunk with done=True.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass

from mise.llm.providers import ProviderConfig


@dataclass(frozen=True)
class StreamChunk:
    content: str
    done: bool = False


class ProviderAdapter(ABC):
    """One implementation per provider protocol."""

    config: ProviderConfig

    @abstractmethod
    def generate_recipe(
        self,
        system_prompt: str,
        user_prompt: str,
        api_key: str,
        *,
        model: str | None = None,
        temperature: float | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream generated text for one request."""

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name
