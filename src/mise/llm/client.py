"""
Mise - OpenAI-Compatible Adapter.

Streams chat completions through the openai SDK. Every catalogued
provider exposes this protocol at its own base_url, so one adapter class
covers all of them.

SDK errors (APIConnectionError, APIStatusError) propagate unchanged; the
error classifier knows how to read them.
"""

import logging
from collections.abc import AsyncIterator
from functools import partial

from openai import AsyncOpenAI

from mise.llm.adapters import ProviderAdapter, StreamChunk
from mise.llm.model_router import DEFAULT_TEMPERATURE
from mise.llm.prompt_logger import log_prompt
from mise.llm.providers import ProviderConfig

logger = logging.getLogger(__name__)


def get_async_client(api_key: str, base_url: str) -> AsyncOpenAI:
    """Build a client for one provider call."""
    return AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)


class OpenAICompatibleAdapter(ProviderAdapter):
    def __init__(self, config: ProviderConfig, *, max_tokens: int | None = None):
        self.config = config
        self.max_tokens = max_tokens

    async def generate_recipe(
        self,
        system_prompt: str,
        user_prompt: str,
        api_key: str,
        *,
        model: str | None = None,
        temperature: float | None = None,
    ) -> AsyncIterator[StreamChunk]:
        model = model or self.config.default_model
        temperature = temperature if temperature is not None else DEFAULT_TEMPERATURE
        client = get_async_client(api_key, self.config.base_url)

        api_kwargs = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "stream": True,
        }
        if self.max_tokens:
            api_kwargs["max_tokens"] = self.max_tokens

        log_call = partial(
            log_prompt,
            flavor="stream",
            provider=self.config.id,
            model=model,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=temperature,
        )

        received: list[str] = []
        try:
            stream = await client.chat.completions.create(**api_kwargs)
            try:
                async for chunk in stream:
                    if not chunk.choices:
                        continue
                    token = chunk.choices[0].delta.content
                    if token:
                        received.append(token)
                        yield StreamChunk(content=token)
            finally:
                close = getattr(stream, "close", None)
                if close is not None:
                    await close()
        except Exception as e:
            log_call(error=str(e))
            raise

        log_call(response="".join(received))
        logger.debug(f"{self.config.id} stream finished ({len(received)} chunks)")
        yield StreamChunk(content="", done=True)
