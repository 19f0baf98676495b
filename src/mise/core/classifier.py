"""
Mise - Error Classifier.

Maps any failure raised during a generation attempt to exactly one APIError.

Input categories:
- transport failure (request never reached a server) -> NETWORK_ERROR, auto-retry
- provider response with a status code (+ optional body) -> by status, body refines
- unresolvable provider id -> PROVIDER_NOT_FOUND
- anything else -> UNKNOWN_ERROR

Pre-network errors (prompt injection, missing key) are built with the
factory methods; they never carry auto-retry.
"""

import logging
from typing import Any

import httpx
import openai

from mise.core.errors import (
    APIError,
    ErrorCode,
    FreeAlternative,
    ProviderNotFoundError,
    ProviderResponseError,
    ProviderTransportError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Catalogue
# =============================================================================

FREE_ALTERNATIVES: list[FreeAlternative] = [
    FreeAlternative(
        provider="Cerebras",
        reason="errors.freeReasons.cerebras",
        url="https://cloud.cerebras.ai/",
        action="switch-provider:cerebras",
    ),
    FreeAlternative(
        provider="Google AI Studio",
        reason="errors.freeReasons.google",
        url="https://aistudio.google.com/",
        action="switch-provider:google",
    ),
    FreeAlternative(
        provider="Groq",
        reason="errors.freeReasons.groq",
        url="https://console.groq.com/",
        action="switch-provider:groq",
    ),
    FreeAlternative(
        provider="Hugging Face",
        reason="errors.freeReasons.huggingface",
        url="https://huggingface.co/",
        action="switch-provider:huggingface",
    ),
    FreeAlternative(
        provider="OpenRouter",
        reason="errors.freeReasons.openrouter",
        url="https://openrouter.ai/",
        action="switch-provider:openrouter",
    ),
]

# Where to create a new key, by provider id
KEY_PAGES: dict[str, str] = {
    "openai": "https://platform.openai.com/api-keys",
    "groq": "https://console.groq.com/keys",
    "google": "https://aistudio.google.com/apikey",
    "openrouter": "https://openrouter.ai/settings/keys",
    "cerebras": "https://cloud.cerebras.ai/",
    "huggingface": "https://huggingface.co/settings/tokens",
    "anthropic": "https://console.anthropic.com/settings/keys",
}

# Provider-specific error codes found in response bodies
BODY_CODES: dict[str, ErrorCode] = {
    # OpenAI-compatible
    "invalid_api_key": ErrorCode.INVALID_API_KEY,
    "invalid_api_key_error": ErrorCode.INVALID_API_KEY,
    "authentication_error": ErrorCode.INVALID_API_KEY,
    "invalid_credentials": ErrorCode.INVALID_API_KEY,
    "rate_limit_exceeded": ErrorCode.RATE_LIMITED,
    "rate_limit": ErrorCode.RATE_LIMITED,
    "rate_limit_error": ErrorCode.RATE_LIMITED,
    "overloaded_error": ErrorCode.PROVIDER_ERROR,
    "server_error": ErrorCode.PROVIDER_ERROR,
    # Google
    "API_KEY_INVALID": ErrorCode.INVALID_API_KEY,
    "PERMISSION_DENIED": ErrorCode.INVALID_API_KEY,
    "UNAUTHENTICATED": ErrorCode.INVALID_API_KEY,
    "RESOURCE_EXHAUSTED": ErrorCode.RATE_LIMITED,
    "UNAVAILABLE": ErrorCode.PROVIDER_ERROR,
}


class ErrorClassifier:
    """
    Turns raw failures into APIError values.

    Delays are seconds. Provider (5xx) retries back off as
    min(provider_retry_base * 2**attempt, provider_retry_max).
    """

    def __init__(
        self,
        *,
        network_retry_delay: float = 3.0,
        rate_limit_retry_delay: float = 5.0,
        provider_retry_base: float = 2.0,
        provider_retry_max: float = 30.0,
    ):
        self.network_retry_delay = network_retry_delay
        self.rate_limit_retry_delay = rate_limit_retry_delay
        self.provider_retry_base = provider_retry_base
        self.provider_retry_max = provider_retry_max

    @classmethod
    def from_settings(cls, settings: Any) -> "ErrorClassifier":
        return cls(
            network_retry_delay=settings.network_retry_delay,
            rate_limit_retry_delay=settings.rate_limit_retry_delay,
            provider_retry_base=settings.provider_retry_base,
            provider_retry_max=settings.provider_retry_max,
        )

    # =========================================================================
    # Classification
    # =========================================================================

    def classify(
        self,
        failure: BaseException | Any,
        *,
        provider: str | None = None,
        attempt: int = 0,
    ) -> APIError:
        """
        Classify one failure.

        Args:
            failure: The exception (or error-like object) raised by the attempt
            provider: Provider id, used for key-page hints
            attempt: Consecutive automatic retries so far (drives backoff)

        Returns:
            Exactly one APIError; never raises
        """
        if isinstance(failure, ProviderNotFoundError):
            return self.provider_not_found(failure.provider_id)

        if _is_transport_failure(failure):
            return self.network_error()

        status = _status_of(failure)
        if status is not None:
            body = _body_of(failure)
            code = _code_from_status(status)
            if code is None:
                code = _code_from_body(body) or ErrorCode.UNKNOWN_ERROR
            logger.info(f"Classified HTTP {status} from {provider or 'provider'} as {code.value}")
            return self._from_code(code, failure=failure, body=body, provider=provider, attempt=attempt)

        logger.warning(f"Unrecognized failure {type(failure).__name__}: {failure}")
        return self.unknown_error()

    def _from_code(
        self,
        code: ErrorCode,
        *,
        failure: Any,
        body: Any,
        provider: str | None,
        attempt: int,
    ) -> APIError:
        if code == ErrorCode.INVALID_API_KEY:
            return self.invalid_api_key(provider)
        if code == ErrorCode.RATE_LIMITED:
            return self.rate_limited(_retry_after(failure, body))
        if code == ErrorCode.PROVIDER_ERROR:
            return self.provider_error(attempt)
        return self.unknown_error()

    # =========================================================================
    # Factories
    # =========================================================================

    def prompt_injection(self) -> APIError:
        return APIError(
            code=ErrorCode.PROMPT_INJECTION,
            icon="🛡️",
            title="errors.promptInjection.title",
            message="errors.promptInjection.message",
            solutions=[
                "I can only help with cooking recipes",
                "Rephrase your request around ingredients",
                'Example: "I have chicken and vegetables, what can I cook?"',
            ],
        )

    def missing_api_key(self) -> APIError:
        return APIError(
            code=ErrorCode.INVALID_API_KEY,
            icon="🔑",
            title="errors.missingKey.title",
            message="errors.missingKey.message",
            solutions=[
                "Add an API key for the selected provider",
                "Or pick a free provider that needs no credit card",
            ],
            free_alternatives=list(FREE_ALTERNATIVES),
            action="show-api-key-form",
        )

    def invalid_api_key(self, provider: str | None = None) -> APIError:
        solutions = [
            "Check that you copied the whole key",
            "Generate a new API key in the provider dashboard",
            "Make sure the key has not expired",
        ]
        if provider in KEY_PAGES:
            solutions.append(f"Create a new key at {KEY_PAGES[provider]}")
        return APIError(
            code=ErrorCode.INVALID_API_KEY,
            icon="🔑",
            title="errors.invalidApiKey.title",
            message="errors.invalidApiKey.message",
            solutions=solutions,
            action="navigate:/settings",
        )

    def provider_not_found(self, provider_id: str) -> APIError:
        return APIError(
            code=ErrorCode.PROVIDER_NOT_FOUND,
            icon="❓",
            title="errors.providerNotFound.title",
            message=f'Provider "{provider_id}" is not available.',
            solutions=[
                "Select another provider from the list",
                "Try a multi-model provider such as OpenRouter",
            ],
            free_alternatives=list(FREE_ALTERNATIVES),
            action="switch-provider:openrouter",
        )

    def network_error(self) -> APIError:
        return APIError(
            code=ErrorCode.NETWORK_ERROR,
            icon="📡",
            title="errors.network.title",
            message="errors.network.message",
            solutions=[
                "Check your internet connection",
                "The service may be temporarily down",
                "Try again in a few seconds",
            ],
            auto_retry=True,
            retry_delay=self.network_retry_delay,
        )

    def rate_limited(self, retry_after: float | None = None) -> APIError:
        return APIError(
            code=ErrorCode.RATE_LIMITED,
            icon="⏱️",
            title="errors.rateLimited.title",
            message="errors.rateLimited.message",
            solutions=[
                "Wait a few seconds before trying again",
                "Send requests less often",
                "Or switch to another free provider",
            ],
            free_alternatives=FREE_ALTERNATIVES[:3],
            auto_retry=True,
            retry_delay=retry_after if retry_after is not None else self.rate_limit_retry_delay,
        )

    def provider_error(self, attempt: int = 0) -> APIError:
        delay = min(self.provider_retry_base * (2 ** max(attempt, 0)), self.provider_retry_max)
        return APIError(
            code=ErrorCode.PROVIDER_ERROR,
            icon="🔧",
            title="errors.providerError.title",
            message="errors.providerError.message",
            solutions=[
                "The provider is having trouble right now",
                "Check the provider status page",
                "Try another provider in the meantime",
            ],
            free_alternatives=FREE_ALTERNATIVES[:3],
            auto_retry=True,
            retry_delay=delay,
        )

    def parse_failure(self) -> APIError:
        return APIError(
            code=ErrorCode.PARSE_FAILURE,
            icon="😕",
            title="errors.noIdeas.title",
            message="errors.noIdeas.message",
            solutions=[
                "Use more common ingredients",
                "Reduce the number of restrictions",
            ],
        )

    def unknown_error(self) -> APIError:
        return APIError(
            code=ErrorCode.UNKNOWN_ERROR,
            icon="❓",
            title="errors.unknown.title",
            message="errors.unknown.message",
            solutions=[
                "Try again",
                "If it keeps happening, switch provider",
            ],
        )


# =============================================================================
# Failure inspection
# =============================================================================


def _is_transport_failure(failure: Any) -> bool:
    return isinstance(
        failure,
        (
            ProviderTransportError,
            openai.APIConnectionError,  # Includes APITimeoutError
            httpx.TransportError,
            ConnectionError,
            TimeoutError,
        ),
    )


def _status_of(failure: Any) -> int | None:
    if isinstance(failure, ProviderResponseError):
        return failure.status
    if isinstance(failure, openai.APIStatusError):
        return failure.status_code
    if isinstance(failure, httpx.HTTPStatusError):
        return failure.response.status_code
    for attr in ("status", "status_code"):
        value = getattr(failure, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _body_of(failure: Any) -> Any:
    return getattr(failure, "body", None)


def _code_from_status(status: int) -> ErrorCode | None:
    if status in (401, 403):
        return ErrorCode.INVALID_API_KEY
    if status == 429:
        return ErrorCode.RATE_LIMITED
    if 500 <= status <= 599:
        return ErrorCode.PROVIDER_ERROR
    return None


def _error_object(body: Any) -> dict | None:
    if not isinstance(body, dict):
        return None
    inner = body.get("error")
    if isinstance(inner, dict):
        return inner
    return body


def _code_from_body(body: Any) -> ErrorCode | None:
    error = _error_object(body)
    if error is None:
        return None
    for field in ("code", "type", "status"):
        value = error.get(field)
        if isinstance(value, str) and value in BODY_CODES:
            return BODY_CODES[value]
    return None


def _retry_after(failure: Any, body: Any) -> float | None:
    """Delay requested by the provider, in seconds."""
    if isinstance(failure, ProviderResponseError) and failure.retry_after is not None:
        return failure.retry_after

    response = getattr(failure, "response", None)
    headers = getattr(response, "headers", None)
    if headers is not None:
        millis = _as_seconds(headers.get("retry-after-ms"))
        if millis is not None:
            return millis / 1000
        seconds = _as_seconds(headers.get("retry-after"))
        if seconds is not None:
            return seconds

    error = _error_object(body)
    if error is not None:
        return _as_seconds(error.get("retry_after"))
    return None


def _as_seconds(value: Any) -> float | None:
    if value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None
