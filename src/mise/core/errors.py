"""
Mise - Error Taxonomy.

APIError is what the user sees when a request fails: a closed code,
remediation steps, optional free alternatives and at most one primary
action token ("switch-provider:<id>", "navigate:<path>", "show-api-key-form").

The exceptions below are raised by adapters and the registry and turned
into APIError by the classifier.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    PROMPT_INJECTION = "PROMPT_INJECTION"
    INVALID_API_KEY = "INVALID_API_KEY"
    PROVIDER_NOT_FOUND = "PROVIDER_NOT_FOUND"
    NETWORK_ERROR = "NETWORK_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    PARSE_FAILURE = "PARSE_FAILURE"  # Soft: surfaced as an empty result
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class FreeAlternative(BaseModel):
    provider: str
    reason: str
    url: str
    action: str  # "switch-provider:<id>"


class APIError(BaseModel):
    """User-facing error with remediation metadata."""

    code: ErrorCode
    icon: str
    title: str  # i18n key or plain text
    message: str
    solutions: list[str] = Field(default_factory=list)
    free_alternatives: list[FreeAlternative] = Field(default_factory=list)
    action: str | None = None
    auto_retry: bool = False
    retry_delay: float | None = None  # Seconds

    @property
    def should_retry(self) -> bool:
        return self.auto_retry and self.retry_delay is not None


# =============================================================================
# Exceptions
# =============================================================================


class MiseError(Exception):
    """Base exception for mise."""


class ProviderNotFoundError(MiseError):
    def __init__(self, provider_id: str):
        super().__init__(f"No adapter registered for provider '{provider_id}'")
        self.provider_id = provider_id


class ProviderResponseError(MiseError):
    """A provider answered with a non-success status."""

    def __init__(
        self,
        status: int,
        body: Any = None,
        *,
        retry_after: float | None = None,
    ):
        super().__init__(f"Provider responded with HTTP {status}")
        self.status = status
        self.body = body
        self.retry_after = retry_after


class ProviderTransportError(MiseError):
    """The request never reached a provider (DNS, refused, reset, timeout)."""


class RecipeParseError(MiseError):
    """Generated text could not be turned into a structured recipe."""
