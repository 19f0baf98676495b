"""
Tests for error classification.

Covers status mapping, transport failures (own, openai SDK, httpx),
body-code refinement, retry delays and the pre-network factories.
"""

import httpx
import openai

from mise.core.classifier import ErrorClassifier
from mise.core.errors import (
    ErrorCode,
    ProviderNotFoundError,
    ProviderResponseError,
    ProviderTransportError,
)

_REQUEST = httpx.Request("POST", "https://api.example.com/v1/chat/completions")


def _status_error(status: int, headers: dict | None = None, body=None) -> openai.APIStatusError:
    response = httpx.Response(status, request=_REQUEST, headers=headers or {})
    return openai.APIStatusError("failed", response=response, body=body)


class TestStatusMapping:
    def test_429_is_rate_limited_with_retry(self):
        error = ErrorClassifier().classify(ProviderResponseError(429))
        assert error.code == ErrorCode.RATE_LIMITED
        assert error.auto_retry is True
        assert error.retry_delay == 5.0

    def test_401_is_invalid_key_without_retry(self):
        error = ErrorClassifier().classify(ProviderResponseError(401), provider="groq")
        assert error.code == ErrorCode.INVALID_API_KEY
        assert error.auto_retry is False
        assert error.action == "navigate:/settings"
        assert any("console.groq.com" in s for s in error.solutions)

    def test_403_is_invalid_key(self):
        assert ErrorClassifier().classify(ProviderResponseError(403)).code == ErrorCode.INVALID_API_KEY

    def test_5xx_backs_off(self):
        classifier = ErrorClassifier(provider_retry_base=2.0, provider_retry_max=30.0)
        delays = [classifier.classify(ProviderResponseError(503), attempt=n).retry_delay for n in range(6)]
        assert delays == [2.0, 4.0, 8.0, 16.0, 30.0, 30.0]
        assert classifier.classify(ProviderResponseError(500)).code == ErrorCode.PROVIDER_ERROR

    def test_other_status_is_unknown(self):
        error = ErrorClassifier().classify(ProviderResponseError(418))
        assert error.code == ErrorCode.UNKNOWN_ERROR
        assert not error.auto_retry

    def test_body_code_refines_unmapped_status(self):
        body = {"error": {"status": "RESOURCE_EXHAUSTED", "message": "quota"}}
        error = ErrorClassifier().classify(ProviderResponseError(400, body))
        assert error.code == ErrorCode.RATE_LIMITED

        body = {"error": {"code": "invalid_api_key"}}
        assert ErrorClassifier().classify(ProviderResponseError(400, body)).code == ErrorCode.INVALID_API_KEY


class TestRetryAfter:
    def test_explicit_retry_after(self):
        error = ErrorClassifier().classify(ProviderResponseError(429, retry_after=12))
        assert error.retry_delay == 12

    def test_header_from_sdk_error(self):
        error = ErrorClassifier().classify(_status_error(429, headers={"retry-after": "7"}))
        assert error.code == ErrorCode.RATE_LIMITED
        assert error.retry_delay == 7.0

    def test_millisecond_header_wins(self):
        error = ErrorClassifier().classify(
            _status_error(429, headers={"retry-after-ms": "1500", "retry-after": "7"})
        )
        assert error.retry_delay == 1.5

    def test_body_retry_after(self):
        error = ErrorClassifier().classify(ProviderResponseError(429, {"error": {"retry_after": 9}}))
        assert error.retry_delay == 9.0


class TestTransport:
    def test_own_transport_error(self):
        error = ErrorClassifier(network_retry_delay=3.0).classify(ProviderTransportError("refused"))
        assert error.code == ErrorCode.NETWORK_ERROR
        assert error.auto_retry is True
        assert error.retry_delay == 3.0

    def test_sdk_connection_error(self):
        error = ErrorClassifier().classify(openai.APIConnectionError(request=_REQUEST))
        assert error.code == ErrorCode.NETWORK_ERROR

    def test_httpx_transport_error(self):
        error = ErrorClassifier().classify(httpx.ConnectError("dns", request=_REQUEST))
        assert error.code == ErrorCode.NETWORK_ERROR

    def test_builtin_timeout(self):
        assert ErrorClassifier().classify(TimeoutError()).code == ErrorCode.NETWORK_ERROR


class TestOtherInputs:
    def test_provider_not_found(self):
        error = ErrorClassifier().classify(ProviderNotFoundError("nope"))
        assert error.code == ErrorCode.PROVIDER_NOT_FOUND
        assert error.action == "switch-provider:openrouter"
        assert not error.auto_retry

    def test_anything_else_is_unknown(self):
        error = ErrorClassifier().classify(ValueError("weird"))
        assert error.code == ErrorCode.UNKNOWN_ERROR
        assert not error.should_retry

    def test_from_settings(self):
        class _Settings:
            network_retry_delay = 1.0
            rate_limit_retry_delay = 2.0
            provider_retry_base = 0.5
            provider_retry_max = 4.0

        classifier = ErrorClassifier.from_settings(_Settings())
        assert classifier.network_error().retry_delay == 1.0
        assert classifier.rate_limited().retry_delay == 2.0
        assert classifier.provider_error(10).retry_delay == 4.0


class TestFactories:
    def test_missing_key_offers_free_providers(self):
        error = ErrorClassifier().missing_api_key()
        assert error.code == ErrorCode.INVALID_API_KEY
        assert error.action == "show-api-key-form"
        assert {a.action for a in error.free_alternatives} >= {
            "switch-provider:groq",
            "switch-provider:openrouter",
        }

    def test_pre_network_errors_never_retry(self):
        classifier = ErrorClassifier()
        for error in (classifier.prompt_injection(), classifier.missing_api_key(), classifier.parse_failure()):
            assert not error.auto_retry

    def test_parse_failure_code(self):
        assert ErrorClassifier().parse_failure().code == ErrorCode.PARSE_FAILURE
