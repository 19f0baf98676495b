"""Basic health check tests."""

import pytest


def test_import_mise():
    """Test that the mise package can be imported."""
    import mise
    assert mise.__version__ == "1.0.0"


def test_import_status_models():
    """Test that status models can be imported and discriminate on state."""
    from pydantic import TypeAdapter

    from mise.models.status import RequestStatus, Streaming

    status = TypeAdapter(RequestStatus).validate_python({"state": "streaming", "tokens": 3, "content": "abc"})
    assert isinstance(status, Streaming)


def test_transition_rules():
    """Test the attempt lifecycle moves."""
    from mise.models.status import can_transition

    assert can_transition("idle", "validating")
    assert can_transition("streaming", "streaming")
    assert can_transition("completed", "validating")
    assert can_transition("error", "idle")
    assert not can_transition("validating", "streaming")
    assert not can_transition("completed", "error")


def test_settings_defaults(monkeypatch):
    """Test that settings load without a .env file."""
    from mise.config import MiseSettings

    monkeypatch.setenv("MISE_MAX_AUTO_RETRIES", "5")
    settings = MiseSettings(_env_file=None)

    assert settings.default_provider == "openrouter"
    assert settings.max_auto_retries == 5
    assert settings.store_path.name == "store.json"


def test_import_llm():
    """Test that the provider layer can be imported."""
    from mise.llm import PROVIDERS, build_default_registry

    assert "groq" in PROVIDERS
    assert build_default_registry().get_adapter("groq") is not None


@pytest.mark.parametrize("module", ["mise.storage", "mise.parsing", "mise.generation", "mise.main"])
def test_modules_import(module):
    """Test that each package imports cleanly."""
    import importlib

    assert importlib.import_module(module) is not None
