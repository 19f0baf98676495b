"""
Tests for the JSONL session logger and its wiring into the orchestrator.
"""

import asyncio
import json

from mise.generation import RecipeGenerator
from mise.observability import SessionLogger
from mise.observability.session_logger import _truncate_value


def _events(path) -> list[dict]:
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


class TestSessionLogger:
    def test_disabled_is_noop(self, tmp_path):
        session = SessionLogger(enabled=False, log_dir=tmp_path)
        session.attempt_start("recipe", "groq")
        assert session.close() is None
        assert list(tmp_path.iterdir()) == []

    def test_attempt_events(self, tmp_path):
        session = SessionLogger(session_id="t1", log_dir=tmp_path)
        session.attempt_start("recipe", "groq", model="llama")
        session.status_change("idle", "validating")
        session.retry_scheduled("NETWORK_ERROR", 3.0, 1)
        session.attempt_end("error", chunks=0, error="NETWORK_ERROR")
        path = session.close()

        events = _events(path)
        assert [e["event"] for e in events] == [
            "session_start",
            "attempt_start",
            "status_change",
            "retry_scheduled",
            "attempt_end",
            "session_end",
        ]
        assert events[1]["attempt"] == 1
        assert events[4]["duration_ms"] is not None
        assert events[-1]["total_attempts"] == 1

    def test_custom_event_truncates_content(self, tmp_path):
        session = SessionLogger(session_id="t2", log_dir=tmp_path)
        session.log("debug", content="x" * 500, items=list(range(20)))
        path = session.close()

        entry = _events(path)[1]
        assert entry["content"].startswith("x" * 50)
        assert "(500 chars)" in entry["content"]
        assert entry["items"][-1] == "... +15 more"


class TestTruncateValue:
    def test_scalars_pass_through(self):
        assert _truncate_value(3) == 3
        assert _truncate_value(None) is None

    def test_deep_nesting_stops(self):
        assert _truncate_value([[[[["deep"]]]]]) == [[[["<nested>"]]]]


class TestOrchestratorLogging:
    def test_lifecycle_written(self, tmp_path, store, fake_adapter, registry_for, sample_recipe_markdown):
        session = SessionLogger(session_id="t3", log_dir=tmp_path)
        gen = RecipeGenerator(
            store=store,
            registry=registry_for(fake_adapter([sample_recipe_markdown])),
            provider="groq",
            api_key="gsk_test",
            session_logger=session,
        )

        asyncio.run(gen.generate_recipe("tomato rice"))
        events = _events(session.close())

        states = [e["new_state"] for e in events if e["event"] == "status_change"]
        assert states == ["validating", "connecting", "streaming", "completed"]
        ends = [e for e in events if e["event"] == "attempt_end"]
        assert ends[0]["outcome"] == "completed"
        kinds = {e["kind"] for e in events if e["event"] == "persisted"}
        assert kinds == {"chat", "recipe"}
