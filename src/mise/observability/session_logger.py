"""
Mise - Session Logger.

Optional JSONL trail of what the orchestrator did during one CLI run:
attempts and their outcome, every status transition, armed and cancelled
retries, and what got persisted. One line per event, so `tail -f` and
`jq` both work.

Usage:
    from mise.observability import SessionLogger

    with SessionLogger(log_dir=Path("session_logs")) as session:
        session.attempt_start("recipe", provider="groq")
        session.status_change("connecting", "streaming")
        session.attempt_end("completed", chunks=42)

Line format:
    {"ts": "2026-01-01T17:30:00", "event": "status_change", "attempt": 1, ...}
"""

import json
import time
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

DEFAULT_LOG_DIR = Path("session_logs")

TEXT_LIMIT = 200
GENERATED_TEXT_LIMIT = 50  # Prompts and replies are noise beyond a preview
SEQUENCE_LIMIT = 5
MAPPING_LIMIT = 10
MAX_DEPTH = 3

GENERATED_TEXT_FIELDS = frozenset(
    {"content", "prompt", "system_prompt", "user_prompt", "response", "description"}
)


def _clip(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... ({len(text)} chars)"


def _truncate_value(value: Any, depth: int = 0) -> Any:
    """
    Make a value small enough for one log line.

    Long strings are clipped with their original length, long lists and
    mappings keep a head plus a count, and nesting stops past MAX_DEPTH.
    """
    if depth > MAX_DEPTH:
        return "<nested>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _clip(value, TEXT_LIMIT)
    if hasattr(value, "model_dump"):
        return _truncate_value(value.model_dump(mode="json"), depth)

    if isinstance(value, Mapping):
        keys = list(value)
        out = {}
        for key in keys[:MAPPING_LIMIT]:
            item = value[key]
            if key in GENERATED_TEXT_FIELDS and isinstance(item, str):
                out[key] = _clip(item, GENERATED_TEXT_LIMIT)
            else:
                out[key] = _truncate_value(item, depth + 1)
        if len(keys) > MAPPING_LIMIT:
            out["_truncated"] = f"+{len(keys) - MAPPING_LIMIT} keys"
        return out

    if isinstance(value, (list, tuple)):
        head = [_truncate_value(item, depth + 1) for item in value[:SEQUENCE_LIMIT]]
        hidden = len(value) - SEQUENCE_LIMIT
        return head + [f"... +{hidden} more"] if hidden > 0 else head

    return _clip(str(value), TEXT_LIMIT)


class SessionLogger:
    """
    JSONL writer for one run. Constructed with enabled=False it writes
    nothing and touches no files, so callers never need to check.
    """

    def __init__(
        self,
        session_id: str | None = None,
        enabled: bool = True,
        log_dir: Path | None = None,
    ):
        self.enabled = enabled
        self.session_id = session_id or datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_path: Path | None = None
        self._file = None
        self._attempts = 0
        self._attempt_clock: float | None = None

        if enabled:
            directory = Path(log_dir) if log_dir is not None else DEFAULT_LOG_DIR
            directory.mkdir(parents=True, exist_ok=True)
            self.log_path = directory / f"session_{self.session_id}.jsonl"
            self._file = self.log_path.open("a", encoding="utf-8")
            self._emit("session_start", session_id=self.session_id)

    def __enter__(self) -> "SessionLogger":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _emit(self, event: str, **fields: Any) -> None:
        if self._file is None:
            return
        entry = {"ts": datetime.now().isoformat(), "event": event, **fields}
        self._file.write(json.dumps(entry, default=str, ensure_ascii=False) + "\n")
        self._file.flush()

    # =========================================================================
    # Attempts
    # =========================================================================

    def attempt_start(
        self,
        flavor: str,
        provider: str,
        model: str | None = None,
        retry: int = 0,
    ) -> None:
        self._attempts += 1
        self._attempt_clock = time.monotonic()
        self._emit(
            "attempt_start",
            attempt=self._attempts,
            flavor=flavor,
            provider=provider,
            model=model,
            retry=retry,
        )

    def attempt_end(
        self,
        outcome: str,
        chunks: int | None = None,
        error: str | None = None,
    ) -> None:
        """Outcome is "completed", "cancelled" or "error"."""
        elapsed_ms = None
        if self._attempt_clock is not None:
            elapsed_ms = round((time.monotonic() - self._attempt_clock) * 1000)
            self._attempt_clock = None
        self._emit(
            "attempt_end",
            attempt=self._attempts,
            outcome=outcome,
            duration_ms=elapsed_ms,
            chunks=chunks,
            error=error,
        )

    def status_change(self, old_state: str, new_state: str) -> None:
        self._emit("status_change", attempt=self._attempts, old_state=old_state, new_state=new_state)

    # =========================================================================
    # Retries and persistence
    # =========================================================================

    def retry_scheduled(self, code: str, delay: float, retry: int) -> None:
        self._emit("retry_scheduled", attempt=self._attempts, code=code, delay_s=delay, retry=retry)

    def retry_cancelled(self, reason: str) -> None:
        self._emit("retry_cancelled", attempt=self._attempts, reason=reason)

    def persisted(self, kind: str, count: int = 1) -> None:
        self._emit("persisted", attempt=self._attempts, kind=kind, count=count)

    def log(self, event_type: str, **fields: Any) -> None:
        """Free-form event; field values are truncated."""
        self._emit(event_type, attempt=self._attempts, **_truncate_value(fields))

    def close(self) -> str | None:
        """Finish the file. Returns its path, or None when nothing was written."""
        if self._file is None:
            return None
        self._emit("session_end", total_attempts=self._attempts)
        self._file.close()
        self._file = None
        return str(self.log_path)
