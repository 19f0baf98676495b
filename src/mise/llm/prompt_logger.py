"""
Mise - Prompt Logger.

Debug aid: one markdown file per provider call holding both prompts and
the streamed reply (or the failure). Off unless MISE_LOG_PROMPTS=1 or
`--log-prompts` is passed.

Files land in prompt_logs/<run>/<NN>_<provider>_<flavor>.md, numbered in
call order.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

LOG_DIR = Path("prompt_logs")


def _enabled_from_env() -> bool:
    return os.getenv("MISE_LOG_PROMPTS", "0").lower() in ("1", "true")


@dataclass
class _Run:
    enabled: bool = field(default_factory=_enabled_from_env)
    started: str = field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"))
    calls: int = 0


_run = _Run()


def enable_prompt_logging(enabled: bool = True) -> None:
    _run.enabled = enabled


def is_enabled() -> bool:
    return _run.enabled


def get_session_log_dir() -> Path | None:
    """Directory holding this run's files, if logging is on."""
    return LOG_DIR / _run.started if _run.enabled else None


def render_call(
    *,
    flavor: str,
    provider: str,
    model: str | None,
    system_prompt: str,
    user_prompt: str,
    temperature: float | None = None,
    response: str | None = None,
    error: str | None = None,
) -> str:
    """Markdown for one call. Prompts are fenced with ~~~ so backticks in them survive."""
    lines = [
        f"# {provider} / {flavor}",
        "",
        f"- time: {datetime.now().isoformat(timespec='seconds')}",
        f"- model: {model or 'provider default'}",
    ]
    if temperature is not None:
        lines.append(f"- temperature: {temperature}")

    for heading, body in (("System prompt", system_prompt), ("User prompt", user_prompt)):
        lines += ["", f"## {heading}", "", "~~~", body, "~~~"]

    lines += ["", "## Reply", ""]
    if error:
        lines.append(f"> failed: {error}")
    elif response:
        lines += ["~~~", response, "~~~"]
    else:
        lines.append("_(empty reply)_")
    return "\n".join(lines) + "\n"


def log_prompt(
    *,
    flavor: str,
    provider: str,
    model: str | None,
    system_prompt: str,
    user_prompt: str,
    temperature: float | None = None,
    response: str | None = None,
    error: str | None = None,
) -> Path | None:
    """
    Write one provider call to disk.

    Returns:
        Path to the file, or None if logging is disabled
    """
    if not _run.enabled:
        return None

    _run.calls += 1
    run_dir = LOG_DIR / _run.started
    run_dir.mkdir(parents=True, exist_ok=True)

    path = run_dir / f"{_run.calls:02d}_{provider}_{flavor}.md"
    path.write_text(
        render_call(
            flavor=flavor,
            provider=provider,
            model=model,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=temperature,
            response=response,
            error=error,
        ),
        encoding="utf-8",
    )
    return path
