"""
Mise - Memory.
"""

from mise.memory.context import build_history_context, enrich_prompt, summarize_assistant_message

__all__ = ["build_history_context", "enrich_prompt", "summarize_assistant_message"]
