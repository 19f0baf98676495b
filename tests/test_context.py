"""
Tests for folding chat history into the user prompt.
"""

from mise.memory.context import (
    SUMMARIZE_THRESHOLD,
    build_history_context,
    enrich_prompt,
    summarize_assistant_message,
)
from mise.models.entities import ChatMessage


def _msg(role: str, content: str) -> ChatMessage:
    return ChatMessage(role=role, content=content)


class TestSummarize:
    def test_short_message_unchanged(self):
        assert summarize_assistant_message("Try an omelette.") == "Try an omelette."

    def test_recipe_reduced_to_title(self, sample_recipe_markdown):
        """Full recipes become a title reference."""
        long_recipe = sample_recipe_markdown + "\n" + "Serve warm. " * 40
        assert summarize_assistant_message(long_recipe) == "[Recipe: Tomato Rice Bowl]"

    def test_long_chat_truncated_on_word_boundary(self):
        text = "word " * 200
        summary = summarize_assistant_message(text)
        assert summary.endswith("...")
        assert len(summary) <= SUMMARIZE_THRESHOLD + 3
        assert "wor..." not in summary


class TestHistoryContext:
    def test_roles_and_limit(self):
        messages = [_msg("user", f"q{i}") if i % 2 == 0 else _msg("assistant", f"a{i}") for i in range(10)]

        context = build_history_context(messages, limit=4)

        assert context.splitlines() == ["User: q6", "Chef: a7", "User: q8", "Chef: a9"]

    def test_empty_history_leaves_prompt_alone(self):
        assert enrich_prompt([], "pasta") == "pasta"
        assert enrich_prompt([_msg("user", "hi")], "pasta", limit=0) == "pasta"

    def test_enriched_prompt_layout(self):
        prompt = enrich_prompt([_msg("user", "I have eggs"), _msg("assistant", "Omelette?")], "sweeter")
        assert prompt == "Recent history:\nUser: I have eggs\nChef: Omelette?\n\nNew request: sweeter"
