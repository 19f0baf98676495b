"""
Mise - Conversation Context.

Providers only take a system prompt and one user prompt, so recent chat
is folded into the user prompt as plain text.

Conversation history conveys WHAT was discussed, not full recipes:
long assistant replies that look like recipes are reduced to their title.
"""

import re

from mise.models.entities import ChatMessage

HISTORY_LIMIT = 6  # Last three exchanges
SUMMARIZE_THRESHOLD = 400

_RECIPE_MARKERS = [
    "ingredients",
    "ingredientes",
    "instructions",
    "instrucciones",
    "prep",
    "preparación",
    "servings",
    "porciones",
    " min",
    "tbsp",
    "cup",
    "taza",
]

_TITLE = re.compile(r"^#{1,2}\s*(.+?)\s*$", re.MULTILINE)


def _looks_like_recipe_content(message: str) -> bool:
    lowered = message.lower()
    return sum(1 for m in _RECIPE_MARKERS if m in lowered) >= 3


def _summarize_recipe_content(message: str) -> str:
    match = _TITLE.search(message)
    if match:
        title = re.sub(r"^[^\w¡¿]+", "", match.group(1)).strip(" *")
        if title:
            return f"[Recipe: {title}]"
    return "[Recipe]"


def summarize_assistant_message(message: str) -> str:
    """Shorten an assistant reply for use as context."""
    if len(message) < SUMMARIZE_THRESHOLD:
        return message

    if _looks_like_recipe_content(message):
        return _summarize_recipe_content(message)

    truncated = message[:SUMMARIZE_THRESHOLD].rsplit(" ", 1)[0]
    return f"{truncated}..."


def build_history_context(messages: list[ChatMessage], limit: int = HISTORY_LIMIT) -> str:
    """
    Render the last `limit` messages as "User:" / "Chef:" lines.

    Returns an empty string when there is no history.
    """
    if limit <= 0:
        return ""
    lines = []
    for message in messages[-limit:]:
        if message.role == "user":
            lines.append(f"User: {message.content}")
        else:
            lines.append(f"Chef: {summarize_assistant_message(message.content)}")
    return "\n".join(lines)


def enrich_prompt(history: list[ChatMessage], prompt: str, limit: int = HISTORY_LIMIT) -> str:
    """The user prompt sent to the provider: recent history plus the new request."""
    context = build_history_context(history, limit)
    if not context:
        return prompt
    return f"Recent history:\n{context}\n\nNew request: {prompt}"
