"""
Mise Guardrails - input validation and system prompts.
"""

from mise.guardrails.validator import Guardrail, PromptGuardrail, ValidationResult

__all__ = [
    "Guardrail",
    "PromptGuardrail",
    "ValidationResult",
]
