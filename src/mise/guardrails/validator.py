"""
Mise - Prompt Guardrails.

Input/output validation that keeps requests in the culinary domain.

Layers:
1. Length (empty / over MAX_INPUT_LENGTH)
2. Forbidden patterns (instruction override, identity change, prompt
   disclosure, code injection, hacking, off-topic code requests)
3. Sanitization of whatever passes
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from mise.guardrails.prompts import (
    build_ideas_system_prompt,
    build_system_prompt,
    redirect_message,
)
from mise.models.entities import ChefProfile

logger = logging.getLogger(__name__)

MAX_INPUT_LENGTH = 500

FORBIDDEN_PATTERNS: list[re.Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in [
        # Instruction override
        r"ignore\s*(previous|all|my|the|your)?\s*(instructions?|prompts?|rules?)",
        r"forget\s*(everything|all|previous|your)",
        r"disregard\s*(previous|all|the|your)",
        r"override\s*(previous|all|the|your|system)",
        # Identity change
        r"you\s*are\s*now",
        r"\bact\s*as\s*(if|a|an)?\b",
        r"pretend\s*(to\s*be|you're|you\s*are)",
        r"roleplay\s*as",
        r"imagine\s*you('re|\s*are)",
        r"from\s*now\s*on\s*(you|act|be)",
        # Prompt disclosure
        r"reveal\s*(your|the|system)?\s*(prompt|instructions?)",
        r"show\s*(me|your)?\s*(prompt|instructions?)",
        r"what\s*(are|is)\s*your\s*(prompt|instructions?)",
        r"system\s*prompt",
        # Code injection
        r"<script\b",
        r"javascript:",
        r"\beval\s*\(",
        r"\{\{.*\}\}",
        r"\$\{.*\}",
        # Dangerous topics
        r"\b(hack|exploit|malware|virus|trojan)\b",
        r"\b(password|credential|secret|token)\s*(steal|hack|crack)",
        r"\b(sql|xss|csrf)\s*inject",
        # Off-topic commands
        r"write\s*(me|a)?\s*(code|script|program|software)",
        r"generate\s*(code|script|program)",
        r"create\s*(a|an)?\s*(virus|malware|exploit)",
    ]
]

CODE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"```(javascript|js|python|py|bash|sh|sql|php)\n", re.IGNORECASE),
    re.compile(r"function\s+\w+\s*\("),
    re.compile(r"const\s+\w+\s*=\s*\("),
    re.compile(r"import\s+.*from\s+['\"`]"),
    re.compile(r"require\s*\(['\"`]"),
    re.compile(r"<script\b", re.IGNORECASE),
]

CULINARY_KEYWORDS = [
    "cook", "cocinar", "bake", "hornear", "fry", "freir", "boil", "hervir",
    "roast", "asar", "grill", "mix", "mezclar", "chop", "picar", "season",
    "ingredient", "ingrediente", "recipe", "receta", "food", "comida",
    "chicken", "pollo", "fish", "pescado", "vegetable", "verdura", "rice", "arroz",
    "pasta", "bread", "egg", "huevo", "cheese", "queso", "oil", "aceite",
    "salt", "sal", "sugar", "flour", "harina", "butter", "oven", "horno",
    "breakfast", "desayuno", "lunch", "almuerzo", "dinner", "cena",
    "dessert", "postre", "dish", "plato", "serving", "porcion", "calorie",
]


@dataclass
class ValidationResult:
    valid: bool
    error: str | None = None
    sanitized_input: str | None = None


class Guardrail(ABC):
    """
    What the orchestrator needs from a guardrail.

    validate_input decides whether a prompt may reach a provider at all;
    the prompt builders return opaque system-prompt strings.
    """

    @abstractmethod
    def validate_input(self, text: str) -> ValidationResult: ...

    @abstractmethod
    def get_system_prompt(
        self, profile: ChefProfile, locale: str, pantry: list[str] | None = None
    ) -> str: ...

    @abstractmethod
    def get_ideas_system_prompt(
        self, profile: ChefProfile, locale: str, pantry: list[str] | None = None
    ) -> str: ...

    def validate_output(self, text: str) -> ValidationResult:
        return ValidationResult(valid=True)

    def get_redirect_message(self, locale: str = "en") -> str:
        """Shown instead of an answer when a prompt is rejected."""
        return redirect_message(locale)


class PromptGuardrail(Guardrail):
    """Default guardrail: pattern-based injection detection."""

    def __init__(self, max_input_length: int = MAX_INPUT_LENGTH):
        self.max_input_length = max_input_length

    def validate_input(self, text: str) -> ValidationResult:
        trimmed = text.strip()

        if not trimmed:
            return ValidationResult(valid=False, error="input_empty")

        if len(trimmed) > self.max_input_length:
            return ValidationResult(valid=False, error="input_too_long")

        for pattern in FORBIDDEN_PATTERNS:
            if pattern.search(trimmed):
                logger.warning(f"Forbidden pattern detected: {pattern.pattern}")
                return ValidationResult(valid=False, error="forbidden_pattern")

        return ValidationResult(valid=True, sanitized_input=self.sanitize(trimmed))

    @staticmethod
    def sanitize(text: str) -> str:
        text = re.sub(r"<[^>]*>", "", text)
        text = re.sub(r"\s+", " ", text)
        return re.sub(r"[\x00-\x1f\x7f]", "", text).strip()

    def validate_output(self, text: str) -> ValidationResult:
        if any(p.search(text) for p in CODE_PATTERNS):
            return ValidationResult(valid=False, error="output_contains_code")

        lowered = text.lower()
        if len(text) > 100 and not any(k in lowered for k in CULINARY_KEYWORDS):
            # Not blocking: valid answers can miss every keyword
            logger.warning("Response without culinary content detected")

        return ValidationResult(valid=True)

    def get_system_prompt(
        self, profile: ChefProfile, locale: str, pantry: list[str] | None = None
    ) -> str:
        return build_system_prompt(profile, locale, pantry or [])

    def get_ideas_system_prompt(
        self, profile: ChefProfile, locale: str, pantry: list[str] | None = None
    ) -> str:
        return build_ideas_system_prompt(profile, locale, pantry or [])
