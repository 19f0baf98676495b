"""
Mise - Recipe Ideas Generation.

Asks for 15-20 short recipe suggestions as JSON. Streaming status only
carries counters; the ideas appear once the response is complete and
parsed. An unusable response is not an error: the attempt completes with
no ideas and a PARSE_FAILURE notice.
"""

import logging
from dataclasses import dataclass, field

from mise.core.errors import APIError
from mise.generation.orchestrator import AttemptContext, GenerationOrchestrator
from mise.models.entities import ChatMessage, MealType, RecipeIdea
from mise.parsing.ideas import parse_ideas_response, split_ingredients

logger = logging.getLogger(__name__)

MEAL_LABELS: dict[MealType, dict[str, str]] = {
    MealType.BREAKFAST: {"en": "breakfast", "es": "desayuno"},
    MealType.LUNCH: {"en": "lunch", "es": "almuerzo"},
    MealType.DINNER: {"en": "dinner", "es": "cena"},
    MealType.SNACK: {"en": "snack", "es": "snack"},
    MealType.DESSERT: {"en": "dessert", "es": "postre"},
}

_PROMPT_LABELS = {
    "en": {"ingredients": "Available ingredients", "meal": "For", "vibes": "Preferences", "servings": "Servings"},
    "es": {"ingredients": "Ingredientes disponibles", "meal": "Para", "vibes": "Preferencias", "servings": "Porciones"},
}


@dataclass
class IdeasRequest:
    ingredients: str  # Comma-separated
    meal_type: MealType | None = None
    vibes: list[str] = field(default_factory=list)
    servings: int = 2


def build_ideas_user_prompt(request: IdeasRequest, ingredients: str, locale: str = "en") -> str:
    labels = _PROMPT_LABELS.get(locale, _PROMPT_LABELS["en"])
    prompt = f"{labels['ingredients']}: {ingredients}"
    if request.meal_type:
        meal = MEAL_LABELS[request.meal_type].get(locale, request.meal_type.value)
        prompt += f". {labels['meal']}: {meal}"
    if request.vibes:
        prompt += f". {labels['vibes']}: {', '.join(request.vibes)}"
    prompt += f". {labels['servings']}: {request.servings}"
    return prompt


class IdeasGenerator(GenerationOrchestrator[IdeasRequest]):
    flavor = "ideas"
    exposes_content = False

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.ideas: list[RecipeIdea] = []
        self.notice: APIError | None = None
        self.selected_idea: RecipeIdea | None = None

    def select_idea(self, idea: RecipeIdea | None) -> None:
        self.selected_idea = idea

    def clear_selection(self) -> None:
        self.selected_idea = None

    def _on_attempt_start(self, request: IdeasRequest) -> None:
        self.ideas = []
        self.notice = None

    def _prompt_text(self, request: IdeasRequest) -> str:
        return request.ingredients

    def _system_prompt(self, ctx: AttemptContext) -> str:
        return self.guardrail.get_ideas_system_prompt(ctx.profile, self.locale, ctx.pantry)

    def _user_prompt(self, ctx: AttemptContext) -> str:
        return build_ideas_user_prompt(ctx.request, ctx.sanitized, self.locale)

    def _on_completed(self, ctx: AttemptContext, content: str, user_message: ChatMessage) -> None:
        request: IdeasRequest = ctx.request
        ideas = parse_ideas_response(
            content,
            request.meal_type,
            request.vibes,
            split_ingredients(ctx.sanitized),
            request.servings,
        )
        if not ideas:
            logger.warning("Ideas response held no usable ideas")
            self.notice = self.classifier.parse_failure()
            return

        added = self.store.add_recipe_ideas(ideas)
        self.session_logger.persisted("ideas", len(added))
        self.ideas = ideas
        logger.info(f"{len(ideas)} ideas generated ({len(added)} new)")

    def _on_reset(self) -> None:
        self.ideas = []
        self.notice = None
        self.selected_idea = None
