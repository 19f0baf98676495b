"""
Mise - Recipe Generation.

Streams one markdown recipe. On completion the exchange is added to chat
history and, when the text looks like a recipe, a structured Recipe is
parsed and saved to recipe history linked to the user message.
"""

import logging
from dataclasses import dataclass

from mise.core.errors import RecipeParseError
from mise.generation.orchestrator import AttemptContext, GenerationOrchestrator
from mise.memory.context import enrich_prompt
from mise.models.entities import ChatMessage, Recipe
from mise.models.status import RequestStatus
from mise.parsing.recipe import has_recipe_structure, parse_recipe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecipeRequest:
    prompt: str


class RecipeGenerator(GenerationOrchestrator[RecipeRequest]):
    flavor = "recipe"
    exposes_content = True

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.last_recipe: Recipe | None = None

    async def generate_recipe(self, prompt: str) -> RequestStatus:
        return await self.generate(RecipeRequest(prompt=prompt))

    def _prompt_text(self, request: RecipeRequest) -> str:
        return request.prompt

    def _system_prompt(self, ctx: AttemptContext) -> str:
        return self.guardrail.get_system_prompt(ctx.profile, self.locale, ctx.pantry)

    def _user_prompt(self, ctx: AttemptContext) -> str:
        return enrich_prompt(self.store.get_chat_history(), ctx.sanitized)

    def _on_completed(self, ctx: AttemptContext, content: str, user_message: ChatMessage) -> None:
        output = self.guardrail.validate_output(content)
        if not output.valid:
            # Warn only; the text is already on screen
            logger.warning(f"Output validation warning: {output.error}")

        if not has_recipe_structure(content):
            return

        try:
            recipe = parse_recipe(content, ctx.provider, user_message.id)
        except RecipeParseError as e:
            logger.warning(f"Could not parse recipe: {e}")
            return

        self.last_recipe = recipe
        if self.store.add_to_history(recipe):
            self.session_logger.persisted("recipe")
            logger.info(f"Recipe saved to history: {recipe.title}")

    def _on_reset(self) -> None:
        self.last_recipe = None
