"""
Mise - Generation.

The orchestrator state machine and its two flavors.
"""

from mise.generation.ideas import IdeasGenerator, IdeasRequest
from mise.generation.orchestrator import (
    CancellationToken,
    GenerationOrchestrator,
    PendingRetry,
)
from mise.generation.recipe import RecipeGenerator, RecipeRequest

__all__ = [
    "CancellationToken",
    "GenerationOrchestrator",
    "IdeasGenerator",
    "IdeasRequest",
    "PendingRetry",
    "RecipeGenerator",
    "RecipeRequest",
]
