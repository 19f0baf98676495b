"""
Mise Core - error taxonomy and failure classification.
"""

from mise.core.classifier import ErrorClassifier
from mise.core.errors import (
    APIError,
    ErrorCode,
    FreeAlternative,
    MiseError,
    ProviderNotFoundError,
    ProviderResponseError,
    ProviderTransportError,
    RecipeParseError,
)

__all__ = [
    "APIError",
    "ErrorClassifier",
    "ErrorCode",
    "FreeAlternative",
    "MiseError",
    "ProviderNotFoundError",
    "ProviderResponseError",
    "ProviderTransportError",
    "RecipeParseError",
]
