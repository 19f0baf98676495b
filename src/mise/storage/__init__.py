"""
Mise - Storage.
"""

from mise.storage.backends import JsonFileBackend, MemoryBackend, StorageBackend
from mise.storage.store import (
    MAX_CHAT_HISTORY,
    MAX_RECIPE_HISTORY,
    MAX_RECIPE_IDEAS,
    PersistenceStore,
    StorageKey,
    normalize_title,
)

__all__ = [
    "JsonFileBackend",
    "MAX_CHAT_HISTORY",
    "MAX_RECIPE_HISTORY",
    "MAX_RECIPE_IDEAS",
    "MemoryBackend",
    "PersistenceStore",
    "StorageBackend",
    "StorageKey",
    "normalize_title",
]
