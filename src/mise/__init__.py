"""
Mise - AI recipe generation from what's in your kitchen.

Pieces:
- Generation: recipe and recipe-idea request lifecycles
- LLM: provider adapters behind a startup-built registry
- Storage: client-local persistence with dedup and size caps
- Parsing: ideas JSON extraction, markdown recipes, ingredient consolidation
"""

__version__ = "1.0.0"
