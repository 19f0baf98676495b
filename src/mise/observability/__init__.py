"""
Mise - Observability.
"""

from mise.observability.session_logger import SessionLogger

__all__ = ["SessionLogger"]
