"""
Repository Layer

Data access layer using the repository pattern for clean separation
of database operations from business logic.
"""

from .base_repository import BaseRepository
from .session_repository import SessionRepository

__all__ = [
    "BaseRepository",
    "SessionRepository",
]
