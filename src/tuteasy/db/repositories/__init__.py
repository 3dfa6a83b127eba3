"""Database repositories for clean data access."""

from .base import BaseRepository
from .tutor import TutorRepository

__all__ = [
    "BaseRepository",
    "TutorRepository",
]
