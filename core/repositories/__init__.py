"""
Repository pattern implementations for data access.

Usage:
    from core.repositories import DecisionRepository
    from core.db import db

    with db.session() as session:
        repo = DecisionRepository(session)
        likers, next_token = repo.get_likers(recipient_user_id, cursor)
"""

from .base import BaseRepository
from .decision_repository import DecisionRepository, DecisionStore, Liker

__all__ = [
    "BaseRepository",
    "DecisionRepository",
    "DecisionStore",
    "Liker",
]
