"""
SQLAlchemy models for the Explore Service.

Usage:
    from core.models import Decision
"""

from core.db import Base
from .decision import Decision

__all__ = [
    "Base",
    "Decision",
]
