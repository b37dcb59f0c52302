"""
Core services with caching and business logic.

Services provide a clean interface for business operations,
with cache-aside reads and detached cache repopulation.
"""

from core.services.background import BackgroundWriter
from core.services.explore_service import ExploreService

__all__ = [
    "BackgroundWriter",
    "ExploreService",
]
