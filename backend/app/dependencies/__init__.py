"""
FastAPI dependency injection module.

Provides centralized dependencies for:
- Database sessions
- Repositories
- Services
- Caching and background cache writes
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from core.cache import CacheProvider
from core.config import Settings, get_settings
from core.db import get_db
from core.repositories import DecisionRepository
from core.services import BackgroundWriter, ExploreService

# =============================================================================
# Repository Dependencies
# =============================================================================


def get_decision_repository(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> DecisionRepository:
    """Get DecisionRepository bound to the request session."""
    return DecisionRepository(
        db,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )


# =============================================================================
# Cache Dependencies
# =============================================================================


def get_cache(request: Request) -> CacheProvider:
    """Get the application's cache client."""
    return request.app.state.cache


def get_background_writer(request: Request) -> BackgroundWriter:
    """Get the application's background cache writer."""
    return request.app.state.writer


# =============================================================================
# Service Dependencies
# =============================================================================


def get_explore_service(
    repo: DecisionRepository = Depends(get_decision_repository),
    cache: CacheProvider = Depends(get_cache),
    writer: BackgroundWriter = Depends(get_background_writer),
    settings: Settings = Depends(get_settings),
) -> ExploreService:
    """Get ExploreService with injected store, cache and writer."""
    return ExploreService(
        repo,
        cache,
        writer,
        likers_ttl=settings.likers_cache_ttl,
        new_likers_ttl=settings.new_likers_cache_ttl,
        likers_count_ttl=settings.likers_count_cache_ttl,
    )


__all__ = [
    "get_db",
    "get_decision_repository",
    "get_cache",
    "get_background_writer",
    "get_explore_service",
]
