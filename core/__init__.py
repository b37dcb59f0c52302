"""
Explore Service Core Library.

This package provides the core functionality for the Explore Service:
decision storage, the liker queries with keyset pagination, the Redis
cache-aside layer, configuration and logging.

Usage:
    # Database
    from core.db import db, get_db
    from core.models import Decision
    from core.repositories import DecisionRepository

    # Service
    from core.services import ExploreService, BackgroundWriter

    # Config
    from core.config import get_settings, Settings

    # Logging
    from core.logging import get_logger, configure_logging
"""

__version__ = "1.0.0"
