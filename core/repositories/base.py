"""Base repository class with common query helpers."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.db import Base
from core.exceptions import StorageUnavailableError
from core.logging import get_logger

T = TypeVar("T", bound=Base)

logger = get_logger("database")


class BaseRepository(Generic[T]):
    """
    Base repository providing common read helpers.

    Usage:
        class DecisionRepository(BaseRepository[Decision]):
            model = Decision

        repo = DecisionRepository(session)
        total = repo.count(recipient_user_id="user123")
    """

    model: type[T]

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def storage_errors(
        self,
        operation: str,
        error_class: type[StorageUnavailableError] = StorageUnavailableError,
        **fields,
    ) -> Iterator[None]:
        """Re-raise any SQLAlchemy fault inside the block as a storage error."""
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("storage_error", operation=operation, error=str(e), **fields)
            raise error_class(f"{operation} failed") from e

    def count(self, **filters) -> int:
        """Get count of records matching equality filters."""
        stmt = select(func.count()).select_from(self.model)
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise ValueError(f"Unknown filter key: {key}")
            stmt = stmt.where(getattr(self.model, key) == value)
        with self.storage_errors("count", **filters):
            return self.session.execute(stmt).scalar_one()
