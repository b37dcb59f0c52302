"""
Decision repository: keyset-paginated liker queries and the decision upsert.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy import Select, and_, exists, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, aliased

from core.exceptions import MutualCheckFailedError, StorageUnavailableError
from core.logging import get_logger
from core.models import Decision
from core.models.decision import utcnow
from core.pagination import DEFAULT_PAGE_SIZE, Cursor, encode_cursor

from .base import BaseRepository

logger = get_logger("database")

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass(frozen=True)
class Liker:
    """A user who liked the recipient, with the time of the like."""

    actor_id: str
    timestamp: int


def to_epoch(value: datetime) -> int:
    """Whole epoch seconds; naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def from_epoch(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


class DecisionStore(Protocol):
    """Capabilities the explore service needs from decision storage."""

    def get_likers(
        self, recipient_user_id: str, cursor: Optional[Cursor]
    ) -> tuple[list[Liker], Optional[str]]: ...

    def get_new_likers(
        self, recipient_user_id: str, cursor: Optional[Cursor]
    ) -> tuple[list[Liker], Optional[str]]: ...

    def count_likes(self, recipient_user_id: str) -> int: ...

    def upsert_decision(self, actor_user_id: str, recipient_user_id: str, liked: bool) -> None: ...

    def has_mutual_like(self, actor_user_id: str, recipient_user_id: str) -> Optional[bool]: ...


class DecisionRepository(BaseRepository[Decision]):
    """
    SQLAlchemy implementation of ``DecisionStore``.

    Key features:
    - Keyset pagination on created_at (no OFFSET scans)
    - Over-fetch by one row to detect a further page
    - INSERT .. ON CONFLICT upsert for last-write-wins decisions

    Usage:
        with db.session() as session:
            repo = DecisionRepository(session)
            likers, next_token = repo.get_likers("user123", cursor=None)
    """

    model = Decision

    def __init__(
        self,
        session: Session,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        super().__init__(session)
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size
        self.clock = clock

    # =========================================================================
    # Liker queries
    # =========================================================================

    def get_likers(
        self, recipient_user_id: str, cursor: Optional[Cursor]
    ) -> tuple[list[Liker], Optional[str]]:
        """
        Users who liked the recipient, newest first.

        Args:
            recipient_user_id: User whose likers are listed
            cursor: Continuation from a previous page, or None for the first page

        Returns:
            Tuple of (likers on this page, next pagination token or None)
        """
        stmt = select(Decision.actor_user_id, Decision.created_at).where(
            Decision.recipient_user_id == recipient_user_id,
            Decision.liked_recipient.is_(True),
        )
        return self._fetch_page(stmt, Decision.created_at, cursor, "get_likers", recipient_user_id)

    def get_new_likers(
        self, recipient_user_id: str, cursor: Optional[Cursor]
    ) -> tuple[list[Liker], Optional[str]]:
        """
        Users who liked the recipient and have no decision from the recipient yet.

        Same keyset contract as ``get_likers``; the anti-join runs inside the
        query so over-fetching by one still detects the next page exactly.
        """
        reply = aliased(Decision)
        already_decided = exists().where(
            reply.actor_user_id == recipient_user_id,
            reply.recipient_user_id == Decision.actor_user_id,
        )
        stmt = select(Decision.actor_user_id, Decision.created_at).where(
            Decision.recipient_user_id == recipient_user_id,
            Decision.liked_recipient.is_(True),
            ~already_decided,
        )
        return self._fetch_page(
            stmt, Decision.created_at, cursor, "get_new_likers", recipient_user_id
        )

    def count_likes(self, recipient_user_id: str) -> int:
        """Total number of users who liked the recipient."""
        return self.count(recipient_user_id=recipient_user_id, liked_recipient=True)

    def _fetch_page(
        self,
        stmt: Select,
        created_at,
        cursor: Optional[Cursor],
        operation: str,
        recipient_user_id: str,
    ) -> tuple[list[Liker], Optional[str]]:
        limit = (cursor or Cursor()).page_size(self.default_page_size, self.max_page_size)

        if cursor is not None:
            stmt = stmt.where(created_at < from_epoch(cursor.last_created_at))
        stmt = stmt.order_by(created_at.desc()).limit(limit + 1)

        with self.storage_errors(operation, recipient_user_id=recipient_user_id):
            rows = self.session.execute(stmt).all()

        likers = [Liker(actor_id=actor_id, timestamp=to_epoch(ts)) for actor_id, ts in rows]

        next_token = None
        if len(likers) > limit:
            likers = likers[:limit]
            next_token = encode_cursor(
                Cursor(last_created_at=likers[-1].timestamp, limit=limit)
            )

        return likers, next_token

    # =========================================================================
    # Decisions
    # =========================================================================

    def upsert_decision(self, actor_user_id: str, recipient_user_id: str, liked: bool) -> None:
        """
        Record a decision, overwriting any earlier one for the same pair.

        On conflict ``liked_recipient`` is replaced and ``created_at`` refreshed.
        The decision is committed before returning.
        """
        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            logger.error("storage_error", operation="upsert_decision", dialect=dialect)
            raise StorageUnavailableError(f"decision upsert is not supported on {dialect}")

        stmt = insert(Decision).values(
            actor_user_id=actor_user_id,
            recipient_user_id=recipient_user_id,
            liked_recipient=liked,
            created_at=self.clock(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["actor_user_id", "recipient_user_id"],
            set_={
                "liked_recipient": stmt.excluded.liked_recipient,
                "created_at": stmt.excluded.created_at,
            },
        )

        with self.storage_errors(
            "upsert_decision", actor_user_id=actor_user_id, recipient_user_id=recipient_user_id
        ):
            self.session.execute(stmt)
            self.session.commit()

    def has_mutual_like(self, actor_user_id: str, recipient_user_id: str) -> Optional[bool]:
        """True when both users currently like each other."""
        forward = exists().where(
            Decision.actor_user_id == actor_user_id,
            Decision.recipient_user_id == recipient_user_id,
            Decision.liked_recipient.is_(True),
        )
        backward = exists().where(
            Decision.actor_user_id == recipient_user_id,
            Decision.recipient_user_id == actor_user_id,
            Decision.liked_recipient.is_(True),
        )

        with self.storage_errors(
            "has_mutual_like",
            error_class=MutualCheckFailedError,
            actor_user_id=actor_user_id,
            recipient_user_id=recipient_user_id,
        ):
            result = self.session.execute(select(and_(forward, backward))).scalar()

        return None if result is None else bool(result)
