"""
Decision model: one directed like/pass edge between two users.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from core.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Decision(Base):
    """
    A user's decision about another user.

    At most one row exists per ordered (actor, recipient) pair; a repeated
    decision overwrites ``liked_recipient`` and refreshes ``created_at``.

    Attributes:
        actor_user_id: User who made the decision
        recipient_user_id: User the decision is about
        liked_recipient: True for a like, False for a pass
        created_at: Time of the most recent decision for the pair
    """

    __tablename__ = "decisions"
    __table_args__ = (
        UniqueConstraint("actor_user_id", "recipient_user_id", name="uq_decisions_actor_recipient"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    actor_user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    recipient_user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    liked_recipient: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        verb = "likes" if self.liked_recipient else "passes"
        return f"<Decision {self.actor_user_id} {verb} {self.recipient_user_id}>"


# Serves the keyset scans: WHERE recipient = ? AND liked ORDER BY created_at DESC
Index(
    "ix_decisions_recipient_liked_created",
    Decision.recipient_user_id,
    Decision.liked_recipient,
    Decision.created_at.desc(),
)
