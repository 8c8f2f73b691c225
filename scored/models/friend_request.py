import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from scored.models.base import Base

PENDING = "pending"
ACCEPTED = "accepted"
DECLINED = "declined"


class FriendRequest(Base):
    __tablename__ = "friend_requests"

    sender_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    receiver_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Canonical ordering of (sender, receiver): one request per unordered pair
    user_low_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    user_high_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PENDING
    )  # pending, accepted, declined
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_friend_requests_pair"),
        CheckConstraint("user_low_id < user_high_id", name="canonical_order"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'declined')", name="valid_status"
        ),
    )

    @staticmethod
    def canonical_pair(user_a: uuid.UUID, user_b: uuid.UUID) -> tuple[uuid.UUID, uuid.UUID]:
        return min(user_a, user_b), max(user_a, user_b)
