import uuid
from datetime import date, datetime

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scored.models.base import Base

MIN_SCORE = 0
MAX_SCORE = 100


class Score(Base):
    __tablename__ = "scores"

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000))
    # Calendar day in the ledger's reference time zone
    score_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_scores_user_date"),
        CheckConstraint("score >= 0 AND score <= 100", name="score_range"),
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="scores")  # noqa: F821
