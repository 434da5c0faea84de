"""
Challenge tables, schema only.

`challenges` holds the immutable templates; `user_challenges` holds one
row per user, template, and calendar day. Each daily row occupies a
numbered slot, so a user can never hold more rows for a day than there
are slots.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from petengine.core.database.base import Base, IdMixin, TimestampMixin


class ChallengeRow(Base):
    """Challenge template (seeded once, never mutated)."""

    __tablename__ = "challenges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    target: Mapped[int] = mapped_column(Integer, nullable=False)
    coin_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")


class UserChallengeRow(Base, IdMixin, TimestampMixin):
    """Per-user, per-day challenge instance."""

    __tablename__ = "user_challenges"
    __table_args__ = (
        UniqueConstraint("user_id", "challenge_id", "day_key", name="uq_user_challenges_user_template_day"),
        UniqueConstraint("user_id", "day_key", "slot", name="uq_user_challenges_user_day_slot"),
        Index("ix_user_challenges_user_day", "user_id", "day_key"),
    )

    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    challenge_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("challenges.id", ondelete="CASCADE"),
        nullable=False,
    )
    day_key: Mapped[str] = mapped_column(String(10), nullable=False)
    slot: Mapped[int] = mapped_column(Integer, nullable=False)

    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    claimed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    claimed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    challenge: Mapped[ChallengeRow] = relationship(lazy="joined")
