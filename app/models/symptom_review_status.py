"""Per-surgery clinical sign-off state for one symptom and age band.

A symptom with no row here has never been reviewed; it is counted as pending.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, new_id
from app.models.user import User


class ReviewState(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CHANGES_REQUIRED = "CHANGES_REQUIRED"


class SymptomReviewStatus(Base):
    __tablename__ = "symptom_review_statuses"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    surgery_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("surgeries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    symptom_id: Mapped[str] = mapped_column(String(32), nullable=False)
    age_group: Mapped[str | None] = mapped_column(String(10), nullable=True)
    status: Mapped[ReviewState] = mapped_column(
        Enum(ReviewState, name="symptom_review_state"),
        nullable=False,
        default=ReviewState.PENDING,
    )
    last_reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_reviewed_by_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    review_note: Mapped[str | None] = mapped_column(Text, nullable=True)

    last_reviewed_by: Mapped[User | None] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("surgery_id", "symptom_id", "age_group", name="uq_symptom_review_statuses_key"),
        Index("ix_symptom_review_statuses_surgery_id_status", "surgery_id", "status"),
    )
