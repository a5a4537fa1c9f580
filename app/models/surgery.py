from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, new_id
from app.models.user import User


class Surgery(Base):
    """Tenant boundary: one GP practice and its clinical governance state."""

    __tablename__ = "surgeries"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    requires_clinical_review: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    last_clinical_review_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_clinical_reviewer_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    last_clinical_reviewer: Mapped[User | None] = relationship(lazy="joined")
