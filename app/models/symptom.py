"""Symptom library tables.

The shared base library is edited centrally; each surgery can override wording,
hide entries, add custom symptoms, and enable/disable what reception staff see.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint, false, true
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, new_id


class BaseSymptom(Base):
    __tablename__ = "base_symptoms"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    age_group: Mapped[str | None] = mapped_column(String(10), nullable=True)
    brief_instruction: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())


class SurgerySymptomOverride(Base):
    __tablename__ = "surgery_symptom_overrides"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    surgery_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("surgeries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    base_symptom_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("base_symptoms.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    age_group: Mapped[str | None] = mapped_column(String(10), nullable=True)
    brief_instruction: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    __table_args__ = (
        UniqueConstraint("surgery_id", "base_symptom_id", name="uq_surgery_symptom_overrides_surgery_base"),
    )


class SurgeryCustomSymptom(Base):
    __tablename__ = "surgery_custom_symptoms"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    surgery_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("surgeries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slug: Mapped[str] = mapped_column(String(200), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    age_group: Mapped[str | None] = mapped_column(String(10), nullable=True)
    brief_instruction: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())


class SurgerySymptomStatus(Base):
    """Enable/disable switch for one base or custom symptom within a surgery."""

    __tablename__ = "surgery_symptom_statuses"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    surgery_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("surgeries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    base_symptom_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("base_symptoms.id", ondelete="CASCADE"), nullable=True
    )
    custom_symptom_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("surgery_custom_symptoms.id", ondelete="CASCADE"), nullable=True
    )
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    last_edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_edited_by: Mapped[str | None] = mapped_column(String(320), nullable=True)
