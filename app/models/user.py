"""Users and their per-surgery memberships.

Only the fields the review workflow needs are modelled here; credentials and
login sessions belong to the host application.
"""

from __future__ import annotations

import enum

from sqlalchemy import Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, new_id


class GlobalRole(str, enum.Enum):
    USER = "USER"
    SUPERUSER = "SUPERUSER"


class SurgeryRole(str, enum.Enum):
    STANDARD = "STANDARD"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    global_role: Mapped[GlobalRole] = mapped_column(
        Enum(GlobalRole, name="global_role"),
        nullable=False,
        default=GlobalRole.USER,
    )

    memberships: Mapped[list["UserSurgery"]] = relationship(back_populates="user", lazy="selectin")


class UserSurgery(Base):
    __tablename__ = "user_surgeries"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    surgery_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("surgeries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[SurgeryRole] = mapped_column(
        Enum(SurgeryRole, name="surgery_role"),
        nullable=False,
        default=SurgeryRole.STANDARD,
    )

    user: Mapped[User] = relationship(back_populates="memberships")

    __table_args__ = (UniqueConstraint("user_id", "surgery_id", name="uq_user_surgeries_user_id_surgery_id"),)
