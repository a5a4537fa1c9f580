"""Acting user and surgery-level access checks.

The host application authenticates the request; this service only receives a
user id. It is resolved once into an :class:`Actor` so downstream code works
with a typed role rather than a loose session payload.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from app.models.surgery import Surgery
from app.models.user import GlobalRole, SurgeryRole, User

logger = logging.getLogger(__name__)


class AuthenticationRequiredError(PermissionError):
    pass


class PermissionDeniedError(PermissionError):
    pass


class SurgeryNotFoundError(LookupError):
    pass


@dataclass
class Actor:
    id: str
    email: str
    name: str | None
    global_role: GlobalRole
    admin_surgery_ids: frozenset[str] = field(default_factory=frozenset)
    member_surgery_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_superuser(self) -> bool:
        return self.global_role is GlobalRole.SUPERUSER

    @property
    def display_name(self) -> str:
        return self.name or self.email

    def can_administer(self, surgery_id: str) -> bool:
        return self.is_superuser or surgery_id in self.admin_surgery_ids

    def can_view(self, surgery_id: str) -> bool:
        return self.is_superuser or surgery_id in self.member_surgery_ids

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            global_role=GlobalRole(user.global_role),
            admin_surgery_ids=frozenset(
                m.surgery_id for m in user.memberships if SurgeryRole(m.role) is SurgeryRole.ADMIN
            ),
            member_surgery_ids=frozenset(m.surgery_id for m in user.memberships),
        )


def load_actor(db: Session, user_id: str | None) -> Actor:
    user_id = (user_id or "").strip()
    if not user_id:
        raise AuthenticationRequiredError("Authentication required")

    user = db.get(User, user_id)
    if user is None:
        logger.warning("Unknown acting user id=%s", user_id)
        raise AuthenticationRequiredError("Authentication required")
    return Actor.from_user(user)


def require_surgery_admin(db: Session, actor: Actor, surgery_id: str) -> Surgery:
    """Return the surgery when the actor is a superuser or one of its admins."""
    if not actor.can_administer(surgery_id):
        raise PermissionDeniedError("Superuser or Practice Admin required")

    surgery = db.get(Surgery, surgery_id)
    if surgery is None:
        raise SurgeryNotFoundError(surgery_id)
    return surgery


def require_surgery_member(db: Session, actor: Actor, surgery_id: str) -> Surgery:
    if not actor.can_view(surgery_id):
        raise PermissionDeniedError("Surgery membership required")

    surgery = db.get(Surgery, surgery_id)
    if surgery is None:
        raise SurgeryNotFoundError(surgery_id)
    return surgery
