from __future__ import annotations

import argparse
import logging
import re

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.models.surgery import Surgery
from app.models.symptom import BaseSymptom, SurgeryCustomSymptom
from app.models.user import GlobalRole, SurgeryRole, User, UserSurgery

logger = logging.getLogger(__name__)
_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def slugify(value: str) -> str:
    return _SLUG_RE.sub("-", value.strip().lower()).strip("-")


def _base_symptoms() -> list[dict[str, str | None]]:
    return [
        {"name": "Abdominal pain", "age_group": "Adult", "brief_instruction": "Book same-day GP if severe."},
        {"name": "Chest pain", "age_group": "Adult", "brief_instruction": "Call 999 if crushing or radiating."},
        {"name": "Fever", "age_group": "U5", "brief_instruction": "Same-day appointment for under 5s."},
        {"name": "Fever", "age_group": "O5", "brief_instruction": "Pharmacy first unless unwell."},
        {"name": "Headache", "age_group": "Adult", "brief_instruction": None},
        {"name": "Rash", "age_group": "U5", "brief_instruction": "Glass test; call 999 if non-blanching."},
        {"name": "Sore throat", "age_group": "Adult", "brief_instruction": "Pharmacy first."},
    ]


def _get_or_create_user(db: Session, *, email: str, name: str, role: GlobalRole) -> User:
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        user = User(email=email, name=name, global_role=role)
        db.add(user)
        db.flush()
        logger.info("Created user email=%s role=%s", email, role.value)
    return user


def seed_demo_data(surgery_name: str = "Demo Surgery") -> str | None:
    _configure_logging()

    db: Session = SessionLocal()
    try:
        surgery = db.execute(select(Surgery).where(Surgery.name == surgery_name)).scalar_one_or_none()
        if surgery is None:
            surgery = Surgery(name=surgery_name)
            db.add(surgery)
            db.flush()
            logger.info("Created surgery name=%s id=%s", surgery_name, surgery.id)

        _get_or_create_user(db, email="superuser@example.com", name="Super User", role=GlobalRole.SUPERUSER)
        admin = _get_or_create_user(db, email="admin@example.com", name="Practice Admin", role=GlobalRole.USER)
        membership = db.execute(
            select(UserSurgery).where(UserSurgery.user_id == admin.id, UserSurgery.surgery_id == surgery.id)
        ).scalar_one_or_none()
        if membership is None:
            db.add(UserSurgery(user_id=admin.id, surgery_id=surgery.id, role=SurgeryRole.ADMIN))

        existing_slugs = set(db.execute(select(BaseSymptom.slug)).scalars().all())
        inserted = 0
        for item in _base_symptoms():
            slug = slugify(f"{item['name']} {item['age_group'] or ''}")
            if slug in existing_slugs:
                continue
            db.add(BaseSymptom(slug=slug, **item))
            existing_slugs.add(slug)
            inserted += 1

        custom_slug = "practice-minor-illness"
        has_custom = db.execute(
            select(SurgeryCustomSymptom.id).where(
                SurgeryCustomSymptom.surgery_id == surgery.id,
                SurgeryCustomSymptom.slug == custom_slug,
            )
        ).first()
        if has_custom is None:
            db.add(
                SurgeryCustomSymptom(
                    surgery_id=surgery.id,
                    slug=custom_slug,
                    name="Minor illness clinic",
                    age_group="Adult",
                    brief_instruction="Offer the nurse-led minor illness clinic.",
                )
            )

        db.commit()
        logger.info("Seed completed. surgery_id=%s base_symptoms_inserted=%s", surgery.id, inserted)
        return surgery.id

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Seed failed")
        return None
    finally:
        db.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo surgery, users, and a small symptom library")
    parser.add_argument("--surgery-name", default="Demo Surgery")
    args = parser.parse_args()

    seed_demo_data(surgery_name=args.surgery_name)


if __name__ == "__main__":
    main()
