from __future__ import annotations

from sqlalchemy.orm import Session

from app.models.symptom import SurgerySymptomStatus


def as_user(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


def disable(
    db: Session,
    surgery_id: str,
    *,
    base_symptom_id: str | None = None,
    custom_symptom_id: str | None = None,
) -> None:
    db.add(
        SurgerySymptomStatus(
            surgery_id=surgery_id,
            base_symptom_id=base_symptom_id,
            custom_symptom_id=custom_symptom_id,
            is_enabled=False,
        )
    )
    db.commit()
