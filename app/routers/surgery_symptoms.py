"""Surgery symptom library visibility (enable/disable per surgery)."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.routers.deps import get_actor, http_error_for
from app.schemas.symptoms import OkOut, SurgerySymptomsPatchIn
from app.services.access import Actor, PermissionDeniedError, SurgeryNotFoundError
from app.services.symptom_visibility_service import SymptomVisibilityService, VisibilityValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["symptom-library"])


@router.patch("/surgerySymptoms", response_model=OkOut)
def update_surgery_symptom(
    payload: SurgerySymptomsPatchIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> OkOut:
    service = SymptomVisibilityService(db)
    try:
        service.apply(
            payload.action,
            surgery_id=payload.surgery_id,
            actor=actor,
            base_symptom_id=payload.base_symptom_id,
            custom_symptom_id=payload.custom_symptom_id,
        )
    except (PermissionDeniedError, SurgeryNotFoundError, VisibilityValidationError) as exc:
        raise http_error_for(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to update surgery symptom visibility surgery_id=%s", payload.surgery_id)
        raise HTTPException(status_code=500, detail="Failed to update surgery symptoms") from exc

    return OkOut()
