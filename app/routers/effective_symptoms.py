"""Effective symptom listing for a surgery.

Returns the merged base/override/custom view that reception staff and the
clinical review console both work from.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.repositories.symptom_catalog_repository import SymptomCatalogRepository
from app.routers.deps import get_actor, http_error_for, parse_flag
from app.schemas.symptoms import EffectiveSymptomOut, EffectiveSymptomsOut
from app.services.access import Actor, PermissionDeniedError, SurgeryNotFoundError, require_surgery_member

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["symptoms"])


@router.get("/effectiveSymptoms", response_model=EffectiveSymptomsOut)
def list_effective_symptoms(
    surgery_id: str = Query(..., alias="surgeryId", min_length=1),
    include_disabled: str | None = Query(default=None, alias="includeDisabled"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> EffectiveSymptomsOut:
    try:
        require_surgery_member(db, actor, surgery_id)
        symptoms = SymptomCatalogRepository(db).list_effective_symptoms(
            surgery_id,
            include_disabled=parse_flag(include_disabled),
        )
    except (PermissionDeniedError, SurgeryNotFoundError) as exc:
        raise http_error_for(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception("Failed to load effective symptoms surgery_id=%s", surgery_id)
        raise HTTPException(status_code=500, detail="Failed to load symptoms") from exc

    return EffectiveSymptomsOut(symptoms=[EffectiveSymptomOut.model_validate(s) for s in symptoms])
