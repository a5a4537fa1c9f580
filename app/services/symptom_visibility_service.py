"""Enable/disable symptoms for a surgery's reception staff.

Visibility is stored as one status row per base or custom symptom. A review
change request can cascade into a disable, and approving a disabled symptom can
cascade into a re-enable; those cascades are separate calls to this service.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.models.symptom import SurgerySymptomStatus
from app.repositories.symptom_catalog_repository import SymptomCatalogRepository
from app.services.access import Actor, require_surgery_admin
from app.services.clinical_review_service import ClinicalReviewService, utcnow

logger = logging.getLogger(__name__)


class VisibilityAction(str, enum.Enum):
    ENABLE_BASE = "ENABLE_BASE"
    ENABLE_EXISTING = "ENABLE_EXISTING"
    DISABLE = "DISABLE"


class VisibilityValidationError(ValueError):
    pass


class SymptomVisibilityService:
    def __init__(self, db: Session, catalog: Optional[SymptomCatalogRepository] = None) -> None:
        self.db = db
        self.catalog = catalog or SymptomCatalogRepository(db)

    def apply(
        self,
        action: VisibilityAction,
        *,
        surgery_id: str,
        actor: Actor,
        base_symptom_id: Optional[str] = None,
        custom_symptom_id: Optional[str] = None,
    ) -> SurgerySymptomStatus:
        require_surgery_admin(self.db, actor, surgery_id)

        if action is VisibilityAction.ENABLE_BASE and not base_symptom_id:
            raise VisibilityValidationError("baseSymptomId and surgeryId are required")
        if not base_symptom_id and not custom_symptom_id:
            raise VisibilityValidationError("baseSymptomId or customSymptomId is required")

        is_enabled = action is not VisibilityAction.DISABLE
        if action is VisibilityAction.ENABLE_BASE:
            custom_symptom_id = None
        row = self.catalog.find_visibility_row(
            surgery_id,
            base_symptom_id=base_symptom_id,
            custom_symptom_id=custom_symptom_id,
        )
        if row is None:
            row = self.catalog.add_visibility_row(
                SurgerySymptomStatus(
                    surgery_id=surgery_id,
                    base_symptom_id=base_symptom_id,
                    custom_symptom_id=custom_symptom_id,
                    is_enabled=is_enabled,
                )
            )

        row.is_enabled = is_enabled
        row.last_edited_at = utcnow()
        row.last_edited_by = actor.display_name

        ClinicalReviewService(self.db, catalog=self.catalog).refresh_requires_clinical_review(surgery_id)
        self.db.commit()

        logger.info(
            "Symptom visibility changed surgery_id=%s action=%s base_symptom_id=%s custom_symptom_id=%s by=%s",
            surgery_id,
            action.value,
            base_symptom_id,
            custom_symptom_id,
            actor.id,
        )
        return row
