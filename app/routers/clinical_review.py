"""Clinical review admin endpoints.

Surgery admins (and superusers) sign off each symptom/age-band pair for their
surgery. Status rows are created on first review and updated in place.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.routers.deps import get_actor, http_error_for
from app.schemas.clinical_review import (
    BulkApproveIn,
    BulkApproveOut,
    ClinicalReviewActionIn,
    ClinicalReviewDataOut,
    CompleteReviewOut,
    RereviewOut,
    ResetAllOut,
    ReviewCountsOut,
    ReviewRowOut,
    ReviewRowsOut,
    ReviewStatusOut,
    ReviewStatusUpdateIn,
    ReviewSummaryOut,
    SurgeryRequest,
    SurgeryReviewOut,
)
from app.schemas.symptoms import EffectiveSymptomOut
from app.services.access import Actor, PermissionDeniedError, SurgeryNotFoundError
from app.services.clinical_review_service import ClinicalReviewService, ReviewIncompleteError, ReviewValidationError
from app.services.review_rows import ReviewFilter, ReviewSort

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["clinical-review"])

_DOMAIN_ERRORS = (PermissionDeniedError, SurgeryNotFoundError, ReviewValidationError)


@router.get("/clinical-review-data", response_model=ClinicalReviewDataOut)
def get_clinical_review_data(
    response: Response,
    surgery_id: str = Query(..., alias="surgeryId", min_length=1),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> ClinicalReviewDataOut:
    response.headers["Cache-Control"] = "no-store"
    try:
        data = ClinicalReviewService(db).get_review_data(surgery_id, actor)
    except _DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch clinical review data surgery_id=%s", surgery_id)
        raise HTTPException(status_code=500, detail="Failed to fetch clinical review data") from exc

    return ClinicalReviewDataOut(
        surgery=SurgeryReviewOut.model_validate(data.surgery),
        review_statuses=[ReviewStatusOut.model_validate(row) for row in data.review_statuses],
    )


@router.post("/review-status", response_model=ReviewStatusOut)
def update_review_status(
    payload: ReviewStatusUpdateIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> ReviewStatusOut:
    service = ClinicalReviewService(db)
    try:
        row = service.set_status(
            surgery_id=payload.surgery_id,
            symptom_id=payload.symptom_id,
            age_group=payload.age_group,
            new_status=payload.new_status,
            actor=actor,
            review_note=payload.review_note,
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to update review status surgery_id=%s", payload.surgery_id)
        raise HTTPException(status_code=500, detail="Failed to update review status") from exc

    return ReviewStatusOut.model_validate(row)


@router.post("/clinical-review", response_model=ResetAllOut)
def clinical_review_action(
    payload: ClinicalReviewActionIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> ResetAllOut:
    if payload.action != "RESET_ALL":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown action")

    service = ClinicalReviewService(db)
    try:
        updated = service.reset_all(payload.surgery_id, actor)
    except _DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to reset review statuses surgery_id=%s", payload.surgery_id)
        raise HTTPException(status_code=500, detail="Failed to process request") from exc

    return ResetAllOut(updated=updated)


@router.post("/clinical-review/bulk-approve", response_model=BulkApproveOut)
def bulk_approve(
    payload: BulkApproveIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> BulkApproveOut:
    service = ClinicalReviewService(db)
    try:
        approved_count = service.bulk_approve(payload.surgery_id, actor, search=payload.search)
    except _DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to bulk approve surgery_id=%s", payload.surgery_id)
        raise HTTPException(status_code=500, detail="Failed to process bulk approve") from exc

    return BulkApproveOut(approved_count=approved_count)


@router.post("/complete-review", response_model=CompleteReviewOut)
def complete_review(
    payload: SurgeryRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    service = ClinicalReviewService(db)
    try:
        surgery = service.complete_review(payload.surgery_id, actor)
    except ReviewIncompleteError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc), "pendingCount": exc.pending_count},
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to complete review surgery_id=%s", payload.surgery_id)
        raise HTTPException(status_code=500, detail="Failed to complete review") from exc

    return CompleteReviewOut(surgery=SurgeryReviewOut.model_validate(surgery))


@router.post("/request-rereview", response_model=RereviewOut)
def request_rereview(
    payload: SurgeryRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> RereviewOut:
    service = ClinicalReviewService(db)
    try:
        service.request_rereview(payload.surgery_id, actor)
    except _DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to request re-review surgery_id=%s", payload.surgery_id)
        raise HTTPException(status_code=500, detail="Failed to request re-review") from exc

    return RereviewOut(message="Re-review requested. All symptoms are now marked as pending review.")


@router.get("/clinical-review-summary", response_model=ReviewSummaryOut)
def clinical_review_summary(
    surgery_id: str = Query(..., alias="surgeryId", min_length=1),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> ReviewSummaryOut:
    try:
        summary = ClinicalReviewService(db).review_summary(surgery_id, actor)
    except _DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception("Failed to build review summary surgery_id=%s", surgery_id)
        raise HTTPException(status_code=500, detail="Failed to fetch review summary") from exc

    return ReviewSummaryOut(
        pending_review_count=summary.counts.pending,
        changes_requested_count=summary.counts.changes_required,
        approved_count=summary.counts.approved,
        total_symptoms=summary.counts.all,
        requires_clinical_review=summary.requires_clinical_review,
        last_clinical_review_at=summary.last_clinical_review_at,
        last_review_activity=summary.last_review_activity,
        recently_reviewed_count=summary.recently_reviewed_count,
    )


@router.get("/clinical-review-rows", response_model=ReviewRowsOut)
def clinical_review_rows(
    surgery_id: str = Query(..., alias="surgeryId", min_length=1),
    review_filter: ReviewFilter = Query(default=ReviewFilter.PENDING, alias="filter"),
    search: Optional[str] = Query(default=None),
    sort: ReviewSort = Query(default=ReviewSort.NAME_ASC),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> ReviewRowsOut:
    try:
        view = ClinicalReviewService(db).list_rows(
            surgery_id,
            actor,
            review_filter=review_filter,
            search=search,
            sort=sort,
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception("Failed to build review rows surgery_id=%s", surgery_id)
        raise HTTPException(status_code=500, detail="Failed to fetch review rows") from exc

    return ReviewRowsOut(
        filter=review_filter,
        sort=sort,
        counts=ReviewCountsOut.model_validate(view.counts),
        rows=[
            ReviewRowOut(
                symptom=EffectiveSymptomOut.model_validate(row.symptom),
                status=row.status,
                review_status=ReviewStatusOut.model_validate(row.review_status) if row.review_status else None,
            )
            for row in view.rows
        ],
    )
