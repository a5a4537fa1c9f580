from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from app.models.symptom_review_status import ReviewState
from app.schemas.symptoms import CamelModel, EffectiveSymptomOut
from app.services.review_rows import ReviewFilter, ReviewSort


def _strip_required(value: object, field_name: str) -> str:
    if value is None:
        raise ValueError(f"{field_name} is required")
    cleaned = str(value).strip()
    if not cleaned:
        raise ValueError(f"{field_name} must not be empty")
    return cleaned


class ReviewerOut(CamelModel):
    id: str
    email: str
    name: str | None = None


class ReviewStatusOut(CamelModel):
    id: str
    surgery_id: str
    symptom_id: str
    age_group: str | None = None
    status: ReviewState
    last_reviewed_at: datetime | None = None
    last_reviewed_by_id: str | None = None
    review_note: str | None = None
    last_reviewed_by: ReviewerOut | None = None


class SurgeryReviewOut(CamelModel):
    id: str
    name: str
    requires_clinical_review: bool
    last_clinical_review_at: datetime | None = None
    last_clinical_reviewer: ReviewerOut | None = None


class ClinicalReviewDataOut(CamelModel):
    surgery: SurgeryReviewOut
    review_statuses: list[ReviewStatusOut]


class SurgeryRequest(CamelModel):
    surgery_id: str = Field(..., min_length=1)

    @field_validator("surgery_id", mode="before")
    @classmethod
    def _strip_surgery_id(cls, value: object) -> str:
        return _strip_required(value, "surgeryId")


class ReviewStatusUpdateIn(SurgeryRequest):
    symptom_id: str = Field(..., min_length=1)
    age_group: str | None = None
    new_status: ReviewState
    review_note: str | None = None

    @field_validator("symptom_id", mode="before")
    @classmethod
    def _strip_symptom_id(cls, value: object) -> str:
        return _strip_required(value, "symptomId")

    @field_validator("age_group", mode="before")
    @classmethod
    def _blank_age_group(cls, value: object) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None


class ClinicalReviewActionIn(SurgeryRequest):
    action: str = Field(..., min_length=1)


class BulkApproveIn(SurgeryRequest):
    search: str | None = None


class ResetAllOut(CamelModel):
    ok: bool = True
    updated: int


class BulkApproveOut(CamelModel):
    ok: bool = True
    approved_count: int


class CompleteReviewOut(CamelModel):
    success: bool = True
    surgery: SurgeryReviewOut


class RereviewOut(CamelModel):
    success: bool = True
    message: str


class ReviewCountsOut(CamelModel):
    pending: int
    approved: int
    changes_required: int
    all: int


class ReviewRowOut(CamelModel):
    symptom: EffectiveSymptomOut
    status: ReviewState
    review_status: ReviewStatusOut | None = None


class ReviewRowsOut(CamelModel):
    filter: ReviewFilter
    sort: ReviewSort
    counts: ReviewCountsOut
    rows: list[ReviewRowOut]


class ReviewSummaryOut(CamelModel):
    pending_review_count: int
    changes_requested_count: int
    approved_count: int
    total_symptoms: int
    requires_clinical_review: bool
    last_clinical_review_at: datetime | None = None
    last_review_activity: datetime | None = None
    recently_reviewed_count: int
