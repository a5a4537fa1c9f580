"""Clinical review workflow for one surgery.

Review rows move freely between ``PENDING``, ``APPROVED`` and
``CHANGES_REQUIRED``; no transition is forbidden. Every mutation stamps the
acting reviewer and recomputes the surgery-level ``requires_clinical_review``
flag. Each public mutator commits its own unit of work.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.surgery import Surgery
from app.models.symptom_review_status import ReviewState, SymptomReviewStatus
from app.repositories.review_status_repository import ReviewStatusRepository
from app.repositories.symptom_catalog_repository import SymptomCatalogRepository
from app.services.access import Actor, require_surgery_admin
from app.services.effective_symptoms import EffectiveSymptom, symptom_review_key
from app.services.review_counts import ReviewCounts, build_status_map, compute_counts
from app.services.review_rows import ReviewFilter, ReviewRow, ReviewSort, matches_search, resolve_rows

logger = logging.getLogger(__name__)


class ReviewValidationError(ValueError):
    pass


class ReviewIncompleteError(ValueError):
    def __init__(self, pending_count: int) -> None:
        super().__init__(
            "You still have unresolved symptoms. Everything must be marked Approved or Needs Change before sign-off."
        )
        self.pending_count = pending_count


@dataclass
class ReviewData:
    surgery: Surgery
    review_statuses: list[SymptomReviewStatus]


@dataclass
class ReviewSummary:
    counts: ReviewCounts
    requires_clinical_review: bool
    last_clinical_review_at: datetime | None
    last_review_activity: datetime | None
    recently_reviewed_count: int


@dataclass
class ReviewRowsView:
    counts: ReviewCounts
    rows: list[ReviewRow]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_age_group(age_group: Optional[str]) -> str | None:
    if age_group is None:
        return None
    cleaned = age_group.strip()
    return cleaned or None


class ClinicalReviewService:
    def __init__(
        self,
        db: Session,
        catalog: Optional[SymptomCatalogRepository] = None,
        reviews: Optional[ReviewStatusRepository] = None,
    ) -> None:
        self.db = db
        self.catalog = catalog or SymptomCatalogRepository(db)
        self.reviews = reviews or ReviewStatusRepository(db)

    # Reads

    def get_review_data(self, surgery_id: str, actor: Actor) -> ReviewData:
        surgery = require_surgery_admin(self.db, actor, surgery_id)
        return ReviewData(surgery=surgery, review_statuses=self.reviews.list_for_surgery(surgery_id))

    def compute_counts(self, surgery_id: str) -> ReviewCounts:
        symptoms = self.catalog.list_effective_symptoms(surgery_id, include_disabled=True)
        statuses = build_status_map(self.reviews.list_for_surgery(surgery_id))
        return compute_counts(symptoms, statuses)

    def list_rows(
        self,
        surgery_id: str,
        actor: Actor,
        *,
        review_filter: ReviewFilter = ReviewFilter.PENDING,
        search: Optional[str] = None,
        sort: ReviewSort = ReviewSort.NAME_ASC,
    ) -> ReviewRowsView:
        require_surgery_admin(self.db, actor, surgery_id)
        symptoms = self.catalog.list_effective_symptoms(surgery_id, include_disabled=True)
        statuses = build_status_map(self.reviews.list_for_surgery(surgery_id))
        return ReviewRowsView(
            counts=compute_counts(symptoms, statuses),
            rows=resolve_rows(symptoms, statuses, filter=review_filter, search=search, sort=sort),
        )

    def review_summary(self, surgery_id: str, actor: Actor) -> ReviewSummary:
        surgery = require_surgery_admin(self.db, actor, surgery_id)
        since = utcnow() - timedelta(days=settings.review_activity_window_days)
        return ReviewSummary(
            counts=self.compute_counts(surgery_id),
            requires_clinical_review=surgery.requires_clinical_review,
            last_clinical_review_at=surgery.last_clinical_review_at,
            last_review_activity=self.reviews.last_review_activity(surgery_id),
            recently_reviewed_count=self.reviews.count_reviewed_since(surgery_id, since),
        )

    # Mutations

    def set_status(
        self,
        *,
        surgery_id: str,
        symptom_id: str,
        age_group: Optional[str],
        new_status: ReviewState,
        actor: Actor,
        review_note: Optional[str] = None,
    ) -> SymptomReviewStatus:
        require_surgery_admin(self.db, actor, surgery_id)

        symptom_id = symptom_id.strip()
        if not symptom_id:
            raise ReviewValidationError("symptomId must not be empty")
        if review_note is not None and len(review_note) > settings.review_note_max_length:
            raise ReviewValidationError(f"reviewNote must be at most {settings.review_note_max_length} characters")

        row = self.reviews.upsert(
            surgery_id=surgery_id,
            symptom_id=symptom_id,
            age_group=normalize_age_group(age_group),
            status=new_status,
            reviewed_at=utcnow(),
            reviewer_id=actor.id,
            # Notes only explain a change request; approving or reopening clears them.
            review_note=review_note if new_status is ReviewState.CHANGES_REQUIRED else None,
        )
        self.refresh_requires_clinical_review(surgery_id)
        self.db.commit()
        self.db.refresh(row)

        logger.info(
            "Review status updated surgery_id=%s symptom_id=%s age_group=%s status=%s reviewer=%s",
            surgery_id,
            symptom_id,
            row.age_group,
            row.status.value,
            actor.id,
        )
        return row

    def approve(self, *, surgery_id: str, symptom_id: str, age_group: Optional[str], actor: Actor) -> SymptomReviewStatus:
        return self.set_status(
            surgery_id=surgery_id,
            symptom_id=symptom_id,
            age_group=age_group,
            new_status=ReviewState.APPROVED,
            actor=actor,
        )

    def request_changes(
        self,
        *,
        surgery_id: str,
        symptom_id: str,
        age_group: Optional[str],
        actor: Actor,
        note: Optional[str] = None,
    ) -> SymptomReviewStatus:
        return self.set_status(
            surgery_id=surgery_id,
            symptom_id=symptom_id,
            age_group=age_group,
            new_status=ReviewState.CHANGES_REQUIRED,
            actor=actor,
            review_note=note,
        )

    def reset_all(self, surgery_id: str, actor: Actor) -> int:
        require_surgery_admin(self.db, actor, surgery_id)

        updated = self.reviews.reset_reviewed(surgery_id, reviewed_at=utcnow(), reviewer_id=actor.id)
        self.refresh_requires_clinical_review(surgery_id)
        self.db.commit()

        logger.info("Reset review statuses surgery_id=%s updated=%s reviewer=%s", surgery_id, updated, actor.id)
        return updated

    def bulk_approve(self, surgery_id: str, actor: Actor, search: Optional[str] = None) -> int:
        require_surgery_admin(self.db, actor, surgery_id)

        symptoms = self.catalog.list_effective_symptoms(surgery_id, include_disabled=True)
        statuses = build_status_map(self.reviews.list_for_surgery(surgery_id))

        pending: list[tuple[EffectiveSymptom, SymptomReviewStatus | None]] = []
        for symptom in symptoms:
            row = statuses.get(symptom_review_key(symptom))
            if row is not None and row.status is not ReviewState.PENDING:
                continue
            if not matches_search(symptom.name, search):
                continue
            pending.append((symptom, row))

        now = utcnow()
        for symptom, row in pending:
            self.reviews.upsert(
                surgery_id=surgery_id,
                symptom_id=symptom.id,
                age_group=normalize_age_group(symptom.age_group),
                status=ReviewState.APPROVED,
                reviewed_at=now,
                reviewer_id=actor.id,
                review_note=None,
                existing=row,
            )

        self.refresh_requires_clinical_review(surgery_id, reviewer_id=actor.id)
        self.db.commit()

        logger.info(
            "Bulk approved surgery_id=%s approved=%s search=%r reviewer=%s",
            surgery_id,
            len(pending),
            search,
            actor.id,
        )
        return len(pending)

    def complete_review(self, surgery_id: str, actor: Actor) -> Surgery:
        surgery = require_surgery_admin(self.db, actor, surgery_id)

        pending_count = self.reviews.count_by_status(surgery_id, ReviewState.PENDING)
        if pending_count > 0:
            raise ReviewIncompleteError(pending_count)

        surgery.requires_clinical_review = False
        surgery.last_clinical_review_at = utcnow()
        surgery.last_clinical_reviewer_id = actor.id
        self.db.commit()
        self.db.refresh(surgery)

        logger.info("Clinical review signed off surgery_id=%s reviewer=%s", surgery_id, actor.id)
        return surgery

    def request_rereview(self, surgery_id: str, actor: Actor) -> int:
        surgery = require_surgery_admin(self.db, actor, surgery_id)

        # Sign-off history (last_clinical_review_at/by) is kept on purpose.
        cleared = self.reviews.clear_all(surgery_id)
        surgery.requires_clinical_review = True
        self.db.commit()

        logger.info("Re-review requested surgery_id=%s cleared=%s by=%s", surgery_id, cleared, actor.id)
        return cleared

    def refresh_requires_clinical_review(self, surgery_id: str, reviewer_id: Optional[str] = None) -> bool:
        """Recompute the surgery flag from the current counts; does not commit."""
        surgery = self.catalog.get_surgery(surgery_id)
        if surgery is None:
            return False

        self.db.flush()
        needs_review = self.compute_counts(surgery_id).pending > 0
        if surgery.requires_clinical_review and not needs_review and reviewer_id is not None:
            surgery.last_clinical_review_at = utcnow()
            surgery.last_clinical_reviewer_id = reviewer_id
        surgery.requires_clinical_review = needs_review
        return needs_review
