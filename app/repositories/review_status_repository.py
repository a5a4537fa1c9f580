from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.models.symptom_review_status import ReviewState, SymptomReviewStatus


class ReviewStatusRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_for_surgery(self, surgery_id: str) -> list[SymptomReviewStatus]:
        stmt = select(SymptomReviewStatus).where(SymptomReviewStatus.surgery_id == surgery_id)
        return list(self.db.execute(stmt).scalars().all())

    def get(self, surgery_id: str, symptom_id: str, age_group: str | None) -> SymptomReviewStatus | None:
        # NULL never equals NULL in SQL, so the unique key needs an explicit IS NULL branch.
        age_clause = (
            SymptomReviewStatus.age_group.is_(None)
            if age_group is None
            else SymptomReviewStatus.age_group == age_group
        )
        stmt = select(SymptomReviewStatus).where(
            SymptomReviewStatus.surgery_id == surgery_id,
            SymptomReviewStatus.symptom_id == symptom_id,
            age_clause,
        )
        return self.db.execute(stmt).scalars().first()

    def upsert(
        self,
        *,
        surgery_id: str,
        symptom_id: str,
        age_group: str | None,
        status: ReviewState,
        reviewed_at: datetime,
        reviewer_id: str | None,
        review_note: str | None,
        existing: SymptomReviewStatus | None = None,
    ) -> SymptomReviewStatus:
        row = existing if existing is not None else self.get(surgery_id, symptom_id, age_group)
        if row is None:
            row = SymptomReviewStatus(surgery_id=surgery_id, symptom_id=symptom_id, age_group=age_group)
            self.db.add(row)

        row.status = status
        row.last_reviewed_at = reviewed_at
        row.last_reviewed_by_id = reviewer_id
        row.review_note = review_note
        self.db.flush()
        return row

    def reset_reviewed(self, surgery_id: str, *, reviewed_at: datetime, reviewer_id: str | None) -> int:
        stmt = (
            update(SymptomReviewStatus)
            .where(
                SymptomReviewStatus.surgery_id == surgery_id,
                SymptomReviewStatus.status.in_([ReviewState.APPROVED, ReviewState.CHANGES_REQUIRED]),
            )
            .values(
                status=ReviewState.PENDING,
                last_reviewed_at=reviewed_at,
                last_reviewed_by_id=reviewer_id,
                review_note=None,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = self.db.execute(stmt)
        return int(result.rowcount or 0)

    def clear_all(self, surgery_id: str) -> int:
        stmt = (
            update(SymptomReviewStatus)
            .where(SymptomReviewStatus.surgery_id == surgery_id)
            .values(
                status=ReviewState.PENDING,
                last_reviewed_at=None,
                last_reviewed_by_id=None,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = self.db.execute(stmt)
        return int(result.rowcount or 0)

    def count_by_status(self, surgery_id: str, status: ReviewState) -> int:
        stmt = select(func.count()).select_from(SymptomReviewStatus).where(
            SymptomReviewStatus.surgery_id == surgery_id,
            SymptomReviewStatus.status == status,
        )
        return int(self.db.execute(stmt).scalar_one() or 0)

    def last_review_activity(self, surgery_id: str) -> datetime | None:
        stmt = select(func.max(SymptomReviewStatus.last_reviewed_at)).where(
            SymptomReviewStatus.surgery_id == surgery_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def count_reviewed_since(self, surgery_id: str, since: datetime) -> int:
        stmt = select(func.count()).select_from(SymptomReviewStatus).where(
            SymptomReviewStatus.surgery_id == surgery_id,
            SymptomReviewStatus.last_reviewed_at >= since,
        )
        return int(self.db.execute(stmt).scalar_one() or 0)
