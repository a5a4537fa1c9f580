from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.surgery import Surgery
from app.models.symptom import BaseSymptom, SurgeryCustomSymptom, SurgerySymptomOverride, SurgerySymptomStatus
from app.services.effective_symptoms import EffectiveSymptom, merge_effective_symptoms


class SymptomCatalogRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_surgery(self, surgery_id: str) -> Surgery | None:
        return self.db.get(Surgery, surgery_id)

    def list_effective_symptoms(self, surgery_id: str, *, include_disabled: bool = False) -> list[EffectiveSymptom]:
        base = self.db.execute(
            select(BaseSymptom).where(BaseSymptom.is_deleted.is_(False)).order_by(BaseSymptom.name.asc())
        ).scalars().all()
        overrides = self.db.execute(
            select(SurgerySymptomOverride).where(SurgerySymptomOverride.surgery_id == surgery_id)
        ).scalars().all()
        customs = self.db.execute(
            select(SurgeryCustomSymptom)
            .where(
                SurgeryCustomSymptom.surgery_id == surgery_id,
                SurgeryCustomSymptom.is_deleted.is_(False),
            )
            .order_by(SurgeryCustomSymptom.name.asc())
        ).scalars().all()
        statuses = self.list_visibility_rows(surgery_id)

        return merge_effective_symptoms(base, overrides, customs, statuses, include_disabled=include_disabled)

    def list_visibility_rows(self, surgery_id: str) -> list[SurgerySymptomStatus]:
        stmt = select(SurgerySymptomStatus).where(SurgerySymptomStatus.surgery_id == surgery_id)
        return list(self.db.execute(stmt).scalars().all())

    def find_visibility_row(
        self,
        surgery_id: str,
        *,
        base_symptom_id: str | None = None,
        custom_symptom_id: str | None = None,
    ) -> SurgerySymptomStatus | None:
        stmt = select(SurgerySymptomStatus).where(SurgerySymptomStatus.surgery_id == surgery_id)
        if base_symptom_id:
            stmt = stmt.where(SurgerySymptomStatus.base_symptom_id == base_symptom_id)
        if custom_symptom_id:
            stmt = stmt.where(SurgerySymptomStatus.custom_symptom_id == custom_symptom_id)
        stmt = stmt.order_by(SurgerySymptomStatus.last_edited_at.desc().nulls_last()).limit(1)
        return self.db.execute(stmt).scalar_one_or_none()

    def add_visibility_row(self, row: SurgerySymptomStatus) -> SurgerySymptomStatus:
        self.db.add(row)
        self.db.flush()
        return row
