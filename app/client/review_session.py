"""Review console state for one surgery.

Holds what the console last fetched (all symptoms, which of them are enabled,
the review rows) and performs review actions through
:class:`~app.client.review_client.ClinicalReviewClient`.

Status changes and their visibility cascade are two separate server calls. The
outcome of the second call is returned as part of :class:`ReviewActionResult`
instead of being raised, so a caller can show "approved, but re-enabling
failed" while keeping the status change that already happened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from app.client.review_client import ClinicalReviewClient, ReviewClientError
from app.models.symptom_review_status import ReviewState
from app.schemas.clinical_review import ReviewStatusOut, SurgeryReviewOut
from app.schemas.symptoms import EffectiveSymptomOut
from app.services.effective_symptoms import review_key, visibility_target
from app.services.review_counts import ReviewCounts, build_status_map, compute_counts
from app.services.review_rows import ReviewFilter, ReviewRow, ReviewSort, resolve_rows
from app.services.symptom_visibility_service import VisibilityAction

logger = logging.getLogger(__name__)


class NothingToApproveError(ReviewClientError):
    pass


class UnknownSymptomError(ReviewClientError, LookupError):
    pass


@dataclass
class CascadeOutcome:
    action: VisibilityAction
    applied: bool
    error: str | None = None


@dataclass
class ReviewActionResult:
    review_status: ReviewStatusOut
    cascade: CascadeOutcome | None = None

    @property
    def partial(self) -> bool:
        return self.cascade is not None and not self.cascade.applied


@dataclass
class ReviewSession:
    client: ClinicalReviewClient
    surgery_id: str
    symptoms: list[EffectiveSymptomOut] = field(default_factory=list)
    enabled_keys: set[str] = field(default_factory=set)
    statuses: dict[str, ReviewStatusOut] = field(default_factory=dict)
    surgery: SurgeryReviewOut | None = None

    def load(self) -> None:
        """Fetch symptoms and review rows; state is only replaced when every call succeeds."""
        symptoms = self.client.effective_symptoms(self.surgery_id, include_disabled=True)
        enabled = self.client.effective_symptoms(self.surgery_id, include_disabled=False)
        data = self.client.clinical_review_data(self.surgery_id)

        self.symptoms = symptoms
        self.enabled_keys = {review_key(s.id, s.age_group) for s in enabled}
        self.statuses = build_status_map(data.review_statuses)
        self.surgery = data.surgery

    def counts(self) -> ReviewCounts:
        return compute_counts(self.symptoms, self.statuses)

    def rows(
        self,
        review_filter: ReviewFilter | str = ReviewFilter.PENDING,
        search: Optional[str] = None,
        sort: ReviewSort | str = ReviewSort.NAME_ASC,
    ) -> list[ReviewRow]:
        return resolve_rows(self.symptoms, self.statuses, filter=review_filter, search=search, sort=sort)

    def is_enabled(self, symptom_id: str, age_group: Optional[str]) -> bool:
        return review_key(symptom_id, age_group) in self.enabled_keys

    def approve(self, symptom_id: str, age_group: Optional[str], *, also_enable: bool = False) -> ReviewActionResult:
        updated = self.client.update_review_status(self.surgery_id, symptom_id, age_group, ReviewState.APPROVED)
        self.statuses[review_key(symptom_id, age_group)] = updated

        cascade = None
        if also_enable and not self.is_enabled(symptom_id, age_group):
            cascade = self._cascade(VisibilityAction.ENABLE_EXISTING, symptom_id)
        self._reload_quietly()
        return ReviewActionResult(review_status=updated, cascade=cascade)

    def request_changes(
        self,
        symptom_id: str,
        age_group: Optional[str],
        note: Optional[str] = None,
        *,
        also_disable: bool = False,
    ) -> ReviewActionResult:
        updated = self.client.update_review_status(
            self.surgery_id,
            symptom_id,
            age_group,
            ReviewState.CHANGES_REQUIRED,
            review_note=note,
        )
        self.statuses[review_key(symptom_id, age_group)] = updated

        cascade = self._cascade(VisibilityAction.DISABLE, symptom_id) if also_disable else None
        self._reload_quietly()
        return ReviewActionResult(review_status=updated, cascade=cascade)

    def reset_all(self) -> int:
        updated = self.client.reset_all(self.surgery_id)
        self._reload_quietly()
        return updated

    def bulk_approve(self, search: Optional[str] = None) -> int:
        if self.counts().pending == 0:
            raise NothingToApproveError("No pending symptoms to approve.")
        approved = self.client.bulk_approve(self.surgery_id, search=search)
        self._reload_quietly()
        return approved

    def _find_symptom(self, symptom_id: str) -> EffectiveSymptomOut:
        for symptom in self.symptoms:
            if symptom.id == symptom_id:
                return symptom
        raise UnknownSymptomError(symptom_id)

    def _cascade(self, action: VisibilityAction, symptom_id: str) -> CascadeOutcome:
        try:
            target = visibility_target(self._find_symptom(symptom_id))
            self.client.set_visibility(
                action,
                self.surgery_id,
                base_symptom_id=target.base_symptom_id,
                custom_symptom_id=target.custom_symptom_id,
            )
        except ReviewClientError as exc:
            logger.warning(
                "Review status saved but %s failed surgery_id=%s symptom_id=%s: %s",
                action.value,
                self.surgery_id,
                symptom_id,
                exc,
            )
            return CascadeOutcome(action=action, applied=False, error=str(exc))
        return CascadeOutcome(action=action, applied=True)

    def _reload_quietly(self) -> None:
        try:
            self.load()
        except ReviewClientError:
            logger.warning("Failed to refresh review data surgery_id=%s", self.surgery_id, exc_info=True)
