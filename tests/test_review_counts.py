from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from app.models.symptom_review_status import ReviewState
from app.services.review_counts import build_status_map, compute_counts, resolve_status


@dataclass
class Symptom:
    id: str
    name: str
    age_group: Optional[str] = None


@dataclass
class Review:
    symptom_id: str
    age_group: Optional[str]
    status: ReviewState
    last_reviewed_at: Optional[datetime] = None


def test_no_review_rows_means_everything_is_pending():
    symptoms = [Symptom("a", "A", "Adult"), Symptom("b", "B", "U5"), Symptom("c", "C")]

    counts = compute_counts(symptoms, {})

    assert counts.to_dict() == {"pending": 3, "approved": 0, "changes_required": 0, "all": 3}


def test_counts_mix_reviewed_and_unreviewed_symptoms():
    symptoms = [Symptom("a", "A", "Adult"), Symptom("b", "B", "U5"), Symptom("c", "C"), Symptom("d", "D")]
    statuses = build_status_map(
        [
            Review("a", "Adult", ReviewState.APPROVED),
            Review("b", "U5", ReviewState.CHANGES_REQUIRED),
            Review("c", None, ReviewState.PENDING),
        ]
    )

    counts = compute_counts(symptoms, statuses)

    assert (counts.pending, counts.approved, counts.changes_required, counts.all) == (2, 1, 1, 4)
    assert counts.pending + counts.approved + counts.changes_required == counts.all


def test_age_groups_are_reviewed_independently():
    symptoms = [Symptom("fever", "Fever", "U5"), Symptom("fever", "Fever", "O5")]
    statuses = build_status_map([Review("fever", "U5", ReviewState.APPROVED)])

    assert resolve_status(symptoms[0], statuses) is ReviewState.APPROVED
    assert resolve_status(symptoms[1], statuses) is ReviewState.PENDING
    assert compute_counts(symptoms, statuses).pending == 1


def test_null_and_empty_age_group_share_a_key():
    statuses = build_status_map([Review("rash", None, ReviewState.APPROVED)])

    assert resolve_status(Symptom("rash", "Rash", ""), statuses) is ReviewState.APPROVED


def test_rows_for_removed_symptoms_still_count():
    symptoms = [Symptom("a", "A")]
    statuses = build_status_map(
        [
            Review("a", None, ReviewState.APPROVED),
            Review("gone", None, ReviewState.APPROVED),
        ]
    )

    counts = compute_counts(symptoms, statuses)

    assert counts.approved == 2
    assert counts.all == 1
