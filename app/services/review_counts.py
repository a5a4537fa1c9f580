"""Clinical review count aggregation.

Counts are computed from the effective symptom set of a surgery and the review
rows keyed by :func:`review_key`. A symptom without a row has never been
reviewed and is counted as pending together with rows explicitly marked
``PENDING``. Approved and changes-required totals come straight from the rows,
so rows left behind by a removed symptom still count; callers that need the
three buckets to sum to ``all`` must not pass orphan rows.

The same functions serve the HTTP layer (ORM rows) and the review console
client (parsed JSON), so they only rely on a few attributes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from app.models.symptom_review_status import ReviewState
from app.services.effective_symptoms import review_key


class ReviewableSymptom(Protocol):
    id: str
    name: str
    age_group: Optional[str]


class ReviewRecord(Protocol):
    symptom_id: str
    age_group: Optional[str]
    status: ReviewState
    last_reviewed_at: Optional[datetime]


@dataclass
class ReviewCounts:
    pending: int
    approved: int
    changes_required: int
    all: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def build_status_map(rows: Iterable[ReviewRecord]) -> dict[str, ReviewRecord]:
    return {review_key(row.symptom_id, row.age_group): row for row in rows}


def get_review_status(symptom: ReviewableSymptom, statuses: Mapping[str, ReviewRecord]) -> ReviewRecord | None:
    return statuses.get(review_key(symptom.id, symptom.age_group))


def resolve_status(symptom: ReviewableSymptom, statuses: Mapping[str, ReviewRecord]) -> ReviewState:
    row = get_review_status(symptom, statuses)
    if row is None:
        return ReviewState.PENDING
    return ReviewState(row.status)


def compute_counts(symptoms: Sequence[ReviewableSymptom], statuses: Mapping[str, ReviewRecord]) -> ReviewCounts:
    unreviewed = sum(1 for s in symptoms if review_key(s.id, s.age_group) not in statuses)

    approved = 0
    changes_required = 0
    explicit_pending = 0
    for row in statuses.values():
        state = ReviewState(row.status)
        if state is ReviewState.APPROVED:
            approved += 1
        elif state is ReviewState.CHANGES_REQUIRED:
            changes_required += 1
        else:
            explicit_pending += 1

    return ReviewCounts(
        pending=unreviewed + explicit_pending,
        approved=approved,
        changes_required=changes_required,
        all=len(symptoms),
    )
