"""Review console rows.

Each effective symptom is paired with its review record, then the list is
narrowed by status filter, narrowed again by a case-insensitive name search,
and finally sorted. Symptoms with no record resolve to ``PENDING`` but keep
``review_status=None``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from app.models.symptom_review_status import ReviewState
from app.services.review_counts import ReviewableSymptom, ReviewRecord, get_review_status, resolve_status


class ReviewFilter(str, Enum):
    PENDING = "pending"
    CHANGES_REQUESTED = "changes-requested"
    APPROVED = "approved"
    ALL = "all"


class ReviewSort(str, Enum):
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    CHANGED_NEW = "changed-new"
    STATUS = "status"


_FILTER_STATES = {
    ReviewFilter.PENDING: ReviewState.PENDING,
    ReviewFilter.CHANGES_REQUESTED: ReviewState.CHANGES_REQUIRED,
    ReviewFilter.APPROVED: ReviewState.APPROVED,
}


@dataclass
class ReviewRow:
    symptom: Any
    status: ReviewState
    review_status: Any | None


def matches_search(name: str, search: Optional[str]) -> bool:
    q = (search or "").strip().lower()
    if not q:
        return True
    return q in name.lower()


def _reviewed_timestamp(row: ReviewRow) -> float:
    reviewed_at = getattr(row.review_status, "last_reviewed_at", None) if row.review_status is not None else None
    if reviewed_at is None:
        return -math.inf
    if reviewed_at.tzinfo is None:
        reviewed_at = reviewed_at.replace(tzinfo=timezone.utc)
    return reviewed_at.timestamp()


def resolve_rows(
    symptoms: Sequence[ReviewableSymptom],
    statuses: Mapping[str, ReviewRecord],
    *,
    filter: ReviewFilter | str = ReviewFilter.PENDING,
    search: Optional[str] = None,
    sort: ReviewSort | str = ReviewSort.NAME_ASC,
) -> list[ReviewRow]:
    """Build the filtered, searched and sorted review rows for one surgery.

    Sorting is stable, so rows with equal keys keep their input order.
    """
    review_filter = ReviewFilter(filter)
    review_sort = ReviewSort(sort)

    rows: list[ReviewRow] = []
    for symptom in symptoms:
        record = get_review_status(symptom, statuses)
        status = resolve_status(symptom, statuses)
        rows.append(ReviewRow(symptom=symptom, status=status, review_status=record))

    wanted = _FILTER_STATES.get(review_filter)
    if wanted is not None:
        rows = [r for r in rows if r.status is wanted]

    rows = [r for r in rows if matches_search(r.symptom.name, search)]

    if review_sort is ReviewSort.NAME_ASC:
        return sorted(rows, key=lambda r: r.symptom.name.casefold())
    if review_sort is ReviewSort.NAME_DESC:
        return sorted(rows, key=lambda r: r.symptom.name.casefold(), reverse=True)
    if review_sort is ReviewSort.STATUS:
        return sorted(rows, key=lambda r: r.status.value)
    return sorted(rows, key=_reviewed_timestamp, reverse=True)
