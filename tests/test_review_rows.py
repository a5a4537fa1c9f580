from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from app.models.symptom_review_status import ReviewState
from app.services.review_counts import build_status_map, resolve_status
from app.services.review_rows import ReviewFilter, ReviewSort, matches_search, resolve_rows


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


NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def symptoms():
    return [
        Symptom("s1", "Chest pain", "Adult"),
        Symptom("s2", "abdominal pain", "Adult"),
        Symptom("s3", "Back pain", "Adult"),
        Symptom("s4", "Bleeding", "U5"),
    ]


@pytest.fixture
def statuses():
    return build_status_map(
        [
            Review("s1", "Adult", ReviewState.APPROVED, NOW - timedelta(days=2)),
            Review("s3", "Adult", ReviewState.CHANGES_REQUIRED, NOW),
            Review("s4", "U5", ReviewState.PENDING, NOW - timedelta(days=1)),
        ]
    )


def _names(rows):
    return [r.symptom.name for r in rows]


def test_matches_search_is_case_insensitive_and_trims():
    assert matches_search("Chest pain", "  CHEST ")
    assert matches_search("Chest pain", "")
    assert matches_search("Chest pain", None)
    assert not matches_search("Chest pain", "rash")


def test_pending_filter_includes_unreviewed_and_explicit_pending(symptoms, statuses):
    rows = resolve_rows(symptoms, statuses, filter=ReviewFilter.PENDING)

    assert _names(rows) == ["abdominal pain", "Bleeding"]
    assert rows[0].review_status is None
    assert rows[1].review_status is not None
    assert all(r.status is ReviewState.PENDING for r in rows)


@pytest.mark.parametrize(
    ("review_filter", "expected"),
    [
        ("changes-requested", ["Back pain"]),
        ("approved", ["Chest pain"]),
    ],
)
def test_status_filters(symptoms, statuses, review_filter, expected):
    assert _names(resolve_rows(symptoms, statuses, filter=review_filter)) == expected


def test_all_filter_returns_every_symptom(symptoms, statuses):
    assert len(resolve_rows(symptoms, statuses, filter=ReviewFilter.ALL)) == len(symptoms)


def test_search_applies_after_filter(symptoms, statuses):
    rows = resolve_rows(symptoms, statuses, filter=ReviewFilter.ALL, search="B")

    assert _names(rows) == ["abdominal pain", "Back pain", "Bleeding"]


def test_name_sorts_ignore_case(symptoms, statuses):
    asc = resolve_rows(symptoms, statuses, filter="all", sort=ReviewSort.NAME_ASC)
    desc = resolve_rows(symptoms, statuses, filter="all", sort=ReviewSort.NAME_DESC)

    assert _names(asc) == ["abdominal pain", "Back pain", "Bleeding", "Chest pain"]
    assert _names(desc) == list(reversed(_names(asc)))


def test_status_sort_orders_by_status_value(symptoms, statuses):
    rows = resolve_rows(symptoms, statuses, filter="all", sort="status")

    assert [r.status for r in rows] == [
        ReviewState.APPROVED,
        ReviewState.CHANGES_REQUIRED,
        ReviewState.PENDING,
        ReviewState.PENDING,
    ]
    # equal keys keep input order
    assert _names(rows)[2:] == ["abdominal pain", "Bleeding"]


def test_changed_new_puts_never_reviewed_last(symptoms, statuses):
    rows = resolve_rows(symptoms, statuses, filter="all", sort=ReviewSort.CHANGED_NEW)

    assert _names(rows) == ["Back pain", "Bleeding", "Chest pain", "abdominal pain"]


def test_changed_new_treats_naive_timestamps_as_utc():
    symptoms = [Symptom("a", "A"), Symptom("b", "B")]
    statuses = build_status_map(
        [
            Review("a", None, ReviewState.APPROVED, datetime(2026, 10, 18, 9, 0)),
            Review("b", None, ReviewState.APPROVED, NOW),
        ]
    )

    rows = resolve_rows(symptoms, statuses, filter="approved", sort="changed-new")

    assert _names(rows) == ["B", "A"]


def test_unknown_filter_is_rejected(symptoms):
    with pytest.raises(ValueError):
        resolve_rows(symptoms, {}, filter="everything")


def test_row_status_agrees_with_resolve_status(symptoms, statuses):
    rows = resolve_rows(symptoms, statuses, filter=ReviewFilter.ALL)

    assert [r.status for r in rows] == [resolve_status(r.symptom, statuses) for r in rows]
