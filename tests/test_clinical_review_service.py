from datetime import datetime, timezone

import pytest

from app.models.surgery import Surgery
from app.models.symptom import BaseSymptom, SurgerySymptomStatus
from app.models.symptom_review_status import ReviewState
from app.models.user import User
from app.repositories.symptom_catalog_repository import SymptomCatalogRepository
from app.services.access import Actor, AuthenticationRequiredError, PermissionDeniedError, load_actor
from app.services.clinical_review_service import ClinicalReviewService, ReviewIncompleteError
from tests.helpers import disable


def test_load_actor_resolves_roles(db, library):
    admin = load_actor(db, library.admin_id)
    root = load_actor(db, f"  {library.superuser_id} ")
    staff = load_actor(db, library.staff_id)

    assert admin.can_administer(library.surgery_id)
    assert not admin.can_administer(library.other_surgery_id)
    assert root.is_superuser and root.can_administer(library.other_surgery_id)
    assert staff.can_view(library.surgery_id) and not staff.can_administer(library.surgery_id)
    assert staff.display_name == "staff@example.com"


@pytest.mark.parametrize("user_id", [None, "", "   ", "unknown"])
def test_load_actor_requires_known_user(db, library, user_id):
    with pytest.raises(AuthenticationRequiredError):
        load_actor(db, user_id)


def test_standard_member_is_denied(db, library):
    staff = Actor.from_user(db.get(User, library.staff_id))

    with pytest.raises(PermissionDeniedError):
        ClinicalReviewService(db).approve(
            surgery_id=library.surgery_id,
            symptom_id=library.abdo_id,
            age_group="Adult",
            actor=staff,
        )


def test_counts_include_disabled_symptoms(db, library, admin_actor):
    disable(db, library.surgery_id, base_symptom_id=library.rash_id)
    service = ClinicalReviewService(db)

    service.approve(surgery_id=library.surgery_id, symptom_id=library.rash_id, age_group=None, actor=admin_actor)

    counts = service.compute_counts(library.surgery_id)
    assert (counts.pending, counts.approved, counts.changes_required, counts.all) == (3, 1, 0, 4)


def test_flag_tracks_pending_symptoms(db, library, admin_actor):
    service = ClinicalReviewService(db)

    for symptom_id, age_group in [
        (library.abdo_id, "Adult"),
        (library.fever_u5_id, "U5"),
        (library.rash_id, None),
    ]:
        service.approve(surgery_id=library.surgery_id, symptom_id=symptom_id, age_group=age_group, actor=admin_actor)
    assert db.get(Surgery, library.surgery_id).requires_clinical_review is True

    service.request_changes(
        surgery_id=library.surgery_id,
        symptom_id=library.custom_id,
        age_group="Adult",
        actor=admin_actor,
        note="Update phone number",
    )
    assert db.get(Surgery, library.surgery_id).requires_clinical_review is False

    assert service.reset_all(library.surgery_id, admin_actor) == 4
    assert db.get(Surgery, library.surgery_id).requires_clinical_review is True


def test_bulk_approve_only_touches_pending(db, library, admin_actor):
    service = ClinicalReviewService(db)
    service.request_changes(
        surgery_id=library.surgery_id,
        symptom_id=library.abdo_id,
        age_group="Adult",
        actor=admin_actor,
    )

    assert service.bulk_approve(library.surgery_id, admin_actor) == 3
    assert service.bulk_approve(library.surgery_id, admin_actor) == 0

    rows = {row.symptom_id: row.status for row in service.reviews.list_for_surgery(library.surgery_id)}
    assert rows[library.abdo_id] is ReviewState.CHANGES_REQUIRED


def test_complete_review_reports_pending_count(db, library, admin_actor):
    service = ClinicalReviewService(db)
    service.set_status(
        surgery_id=library.surgery_id,
        symptom_id=library.abdo_id,
        age_group="Adult",
        new_status=ReviewState.PENDING,
        actor=admin_actor,
    )

    with pytest.raises(ReviewIncompleteError) as excinfo:
        service.complete_review(library.surgery_id, admin_actor)

    assert excinfo.value.pending_count == 1


def test_bulk_approve_stores_blank_age_group_as_null(db, library, admin_actor):
    cough = BaseSymptom(slug="cough", name="Cough", age_group="")
    db.add(cough)
    db.commit()
    service = ClinicalReviewService(db)

    assert service.bulk_approve(library.surgery_id, admin_actor, search="cough") == 1
    service.request_changes(
        surgery_id=library.surgery_id,
        symptom_id=cough.id,
        age_group="",
        actor=admin_actor,
        note="Add red flags",
    )

    rows = [row for row in service.reviews.list_for_surgery(library.surgery_id) if row.symptom_id == cough.id]
    assert [(row.age_group, row.status) for row in rows] == [(None, ReviewState.CHANGES_REQUIRED)]
    assert service.compute_counts(library.surgery_id).changes_required == 1


def test_visibility_lookup_prefers_most_recent_edit(db, library):
    edited = SurgerySymptomStatus(
        surgery_id=library.surgery_id,
        base_symptom_id=library.abdo_id,
        is_enabled=False,
        last_edited_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
    )
    db.add_all(
        [
            SurgerySymptomStatus(surgery_id=library.surgery_id, base_symptom_id=library.abdo_id, is_enabled=True),
            edited,
        ]
    )
    db.commit()

    found = SymptomCatalogRepository(db).find_visibility_row(library.surgery_id, base_symptom_id=library.abdo_id)

    assert found is not None
    assert found.id == edited.id
