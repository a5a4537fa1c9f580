from sqlalchemy import func, select

from app.models.symptom import BaseSymptom, SurgeryCustomSymptom
from app.models.user import User
from app.scripts import seed_demo_data as seed


def test_slugify():
    assert seed.slugify("  Fever U5 ") == "fever-u5"
    assert seed.slugify("Chest pain (Adult)") == "chest-pain-adult"


def test_seed_is_idempotent(monkeypatch, session_factory):
    monkeypatch.setattr(seed, "SessionLocal", session_factory)

    first = seed.seed_demo_data("Demo Surgery")
    second = seed.seed_demo_data("Demo Surgery")

    assert first is not None
    assert first == second

    with session_factory() as db:
        assert db.execute(select(func.count()).select_from(BaseSymptom)).scalar_one() == 7
        assert db.execute(select(func.count()).select_from(SurgeryCustomSymptom)).scalar_one() == 1
        admin = db.execute(select(User).where(User.email == "admin@example.com")).scalar_one()
        assert [m.surgery_id for m in admin.memberships] == [first]
