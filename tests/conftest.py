import os
from dataclasses import dataclass
from typing import Generator, Iterator

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
import sqlalchemy as sa
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import Base
from app.db.session import get_db
from app.main import app
from app.models.surgery import Surgery
from app.models.symptom import BaseSymptom, SurgeryCustomSymptom, SurgerySymptomOverride
from app.models.user import GlobalRole, SurgeryRole, User, UserSurgery
from app.services.access import Actor


@dataclass
class Library:
    """Ids of the rows created by the ``library`` fixture."""

    surgery_id: str
    other_surgery_id: str
    superuser_id: str
    admin_id: str
    staff_id: str
    abdo_id: str
    fever_u5_id: str
    rash_id: str
    hidden_id: str
    custom_id: str


@pytest.fixture
def session_factory() -> Iterator[sessionmaker]:
    """Provide an isolated in-memory SQLite database for each test."""
    engine = sa.create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory: sessionmaker) -> Iterator[TestClient]:
    def _session_dependency() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _session_dependency
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def library(db: Session) -> Library:
    """A surgery with base, override, hidden and custom symptoms plus three users."""
    surgery = Surgery(name="Riverside Surgery")
    other = Surgery(name="Hilltop Practice")
    superuser = User(email="root@example.com", name="Root", global_role=GlobalRole.SUPERUSER)
    admin = User(email="admin@example.com", name="Ada Admin", global_role=GlobalRole.USER)
    staff = User(email="staff@example.com", name=None, global_role=GlobalRole.USER)
    db.add_all([surgery, other, superuser, admin, staff])
    db.flush()

    db.add_all(
        [
            UserSurgery(user_id=admin.id, surgery_id=surgery.id, role=SurgeryRole.ADMIN),
            UserSurgery(user_id=staff.id, surgery_id=surgery.id, role=SurgeryRole.STANDARD),
        ]
    )

    abdo = BaseSymptom(slug="abdominal-pain", name="Abdominal pain", age_group="Adult")
    fever = BaseSymptom(slug="fever-u5", name="Fever", age_group="U5", brief_instruction="Same day")
    rash = BaseSymptom(slug="rash", name="Rash", age_group=None)
    hidden = BaseSymptom(slug="hiccups", name="Hiccups", age_group="Adult")
    deleted = BaseSymptom(slug="retired", name="Retired symptom", age_group="Adult", is_deleted=True)
    db.add_all([abdo, fever, rash, hidden, deleted])
    db.flush()

    custom = SurgeryCustomSymptom(
        surgery_id=surgery.id,
        slug="blood-test-results",
        name="Blood test results",
        age_group="Adult",
    )
    db.add(custom)
    db.add_all(
        [
            SurgerySymptomOverride(
                surgery_id=surgery.id,
                base_symptom_id=fever.id,
                name="Fever in babies",
                brief_instruction="   ",
            ),
            SurgerySymptomOverride(surgery_id=surgery.id, base_symptom_id=hidden.id, is_hidden=True),
        ]
    )
    db.commit()
    db.expire_all()

    return Library(
        surgery_id=surgery.id,
        other_surgery_id=other.id,
        superuser_id=superuser.id,
        admin_id=admin.id,
        staff_id=staff.id,
        abdo_id=abdo.id,
        fever_u5_id=fever.id,
        rash_id=rash.id,
        hidden_id=hidden.id,
        custom_id=custom.id,
    )


@pytest.fixture
def admin_actor(db: Session, library: Library) -> Actor:
    return Actor.from_user(db.get(User, library.admin_id))

