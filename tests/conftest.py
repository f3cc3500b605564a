"""
Shared fixtures: in-memory SQLite behind get_db, a scratch upload directory,
and helpers that create users/classrooms straight through the ORM.
"""

import os
import shutil
import tempfile
from pathlib import Path

os.environ.setdefault("DATABASE_URL", "sqlite://")
# must be in place before classhub.main mounts the static directory
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="classhub-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from classhub import models  # noqa
from classhub.core.config import settings
from classhub.core.security import get_password_hash, token_for_user
from classhub.db.base import Base
from classhub.db.session import get_db, get_session_factory
from classhub.main import app
from classhub.models.classroom import Classroom
from classhub.models.user import User

TEST_DATABASE_URL = "sqlite://"

# hashing once keeps bcrypt out of every fixture
PASSWORD = "secret-pass"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def upload_dir():
    """The directory the app serves under /uploads, emptied around each test."""
    path = Path(settings.UPLOAD_DIR)
    _empty(path)
    yield path
    _empty(path)


def _empty(path):
    path.mkdir(parents=True, exist_ok=True)
    for entry in path.iterdir():
        if entry.is_dir():
            shutil.rmtree(entry)
        else:
            entry.unlink()


@pytest.fixture
def client(engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: SessionLocal
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db, *, name, role, email=None, phone=None, college="Engineering"):
    user = User(
        name=name,
        email=email,
        phone=phone,
        college=college,
        university="State University",
        student_id="S-1" if role == "student" else None,
        role=role,
        password_hash=PASSWORD_HASH,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {token_for_user(user)}"}


@pytest.fixture
def teacher(db_session):
    return make_user(db_session, name="Test Teacher", role="teacher", email="teacher@test.com")


@pytest.fixture
def student(db_session):
    return make_user(db_session, name="Test Student", role="student", email="student@test.com")


@pytest.fixture
def other_student(db_session):
    return make_user(db_session, name="Second Student", role="student", phone="5550001")


@pytest.fixture
def classroom(db_session, teacher):
    classroom = Classroom(name="Physics 101", code="ABC123", teacher_id=teacher.id)
    db_session.add(classroom)
    db_session.commit()
    db_session.refresh(classroom)
    return classroom
