"""
Shared fixtures: in-memory SQLite database, API client and bearer tokens.
"""

import os

# Keep the app's own engine off Postgres while tests import it
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from uniplace.core import auth
from uniplace.database import Base, get_db
from uniplace.models import Drive, Result, Student


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_token(sub="student-1", email="student@uni.edu", name="Arisha Rizwan", role=None):
    claims = {
        "sub": sub,
        "email": email,
        "user_metadata": {"full_name": name},
    }
    if role:
        claims["app_metadata"] = {"role": role}
    if auth.JWT_AUDIENCE:
        claims["aud"] = auth.JWT_AUDIENCE
    return jwt.encode(claims, auth.JWT_SECRET, algorithm=auth.JWT_ALGORITHM)


@pytest.fixture
def student_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def admin_headers():
    token = make_token(sub="admin-1", email="admin@uni.edu", name="Placement Cell", role="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def roster(db):
    """Four students across two branches."""
    students = [
        Student(enrollment_number="2101", name="Asha", branch="CSE", primary_email="a@x.edu",
                secondary_email="asha.alt@x.edu", passing_year=2026, cgpa=8.9),
        Student(enrollment_number="2102", name="Bilal", branch="CSE", primary_email="b@x.edu",
                passing_year=2026, cgpa=7.5),
        Student(enrollment_number="2103", name="Chitra", branch="CSE", primary_email="not-an-email",
                passing_year=2026, cgpa=9.1),
        Student(enrollment_number="2201", name="Dev", branch="ECE", primary_email="d@x.edu",
                passing_year=2025, cgpa=6.8),
    ]
    db.add_all(students)
    db.commit()
    return students


def add_drive(db, company, title, status, student_ids, employment_type="FTE", result_type=None):
    """Insert a drive with one result per student."""
    drive = Drive(
        company_name=company,
        job_title=title,
        batch="2026",
        employment_type=employment_type,
        result_type=result_type or ("Final Offer" if status == "Selected" else "OA"),
    )
    db.add(drive)
    db.flush()
    db.add_all([Result(drive_id=drive.id, student_id=sid, status=status) for sid in student_ids])
    db.commit()
    return drive
