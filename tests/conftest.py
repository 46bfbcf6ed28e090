"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown (in-memory SQLite)
- The standard data set: companies c1-c3, four jobs, users admin/u1/u2
- FastAPI test client and bearer tokens
"""

import os

# Must be set before the app modules read their settings
os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  Register tables on Base.metadata
from app.core.database import Base, get_db, make_engine
from app.core.security import create_token
from app.crud import company as company_crud
from app.crud import job as job_crud
from app.crud import user as user_crud
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = make_engine(SQLALCHEMY_TEST_DATABASE_URL, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """
    Create a fresh database for each test.
    All tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seeded(db_session):
    """
    Standard data set.

    Returns a dict mapping each job title to its generated id.
    """
    for n in (1, 2, 3):
        company_crud.create(db_session, {
            "handle": f"c{n}",
            "name": f"C{n}",
            "numEmployees": n,
            "description": f"Desc{n}",
            "logoUrl": f"http://c{n}.img",
        })

    user_crud.register(db_session, {
        "username": "admin",
        "firstName": "AdminFN",
        "lastName": "AdminLN",
        "email": "admin@mail.com",
        "password": "adminpass",
        "isAdmin": True,
    })
    for n in (1, 2):
        user_crud.register(db_session, {
            "username": f"u{n}",
            "firstName": f"U{n}F",
            "lastName": f"U{n}L",
            "email": f"user{n}@user.com",
            "password": f"password{n}",
            "isAdmin": False,
        })

    job_ids = {}
    for title, salary, equity, handle in [
        ("UX Designer", 60000, 0.1, "c1"),
        ("Front-End Developer", 110000, 0, "c2"),
        ("Back-End Developer", 120000, 0.4, "c1"),
        ("Project Manager", None, None, "c2"),
    ]:
        job = job_crud.create(db_session, {
            "title": title,
            "salary": salary,
            "equity": equity,
            "companyHandle": handle,
        })
        job_ids[title] = job["id"]

    user_crud.apply_to_job(db_session, "u1", job_ids["UX Designer"])
    return job_ids


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_token({'username': 'admin', 'isAdmin': True})}"}


@pytest.fixture
def u1_headers():
    return {"Authorization": f"Bearer {create_token({'username': 'u1', 'isAdmin': False})}"}
