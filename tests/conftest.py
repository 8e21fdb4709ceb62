"""Pytest fixtures for the HR/payroll API tests."""

import os

# Settings are read at import time; point them at throwaway values first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_DB"] = "false"
os.environ["RATE_LIMIT"] = "100000/minute"
os.environ["SMTP_HOST"] = ""
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASS"] = ""
os.environ["ADMIN_EMAILS"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth.router import get_or_create_roles
from app.auth.security import create_access_token, get_password_hash
from app.db import Base, get_db
from app.main import app
from app.models.models import User


@pytest.fixture
def engine():
    """Fresh in-memory database per test, shared across connections."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def enforce_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, username: str, roles) -> User:
    user = User(
        username=username,
        email=f"{username}@district.org",
        password_hash=get_password_hash("password123"),
        first_name=username.title(),
        last_name="Tester",
    )
    user.roles = get_or_create_roles(db, list(roles))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), roles=user.role_names)}"}


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin", ["admin"])


@pytest.fixture
def auth_headers(admin_user):
    """Admin bearer token; admins pass every role check."""
    return bearer(admin_user)


@pytest.fixture
def employee_headers(db):
    return bearer(make_user(db, "staffer", ["employee"]))


@pytest.fixture
def employee_payload():
    return {
        "employee_id": "T-1001",
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane.doe@district.org",
        "phone": "555-0100",
        "department": "Mathematics",
        "position": "Math Teacher",
        "employee_type": "teacher",
        "hire_date": "2022-08-15",
        "salary": 55000,
    }


@pytest.fixture
def employee(client, auth_headers, employee_payload):
    resp = client.post("/api/employees", json=employee_payload, headers=auth_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
