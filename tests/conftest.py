"""Shared pytest fixtures: in-memory database, API client and accounts."""
import os
import tempfile

# Settings are read at import time, so the environment must be ready first.
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STATIC_DIR"] = tempfile.mkdtemp(prefix="ewaste-static-")
os.environ["LOG_FILE"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlmodel import SQLModel, Session

from app.db import schema  # noqa: F401
from app.db.core import engine
from app.main import app


# SQLite leaves foreign keys unchecked unless asked, unlike PostgreSQL
@event.listens_for(engine, "connect")
def _enforce_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def _tables():
    """Fresh schema for every test."""
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db():
    """Opens a new session per call so reads never come from a stale identity map."""
    def _open() -> Session:
        return Session(engine)
    return _open


def _register(client: TestClient, email: str, account_type: str = "user",
              company_name: str = None, **extra) -> dict:
    payload = {
        "email": email,
        "password": PASSWORD,
        "username": email.split("@")[0],
        "account_type": account_type,
        **extra,
    }
    if company_name:
        payload["company_name"] = company_name
    response = client.post("/api/v1/users/signup", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _auth_headers(client: TestClient, email: str) -> dict:
    response = client.post(
        "/api/v1/users/token", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def user_headers(client) -> dict:
    _register(client, "asha@example.com", mobile="+91 98765 43210")
    return _auth_headers(client, "asha@example.com")


@pytest.fixture()
def other_user_headers(client) -> dict:
    _register(client, "ravi@example.com")
    return _auth_headers(client, "ravi@example.com")


@pytest.fixture()
def company(client) -> dict:
    """A company account: its id and auth headers."""
    account = _register(client, "ops@greencycle.example.com", account_type="company",
                        company_name="GreenCycle Recyclers")
    return {
        "id": account["company"]["id"],
        "headers": _auth_headers(client, "ops@greencycle.example.com"),
    }


@pytest.fixture()
def submit(client, company):
    """Submits an e-waste request as the given user and returns the created card."""
    def _submit(headers: dict, name: str = "Old laptop", **fields) -> dict:
        payload = {
            "company_id": company["id"],
            "name": name,
            "quantity": 1,
            "weight": 2.5,
            "prize": 450,
            **fields,
        }
        response = client.post("/api/v1/requests/", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _submit


@pytest.fixture()
def register(client):
    """Signs up an account; returns the created profile."""
    def _do(email: str, **kwargs) -> dict:
        return _register(client, email, **kwargs)
    return _do


@pytest.fixture()
def login(client):
    """Signs in; returns bearer auth headers."""
    def _do(email: str) -> dict:
        return _auth_headers(client, email)
    return _do
