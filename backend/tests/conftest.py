import os

# Must be set before any prm module reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from prm.main import app
from prm.core.database import Base, SessionLocal, engine

DEFAULT_PASSWORD = "secret1"


@pytest.fixture
def db():
    """Fresh in-memory schema for every test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def csrf_headers(client):
    """Fetch an anti-forgery token; the client keeps the matching cookie"""
    response = client.get("/api/auth/csrf")
    assert response.status_code == 200
    return {"X-CSRF-Token": response.json()["csrf_token"]}


def register_payload(email="ann@x.com", first_name="Ann", last_name="Lee", password=DEFAULT_PASSWORD):
    return {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "password": password,
        "confirm_password": password,
    }


@pytest.fixture
def register(client, csrf_headers):
    def _register(**overrides):
        return client.post("/api/auth/register", json=register_payload(**overrides), headers=csrf_headers)
    return _register


@pytest.fixture
def login(client, csrf_headers):
    def _login(email="ann@x.com", password=DEFAULT_PASSWORD):
        return client.post("/api/auth/login", json={"email": email, "password": password}, headers=csrf_headers)
    return _login


@pytest.fixture
def logged_in_user(register, login):
    """Register Ann Lee and log in as that user; returns the user payload"""
    user = register().json()["user"]
    response = login()
    assert response.status_code == 200
    return user
