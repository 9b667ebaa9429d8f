import os
import tempfile

# Settings are read once on first import of app.config
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_INIT_MODE", "create_all")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "healthsync-tests", "app.log"))

import pytest
from fastapi.testclient import TestClient

from app.core.database import Database, get_db


@pytest.fixture
def database():
    test_db = Database("sqlite://")
    test_db.create_all()
    yield test_db
    test_db.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(database):
    from app.main import app

    def override_get_db():
        session = database.session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def register(client, email="a@x.com", password="pw1", name=None):
    body = {"email": email, "password": password}
    if name:
        body["name"] = name
    response = client.post("/api/v1/auth/register", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def auth_headers(session):
    return {"Authorization": f"Bearer {session['access_token']}"}
