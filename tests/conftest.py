"""
Test configuration and fixtures.

Provides:
- A throwaway SQLite database (configured before the app is imported,
  removed when the session ends)
- Fresh tables for every test
- TestClient and an authenticated admin header
"""
import os
import shutil
import tempfile

_tmpdir = tempfile.mkdtemp(prefix="secret-santa-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_tmpdir, "test.db")
os.environ["ADMIN_PASSWORD"] = "test-password"
os.environ["SESSION_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from db import Base, SessionLocal, engine
from main import app
from models import Registrant, SantaIdentity


@pytest.fixture(scope="session", autouse=True)
def _database_dir():
    yield
    engine.dispose()
    shutil.rmtree(_tmpdir, ignore_errors=True)


@pytest.fixture(autouse=True)
def fresh_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin_headers(client):
    response = client.post("/admin/login", json={"password": "test-password"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def seed(db):
    """Insert registrants and Santa identities directly.

    ``santas`` may hold plain names or ``(name, contact_email)`` tuples.
    """
    def _seed(emails=(), santas=()):
        for email in emails:
            db.add(Registrant(email=email))
        for santa in santas:
            name, contact = santa if isinstance(santa, tuple) else (santa, "")
            db.add(SantaIdentity(name=name, email=contact, assigned=False))
        db.commit()

    return _seed
