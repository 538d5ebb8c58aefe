"""Shared fixtures: in-memory SQLite store, API client and user factory."""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token
from app.db import models as _models  # noqa: F401
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.user import User

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, _record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@dataclass
class Caller:
    """A stored user plus the headers that authenticate as them."""

    id: uuid.UUID
    name: str
    email: str
    headers: dict = field(default_factory=dict)


# ── Store Fixtures ────────────────────────────────────────────


@pytest.fixture
def db():
    """Fresh schema per test; yields a session for direct store access."""
    Base.metadata.create_all(engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def client(db):
    def _get_test_db():
        s = TestingSessionLocal()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_test_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ── Identity Fixtures ─────────────────────────────────────────


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name: str | None = None, email: str | None = None) -> Caller:
        counter["n"] += 1
        name = name or f"User {counter['n']}"
        email = email or f"user{counter['n']}@example.com"
        u = User(name=name, email=email)
        db.add(u)
        db.commit()
        token = create_access_token(subject=str(u.id))
        return Caller(
            id=u.id,
            name=name,
            email=email,
            headers={"Authorization": f"Bearer {token}"},
        )

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("Alice", "alice@example.com")


@pytest.fixture
def bob(make_user):
    return make_user("Bob", "bob@example.com")


@pytest.fixture
def carol(make_user):
    return make_user("Carol", "carol@example.com")


# ── API Helpers ───────────────────────────────────────────────


@pytest.fixture
def create_team(client):
    def _create(owner: Caller, name: str = "Acme", member_ids=()):
        resp = client.post(
            "/teams",
            json={"name": name, "memberIds": [str(m) for m in member_ids]},
            headers=owner.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create


@pytest.fixture
def create_dataset(client):
    def _create(owner: Caller, name: str = "Sales", visibility: str = "PRIVATE", team_id=None, **extra):
        body = {
            "name": name,
            "description": f"{name} data",
            "fileName": f"{name.lower()}.csv",
            "fileUrl": f"/upload/{owner.id}/{name.lower()}.csv",
            "visibility": visibility,
        }
        if team_id is not None:
            body["teamId"] = str(team_id)
        body.update(extra)
        resp = client.post("/datasets", json=body, headers=owner.headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create


@pytest.fixture
def create_viz(client):
    def _create(caller: Caller, dataset_id, title: str = "Revenue by month", config=None):
        resp = client.post(
            "/visualizations",
            json={
                "title": title,
                "type": "bar",
                "config": config if config is not None else {"x": "month", "y": "revenue"},
                "datasetId": str(dataset_id),
            },
            headers=caller.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
