import os

# Must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_EMAIL"] = ""
os.environ["ADMIN_PASSWORD"] = ""
os.environ["SECRET_KEY"] = "test-secret-key"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from app.db.session import engine
from app.main import app
from app.models.blog import Category, Post
from app.services.auth import AuthService

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_db():
    """Fresh schema for every test."""
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin(session):
    return AuthService(session).create_user(ADMIN_EMAIL, ADMIN_PASSWORD, name="Admin")


@pytest.fixture
def auth_headers(client, admin):
    response = client.post(
        "/api/v1/auth/token",
        data={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def make_post(session):
    """Insert a post directly; returns its id."""

    def _make_post(title, slug=None, **fields):
        fields.setdefault("published", True)
        if fields["published"]:
            fields.setdefault("published_at", datetime(2024, 1, 1))
        post = Post(title=title, slug=slug or title.lower().replace(" ", "-"), **fields)
        session.add(post)
        session.commit()
        return post.id

    return _make_post


@pytest.fixture
def make_category(session):
    def _make_category(name, **fields):
        category = Category(name=name, slug=name.lower(), **fields)
        session.add(category)
        session.commit()
        return category.id

    return _make_category
