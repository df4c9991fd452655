# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import os
import tempfile
from datetime import date
from typing import Generator

os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="renteasy-uploads-"))
os.environ.setdefault("JWT_SECRET", "test-secret")

import mongomock
import pytest
from fastapi.testclient import TestClient

from core.security import create_token
from database import create_document, get_db, to_datetime
from main import create_app

# Users that never log in do not need a real bcrypt hash
PLACEHOLDER_HASH = "not-a-real-hash"


@pytest.fixture
def db():
    """A fresh in-memory MongoDB per test."""
    return mongomock.MongoClient().db


@pytest.fixture
def app(db):
    """Create a test FastAPI application wired to the in-memory database."""
    application = create_app()
    application.dependency_overrides[get_db] = lambda: db
    return application


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role="renter", name=None, email=None, is_active=True, password_hash=PLACEHOLDER_HASH, **extra):
        counter["n"] += 1
        doc = {
            "name": name or f"{role.title()} {counter['n']}",
            "email": email or f"{role}{counter['n']}@example.com",
            "phone": extra.pop("phone", None),
            "password_hash": password_hash,
            "role": role,
            "is_active": is_active,
            **extra,
        }
        return create_document(db, "user", doc)

    return _make_user


@pytest.fixture
def make_property(db):
    def _make_property(owner_id, **overrides):
        doc = {
            "owner_id": owner_id,
            "title": "Sunny Loft",
            "description": "Bright loft close to the park",
            "address": {"street": "1 Main St", "city": "Austin", "state": "TX", "zip_code": "78701"},
            "rent_per_month": 1000.0,
            "property_type": "apartment",
            "bedrooms": 2,
            "bathrooms": 1,
            "amenities": ["parking"],
            "images": [],
            "available_from": date(2024, 1, 1),
            "is_active": True,
            "is_approved": True,
        }
        doc.update(overrides)
        doc["available_from"] = to_datetime(doc["available_from"])
        return create_document(db, "property", doc)

    return _make_property


@pytest.fixture
def auth_header():
    def _auth_header(user_id):
        return {"Authorization": f"Bearer {create_token(user_id)}"}

    return _auth_header


@pytest.fixture
def renter(make_user):
    return make_user("renter")


@pytest.fixture
def owner(make_user):
    return make_user("owner")


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def listing(make_property, owner):
    return make_property(owner)
