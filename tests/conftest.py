"""Pytest fixtures for the portfolio backend tests."""

from datetime import timedelta

import mongomock
import pytest
from fastapi.testclient import TestClient

import database


@pytest.fixture
def db():
    """Bind an in-memory MongoDB for the duration of a test."""
    database.close_db()
    yield database.use_client(mongomock.MongoClient(), "portfolio_test")
    database.close_db()


@pytest.fixture
def client(db):
    from main import app

    return TestClient(app)


@pytest.fixture
def operator_headers(client, monkeypatch):
    """Authorization headers carrying a valid operator token."""
    monkeypatch.setenv("ADMIN_KEY", "test-key")
    response = client.post("/admin/token", json={"key": "test-key"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def make_product(db):
    """Insert a product straight into the catalog and return its id."""

    def _make(name="Widget", price=100.0, stock=10, discount=None, category="electronics", **extra):
        doc = {
            "name": name,
            "description": f"{name} description",
            "price": price,
            "category": category,
            "image": "https://example.com/img.jpg",
            "stock": stock,
            "rating": 4.0,
            "reviewCount": 0,
            "featured": False,
            "tags": [],
            "createdAt": database.utcnow(),
            **extra,
        }
        if discount is not None:
            doc["discount"] = discount
        return str(db["product"].insert_one(doc).inserted_id)

    return _make


ADDRESS = {
    "street": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "country": "US",
    "zipCode": "62701",
}


def days_ago(days):
    return database.utcnow() - timedelta(days=days)
