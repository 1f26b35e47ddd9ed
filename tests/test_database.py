"""Tests for the connection layer and document helpers."""

import threading
from datetime import datetime

import mongomock
import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

import database
from errors import DatabaseNotConfiguredError


@pytest.fixture
def no_connection():
    database.close_db()
    yield
    database.close_db()


class TestConnection:
    def test_not_configured(self, no_connection, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("DATABASE_NAME", raising=False)
        with pytest.raises(DatabaseNotConfiguredError):
            database.get_db()

    def test_single_initialisation_across_threads(self, no_connection, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "mongodb://example:27017")
        monkeypatch.setenv("DATABASE_NAME", "portfolio")
        created = []

        def fake_client(url, **kwargs):
            created.append(url)
            return mongomock.MongoClient()

        monkeypatch.setattr(database, "MongoClient", fake_client)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(database.get_db())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert created == ["mongodb://example:27017"]
        assert all(r is results[0] for r in results)
        assert database.is_connected()

    def test_close_resets(self, db):
        assert database.is_connected()
        database.close_db()
        assert not database.is_connected()

    def test_cart_user_is_unique(self, db):
        db["cart"].insert_one({"user": "u1", "items": []})
        with pytest.raises(DuplicateKeyError):
            db["cart"].insert_one({"user": "u1", "items": []})


class TestHelpers:
    def test_parse_object_id(self):
        oid = ObjectId()
        assert database.parse_object_id(str(oid)) == oid
        assert database.parse_object_id(oid) is oid
        assert database.parse_object_id("xyz") is None
        assert database.parse_object_id(None) is None

    def test_serialize_doc(self):
        oid, ref = ObjectId(), ObjectId()
        doc = {"_id": oid, "items": [{"product": ref}], "when": datetime(2026, 1, 2, 3, 4, 5)}
        assert database.serialize_doc(doc) == {
            "id": str(oid),
            "items": [{"product": str(ref)}],
            "when": "2026-01-02T03:04:05",
        }
        assert database.serialize_doc(None) is None

    def test_create_document_stamps_times(self, db):
        new_id = database.create_document("task", {"title": "x"})
        doc = db["task"].find_one({"_id": ObjectId(new_id)})
        assert doc["title"] == "x"
        assert doc["createdAt"] == doc["updatedAt"]


class TestHealth:
    def test_root(self, client):
        assert client.get("/").status_code == 200

    def test_database_diagnostics(self, client):
        data = client.get("/test").json()
        assert data["connection_status"] == "Connected"

    def test_unconfigured_database_is_500(self, no_connection, monkeypatch):
        from fastapi.testclient import TestClient
        from main import app

        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("DATABASE_NAME", raising=False)
        response = TestClient(app).get("/tasks")
        assert response.status_code == 500
        assert response.json() == {"error": "Database not configured"}
