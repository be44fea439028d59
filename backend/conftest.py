"""Shared pytest fixtures: a Flask app backed by an in-memory mongomock store."""
import mongomock
import pytest

from smartsplit import create_app, extensions
from smartsplit.config import TestConfig
from smartsplit.services import gemini_summary


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setattr(extensions, "MongoClient", mongomock.MongoClient)
    gemini_summary.reset_summary_service()

    app = create_app(TestConfig)
    yield app

    extensions.get_client().drop_database(TestConfig.MONGO_DB_NAME)
    gemini_summary.reset_summary_service()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    """Sign in by identifier; returns (user dict, auth headers)."""
    def _login(identifier):
        resp = client.post("/api/v1/auth/login", json={"identifier": identifier})
        assert resp.status_code in (200, 201), resp.get_json()
        body = resp.get_json()
        return body["user"], {"Authorization": f"Bearer {body['access_token']}"}
    return _login
