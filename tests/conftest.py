"""Shared pytest fixtures for the API and client tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import mongomock
import pytest

# Ensure the application package is importable during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from jobboard import database, storage  # noqa: E402
from jobboard.main import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def mongo_db(monkeypatch: pytest.MonkeyPatch):
    """Provide an isolated in-memory MongoDB database for each test."""
    test_db_name = "test_job_board"
    monkeypatch.setenv("ENABLE_MONGODB", "true")
    monkeypatch.setenv("MONGODB_DATABASE", test_db_name)

    client = mongomock.MongoClient()
    db = client[test_db_name]

    monkeypatch.setattr(database, "get_mongo_client", lambda: client)
    monkeypatch.setattr(database, "get_database", lambda: db)

    yield db

    client.drop_database(test_db_name)
    storage.reset()


@pytest.fixture
def memory_backend(mongo_db, monkeypatch: pytest.MonkeyPatch):
    """Switch the services to the in-memory stores."""
    monkeypatch.setenv("ENABLE_MONGODB", "false")
    storage.reset()
    yield storage
    storage.reset()


@pytest.fixture
def app(mongo_db):
    flask_app = create_app()
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def http(app):
    return app.test_client()


class FlaskTransport:
    """Client transport that sends requests through Flask's test client."""

    def __init__(self, test_client) -> None:
        self.test_client = test_client
        self.requests = []

    def get(self, path: str, params: Optional[Dict[str, Any]] = None):
        self.requests.append(("GET", path, params))
        response = self.test_client.get(path, query_string=params)
        return response.status_code, response.get_json(silent=True) or {}

    def post(self, path: str, json: Dict[str, Any]):
        self.requests.append(("POST", path, json))
        response = self.test_client.post(path, json=json)
        return response.status_code, response.get_json(silent=True) or {}


@pytest.fixture
def transport(http):
    return FlaskTransport(http)
