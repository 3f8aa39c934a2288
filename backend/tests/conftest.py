"""
Shared pytest fixtures for backend tests.
Each test gets its own SQLite file and a model gateway double.
"""
import pytest
import sqlite3
import sys
import os
from datetime import datetime

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import database
from config import Settings
from gateway import ModelGateway
from temporal import KST

# Monday 2026-01-05 14:30 KST
FIXED_NOW = datetime(2026, 1, 5, 14, 30, tzinfo=KST)


def make_settings(api_key="test-key") -> Settings:
    return Settings(
        anthropic_api_key=api_key,
        anthropic_model="test-model",
        max_tokens=1024,
        analysis_max_tokens=2048,
        timeout_seconds=5.0,
        cors_allow_origins=["*"],
    )


class FakeGateway(ModelGateway):
    """Gateway double: returns a canned object or raises, and records calls."""

    def __init__(self, result=None, error=None, api_key="test-key"):
        super().__init__(settings=make_settings(api_key))
        self.result = result if result is not None else {}
        self.error = error
        self.calls = []

    async def generate(self, prompt, schema, name, max_tokens=None):
        self.calls.append({"prompt": prompt, "schema": schema, "name": name, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def test_db(monkeypatch, tmp_path):
    """
    Create an isolated test database for each test.
    Uses a temp file (not :memory:) because database.py opens new connections per operation.
    """
    db_path = str(tmp_path / "test.db")
    monkeypatch.setattr(database, "DATABASE_PATH", db_path)

    # Create tables directly (skip alembic for tests)
    conn = sqlite3.connect(db_path)
    conn.executescript("""
        CREATE TABLE todos (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            description TEXT,
            priority TEXT NOT NULL DEFAULT 'medium',
            category TEXT NOT NULL DEFAULT '[]',
            completed INTEGER NOT NULL DEFAULT 0,
            created_date TEXT NOT NULL,
            due_date TEXT,
            updated_at TEXT NOT NULL
        );
    """)
    conn.commit()
    conn.close()

    yield db_path


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def app_client(test_db, fake_gateway, monkeypatch):
    """
    Test client for the FastAPI app with the gateway and clock replaced.
    Skips alembic migrations; tables already exist from test_db.
    """
    from fastapi.testclient import TestClient
    import main

    monkeypatch.setattr(main, "init_db", lambda: None)
    main.app.dependency_overrides[main.get_gateway] = lambda: fake_gateway
    main.app.dependency_overrides[main.get_now] = lambda: FIXED_NOW

    with TestClient(main.app) as client:
        yield client

    main.app.dependency_overrides.clear()
