"""Shared fixtures: a throwaway SQLite file and a small language directory."""

import sqlite3

import pytest

from lexi import db
from lexi.languages import LanguageDirectory
from lexi.models import Language


@pytest.fixture(autouse=True)
def temp_db(tmp_path, monkeypatch):
    """Point LEXI_DB_PATH to a fresh temp file for each test."""
    monkeypatch.setenv("LEXI_DB_PATH", str(tmp_path / "test_lexi.db"))
    db.init_db()
    yield


@pytest.fixture
def languages() -> LanguageDirectory:
    return LanguageDirectory(
        [
            Language(id=1, name="default", title="English"),
            Language(id=2, name="de", title="Deutsch"),
            Language(id=3, name="fr", title="Français"),
        ]
    )


@pytest.fixture
def statements(monkeypatch) -> list[str]:
    """Record every SQL statement sent through lexi.db.connect()."""
    captured: list[str] = []
    real_connect = sqlite3.connect

    def tracing_connect(*args, **kwargs):
        conn = real_connect(*args, **kwargs)
        conn.set_trace_callback(captured.append)
        return conn

    monkeypatch.setattr(db.sqlite3, "connect", tracing_connect)
    return captured
