"""
Shared pytest fixtures for roadlines tests.

Every test gets an isolated data directory and script directories under
``tmp_path``; nothing touches the user's real documents folder.

Usage:
    def test_something(make_manager, write_script):
        write_script("migrations", "001_create_users.sql", "CREATE TABLE users (id INTEGER);")
        db = make_manager()
        db.initialize()
"""

from __future__ import annotations

import os
import sqlite3
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import structlog

from roadlines.core.database import DatabaseManager, reset_database
from roadlines.core.settings import Settings, reset_settings


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Drop ROADLINES_* env vars and reset module-level singletons."""
    for key in list(os.environ):
        if key.startswith("ROADLINES_"):
            monkeypatch.delenv(key, raising=False)
    # keep .env files in the working tree from leaking into settings
    monkeypatch.chdir(tmp_path)
    reset_settings()
    reset_database()
    yield
    reset_database()
    reset_settings()
    structlog.reset_defaults()


@pytest.fixture()
def scripts_dir(tmp_path: Path) -> Path:
    d = tmp_path / "database"
    (d / "migrations").mkdir(parents=True)
    (d / "seeders").mkdir(parents=True)
    return d


@pytest.fixture()
def settings(tmp_path: Path, scripts_dir: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data", scripts_dir=scripts_dir)


@pytest.fixture()
def write_script(scripts_dir: Path) -> Callable[[str, str, str], Path]:
    """Write ``<scripts_dir>/<kind>/<name>`` with dedented SQL."""

    def _write(kind: str, name: str, sql: str) -> Path:
        path = scripts_dir / kind / name
        path.write_text(textwrap.dedent(sql), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def make_manager(settings: Settings) -> Iterator[Callable[..., DatabaseManager]]:
    """Factory for managers bound to the test settings; all are closed afterwards."""
    created: list[DatabaseManager] = []

    def _make(**overrides) -> DatabaseManager:
        manager = DatabaseManager(settings, **overrides)
        created.append(manager)
        return manager

    yield _make

    for manager in created:
        manager.close()


@pytest.fixture()
def conn() -> Iterator[sqlite3.Connection]:
    """In-memory SQLite connection in autocommit mode."""
    c = sqlite3.connect(":memory:", isolation_level=None)
    yield c
    c.close()


@pytest.fixture()
def users_scenario(write_script) -> None:
    """Two migrations and one seed: users table, index, admin row."""
    write_script(
        "migrations",
        "001_create_users.sql",
        """\
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            name TEXT
        );
        """,
    )
    write_script(
        "migrations",
        "002_add_index.sql",
        "CREATE INDEX IF NOT EXISTS idx_users_name ON users(name);\n",
    )
    write_script(
        "seeders",
        "01_admin.sql",
        "INSERT INTO users (email, name) VALUES ('admin@roadlines.local', 'Admin');\n",
    )
