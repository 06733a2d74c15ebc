"""Tests for roadlines.core.errors module."""

import sqlite3

from roadlines.core.errors import (
    ConfigError,
    DatabaseError,
    ErrorCategory,
    InitializationError,
    MigrationError,
    NotInitializedError,
    QueryError,
    RoadlinesError,
    SeedWarning,
)


class TestRoadlinesError:
    def test_defaults(self):
        err = RoadlinesError("boom")
        assert err.message == "boom"
        assert err.category is ErrorCategory.INTERNAL
        assert err.context == {}
        assert err.cause is None

    def test_cause_is_chained(self):
        cause = sqlite3.OperationalError("disk I/O error")
        err = DatabaseError("failed", cause=cause)
        assert err.__cause__ is cause

    def test_with_context_is_fluent(self):
        err = InitializationError("open failed").with_context(path="/tmp/x.db")
        assert isinstance(err, InitializationError)
        assert err.context["path"] == "/tmp/x.db"

    def test_to_dict(self):
        err = DatabaseError("failed", context={"path": "a.db"}, cause=ValueError("bad"))
        assert err.to_dict() == {
            "error_type": "DatabaseError",
            "message": "failed",
            "category": "DATABASE",
            "context": {"path": "a.db"},
            "cause": "bad",
        }

    def test_repr(self):
        assert repr(ConfigError("nope")) == "ConfigError('nope', category=CONFIG)"


class TestHierarchy:
    def test_migration_error_is_fatal_initialization_error(self):
        err = MigrationError("002_bad.sql", cause=sqlite3.OperationalError("syntax error"))
        assert isinstance(err, InitializationError)
        assert isinstance(err, DatabaseError)
        assert err.category is ErrorCategory.MIGRATION
        assert err.script == "002_bad.sql"
        assert str(err) == "Migration 002_bad.sql failed: syntax error"

    def test_not_initialized_message(self):
        err = NotInitializedError()
        assert str(err) == "Database not initialized"
        assert isinstance(err, DatabaseError)

    def test_query_error_carries_statement(self):
        err = QueryError("Query failed", sql="SELECT * FROM t WHERE id = ?", params=[5])
        assert err.sql == "SELECT * FROM t WHERE id = ?"
        assert err.params == [5]
        assert err.context == {"sql": "SELECT * FROM t WHERE id = ?", "params": [5]}

    def test_seed_warning_is_not_a_database_error(self):
        warning = SeedWarning("01_admin.sql", cause=sqlite3.IntegrityError("UNIQUE constraint failed"))
        assert not isinstance(warning, DatabaseError)
        assert warning.category is ErrorCategory.SEED
        assert warning.to_dict()["context"] == {"script": "01_admin.sql"}
