"""
Embedded database lifecycle manager.

``DatabaseManager`` owns the single SQLite connection an application uses:
it creates the file, switches it to write-ahead logging, brings the schema
up to date, applies seed data and then serves every statement through one
``query(sql, params)`` entry point.

Lifecycle:
    ::

        ┌───────────────┐ initialize() ┌──────────────┐   ok   ┌─────────┐
        │ UNINITIALIZED │─────────────►│ INITIALIZING │───────►│  READY  │
        └───────────────┘              └──────────────┘        └─────────┘
               ▲                          │      ▲  initialize()  │  │
               │        failure           │      └────────────────┘  │
               └──────────────────────────┘                          │
                                                    close()          ▼
                                                               ┌─────────┐
                                                               │ CLOSED  │
                                                               └─────────┘

    ``initialize()`` runs, in order:

    1. create the directory holding the database file
    2. close the previous connection, if any
    3. open/create the file
    4. ``PRAGMA journal_mode`` (WAL by default) and ``PRAGMA foreign_keys``
    5. migrations (fail-fast, raises ``MigrationError``)
    6. seeds (failures logged as ``SeedWarning``, never raised)

    A failure in steps 1-5 closes whatever was opened and leaves the manager
    ``UNINITIALIZED``: there is exactly one open connection in ``READY`` and
    none in any other state.

Query routing:
    Statements whose trimmed text starts with ``SELECT`` return
    ``list[dict]``; everything else, including ``WITH``/``PRAGMA``/
    ``EXPLAIN``, returns a :class:`~roadlines.core.statements.WriteResult`.

Concurrency:
    Synchronous and unlocked.  The connection runs in autocommit mode so each
    ``query`` call is its own unit.  Do not re-initialize while another
    thread is mid-query; use :class:`roadlines.core.aio.AsyncDatabase` from an
    event loop.

Examples:
    >>> db = DatabaseManager(database_path=tmp / "app.db",
    ...                      migrations_dir=tmp / "migrations",
    ...                      seeders_dir=tmp / "seeders")
    >>> report = db.initialize()
    >>> db.query("INSERT INTO users (email) VALUES (?)", ["a@example.com"])
    WriteResult(changes=1, last_insert_rowid=1)
    >>> db.query("SELECT email FROM users WHERE id = ?", [1])
    [{'email': 'a@example.com'}]
    >>> db.close()
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from roadlines.core.errors import (
    InitializationError,
    MigrationError,
    NotInitializedError,
    QueryError,
    SeedWarning,
)
from roadlines.core.logging import get_logger
from roadlines.core.migrations import (
    MigrationResult,
    MigrationRunner,
    MigrationStatus,
    SeedResult,
    SeedRunner,
)
from roadlines.core.paths import DatabaseLayout, ensure_data_dir, resolve_layout
from roadlines.core.settings import Settings, get_settings
from roadlines.core.statements import (
    Params,
    Row,
    StatementKind,
    WriteResult,
    classify_statement,
    normalize_params,
)

logger = get_logger(__name__)


class ManagerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    CLOSED = "closed"


@dataclass
class InitializationReport:
    """What a successful ``initialize()`` did."""

    database_path: Path
    journal_mode: str
    migrations: MigrationResult = field(default_factory=MigrationResult)
    seeds: SeedResult = field(default_factory=SeedResult)


class DatabaseManager:
    """Owns one SQLite connection and its schema lifecycle.

    Parameters
    ----------
    settings
        Source of defaults; falls back to :func:`get_settings`.
    database_path, migrations_dir, seeders_dir
        Explicit overrides for the resolved layout (tests point these at
        ``tmp_path``).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        database_path: Path | str | None = None,
        migrations_dir: Path | str | None = None,
        seeders_dir: Path | str | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        layout = resolve_layout(self._settings, database_path)
        if migrations_dir is not None or seeders_dir is not None:
            layout = DatabaseLayout(
                database_path=layout.database_path,
                migrations_dir=Path(migrations_dir) if migrations_dir is not None else layout.migrations_dir,
                seeders_dir=Path(seeders_dir) if seeders_dir is not None else layout.seeders_dir,
            )
        self._layout = layout
        self._conn: sqlite3.Connection | None = None
        self._state = ManagerState.UNINITIALIZED

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ManagerState.READY

    @property
    def layout(self) -> DatabaseLayout:
        return self._layout

    @property
    def database_path(self) -> Path:
        return self._layout.database_path

    @property
    def connection(self) -> sqlite3.Connection:
        """The live connection.  Raises ``NotInitializedError`` unless READY."""
        return self._require_connection()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(
        self,
        database_path: Path | str | None = None,
        *,
        force_seeds: bool = False,
    ) -> InitializationReport:
        """Open the database and bring it up to date.

        Passing ``database_path`` re-targets the manager before opening.
        Raises ``InitializationError`` (or ``MigrationError``) on failure.
        """
        if database_path is not None:
            self._layout = self._layout.with_database_path(database_path)

        path = self._layout.database_path
        self._state = ManagerState.INITIALIZING
        logger.info("database.initializing", path=str(path))

        try:
            ensure_data_dir(self._layout)
        except OSError as exc:
            self._abort()
            raise InitializationError(
                f"Cannot create database directory {self._layout.data_dir}: {exc}",
                context={"path": str(path)},
                cause=exc,
            ) from exc

        self._close_connection()

        try:
            self._conn = self._open(path)
            journal_mode = self._configure(self._conn)
        except sqlite3.Error as exc:
            self._abort()
            raise InitializationError(
                f"Cannot open database {path}: {exc}",
                context={"path": str(path)},
                cause=exc,
            ) from exc

        try:
            migrations = MigrationRunner(
                self._conn,
                self._layout.migrations_dir,
                track=self._settings.track_migrations,
            ).apply_pending()
        except MigrationError:
            self._abort()
            raise
        except sqlite3.Error as exc:
            self._abort()
            raise InitializationError(
                f"Cannot prepare migrations for {path}: {exc}",
                context={"path": str(path)},
                cause=exc,
            ) from exc

        seeds = self._run_seeds(self._conn, force=force_seeds)

        self._state = ManagerState.READY
        logger.info(
            "database.ready",
            path=str(path),
            journal_mode=journal_mode,
            migrations_applied=len(migrations.applied),
            seeds_failed=len(seeds.warnings),
        )
        return InitializationReport(
            database_path=path,
            journal_mode=journal_mode,
            migrations=migrations,
            seeds=seeds,
        )

    def close(self) -> None:
        """Close the connection.  Safe to call repeatedly."""
        if self._conn is None:
            return
        self._close_connection()
        self._state = ManagerState.CLOSED
        logger.info("database.closed", path=str(self.database_path))

    def __enter__(self) -> DatabaseManager:
        if not self.is_ready:
            self.initialize()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Query dispatcher
    # ------------------------------------------------------------------

    def query(self, sql: str, params: Params = None) -> list[Row] | WriteResult:
        """Execute one statement.

        ``SELECT ...`` returns the full result set as a list of
        ``{column: value}`` dicts; any other statement returns a
        ``WriteResult``.  Failures raise ``QueryError`` with the SQL text and
        parameters attached.
        """
        conn = self._require_connection()
        kind = classify_statement(sql)

        try:
            cursor = conn.execute(sql, normalize_params(params))
            if kind is StatementKind.READ:
                return [dict(row) for row in cursor.fetchall()]
            return WriteResult(
                changes=max(cursor.rowcount, 0),
                last_insert_rowid=cursor.lastrowid,
            )
        except (sqlite3.Error, TypeError, ValueError) as exc:
            logger.error("database.query_failed", sql=sql, params=params, error=str(exc))
            raise QueryError(
                f"Query failed: {exc}",
                sql=sql,
                params=params,
                cause=exc,
            ) from exc

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def migration_status(self) -> MigrationStatus:
        conn = self._require_connection()
        return MigrationRunner(
            conn, self._layout.migrations_dir, track=self._settings.track_migrations
        ).status()

    def run_seeders(self, *, force: bool = False) -> SeedResult:
        """Re-run seed scripts against the open database."""
        conn = self._require_connection()
        return self._run_seeds(conn, force=force)

    def reset_seed_history(self) -> bool:
        conn = self._require_connection()
        return SeedRunner(conn, self._layout.seeders_dir).reset_history()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _open(self, path: Path) -> sqlite3.Connection:
        conn = sqlite3.connect(
            str(path),
            timeout=self._settings.busy_timeout,
            isolation_level=None,  # autocommit; each query is its own unit
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        return conn

    def _configure(self, conn: sqlite3.Connection) -> str:
        """Apply pragmas; returns the journal mode SQLite actually chose."""
        row = conn.execute(f"PRAGMA journal_mode = {self._settings.journal_mode}").fetchone()
        if self._settings.foreign_keys:
            conn.execute("PRAGMA foreign_keys = ON")
        return str(row[0]).upper() if row else self._settings.journal_mode

    def _run_seeds(self, conn: sqlite3.Connection, *, force: bool) -> SeedResult:
        try:
            return SeedRunner(conn, self._layout.seeders_dir).run(force=force)
        except sqlite3.Error as exc:
            # seeder_history itself is unusable; seeding is still non-fatal
            warning = SeedWarning(self._layout.seeders_dir.name, cause=exc)
            logger.warning("seed.run_failed", error=str(exc))
            return SeedResult(warnings=[warning])

    def _require_connection(self) -> sqlite3.Connection:
        if self._state is not ManagerState.READY or self._conn is None:
            raise NotInitializedError()
        return self._conn

    def _close_connection(self) -> None:
        if self._conn is not None:
            conn, self._conn = self._conn, None
            conn.close()

    def _abort(self) -> None:
        self._close_connection()
        self._state = ManagerState.UNINITIALIZED

    def __repr__(self) -> str:
        return f"DatabaseManager(path={str(self.database_path)!r}, state={self._state.value})"


# Process-wide default manager for hosts that want one
_database: DatabaseManager | None = None


def get_database() -> DatabaseManager:
    """Get or create the shared manager (not initialized automatically)."""
    global _database
    if _database is None:
        _database = DatabaseManager()
    return _database


def reset_database() -> None:
    """Close and forget the shared manager (for testing)."""
    global _database
    if _database is not None:
        _database.close()
    _database = None
