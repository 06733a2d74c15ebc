"""SQL migration runner.

Reads ``.sql`` files from the migrations directory and applies them in
filename order, stopping at the first failure.  Filenames must sort in the
intended order (zero-padded prefixes such as ``001_create_users.sql``);
there is no semantic version parsing.

Applied scripts are tracked in the ``_migrations`` table unless tracking is
disabled, in which case every script is replayed on each run and must be
idempotent on its own (``CREATE TABLE IF NOT EXISTS`` and friends).

Each script runs inside one transaction together with its ledger row, so a
script that fails halfway leaves neither its statements nor a record behind.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from pathlib import Path

from roadlines.core.errors import MigrationError
from roadlines.core.logging import get_logger

logger = get_logger(__name__)

SCRIPT_SUFFIX = ".sql"


@dataclass
class MigrationRecord:
    """Record of a single applied migration."""

    id: int
    filename: str
    applied_at: str


@dataclass
class MigrationResult:
    """Result of a migration run."""

    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.applied) + len(self.skipped)


@dataclass
class MigrationStatus:
    """Applied and pending migrations, for reporting."""

    applied: list[MigrationRecord] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)


def discover_scripts(directory: Path) -> list[Path]:
    """Return ``.sql`` files in *directory* sorted by filename.

    A missing directory yields an empty list.
    """
    if not directory.is_dir():
        return []
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == SCRIPT_SUFFIX),
        key=lambda p: p.name,
    )


class MigrationRunner:
    """Applies SQL migrations from a directory.

    Parameters
    ----------
    conn
        An open ``sqlite3.Connection``.
    migrations_dir
        Directory containing numbered ``.sql`` files.
    track
        Record applied scripts in ``_migrations`` and skip them next time.
    create_table
        Create ``_migrations`` up front.  Pass ``False`` to inspect a
        database (opened read-only, for instance) without writing to it.

    Example::

        conn = sqlite3.connect("roadlines.db", isolation_level=None)
        result = MigrationRunner(conn, Path("database/migrations")).apply_pending()
        print(f"Applied {len(result.applied)} migrations")
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        migrations_dir: Path | str,
        *,
        track: bool = True,
        create_table: bool = True,
    ) -> None:
        self._conn = conn
        self._migrations_dir = Path(migrations_dir)
        self._track = track
        if track and create_table:
            self._ensure_migrations_table()

    @property
    def migrations_dir(self) -> Path:
        return self._migrations_dir

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def apply_pending(self) -> MigrationResult:
        """Apply all pending migrations in filename order.

        Raises ``MigrationError`` naming the first script that fails; scripts
        after it are not attempted.
        """
        result = MigrationResult()

        if not self._migrations_dir.is_dir():
            logger.info("migration.no_directory", path=str(self._migrations_dir))
            return result

        if self._track:
            self._ensure_migrations_table()
        applied = {r.filename for r in self.get_applied()} if self._track else set()

        for script in discover_scripts(self._migrations_dir):
            name = script.name
            if name in applied:
                result.skipped.append(name)
                logger.debug("migration.already_applied", migration=name)
                continue

            try:
                self._conn.executescript(self._wrap_script(name, script.read_text(encoding="utf-8")))
            except (sqlite3.Error, OSError, UnicodeDecodeError) as exc:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                logger.error("migration.failed", migration=name, error=str(exc))
                raise MigrationError(name, cause=exc) from exc

            result.applied.append(name)
            logger.info("migration.applied", migration=name)

        if not result.applied:
            logger.info("migration.up_to_date", skipped=len(result.skipped))

        return result

    def get_applied(self) -> list[MigrationRecord]:
        """Return list of already-applied migrations."""
        if not self._track or not self._has_ledger():
            return []
        cursor = self._conn.execute(
            "SELECT id, filename, applied_at FROM _migrations ORDER BY id"
        )
        return [
            MigrationRecord(id=row[0], filename=row[1], applied_at=row[2])
            for row in cursor.fetchall()
        ]

    def get_pending(self) -> list[str]:
        """Return filenames of migrations not yet applied."""
        applied = {r.filename for r in self.get_applied()}
        return [
            p.name
            for p in discover_scripts(self._migrations_dir)
            if p.name not in applied
        ]

    def status(self) -> MigrationStatus:
        return MigrationStatus(applied=self.get_applied(), pending=self.get_pending())

    def rollback_last(self) -> str | None:
        """Remove the last migration record (does NOT reverse SQL).

        Returns the filename of the removed record, or ``None`` if no
        migrations exist.

        .. warning::
            This only removes the tracking record.  The next run re-applies
            the script, so it must tolerate being executed again.
        """
        records = self.get_applied()
        if not records:
            return None
        last = records[-1]
        self._conn.execute("DELETE FROM _migrations WHERE id = ?", (last.id,))
        logger.info("migration.rolled_back", migration=last.filename)
        return last.filename

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _has_ledger(self) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = '_migrations'"
        ).fetchone()
        return row is not None

    def _ensure_migrations_table(self) -> None:
        """Create the ``_migrations`` table if it doesn't exist."""
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT NOT NULL UNIQUE,
                applied_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
            """
        )

    def _wrap_script(self, filename: str, sql: str) -> str:
        """Run *sql* and its ledger row as one transaction.

        Scripts must not issue their own ``BEGIN``/``COMMIT``.
        """
        parts = ["BEGIN;", sql, ";"]
        if self._track:
            literal = filename.replace("'", "''")
            parts.append(f"INSERT INTO _migrations (filename) VALUES ('{literal}');")
        parts.append("COMMIT;")
        return "\n".join(parts)
