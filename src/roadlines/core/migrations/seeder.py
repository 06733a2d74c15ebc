"""SQL seed runner.

Seeds are executed after migrations, in filename order, on *every*
initialization so that rows deleted by hand come back.  Most re-runs hit
uniqueness constraints; each failing script is logged as a
:class:`~roadlines.core.errors.SeedWarning` and the run moves on.

``seeder_history`` records when each script first succeeded and when it last
ran.  History is informational only: it never causes a script to be skipped.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from pathlib import Path

from roadlines.core.errors import SeedWarning
from roadlines.core.logging import get_logger
from roadlines.core.migrations.runner import discover_scripts

logger = get_logger(__name__)


@dataclass
class SeedRecord:
    seeder_name: str
    executed_at: str
    last_run: str


@dataclass
class SeedResult:
    """Result of a seed run."""

    executed: list[str] = field(default_factory=list)
    warnings: list[SeedWarning] = field(default_factory=list)

    @property
    def failed(self) -> list[str]:
        return [w.script for w in self.warnings]


class SeedRunner:
    """Applies seed scripts from a directory, tolerating failures."""

    def __init__(self, conn: sqlite3.Connection, seeders_dir: Path | str) -> None:
        self._conn = conn
        self._seeders_dir = Path(seeders_dir)

    @property
    def seeders_dir(self) -> Path:
        return self._seeders_dir

    def run(self, *, force: bool = False) -> SeedResult:
        """Execute every seed script in filename order.

        ``force`` only affects logging; scripts already in history are
        re-run either way.
        """
        result = SeedResult()

        if not self._seeders_dir.is_dir():
            logger.info("seed.no_directory", path=str(self._seeders_dir))
            return result

        self._ensure_history_table()

        for script in discover_scripts(self._seeders_dir):
            name = script.name
            seen = self._has_run(name)

            if seen:
                self._touch(name)
                logger.info("seed.rerun", seeder=name, forced=force)
            else:
                logger.info("seed.first_run", seeder=name)

            try:
                self._conn.executescript(script.read_text(encoding="utf-8"))
                if not seen:
                    self._conn.execute(
                        "INSERT INTO seeder_history (seeder_name) VALUES (?)", (name,)
                    )
            except (sqlite3.Error, OSError, UnicodeDecodeError) as exc:
                warning = SeedWarning(name, cause=exc)
                result.warnings.append(warning)
                logger.warning("seed.failed", seeder=name, error=str(exc))
                continue

            result.executed.append(name)
            logger.info("seed.executed", seeder=name)

        return result

    def get_history(self) -> list[SeedRecord]:
        self._ensure_history_table()
        rows = self._conn.execute(
            "SELECT seeder_name, executed_at, last_run FROM seeder_history ORDER BY id"
        ).fetchall()
        return [SeedRecord(seeder_name=r[0], executed_at=r[1], last_run=r[2]) for r in rows]

    def reset_history(self) -> bool:
        """Forget every recorded seed run.  Returns False if the reset failed."""
        try:
            self._ensure_history_table()
            self._conn.execute("DELETE FROM seeder_history")
        except sqlite3.Error as exc:
            logger.warning("seed.history_reset_failed", error=str(exc))
            return False
        logger.info("seed.history_reset")
        return True

    # ------------------------------------------------------------------

    def _ensure_history_table(self) -> None:
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS seeder_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                seeder_name TEXT NOT NULL UNIQUE,
                executed_at TEXT NOT NULL DEFAULT (datetime('now')),
                last_run TEXT NOT NULL DEFAULT (datetime('now'))
            )
            """
        )

    def _has_run(self, name: str) -> bool:
        row = self._conn.execute(
            "SELECT id FROM seeder_history WHERE seeder_name = ?", (name,)
        ).fetchone()
        return row is not None

    def _touch(self, name: str) -> None:
        self._conn.execute(
            "UPDATE seeder_history SET last_run = datetime('now') WHERE seeder_name = ?",
            (name,),
        )
