"""Resolve where the database file and its script directories live.

The hosting application decides the base location (settings or an explicit
path); this module only turns that into a concrete :class:`DatabaseLayout`
and creates the containing directory when asked.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from roadlines.core.settings import Settings


@dataclass(frozen=True)
class DatabaseLayout:
    """On-disk locations used by one database manager."""

    database_path: Path
    migrations_dir: Path
    seeders_dir: Path

    @property
    def data_dir(self) -> Path:
        return self.database_path.parent

    def with_database_path(self, database_path: Path | str) -> DatabaseLayout:
        """Same script directories, different database file."""
        return DatabaseLayout(
            database_path=Path(database_path).expanduser(),
            migrations_dir=self.migrations_dir,
            seeders_dir=self.seeders_dir,
        )


def resolve_layout(settings: Settings, database_path: Path | str | None = None) -> DatabaseLayout:
    """Build a layout from settings, optionally overriding the database file."""
    path = Path(database_path) if database_path is not None else settings.database_path
    return DatabaseLayout(
        database_path=path.expanduser(),
        migrations_dir=settings.resolved_migrations_dir.expanduser(),
        seeders_dir=settings.resolved_seeders_dir.expanduser(),
    )


def ensure_data_dir(layout: DatabaseLayout) -> Path:
    """Create the directory containing the database file (idempotent)."""
    layout.data_dir.mkdir(parents=True, exist_ok=True)
    return layout.data_dir
