"""Move the database to a user-chosen folder.

Built entirely on the manager's public lifecycle: ``close()``, copy the file,
``initialize(new_path)``.  The outcome is reported as a
:class:`RelocationResult` rather than raised, because the caller is usually a
settings screen that just shows the message.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from roadlines.core.database import DatabaseManager
from roadlines.core.errors import RoadlinesError
from roadlines.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RelocationResult:
    success: bool
    message: str
    path: Path | None = None
    migrated: bool = False


def relocate_database(
    manager: DatabaseManager,
    new_dir: Path | str,
    *,
    copy_existing: bool = True,
) -> RelocationResult:
    """Point *manager* at ``new_dir/<database file name>`` and re-initialize.

    When ``copy_existing`` is set and the current file exists at a different
    location, it is copied across first.  If the copy fails a fresh database
    is created at the new location instead.
    """
    target_dir = Path(new_dir).expanduser()
    current = manager.database_path
    new_path = target_dir / current.name
    migrated = False

    try:
        if copy_existing and current.exists() and current.resolve() != new_path.resolve():
            manager.close()
            try:
                target_dir.mkdir(parents=True, exist_ok=True)
                shutil.copy2(current, new_path)
            except OSError as exc:
                logger.warning(
                    "relocate.copy_failed",
                    source=str(current),
                    target=str(new_path),
                    error=str(exc),
                )
                manager.initialize(new_path)
                return RelocationResult(
                    success=True,
                    path=target_dir,
                    migrated=False,
                    message=f"New database created (migration failed: {exc})",
                )
            migrated = True
            logger.info("relocate.copied", source=str(current), target=str(new_path))

        manager.initialize(new_path)
    except RoadlinesError as exc:
        logger.error("relocate.failed", target=str(new_path), error=str(exc))
        return RelocationResult(
            success=False,
            message=f"Error updating database location: {exc}",
        )

    return RelocationResult(
        success=True,
        path=target_dir,
        migrated=migrated,
        message="Database migrated successfully" if migrated else "Database location updated",
    )
