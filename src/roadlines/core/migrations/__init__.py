"""Schema migration and seed runners.

Both runners apply ``.sql`` files in filename order.  Migrations are
fail-fast and tracked in ``_migrations``; seeds tolerate failure and are
re-run on every initialization.

Modules
-------
runner    MigrationRunner with apply_pending() / status() / rollback_last()
seeder    SeedRunner with run() / get_history() / reset_history()
"""

from roadlines.core.migrations.runner import (
    MigrationRecord,
    MigrationResult,
    MigrationRunner,
    MigrationStatus,
    discover_scripts,
)
from roadlines.core.migrations.seeder import SeedRecord, SeedResult, SeedRunner

__all__ = [
    "MigrationRecord",
    "MigrationResult",
    "MigrationRunner",
    "MigrationStatus",
    "SeedRecord",
    "SeedResult",
    "SeedRunner",
    "discover_scripts",
]
