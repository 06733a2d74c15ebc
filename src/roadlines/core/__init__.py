"""
roadlines.core - embedded database lifecycle.

Opens one local SQLite file, applies ordered migrations and tolerant seeds,
and routes every statement through ``DatabaseManager.query``.

Modules
-------
database      DatabaseManager, ManagerState, get_database()
migrations    MigrationRunner, SeedRunner
statements    classify_statement(), WriteResult
errors        RoadlinesError hierarchy
settings      pydantic-settings configuration
paths         DatabaseLayout resolution
logging       structlog configuration
aio           AsyncDatabase wrapper
"""

from roadlines.core.database import (
    DatabaseManager,
    InitializationReport,
    ManagerState,
    get_database,
    reset_database,
)
from roadlines.core.errors import (
    ConfigError,
    DatabaseError,
    InitializationError,
    MigrationError,
    NotInitializedError,
    QueryError,
    RoadlinesError,
    SeedWarning,
)
from roadlines.core.statements import StatementKind, WriteResult, classify_statement

__all__ = [
    "ConfigError",
    "DatabaseError",
    "DatabaseManager",
    "InitializationError",
    "InitializationReport",
    "ManagerState",
    "MigrationError",
    "NotInitializedError",
    "QueryError",
    "RoadlinesError",
    "SeedWarning",
    "StatementKind",
    "WriteResult",
    "classify_statement",
    "get_database",
    "reset_database",
]
