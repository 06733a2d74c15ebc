"""
Structured error types for the roadlines database core.

Every failure the lifecycle manager can surface is a ``RoadlinesError``
subclass carrying a category, free-form context and the chained cause, so
callers (and log processors) get the same shape regardless of where the
error came from.

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────┐
        │                      RoadlinesError                        │
        │           (category, context, cause, to_dict())            │
        ├────────────────────────────────────────────────────────────┤
        │                                                            │
        │   DatabaseError            SeedWarning       ConfigError   │
        │   (DATABASE)               (SEED, non-fatal) (CONFIG)      │
        │        │                                                   │
        │   InitializationError   NotInitializedError   QueryError   │
        │        │                                                   │
        │   MigrationError                                           │
        └────────────────────────────────────────────────────────────┘

Propagation:
    - ``InitializationError`` / ``MigrationError`` abort startup and bubble
      unchanged to whoever called ``initialize()``.
    - ``SeedWarning`` is created and logged by the seed runner; it is never
      raised and never changes control flow.
    - ``NotInitializedError`` and ``QueryError`` are raised straight to the
      caller of ``query()``.  Nothing is retried.

Examples:
    >>> err = QueryError("no such table: t", sql="SELECT * FROM t", params=[])
    >>> err.to_dict()["category"]
    'DATABASE'
    >>> err.sql
    'SELECT * FROM t'
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification in logs."""

    DATABASE = "DATABASE"
    MIGRATION = "MIGRATION"
    SEED = "SEED"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


class RoadlinesError(Exception):
    """
    Base exception for all roadlines errors.

    Subclasses set ``default_category``; instances carry a ``context`` dict of
    structured metadata and an optional ``cause`` which is also chained as
    ``__cause__`` so tracebacks show the original failure.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RoadlinesError:
        """
        Add context to this error (fluent API).

        Usage:
            raise InitializationError("open failed").with_context(path=str(db_path))
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(RoadlinesError):
    """Database lifecycle or statement error."""

    default_category = ErrorCategory.DATABASE


class InitializationError(DatabaseError):
    """
    Fatal failure while bringing the database up.

    Raised for directory creation, file open and pragma failures.  The
    manager is left uninitialized and holds no connection afterwards.
    """


class MigrationError(InitializationError):
    """A specific migration script failed; later scripts were not attempted."""

    default_category = ErrorCategory.MIGRATION

    def __init__(self, script: str, cause: BaseException | None = None, message: str | None = None):
        self.script = script
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            message or f"Migration {script} failed{detail}",
            context={"script": script},
            cause=cause,
        )


class NotInitializedError(DatabaseError):
    """A statement was issued before a successful ``initialize()``."""

    def __init__(self, message: str = "Database not initialized"):
        super().__init__(message)


class QueryError(DatabaseError):
    """Statement preparation or execution failed."""

    def __init__(
        self,
        message: str,
        *,
        sql: str,
        params: Any = None,
        cause: BaseException | None = None,
    ):
        self.sql = sql
        self.params = params
        super().__init__(
            message,
            context={"sql": sql, "params": params},
            cause=cause,
        )


# =============================================================================
# NON-FATAL
# =============================================================================


class SeedWarning(RoadlinesError):
    """
    A seed script failed.

    Seeds are re-run on every initialization and routinely hit uniqueness
    violations, so the runner records these instead of raising them.
    """

    default_category = ErrorCategory.SEED

    def __init__(self, script: str, cause: BaseException | None = None):
        self.script = script
        super().__init__(
            f"Seeder {script} failed: {cause}",
            context={"script": script},
            cause=cause,
        )


class ConfigError(RoadlinesError):
    """Invalid configuration value."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "RoadlinesError",
    "DatabaseError",
    "InitializationError",
    "MigrationError",
    "NotInitializedError",
    "QueryError",
    "SeedWarning",
    "ConfigError",
]
