"""Statement classification and result types for the query dispatcher.

Routing is decided lexically: a statement whose trimmed, upper-cased text
starts with ``SELECT`` is a read, anything else is a write.  That means
``WITH ... SELECT``, ``PRAGMA`` and ``EXPLAIN`` all take the write path and
come back as a :class:`WriteResult`; callers rely on this.

Examples:
    >>> classify_statement("  select * from users")
    <StatementKind.READ: 'read'>
    >>> classify_statement("WITH x AS (SELECT 1) SELECT * FROM x")
    <StatementKind.WRITE: 'write'>
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

Params = Sequence[Any] | Mapping[str, Any] | None
Row = dict[str, Any]


class StatementKind(str, Enum):
    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a write-path statement."""

    changes: int
    last_insert_rowid: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"changes": self.changes, "last_insert_rowid": self.last_insert_rowid}


def classify_statement(sql: str) -> StatementKind:
    """Return READ when the statement text begins with SELECT."""
    if sql.strip().upper().startswith("SELECT"):
        return StatementKind.READ
    return StatementKind.WRITE


def normalize_params(params: Params) -> Sequence[Any] | Mapping[str, Any]:
    """Coerce caller parameters into something ``sqlite3`` can bind.

    Positional values become a tuple; mappings are passed through for named
    (``:name``) placeholders.
    """
    if params is None:
        return ()
    if isinstance(params, Mapping):
        return params
    if isinstance(params, (str, bytes)):
        # A bare string would otherwise bind one character per placeholder
        return (params,)
    return tuple(params)
