"""Async boundary for the database manager.

The manager itself is blocking.  Hosts running an event loop (a desktop UI
bridge, an API server) wrap it here: each call runs in a worker thread and
calls are serialised with an ``asyncio.Lock`` so the single connection never
sees two operations at once.

Usage::

    adb = AsyncDatabase(DatabaseManager())
    await adb.initialize()
    rows = await adb.query("SELECT * FROM users WHERE id = ?", [1])
    await adb.close()
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from roadlines.core.database import DatabaseManager, InitializationReport
from roadlines.core.statements import Params, Row, WriteResult


class AsyncDatabase:
    def __init__(self, manager: DatabaseManager) -> None:
        self._manager = manager
        self._lock = asyncio.Lock()

    @property
    def manager(self) -> DatabaseManager:
        return self._manager

    async def initialize(self, database_path: Path | str | None = None) -> InitializationReport:
        async with self._lock:
            return await asyncio.to_thread(self._manager.initialize, database_path)

    async def query(self, sql: str, params: Params = None) -> list[Row] | WriteResult:
        async with self._lock:
            return await asyncio.to_thread(self._manager.query, sql, params)

    async def close(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._manager.close)
