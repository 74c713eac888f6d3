"""Cache-aside table accessor.

Reads are served from the snapshot cache immediately; each read also schedules
a background refetch of the table from the remote store which replaces the
snapshot on success. Writes go straight to the remote store and trigger the
same refresh.

Failure policy:
- Remote read/refresh errors are logged; the cached snapshot is left as is.
- Remote upsert errors are logged and the unwritten item is returned.
- No retry, no backoff, no offline queue, last write wins.

Callers get no staleness signal: a snapshot may lag the remote store by any
amount until a refresh completes.

Refreshes of one table may overlap. Each is numbered when it starts, and a
refresh that finishes after a later-started one has stored its rows is
dropped, so a slow fetch never replaces a newer snapshot.
"""

import asyncio
import logging
from typing import Any, Protocol

logger = logging.getLogger("uvicorn.error")


class SnapshotCache(Protocol):
    async def get(self, table: str) -> list[dict[str, Any]] | None: ...

    async def put(self, table: str, rows: list[dict[str, Any]]) -> None: ...


class RemoteTableStore(Protocol):
    async def select(self, table: str) -> list[dict[str, Any]]: ...

    async def upsert(self, table: str, item: dict[str, Any], match_key: str = "id") -> dict[str, Any]: ...

    async def delete(self, table: str, record_id: str) -> None: ...


class TableAccessor:
    """Local-first access to remote tables."""

    def __init__(self, cache: SnapshotCache, remote: RemoteTableStore) -> None:
        self.cache = cache
        self.remote = remote
        self._pending: set[asyncio.Task[bool]] = set()
        # Per table: number of the latest refresh started, and of the one last stored
        self._started: dict[str, int] = {}
        self._stored: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def read(self, table: str) -> list[dict[str, Any]]:
        """Return the cached snapshot and schedule a background refresh."""
        try:
            rows = await self.cache.get(table)
        except Exception:
            logger.exception(f"[sync] cache read failed table={table}")
            rows = None
        self._schedule_refresh(table)
        return rows or []

    async def fetch(self, table: str) -> list[dict[str, Any]]:
        """Authoritative read from the remote store. Raises on failure."""
        return await self.remote.select(table)

    async def refresh(self, table: str) -> bool:
        """Refetch a table and replace its snapshot.

        Returns:
            True if the snapshot was replaced, False if the fetch failed or a
            newer refresh already stored its rows.
        """
        generation = self._started.get(table, 0) + 1
        self._started[table] = generation
        try:
            rows = await self.remote.select(table)
        except Exception:
            logger.exception(f"[sync] refresh failed table={table}, keeping cached snapshot")
            return False
        if generation < self._stored.get(table, 0):
            logger.debug(f"[sync] dropped stale refresh table={table} generation={generation}")
            return False
        self._stored[table] = generation
        try:
            await self.cache.put(table, rows)
        except Exception:
            logger.exception(f"[sync] cache write failed table={table}")
            return False
        logger.debug(f"[sync] refreshed table={table} rows={len(rows)}")
        return True

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def write(self, table: str, item: dict[str, Any], match_key: str = "id") -> dict[str, Any]:
        """Upsert an item remotely, keyed by `match_key`.

        Returns:
            The stored row on success; the unwritten input on failure.
        """
        try:
            stored = await self.remote.upsert(table, item, match_key)
        except Exception:
            logger.exception(f"[sync] upsert failed table={table} match_key={match_key}")
            return item
        self._schedule_refresh(table)
        return stored

    async def delete(self, table: str, record_id: str) -> bool:
        """Delete a row remotely. Returns False if the delete failed."""
        try:
            await self.remote.delete(table, record_id)
        except Exception:
            logger.exception(f"[sync] delete failed table={table} id={record_id}")
            return False
        self._schedule_refresh(table)
        return True

    # ------------------------------------------------------------------
    # Background refresh bookkeeping
    # ------------------------------------------------------------------

    def _schedule_refresh(self, table: str) -> None:
        task = asyncio.create_task(self.refresh(table))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @property
    def pending_refreshes(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every in-flight refresh to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
