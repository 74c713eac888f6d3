"""In-process fallbacks for the Redis-backed stores.

Used when Redis cannot be reached at startup, and by the test suite.
"""

import copy
import time
from typing import Any


class MemorySnapshotCache:
    """Table snapshots held in a dict."""

    def __init__(self) -> None:
        self._tables: dict[str, list[dict[str, Any]]] = {}

    async def get(self, table: str) -> list[dict[str, Any]] | None:
        rows = self._tables.get(table)
        return copy.deepcopy(rows) if rows is not None else None

    async def put(self, table: str, rows: list[dict[str, Any]]) -> None:
        self._tables[table] = copy.deepcopy(rows)


class MemorySessionBackend:
    """Session payloads with expiry, held in a dict."""

    def __init__(self) -> None:
        self._items: dict[str, tuple[float, dict[str, Any]]] = {}

    async def get(self, token: str) -> dict[str, Any] | None:
        entry = self._items.get(token)
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at < time.monotonic():
            self._items.pop(token, None)
            return None
        return dict(payload)

    async def set(self, token: str, payload: dict[str, Any], ttl: int) -> None:
        self._items[token] = (time.monotonic() + ttl, dict(payload))

    async def delete(self, token: str) -> None:
        self._items.pop(token, None)
