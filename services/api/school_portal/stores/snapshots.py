"""Redis-backed implementations of the snapshot cache and session backend."""

from typing import Any

from school_portal.stores.redis import (
    delete_session_payload,
    get_session_payload,
    get_table_snapshot,
    set_session_payload,
    set_table_snapshot,
)


class RedisSnapshotCache:
    """Table snapshots stored as JSON strings under `table:<name>`."""

    async def get(self, table: str) -> list[dict[str, Any]] | None:
        return await get_table_snapshot(table)

    async def put(self, table: str, rows: list[dict[str, Any]]) -> None:
        await set_table_snapshot(table, rows)


class RedisSessionBackend:
    """Session payloads stored under `session:<token>` with TTL."""

    async def get(self, token: str) -> dict[str, Any] | None:
        return await get_session_payload(token)

    async def set(self, token: str, payload: dict[str, Any], ttl: int) -> None:
        await set_session_payload(token, payload, ttl)

    async def delete(self, token: str) -> None:
        await delete_session_payload(token)
