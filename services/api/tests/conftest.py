"""Shared fixtures: in-memory remote tables, accessor, app client."""

import asyncio
import copy
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from school_portal.main import app
from school_portal.models.ids import generate_record_id
from school_portal.services.auth import SessionStore, StubAuthProvider
from school_portal.services.sync import TableAccessor
from school_portal.settings import DEFAULT_DEMO_ACCOUNTS
from school_portal.stores.memory import MemorySessionBackend, MemorySnapshotCache


class FakeRemote:
    """Remote table store held in memory.

    `fail_reads` / `fail_writes` make the matching calls raise; `fail_tables`
    does the same for writes to the named tables only. When `gate` is set,
    select() waits on it before answering. hold_next_select() stalls only the
    next select(), which answers with the rows as they were when it was called.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.fail_tables: set[str] = set()
        self.gate: asyncio.Event | None = None
        self.holds: list[asyncio.Event] = []
        self._next_holds: list[asyncio.Event] = []
        self.select_calls = 0
        self.upserts: list[tuple[str, dict[str, Any], str]] = []

    def seed(self, table: str, rows: list[dict[str, Any]]) -> None:
        self.tables[table] = [copy.deepcopy(r) for r in rows]

    def hold_next_select(self) -> asyncio.Event:
        release = asyncio.Event()
        self.holds.append(release)
        self._next_holds.append(release)
        return release

    async def select(self, table: str) -> list[dict[str, Any]]:
        self.select_calls += 1
        if self._next_holds:
            release = self._next_holds.pop(0)
            rows = copy.deepcopy(self.tables.get(table, []))
            await release.wait()
            return rows
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_reads:
            raise ConnectionError("database unreachable")
        return copy.deepcopy(self.tables.get(table, []))

    async def upsert(self, table: str, item: dict[str, Any], match_key: str = "id") -> dict[str, Any]:
        if self.fail_writes or table in self.fail_tables:
            raise ConnectionError("database unreachable")
        self.upserts.append((table, copy.deepcopy(item), match_key))
        rows = self.tables.setdefault(table, [])
        key_value = item.get(match_key)
        for row in rows:
            if key_value is not None and row.get(match_key) == key_value:
                row.update({k: v for k, v in item.items() if k != "id"})
                return copy.deepcopy(row)
        row = {**copy.deepcopy(item), "id": item.get("id") or generate_record_id()}
        rows.append(row)
        return copy.deepcopy(row)

    async def delete(self, table: str, record_id: str) -> None:
        if self.fail_writes:
            raise ConnectionError("database unreachable")
        self.tables[table] = [r for r in self.tables.get(table, []) if r.get("id") != record_id]


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
async def accessor(remote: FakeRemote):
    acc = TableAccessor(cache=MemorySnapshotCache(), remote=remote)
    yield acc
    if remote.gate is not None:
        remote.gate.set()
    for release in remote.holds:
        release.set()
    await acc.drain()


@pytest.fixture
def seed(accessor: TableAccessor, remote: FakeRemote):
    """Seed a remote table and pull it into the snapshot cache."""

    async def _seed(table: str, rows: list[dict[str, Any]]) -> None:
        remote.seed(table, rows)
        await accessor.refresh(table)

    return _seed


@pytest.fixture
async def client(accessor: TableAccessor):
    """Create test client wired to the in-memory accessor."""
    app.state.accessor = accessor
    app.state.sessions = SessionStore(MemorySessionBackend(), ttl=3600)
    app.state.auth_provider = StubAuthProvider(DEFAULT_DEMO_ACCOUNTS)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def login(client: AsyncClient):
    """Sign in and return an Authorization header."""

    async def _login(path: str, body: dict[str, Any]) -> dict[str, str]:
        response = await client.post(path, json=body)
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
