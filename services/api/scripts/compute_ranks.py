#!/usr/bin/env python3
"""End-of-term ranking job (Railway Cron or manual run).

For every class, ranks the result sheets of the given term and session by
total score and writes position + class_population back to each record.

Run (local / Railway):
  cd services/api
  python -m scripts.compute_ranks

Optional env vars:
  RANK_TERM="1st Term"          (default: CURRENT_TERM)
  RANK_SESSION="2024/2025"      (default: CURRENT_SESSION)
  RANK_CLASSES="JSS 1,JSS 2"    (default: every class in the classes table)
"""

import asyncio
import os
import sys

# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from school_portal.services.directory import ensure_default_classes  # noqa: E402
from school_portal.services.ranking import compute_ranks_for_classes  # noqa: E402
from school_portal.services.sync import TableAccessor  # noqa: E402
from school_portal.settings import get_settings  # noqa: E402
from school_portal.stores.memory import MemorySnapshotCache  # noqa: E402
from school_portal.stores.postgres import close_db, init_db, ping_db  # noqa: E402
from school_portal.stores.redis import close_redis, init_redis  # noqa: E402
from school_portal.stores.snapshots import RedisSnapshotCache  # noqa: E402
from school_portal.stores.tables import CLASSES, PostgresTableStore  # noqa: E402


def _parse_csv_env(name: str) -> list[str]:
    raw = os.getenv(name, "")
    return [p.strip() for p in raw.split(",") if p.strip()]


async def main() -> None:
    # Same connections as the API lifespan, for a one-off run
    settings = get_settings()
    await init_db()
    await ping_db()
    cache = RedisSnapshotCache()
    try:
        await init_redis()
    except Exception:
        # Ranking reads and writes Postgres directly; Redis only holds snapshots
        cache = MemorySnapshotCache()

    accessor = TableAccessor(cache=cache, remote=PostgresTableStore())
    try:
        term = os.getenv("RANK_TERM") or settings.current_term
        session = os.getenv("RANK_SESSION") or settings.current_session
        classes = _parse_csv_env("RANK_CLASSES")
        if not classes:
            await accessor.refresh(CLASSES)
            classes = [str(c["name"]) for c in await ensure_default_classes(accessor, settings.default_classes)]

        ranked = await compute_ranks_for_classes(accessor, classes, term, session)
        await accessor.drain()

        # Final output for Railway logs
        print({"ok": True, "term": term, "session": session, "ranked": ranked})
    finally:
        await close_redis()
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
