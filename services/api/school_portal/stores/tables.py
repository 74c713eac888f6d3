"""Table-keyed repository over PostgreSQL.

The rest of the app treats the database as a set of named tables supporting
select-all, upsert-by-field and delete-by-id. Rows cross this boundary as
plain dicts keyed by column name.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.models import Application, Post, SchoolClass, Student, Teacher, TermResult
from school_portal.models.ids import generate_record_id, utcnow
from school_portal.stores.postgres import Base, get_session

# Table names used across services and routes
STUDENTS = "students"
TEACHERS = "teachers"
CLASSES = "classes"
APPLICATIONS = "applications"
RESULTS = "results"
POSTS = "posts"

TABLE_MODELS: dict[str, type[Base]] = {
    STUDENTS: Student,
    TEACHERS: Teacher,
    CLASSES: SchoolClass,
    APPLICATIONS: Application,
    RESULTS: TermResult,
    POSTS: Post,
}

_SYSTEM_COLUMNS = {"created_at", "updated_at"}


class UnknownTableError(KeyError):
    pass


def model_for(table: str) -> type[Base]:
    try:
        return TABLE_MODELS[table]
    except KeyError:
        raise UnknownTableError(table) from None


def column_names(model: type[Base]) -> list[str]:
    return [c.key for c in model.__table__.columns]


def row_to_dict(row: Base) -> dict[str, Any]:
    """Serialize an ORM row to a JSON-friendly dict."""
    out: dict[str, Any] = {}
    for name in column_names(type(row)):
        value = getattr(row, name)
        if isinstance(value, datetime):
            value = value.isoformat()
        out[name] = value
    return out


def _writable_values(model: type[Base], item: dict[str, Any]) -> dict[str, Any]:
    allowed = set(column_names(model)) - _SYSTEM_COLUMNS
    return {k: v for k, v in item.items() if k in allowed}


class PostgresTableStore:
    """Remote table store backed by async SQLAlchemy sessions."""

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]] = get_session,
    ) -> None:
        self._session_factory = session_factory

    async def select(self, table: str) -> list[dict[str, Any]]:
        model = model_for(table)
        async with self._session_factory() as session:
            result = await session.execute(select(model).order_by(model.created_at))
            return [row_to_dict(r) for r in result.scalars().all()]

    async def upsert(self, table: str, item: dict[str, Any], match_key: str = "id") -> dict[str, Any]:
        """Insert-or-update the row whose `match_key` column equals the item's value."""
        model = model_for(table)
        if match_key not in column_names(model):
            raise ValueError(f"{table} has no column {match_key!r}")

        values = _writable_values(model, item)
        now = utcnow()

        async with self._session_factory() as session:
            existing = None
            key_value = values.get(match_key)
            if key_value is not None:
                result = await session.execute(
                    select(model).where(getattr(model, match_key) == key_value)
                )
                existing = result.scalars().first()

            if existing is None:
                values["id"] = values.get("id") or generate_record_id()
                row = model(**values, created_at=now, updated_at=now)
                session.add(row)
            else:
                # The primary key never changes on update
                values.pop("id", None)
                for name, value in values.items():
                    setattr(existing, name, value)
                existing.updated_at = now
                row = existing

            await session.flush()
            return row_to_dict(row)

    async def delete(self, table: str, record_id: str) -> None:
        model = model_for(table)
        async with self._session_factory() as session:
            await session.execute(delete(model).where(model.id == record_id))
