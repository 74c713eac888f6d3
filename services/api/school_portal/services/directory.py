"""Student/staff/class directory helpers.

Lookups operate on table snapshots returned by the accessor; writes go through
the accessor so the snapshot is refreshed afterwards.
"""

import base64
from datetime import datetime, timezone
import logging
import re
from typing import Any

from school_portal.schemas.records import StudentRecord
from school_portal.services.sync import TableAccessor
from school_portal.stores.tables import APPLICATIONS, CLASSES, POSTS, STUDENTS

logger = logging.getLogger("uvicorn.error")


class ValidationFailed(ValueError):
    pass


def reg_number_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(prefix)}/\d{{4}}/\d{{3}}$", re.IGNORECASE)


def is_valid_reg_number(reg_number: str, prefix: str) -> bool:
    return bool(reg_number_pattern(prefix).match(reg_number.strip()))


def find_student_by_reg(students: list[dict[str, Any]], reg_number: str) -> dict[str, Any] | None:
    """Case-insensitive lookup by registration number."""
    wanted = reg_number.strip().upper()
    for student in students:
        if str(student.get("reg_number", "")).upper() == wanted:
            return student
    return None


def authenticate_student(
    students: list[dict[str, Any]],
    reg_number: str,
    pin: str,
) -> dict[str, Any] | None:
    """Student portal login: reg number (any case) + exact PIN."""
    student = find_student_by_reg(students, reg_number)
    if student is None or str(student.get("pin")) != pin:
        return None
    return student


async def save_student(accessor: TableAccessor, student: StudentRecord, prefix: str) -> dict[str, Any]:
    """Validate and upsert a student record."""
    if not is_valid_reg_number(student.reg_number, prefix):
        raise ValidationFailed(
            f"Invalid Reg Number format! Please use {prefix}/YYYY/NNN (e.g., {prefix}/2024/001)"
        )
    return await accessor.write(STUDENTS, student.to_row())


def class_id(name: str) -> str:
    """Stable id for a default class (url-safe base64 of its name)."""
    return base64.urlsafe_b64encode(name.encode("utf-8")).decode("ascii")


async def ensure_default_classes(accessor: TableAccessor, names: list[str]) -> list[dict[str, Any]]:
    """Seed the classes table when it is empty.

    Returns:
        The class list (existing rows, or the defaults just written).
    """
    existing = await accessor.read(CLASSES)
    if existing:
        return existing

    defaults = [{"id": class_id(n), "name": n} for n in names]
    for row in defaults:
        await accessor.write(CLASSES, row)
    logger.info(f"[directory] seeded {len(defaults)} default classes")
    return defaults


def overview(
    students: list[dict[str, Any]],
    teachers: list[dict[str, Any]],
    applications: list[dict[str, Any]],
    classes: list[dict[str, Any]],
) -> dict[str, int]:
    return {
        "total_students": len(students),
        "pending_applications": sum(1 for a in applications if a.get("status") == "Pending"),
        "active_staff": len(teachers),
        "classes": len(classes),
    }


async def export_backup(accessor: TableAccessor, owner: str) -> dict[str, Any]:
    """JSON backup of the tables an admin restores by hand."""
    return {
        "applications": await accessor.read(APPLICATIONS),
        "posts": await accessor.read(POSTS),
        "students": await accessor.read(STUDENTS),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "owner": owner,
    }


def backup_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"IMST_Database_Backup_{now.date().isoformat()}.json"
