#!/usr/bin/env python3
"""Seed database with initial data.

Creates:
- The default class levels (JSS 1 - SSS 3)
- A demo teacher assigned to JSS 1 and JSS 2
- Two demo students with portal PINs
- Welcome posts for the public notice board

The script is idempotent: every row is upserted on a natural key
(class name, teacher email, reg number, post title).

Usage (after `alembic upgrade head`):
    cd services/api
    python -m scripts.seed
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402

from school_portal.services.directory import class_id  # noqa: E402
from school_portal.settings import get_settings  # noqa: E402
from school_portal.stores.postgres import close_db, init_db, ping_db  # noqa: E402
from school_portal.stores.tables import CLASSES, POSTS, STUDENTS, TEACHERS, PostgresTableStore  # noqa: E402

load_dotenv()

# ============================================================
# Demo data
# ============================================================

TEACHERS_SEED = [
    {
        "full_name": "Malam Ibrahim Yusuf",
        "email": "teacher@school.com",
        "assigned_classes": ["JSS 1", "JSS 2"],
        "subjects": ["Mathematics", "Basic Science"],
    },
]

STUDENTS_SEED = [
    {
        "full_name": "Ahmed Musa",
        "reg_number": "IMST/2024/001",
        "pin": "12345",
        "class_level": "JSS 1",
        "guardian_phone": "08012345678",
        "fees_paid": True,
        "status": "Admitted",
    },
    {
        "full_name": "Fatima Abdullahi",
        "reg_number": "IMST/2024/002",
        "pin": "54321",
        "class_level": "JSS 2",
        "guardian_phone": "08087654321",
        "fees_paid": False,
        "status": "Admitted",
    },
]

POSTS_SEED = [
    {
        "title": "Admissions Open",
        "content": "Admission forms for the new session are available online. Pay the application fee and complete the form.",
        "date": "2024-09-01",
    },
    {
        "title": "Resumption Date",
        "content": "First term resumes on Monday. Students should report in full uniform.",
        "date": "2024-09-09",
    },
]


async def seed_database() -> None:
    """Seed database with initial data."""
    settings = get_settings()
    await init_db()
    await ping_db()

    store = PostgresTableStore()

    try:
        print("Seeding database...")

        print("\nClasses:")
        for name in settings.default_classes:
            await store.upsert(CLASSES, {"id": class_id(name), "name": name}, match_key="name")
            print(f"  + {name}")

        print("\nTeachers:")
        for teacher in TEACHERS_SEED:
            row = await store.upsert(TEACHERS, teacher, match_key="email")
            print(f"  + {row['email']} ({', '.join(row['assigned_classes'])})")

        print("\nStudents:")
        for student in STUDENTS_SEED:
            row = await store.upsert(STUDENTS, student, match_key="reg_number")
            print(f"  + {row['reg_number']} {row['full_name']} pin={row['pin']}")

        print("\nPosts:")
        for post in POSTS_SEED:
            row = await store.upsert(POSTS, post, match_key="title")
            print(f"  + {row['title']}")

        print("\nDatabase seeded successfully!")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(seed_database())
