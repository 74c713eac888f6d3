"""Admissions workflow.

Flow:
1. Applicant signs in and pays the application fee on the hosted checkout page
2. The gateway redirects back with ?reference=... (or ?trxref=...); the
   reference is stored on the application (status Pending)
3. Applicant submits the full form
4. Admin approves (application -> student, reg number + PIN issued) or rejects

Security gap: a reference string in the return URL is taken as proof of
payment. Nothing verifies it with the gateway.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
import logging
import secrets
from typing import Any

from school_portal.schemas.records import ApplicationRecord, StudentRecord
from school_portal.services.sync import TableAccessor
from school_portal.stores.tables import APPLICATIONS, STUDENTS

logger = logging.getLogger("uvicorn.error")

MIN_MANUAL_REFERENCE_LENGTH = 6
TERMINAL_STATUSES = {"Approved", "Rejected"}


class AdmissionError(RuntimeError):
    pass


class StudentNotSaved(AdmissionError):
    """The student row for an approval could not be written."""


def reference_from_return_params(params: Mapping[str, str]) -> str | None:
    """Payment reference from the gateway return URL query string."""
    reference = params.get("reference") or params.get("trxref")
    if reference and reference.strip():
        return reference.strip()
    return None


def validate_manual_reference(reference: str) -> str:
    """Manually pasted references must be longer than 5 characters."""
    reference = reference.strip()
    if len(reference) < MIN_MANUAL_REFERENCE_LENGTH:
        raise AdmissionError("Please enter a valid Paystack reference number.")
    return reference


async def get_application(accessor: TableAccessor, user_id: str) -> dict[str, Any] | None:
    rows = await accessor.fetch(APPLICATIONS)
    for row in rows:
        if row.get("user_id") == user_id:
            return row
    return None


async def record_payment_reference(accessor: TableAccessor, user_id: str, reference: str) -> dict[str, Any]:
    """Attach a payment reference to the applicant's application.

    Raises:
        AdmissionError: the application was already approved or rejected.
    """
    existing = await get_application(accessor, user_id)
    if existing and existing.get("status") in TERMINAL_STATUSES:
        raise AdmissionError(f"Application already {existing['status'].lower()}")

    logger.info(f"[admissions] payment reference recorded user_id={user_id}")
    return await accessor.write(
        APPLICATIONS,
        {"user_id": user_id, "payment_reference": reference, "status": "Pending"},
        match_key="user_id",
    )


async def submit_application(
    accessor: TableAccessor,
    user_id: str,
    form: Mapping[str, Any],
    payment_reference: str | None,
) -> dict[str, Any]:
    """Save the full application form. Requires a payment reference."""
    if not payment_reference:
        raise AdmissionError("Please complete the application fee payment first.")

    existing = await get_application(accessor, user_id)
    if existing and existing.get("status") in TERMINAL_STATUSES:
        raise AdmissionError(f"Application already {existing['status'].lower()}")

    record = ApplicationRecord(
        **dict(form),
        user_id=user_id,
        payment_reference=payment_reference,
        status="Pending",
    )
    return await accessor.write(APPLICATIONS, record.to_row(), match_key="user_id")


def generate_reg_number(prefix: str, year: int, taken: set[str]) -> str:
    """Random `<PREFIX>/<YYYY>/<NNN>` not already in `taken` (compared upper-case)."""
    free = [c for c in (f"{prefix}/{year}/{n:03d}" for n in range(1000)) if c.upper() not in taken]
    if not free:
        raise AdmissionError(f"No free registration numbers left for {year}")
    return secrets.choice(free)


def generate_pin() -> str:
    """5-digit portal PIN."""
    return str(10000 + secrets.randbelow(90000))


def student_from_application(
    application: ApplicationRecord,
    reg_number: str,
    pin: str,
) -> StudentRecord:
    """Promote an application to a student record."""
    if not application.full_name or not application.class_applied:
        raise AdmissionError("Application is missing the applicant name or class")
    return StudentRecord(
        full_name=application.full_name,
        reg_number=reg_number,
        pin=pin,
        class_level=application.class_applied,
        guardian_phone=application.phone or "",
        fees_paid=False,
        photo_url=application.photo_url,
        email=application.email,
        application_date=application.created_at,
        date_of_birth=application.date_of_birth,
        address=application.address,
        status="Admitted",
    )


def _ensure_open(application: ApplicationRecord) -> None:
    if application.status in TERMINAL_STATUSES:
        raise AdmissionError(f"Application already {application.status.lower()}")


async def approve_application(
    accessor: TableAccessor,
    application: ApplicationRecord,
    prefix: str,
    year: int | None = None,
) -> dict[str, Any]:
    """Admit the applicant.

    Returns:
        The new student record (with reg number and PIN to hand to the parents).
    """
    _ensure_open(application)
    year = year or datetime.now(timezone.utc).year

    students = await accessor.fetch(STUDENTS)
    taken = {str(s.get("reg_number", "")).upper() for s in students}
    student = student_from_application(application, generate_reg_number(prefix, year, taken), generate_pin())

    row = student.to_row()
    stored = await accessor.write(STUDENTS, row)
    if stored is row:
        # The write failed and handed back its input; leave the application open
        raise StudentNotSaved("Could not save the student record, try again")
    await accessor.write(
        APPLICATIONS,
        {"user_id": application.user_id, "status": "Approved"},
        match_key="user_id",
    )
    logger.info(f"[admissions] approved user_id={application.user_id} reg={student.reg_number}")
    return stored


async def reject_application(accessor: TableAccessor, application: ApplicationRecord) -> dict[str, Any]:
    _ensure_open(application)
    logger.info(f"[admissions] rejected user_id={application.user_id}")
    return await accessor.write(
        APPLICATIONS,
        {"user_id": application.user_id, "status": "Rejected"},
        match_key="user_id",
    )
