"""Admin endpoints: records management, admissions decisions, ranking, exports.

All endpoints require an ADMIN session.
"""

from datetime import date
import json
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from school_portal.routes.deps import get_accessor, require_role
from school_portal.routes.errors import api_error, not_found
from school_portal.routes.files import attachment, pdf, xlsx
from school_portal.schemas.payloads import ComputeRanksRequest, ComputeRanksResponse, OverviewStats
from school_portal.schemas.records import (
    ApplicationRecord,
    ClassRecord,
    PostRecord,
    ResultRecord,
    StudentRecord,
    TeacherRecord,
)
from school_portal.services.admissions import (
    AdmissionError,
    StudentNotSaved,
    approve_application,
    reject_application,
)
from school_portal.services.auth import Role
from school_portal.services.directory import (
    ValidationFailed,
    backup_filename,
    ensure_default_classes,
    export_backup,
    overview,
    save_student,
)
from school_portal.services.documents import render_admission_letter
from school_portal.services.ranking import compute_ranks_for_classes
from school_portal.services.spreadsheets import fee_report_workbook, students_workbook
from school_portal.services.sync import TableAccessor
from school_portal.settings import Settings, get_settings
from school_portal.stores.tables import APPLICATIONS, CLASSES, POSTS, RESULTS, STUDENTS, TEACHERS

router = APIRouter(dependencies=[Depends(require_role(Role.ADMIN))])
logger = logging.getLogger("uvicorn.error")


@router.get("/overview", response_model=OverviewStats)
async def get_overview(
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> OverviewStats:
    stats = overview(
        await accessor.read(STUDENTS),
        await accessor.read(TEACHERS),
        await accessor.read(APPLICATIONS),
        await ensure_default_classes(accessor, settings.default_classes),
    )
    return OverviewStats(**stats)


# ============================================================
# Students
# ============================================================


@router.get("/students", response_model=list[StudentRecord])
async def list_students(accessor: TableAccessor = Depends(get_accessor)) -> list[StudentRecord]:
    return [StudentRecord.model_validate(r) for r in await accessor.read(STUDENTS)]


@router.post("/students", response_model=StudentRecord)
async def upsert_student(
    student: StudentRecord,
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> StudentRecord:
    try:
        row = await save_student(accessor, student, settings.reg_number_prefix)
    except ValidationFailed as e:
        raise api_error(422, "INVALID_REG_NUMBER", str(e), {"reg_number": student.reg_number})
    return StudentRecord.model_validate(row)


@router.delete("/students/{record_id}")
async def delete_student(record_id: str, accessor: TableAccessor = Depends(get_accessor)) -> dict[str, bool]:
    return {"ok": await accessor.delete(STUDENTS, record_id)}


@router.get("/students/{record_id}/admission-letter.pdf")
async def admission_letter(
    record_id: str,
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> Response:
    for row in await accessor.read(STUDENTS):
        if row.get("id") == record_id:
            name = str(row.get("full_name", "Student")).replace(" ", "_")
            return pdf(
                render_admission_letter(row, settings, settings.current_session),
                f"Admission_Letter_{name}.pdf",
            )
    raise not_found("student", id=record_id)


# ============================================================
# Teachers, classes, posts
# ============================================================


@router.get("/teachers", response_model=list[TeacherRecord])
async def list_teachers(accessor: TableAccessor = Depends(get_accessor)) -> list[TeacherRecord]:
    return [TeacherRecord.model_validate(r) for r in await accessor.read(TEACHERS)]


@router.post("/teachers", response_model=TeacherRecord)
async def upsert_teacher(teacher: TeacherRecord, accessor: TableAccessor = Depends(get_accessor)) -> TeacherRecord:
    return TeacherRecord.model_validate(await accessor.write(TEACHERS, teacher.to_row()))


@router.delete("/teachers/{record_id}")
async def delete_teacher(record_id: str, accessor: TableAccessor = Depends(get_accessor)) -> dict[str, bool]:
    return {"ok": await accessor.delete(TEACHERS, record_id)}


@router.get("/classes", response_model=list[ClassRecord])
async def list_classes(
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> list[ClassRecord]:
    rows = await ensure_default_classes(accessor, settings.default_classes)
    return [ClassRecord.model_validate(r) for r in rows]


@router.post("/classes", response_model=ClassRecord)
async def upsert_class(school_class: ClassRecord, accessor: TableAccessor = Depends(get_accessor)) -> ClassRecord:
    return ClassRecord.model_validate(await accessor.write(CLASSES, school_class.to_row()))


@router.delete("/classes/{record_id}")
async def delete_class(record_id: str, accessor: TableAccessor = Depends(get_accessor)) -> dict[str, bool]:
    return {"ok": await accessor.delete(CLASSES, record_id)}


@router.get("/posts", response_model=list[PostRecord])
async def list_posts(accessor: TableAccessor = Depends(get_accessor)) -> list[PostRecord]:
    return [PostRecord.model_validate(r) for r in await accessor.read(POSTS)]


@router.post("/posts", response_model=PostRecord)
async def upsert_post(post: PostRecord, accessor: TableAccessor = Depends(get_accessor)) -> PostRecord:
    return PostRecord.model_validate(await accessor.write(POSTS, post.to_row()))


@router.delete("/posts/{record_id}")
async def delete_post(record_id: str, accessor: TableAccessor = Depends(get_accessor)) -> dict[str, bool]:
    return {"ok": await accessor.delete(POSTS, record_id)}


# ============================================================
# Applications
# ============================================================


@router.get("/applications", response_model=list[ApplicationRecord])
async def list_applications(
    status: str | None = Query(default=None, pattern="^(Pending|Approved|Rejected)$"),
    accessor: TableAccessor = Depends(get_accessor),
) -> list[ApplicationRecord]:
    rows = await accessor.read(APPLICATIONS)
    if status:
        rows = [r for r in rows if r.get("status") == status]
    return [ApplicationRecord.model_validate(r) for r in rows]


async def _application(accessor: TableAccessor, user_id: str) -> ApplicationRecord:
    for row in await accessor.fetch(APPLICATIONS):
        if row.get("user_id") == user_id:
            return ApplicationRecord.model_validate(row)
    raise not_found("application", user_id=user_id)


@router.post("/applications/{user_id}/approve", response_model=StudentRecord)
async def approve(
    user_id: str,
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> StudentRecord:
    """Admit an applicant. The response carries the new reg number and PIN."""
    application = await _application(accessor, user_id)
    try:
        student = await approve_application(accessor, application, settings.reg_number_prefix)
    except StudentNotSaved as e:
        raise api_error(503, "STUDENT_NOT_SAVED", str(e), {"user_id": user_id})
    except AdmissionError as e:
        raise api_error(409, "APPLICATION_CLOSED", str(e), {"user_id": user_id})
    return StudentRecord.model_validate(student)


@router.post("/applications/{user_id}/reject", response_model=ApplicationRecord)
async def reject(user_id: str, accessor: TableAccessor = Depends(get_accessor)) -> ApplicationRecord:
    application = await _application(accessor, user_id)
    try:
        row = await reject_application(accessor, application)
    except AdmissionError as e:
        raise api_error(409, "APPLICATION_CLOSED", str(e), {"user_id": user_id})
    return ApplicationRecord.model_validate({**application.to_row(), **row})


# ============================================================
# Results + ranking
# ============================================================


@router.get("/results", response_model=list[ResultRecord])
async def list_results(
    class_level: str | None = Query(default=None, alias="class"),
    term: str | None = Query(default=None),
    session: str | None = Query(default=None),
    accessor: TableAccessor = Depends(get_accessor),
) -> list[ResultRecord]:
    rows = await accessor.read(RESULTS)
    if class_level:
        rows = [r for r in rows if r.get("class_level") == class_level]
    if term:
        rows = [r for r in rows if r.get("term") == term]
    if session:
        rows = [r for r in rows if r.get("session") == session]
    return [ResultRecord.model_validate(r) for r in rows]


@router.post("/ranks", response_model=ComputeRanksResponse)
async def compute_ranks(
    request: ComputeRanksRequest,
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> ComputeRanksResponse:
    """Compute class positions for every class (or the listed ones)."""
    term = request.term or settings.current_term
    session = request.session or settings.current_session
    classes = request.classes
    if not classes:
        rows = await ensure_default_classes(accessor, settings.default_classes)
        classes = [str(c["name"]) for c in rows]

    try:
        ranked = await compute_ranks_for_classes(accessor, classes, term, session)
    except Exception:
        logger.exception("[admin] ranking failed")
        raise api_error(503, "RANKING_FAILED", "Could not load results from the database")
    return ComputeRanksResponse(term=term, session=session, ranked=ranked)


# ============================================================
# Exports
# ============================================================


@router.get("/exports/students.xlsx")
async def export_students(accessor: TableAccessor = Depends(get_accessor)) -> Response:
    return xlsx(students_workbook(await accessor.read(STUDENTS)), f"IMST_Students_{date.today().isoformat()}.xlsx")


@router.get("/exports/fees.xlsx")
async def export_fee_report(
    class_level: str = Query(default="All", alias="class"),
    term: str | None = Query(default=None),
    session: str | None = Query(default=None),
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> Response:
    term = term or settings.current_term
    session = session or settings.current_session
    content = fee_report_workbook(await accessor.read(STUDENTS), class_level, term, session)
    return xlsx(content, f"IMST_FeeReport_{class_level}_{term.replace(' ', '_')}.xlsx")


@router.get("/backup")
async def backup(
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Download a JSON backup of applications, posts and students."""
    payload = await export_backup(accessor, settings.backup_owner)
    content = json.dumps(payload, indent=2, default=str).encode("utf-8")
    return attachment(content, backup_filename(), "application/json")
