"""Teacher dashboard endpoints.

Teachers only see and score students in their assigned classes.
Bulk uploads are sent as the raw .xlsx request body.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from school_portal.routes.deps import get_accessor, get_auth_provider, get_session_store, require_role
from school_portal.routes.errors import api_error, not_found
from school_portal.routes.files import xlsx
from school_portal.schemas.payloads import (
    BulkScoreReport,
    LoginRequest,
    LoginResponse,
    ReportCommentResponse,
    ScoreEntryRequest,
)
from school_portal.schemas.records import ResultRecord, StudentRecord
from school_portal.services.auth import AuthError, AuthUser, Role, SessionStore, StubAuthProvider
from school_portal.services.directory import find_student_by_reg
from school_portal.services.grading import ScoreError, apply_bulk_scores, record_subject_score
from school_portal.services.report_comment import generate_report_comment
from school_portal.services.spreadsheets import SpreadsheetError, parse_result_upload, result_template_workbook
from school_portal.services.sync import TableAccessor
from school_portal.settings import Settings, get_settings
from school_portal.stores.tables import RESULTS, STUDENTS, TEACHERS

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

teacher_only = require_role(Role.TEACHER)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024


async def _teacher(accessor: TableAccessor, user: AuthUser) -> dict:
    for row in await accessor.read(TEACHERS):
        if row.get("id") == user.user_id:
            return row
    raise not_found("teacher", id=user.user_id)


def _check_class(teacher: dict, class_level: str | None) -> None:
    if class_level not in (teacher.get("assigned_classes") or []):
        raise api_error(
            403,
            "CLASS_NOT_ASSIGNED",
            "You are not assigned to this class",
            {"class_level": class_level},
        )


@router.post("/login", response_model=LoginResponse)
async def teacher_login(
    request: LoginRequest,
    accessor: TableAccessor = Depends(get_accessor),
    provider: StubAuthProvider = Depends(get_auth_provider),
    sessions: SessionStore = Depends(get_session_store),
) -> LoginResponse:
    try:
        user = provider.sign_in_teacher(await accessor.read(TEACHERS), request.email, request.password)
    except AuthError as e:
        raise api_error(401, "INVALID_CREDENTIALS", str(e))
    token = await sessions.issue(user)
    return LoginResponse(token=token, role=user.role.value, user_id=user.user_id, email=user.email)


@router.get("/students", response_model=list[StudentRecord])
async def class_students(
    class_level: str = Query(alias="class", min_length=1),
    user: AuthUser = Depends(teacher_only),
    accessor: TableAccessor = Depends(get_accessor),
) -> list[StudentRecord]:
    _check_class(await _teacher(accessor, user), class_level)
    rows = [s for s in await accessor.read(STUDENTS) if s.get("class_level") == class_level]
    return [StudentRecord.model_validate(s) for s in rows]


@router.get("/students/lookup", response_model=StudentRecord)
async def lookup_student(
    reg: str = Query(min_length=1),
    user: AuthUser = Depends(teacher_only),
    accessor: TableAccessor = Depends(get_accessor),
) -> StudentRecord:
    student = find_student_by_reg(await accessor.read(STUDENTS), reg)
    if student is None:
        raise not_found("student", reg_number=reg)
    return StudentRecord.model_validate(student)


@router.post("/scores", response_model=ResultRecord)
async def enter_score(
    request: ScoreEntryRequest,
    user: AuthUser = Depends(teacher_only),
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> ResultRecord:
    teacher = await _teacher(accessor, user)
    student = find_student_by_reg(await accessor.read(STUDENTS), request.reg_number)
    if student is None:
        raise not_found("student", reg_number=request.reg_number)
    _check_class(teacher, student.get("class_level"))

    try:
        row = await record_subject_score(
            accessor,
            student,
            request.subject,
            request.ca,
            request.exam,
            request.term or settings.current_term,
            request.session or settings.current_session,
        )
    except ScoreError as e:
        raise api_error(422, "INVALID_SCORE", str(e))
    return ResultRecord.model_validate(row)


@router.get("/template.xlsx")
async def result_template(
    class_level: str | None = Query(default=None, alias="class"),
    user: AuthUser = Depends(teacher_only),
    accessor: TableAccessor = Depends(get_accessor),
) -> Response:
    if class_level:
        _check_class(await _teacher(accessor, user), class_level)
    content = result_template_workbook(await accessor.read(STUDENTS), class_level)
    return xlsx(content, f"{class_level or 'Class'}_Result_Template.xlsx")


async def _upload(request: Request) -> bytes:
    data = await request.body()
    if not data:
        raise api_error(400, "EMPTY_UPLOAD", "Upload an .xlsx file as the request body")
    if len(data) > MAX_UPLOAD_BYTES:
        raise api_error(413, "UPLOAD_TOO_LARGE", "File is too large")
    return data


@router.post("/scores/bulk/preview")
async def preview_bulk(
    request: Request,
    user: AuthUser = Depends(teacher_only),
) -> list[dict]:
    """Parse an uploaded sheet without saving anything."""
    try:
        rows = parse_result_upload(await _upload(request))
    except SpreadsheetError as e:
        raise api_error(422, "INVALID_SPREADSHEET", str(e))
    return [
        {
            "regNumber": r.reg_number,
            "studentName": r.student_name,
            "ca": r.ca,
            "exam": r.exam,
            "total": r.total,
            "grade": r.grade,
            "remark": r.remark,
            "isValid": r.is_valid,
        }
        for r in rows
    ]


@router.post("/scores/bulk", response_model=BulkScoreReport)
async def save_bulk(
    request: Request,
    subject: str = Query(min_length=1),
    term: str | None = Query(default=None),
    session: str | None = Query(default=None),
    user: AuthUser = Depends(teacher_only),
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> BulkScoreReport:
    teacher = await _teacher(accessor, user)
    try:
        rows = parse_result_upload(await _upload(request))
    except SpreadsheetError as e:
        raise api_error(422, "INVALID_SPREADSHEET", str(e))

    assigned = set(teacher.get("assigned_classes") or [])
    students = [s for s in await accessor.read(STUDENTS) if s.get("class_level") in assigned]
    report = await apply_bulk_scores(
        accessor,
        rows,
        students,
        subject,
        term or settings.current_term,
        session or settings.current_session,
    )
    logger.info(f"[teacher] bulk upload subject={subject} saved={report.saved} rejected={len(report.rejected)}")
    return BulkScoreReport(saved=report.saved, rejected=report.rejected)


@router.get("/results/{result_id}/comment", response_model=ReportCommentResponse)
async def report_comment(
    result_id: str,
    user: AuthUser = Depends(teacher_only),
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> ReportCommentResponse:
    teacher = await _teacher(accessor, user)
    for row in await accessor.read(RESULTS):
        if row.get("id") == result_id:
            _check_class(teacher, row.get("class_level"))
            comment = await generate_report_comment(
                settings,
                row.get("student_name") or "the student",
                row.get("scores") or [],
                average=row.get("average"),
                total_score=row.get("total_score"),
            )
            return ReportCommentResponse(comment=comment)
    raise not_found("result", id=result_id)
