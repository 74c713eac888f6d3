"""Student portal: reg number + PIN login, results, report cards, receipts."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from school_portal.routes.deps import get_accessor, get_session_store, require_role
from school_portal.routes.errors import api_error, not_found
from school_portal.routes.files import pdf
from school_portal.schemas.payloads import LoginResponse, StudentLoginRequest
from school_portal.schemas.records import ResultRecord, StudentRecord
from school_portal.services.auth import AuthUser, Role, SessionStore
from school_portal.services.directory import authenticate_student
from school_portal.services.documents import (
    ReceiptData,
    format_amount,
    render_receipt,
    render_report_card,
    today_label,
)
from school_portal.services.sync import TableAccessor
from school_portal.settings import Settings, get_settings
from school_portal.stores.tables import RESULTS, STUDENTS

router = APIRouter()

student_only = require_role(Role.STUDENT)


async def _student(accessor: TableAccessor, user: AuthUser) -> dict:
    for row in await accessor.read(STUDENTS):
        if row.get("id") == user.user_id:
            return row
    raise not_found("student", id=user.user_id)


@router.post("/login", response_model=LoginResponse)
async def student_login(
    request: StudentLoginRequest,
    accessor: TableAccessor = Depends(get_accessor),
    sessions: SessionStore = Depends(get_session_store),
) -> LoginResponse:
    student = authenticate_student(await accessor.read(STUDENTS), request.reg_number, request.pin)
    if student is None:
        raise api_error(401, "INVALID_CREDENTIALS", "Invalid Registration Number or PIN")
    user = AuthUser(user_id=str(student["id"]), role=Role.STUDENT, email=student.get("email"))
    token = await sessions.issue(user)
    return LoginResponse(token=token, role=user.role.value, user_id=user.user_id, email=user.email)


@router.get("/me", response_model=StudentRecord)
async def me(
    user: AuthUser = Depends(student_only),
    accessor: TableAccessor = Depends(get_accessor),
) -> StudentRecord:
    return StudentRecord.model_validate(await _student(accessor, user))


@router.get("/results", response_model=list[ResultRecord])
async def my_results(
    user: AuthUser = Depends(student_only),
    accessor: TableAccessor = Depends(get_accessor),
) -> list[ResultRecord]:
    rows = [r for r in await accessor.read(RESULTS) if r.get("student_id") == user.user_id]
    return [ResultRecord.model_validate(r) for r in rows]


@router.get("/results/{result_id}/report-card.pdf")
async def report_card(
    result_id: str,
    user: AuthUser = Depends(student_only),
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> Response:
    student = await _student(accessor, user)
    for row in await accessor.read(RESULTS):
        if row.get("id") == result_id and row.get("student_id") == user.user_id:
            return pdf(render_report_card(row, student, settings), f"{student.get('full_name', 'Student')}_Result.pdf")
    raise not_found("result", id=result_id)


@router.get("/fees/receipt.pdf")
async def fees_receipt(
    user: AuthUser = Depends(student_only),
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> Response:
    """School fees receipt, available once the bursary has marked fees as paid."""
    student = await _student(accessor, user)
    if not student.get("fees_paid"):
        raise api_error(402, "FEES_UNPAID", "School fees have not been paid for this term")

    reg = str(student.get("reg_number", ""))
    stamp = str(int(datetime.now(timezone.utc).timestamp() * 1000))[-4:]
    reference = f"PAY-{reg.replace('/', '-')}-{stamp}"
    data = ReceiptData(
        receipt_type="School Fees Payment Receipt",
        student_name=student.get("full_name", ""),
        reg_no=reg,
        amount=format_amount(settings.school_fee_amount),
        reference=reference,
        date=today_label(),
        term=settings.current_term,
        session=settings.current_session,
    )
    return pdf(render_receipt(data, settings), f"Receipt_{reference}.pdf")
