"""Admissions endpoints for signed-in applicants.

GET  /payment-return        -> gateway redirect target (?reference= or ?trxref=)
POST /payment-reference     -> manual reference entry
GET  /application           -> current application
POST /application           -> submit the form
GET  /application/form.pdf  -> printable form
GET  /application/receipt.pdf -> application fee receipt
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from school_portal.routes.deps import get_accessor, require_role
from school_portal.routes.errors import api_error, not_found
from school_portal.routes.files import pdf
from school_portal.schemas.payloads import ApplicationForm, ManualReferenceRequest
from school_portal.schemas.records import ApplicationRecord
from school_portal.services.admissions import (
    AdmissionError,
    get_application,
    record_payment_reference,
    reference_from_return_params,
    submit_application,
    validate_manual_reference,
)
from school_portal.services.auth import AuthUser, Role
from school_portal.services.documents import (
    ReceiptData,
    format_amount,
    render_application_form,
    render_receipt,
    today_label,
)
from school_portal.services.sync import TableAccessor
from school_portal.settings import Settings, get_settings

router = APIRouter()

applicant = require_role(Role.APPLICANT)


async def _load(accessor: TableAccessor, user: AuthUser) -> dict:
    application = await get_application(accessor, user.user_id)
    if application is None:
        raise not_found("application", user_id=user.user_id)
    return application


async def _record_reference(accessor: TableAccessor, user: AuthUser, reference: str) -> ApplicationRecord:
    try:
        row = await record_payment_reference(accessor, user.user_id, reference)
    except AdmissionError as e:
        raise api_error(409, "APPLICATION_CLOSED", str(e), {"user_id": user.user_id})
    return ApplicationRecord.model_validate(row)


@router.get("/payment-return", response_model=ApplicationRecord)
async def payment_return(
    request: Request,
    user: AuthUser = Depends(applicant),
    accessor: TableAccessor = Depends(get_accessor),
) -> ApplicationRecord:
    """Store the reference the payment gateway appended to the return URL.

    The reference is not verified with the gateway.
    """
    reference = reference_from_return_params(request.query_params)
    if reference is None:
        raise api_error(400, "MISSING_REFERENCE", "No payment reference in return URL")
    return await _record_reference(accessor, user, reference)


@router.post("/payment-reference", response_model=ApplicationRecord)
async def manual_reference(
    body: ManualReferenceRequest,
    user: AuthUser = Depends(applicant),
    accessor: TableAccessor = Depends(get_accessor),
) -> ApplicationRecord:
    try:
        reference = validate_manual_reference(body.reference)
    except AdmissionError as e:
        raise api_error(422, "INVALID_REFERENCE", str(e))
    return await _record_reference(accessor, user, reference)


@router.get("/application", response_model=ApplicationRecord)
async def read_application(
    user: AuthUser = Depends(applicant),
    accessor: TableAccessor = Depends(get_accessor),
) -> ApplicationRecord:
    return ApplicationRecord.model_validate(await _load(accessor, user))


@router.post("/application", response_model=ApplicationRecord)
async def submit(
    form: ApplicationForm,
    user: AuthUser = Depends(applicant),
    accessor: TableAccessor = Depends(get_accessor),
) -> ApplicationRecord:
    existing = await get_application(accessor, user.user_id)
    reference = existing.get("payment_reference") if existing else None
    try:
        row = await submit_application(accessor, user.user_id, form.model_dump(), reference)
    except AdmissionError as e:
        code = "PAYMENT_REQUIRED" if not reference else "APPLICATION_CLOSED"
        raise api_error(402 if not reference else 409, code, str(e))
    return ApplicationRecord.model_validate(row)


@router.get("/application/form.pdf")
async def application_form_pdf(
    user: AuthUser = Depends(applicant),
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> Response:
    application = await _load(accessor, user)
    name = (application.get("full_name") or "Applicant").replace(" ", "_")
    return pdf(render_application_form(application, settings), f"Admission_Form_{name}.pdf")


@router.get("/application/receipt.pdf")
async def application_receipt_pdf(
    user: AuthUser = Depends(applicant),
    accessor: TableAccessor = Depends(get_accessor),
    settings: Settings = Depends(get_settings),
) -> Response:
    application = await _load(accessor, user)
    reference = application.get("payment_reference")
    if not reference:
        raise api_error(402, "PAYMENT_REQUIRED", "Please complete the application fee payment first.")
    data = ReceiptData(
        receipt_type="Application Fee Receipt",
        student_name=application.get("full_name") or "",
        amount=format_amount(settings.application_fee_amount),
        reference=reference,
        date=today_label(),
    )
    return pdf(render_receipt(data, settings), f"Receipt_{reference}.pdf")
