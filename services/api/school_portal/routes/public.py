"""Public endpoints: school profile, news posts, fee receipts.

No authentication. Reads are served from the table snapshot cache.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from school_portal.routes.deps import get_accessor
from school_portal.routes.files import pdf
from school_portal.schemas.payloads import FeeReceiptRequest, SchoolProfile
from school_portal.schemas.records import PostRecord
from school_portal.services.documents import ReceiptData, format_amount, render_receipt, today_label
from school_portal.services.sync import TableAccessor
from school_portal.settings import Settings, get_settings
from school_portal.stores.tables import POSTS

router = APIRouter()


@router.get("/school", response_model=SchoolProfile)
async def get_school(settings: Settings = Depends(get_settings)) -> SchoolProfile:
    """School contact details, payment links and the current term."""
    return SchoolProfile(
        name=settings.school_name,
        address=settings.school_address,
        phone=settings.school_phone,
        email=settings.school_email,
        application_fee_link=settings.application_fee_link,
        school_fee_link=settings.school_fee_link,
        application_fee_amount=settings.application_fee_amount,
        school_fee_amount=settings.school_fee_amount,
        current_term=settings.current_term,
        current_session=settings.current_session,
    )


@router.get("/posts", response_model=list[PostRecord])
async def list_posts(accessor: TableAccessor = Depends(get_accessor)) -> list[PostRecord]:
    """News posts, newest first."""
    rows = await accessor.read(POSTS)
    posts = [PostRecord.model_validate(r) for r in rows]
    return sorted(posts, key=lambda p: p.date, reverse=True)


@router.post("/fees/receipt")
async def fee_receipt(
    request: FeeReceiptRequest,
    settings: Settings = Depends(get_settings),
) -> Response:
    """Receipt for a school fee payment made on the hosted checkout page."""
    data = ReceiptData(
        receipt_type="School Fees Payment Receipt",
        student_name=request.student_name,
        amount=format_amount(request.amount),
        reference=request.reference,
        date=today_label(),
        term=request.term,
        session=request.session,
    )
    return pdf(render_receipt(data, settings), f"Receipt_{request.reference}.pdf")
