"""Request/response payloads for the HTTP routes."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------------------------------------------------------------
# Auth
# ------------------------------------------------------------------


class LoginRequest(Payload):
    email: str = Field(min_length=3, max_length=200)
    password: str = Field(min_length=1, max_length=200)


class StudentLoginRequest(Payload):
    reg_number: str = Field(min_length=1, max_length=50)
    pin: str = Field(min_length=1, max_length=20)


class LoginResponse(Payload):
    token: str
    role: str
    user_id: str
    email: str | None = None


# ------------------------------------------------------------------
# Public
# ------------------------------------------------------------------


class SchoolProfile(Payload):
    name: str
    address: str
    phone: str
    email: str
    application_fee_link: str
    school_fee_link: str
    application_fee_amount: int
    school_fee_amount: int
    current_term: str
    current_session: str


class FeeReceiptRequest(Payload):
    student_name: str = Field(min_length=1, max_length=200)
    amount: float = Field(gt=0)
    reference: str = Field(min_length=1, max_length=100)
    term: str = "1st Term"
    session: str = "2024/2025"


# ------------------------------------------------------------------
# Admissions
# ------------------------------------------------------------------


class ManualReferenceRequest(Payload):
    reference: str = Field(max_length=100)


class ApplicationForm(Payload):
    full_name: str = Field(min_length=1, max_length=200)
    gender: str | None = None
    date_of_birth: str | None = None
    special_needs: str | None = None
    last_school: str | None = None
    islamiyya_school: str | None = None
    graduation_year: str | None = None
    class_applied: str = Field(min_length=1, max_length=50)
    parent_name: str | None = None
    parent_occupation: str | None = None
    address: str | None = None
    phone: str = Field(min_length=1, max_length=50)
    email: str | None = None
    photo_url: str | None = None


# ------------------------------------------------------------------
# Teacher
# ------------------------------------------------------------------


class ScoreEntryRequest(Payload):
    reg_number: str = Field(min_length=1, max_length=50)
    subject: str = Field(min_length=1, max_length=100)
    ca: float = Field(ge=0, le=100)
    exam: float = Field(ge=0, le=100)
    term: str | None = None
    session: str | None = None


class BulkScoreReport(Payload):
    saved: int
    rejected: list[dict]


class ReportCommentResponse(Payload):
    comment: str


# ------------------------------------------------------------------
# Admin
# ------------------------------------------------------------------


class OverviewStats(Payload):
    total_students: int
    pending_applications: int
    active_staff: int
    classes: int


class ComputeRanksRequest(Payload):
    term: str | None = None
    session: str | None = None
    classes: list[str] | None = None


class ComputeRanksResponse(Payload):
    term: str
    session: str
    ranked: dict[str, int]
