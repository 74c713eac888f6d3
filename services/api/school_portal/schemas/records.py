"""Typed record variants for each table.

Every table has its own model with a `kind` tag, so records from different
tables cannot be mixed up silently. Conversion between tables (e.g. promoting
an application to a student) goes through explicit functions in services.

Field names are snake_case internally and camelCase on the wire.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ApplicationStatus = Literal["Pending", "Approved", "Rejected"]


class Record(BaseModel):
    """Base for table records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str | None = None

    def to_row(self) -> dict[str, Any]:
        """Dict for the table store (snake_case keys, no tag, no unset id)."""
        row = self.model_dump(exclude={"kind"})
        if row.get("id") is None:
            row.pop("id", None)
        return row


class StudentRecord(Record):
    kind: Literal["student"] = "student"

    full_name: str
    reg_number: str
    pin: str
    class_level: str
    guardian_phone: str = ""
    fees_paid: bool = False
    photo_url: str | None = None
    email: str | None = None
    application_date: str | None = None
    date_of_birth: str | None = None
    address: str | None = None
    status: str | None = None


class TeacherRecord(Record):
    kind: Literal["teacher"] = "teacher"

    full_name: str
    email: str
    assigned_classes: list[str] = Field(default_factory=list)
    subjects: list[str] = Field(default_factory=list)


class ClassRecord(Record):
    kind: Literal["class"] = "class"

    name: str


class PostRecord(Record):
    kind: Literal["post"] = "post"

    title: str
    content: str
    date: str


class ApplicationRecord(Record):
    kind: Literal["application"] = "application"

    user_id: str
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: str | None = None
    gender: str | None = None
    class_applied: str | None = None
    last_school: str | None = None
    islamiyya_school: str | None = None
    graduation_year: str | None = None
    parent_name: str | None = None
    parent_occupation: str | None = None
    special_needs: str | None = None
    payment_reference: str | None = None
    status: ApplicationStatus = "Pending"
    photo_url: str | None = None
    created_at: str | None = None


class SubjectResult(BaseModel):
    """One subject line on a result sheet."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subject: str
    ca: float = Field(ge=0)
    exam: float = Field(ge=0)
    total: float = Field(ge=0, le=100)
    grade: str
    remark: str


class ResultRecord(Record):
    kind: Literal["result"] = "result"

    student_id: str
    student_name: str | None = None
    reg_number: str | None = None
    class_level: str
    term: str
    session: str
    scores: list[SubjectResult] = Field(default_factory=list)
    total_score: float = 0
    average: float = 0
    position: str | None = None
    class_population: int | None = None
    teacher_comment: str | None = None
    principal_comment: str | None = None
    next_term_begins: str | None = None
