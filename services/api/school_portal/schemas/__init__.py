"""Pydantic schemas for API request/response validation."""

from school_portal.schemas.common import ErrorDetail, ErrorResponse
from school_portal.schemas.records import (
    ApplicationRecord,
    ClassRecord,
    PostRecord,
    ResultRecord,
    StudentRecord,
    SubjectResult,
    TeacherRecord,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "ApplicationRecord",
    "ClassRecord",
    "PostRecord",
    "ResultRecord",
    "StudentRecord",
    "SubjectResult",
    "TeacherRecord",
]
