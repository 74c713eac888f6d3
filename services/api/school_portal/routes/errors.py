"""Structured HTTP errors.

Format: { "error": { "code": str, "message": str, "detail": object } }
"""

from typing import Any

from fastapi import HTTPException

from school_portal.schemas.common import ErrorDetail, ErrorResponse


def api_error(
    status_code: int,
    code: str,
    message: str,
    detail: dict[str, Any] | None = None,
) -> HTTPException:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return HTTPException(status_code=status_code, detail=body.model_dump())


def not_found(what: str, **detail: Any) -> HTTPException:
    code = f"{what.upper().replace(' ', '_')}_NOT_FOUND"
    return api_error(404, code, f"{what.capitalize()} not found.", detail or None)
