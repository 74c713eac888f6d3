"""Download responses (PDF, XLSX, JSON attachments)."""

from fastapi.responses import Response

from school_portal.services.spreadsheets import XLSX_MEDIA_TYPE

PDF_MEDIA_TYPE = "application/pdf"


def safe_filename(name: str) -> str:
    """Replace characters that break Content-Disposition or paths."""
    cleaned = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in name.strip())
    return cleaned or "download"


def attachment(content: bytes, filename: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{safe_filename(filename)}"',
            "Cache-Control": "private, no-store",
        },
    )


def pdf(content: bytes, filename: str) -> Response:
    return attachment(content, filename, PDF_MEDIA_TYPE)


def xlsx(content: bytes, filename: str) -> Response:
    return attachment(content, filename, XLSX_MEDIA_TYPE)
