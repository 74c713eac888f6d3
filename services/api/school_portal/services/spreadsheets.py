"""Excel exports and result-sheet uploads (openpyxl).

Workbooks are returned as bytes, ready to send as
application/vnd.openxmlformats-officedocument.spreadsheetml.sheet.
"""

from io import BytesIO
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font

from school_portal.services.grading import MAX_TOTAL, BulkScoreRow, calculate_grade

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

TEMPLATE_HEADERS = ["RegNumber", "StudentName", "CAScore", "ExamScore"]
TEMPLATE_EXAMPLE_ROW = ["IMST/2024/001", "Ahmed Musa", 30, 50]


class SpreadsheetError(ValueError):
    pass


def _to_bytes(wb: Workbook) -> bytes:
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _sheet(wb: Workbook, title: str, headers: list[str], rows: list[list[Any]]) -> None:
    ws = wb.active
    ws.title = title
    ws.append(headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(row)


def students_workbook(students: list[dict[str, Any]]) -> bytes:
    """Full student list, one row per student."""
    wb = Workbook()
    _sheet(
        wb,
        "Students_List",
        ["Full Name", "Reg Number", "Class Level", "Guardian Phone", "Fee Status", "PIN"],
        [
            [
                s.get("full_name"),
                s.get("reg_number"),
                s.get("class_level"),
                s.get("guardian_phone"),
                "Paid" if s.get("fees_paid") else "Unpaid",
                s.get("pin"),
            ]
            for s in students
        ],
    )
    return _to_bytes(wb)


def fee_report_workbook(
    students: list[dict[str, Any]],
    class_filter: str,
    term: str,
    session: str,
) -> bytes:
    """Fee payment status per student; class_filter "All" keeps every class."""
    selected = [s for s in students if class_filter == "All" or s.get("class_level") == class_filter]
    wb = Workbook()
    _sheet(
        wb,
        "Fee_Report",
        ["Student Name", "Reg Number", "Class", "Session", "Term", "Payment Status", "Guardian Contact"],
        [
            [
                s.get("full_name"),
                s.get("reg_number"),
                s.get("class_level"),
                session,
                term,
                "COMPLETED" if s.get("fees_paid") else "PENDING",
                s.get("guardian_phone"),
            ]
            for s in selected
        ],
    )
    return _to_bytes(wb)


def result_template_workbook(students: list[dict[str, Any]], class_level: str | None) -> bytes:
    """Blank score sheet for a class, or one example row when the class is empty."""
    rows: list[list[Any]] = []
    if class_level:
        rows = [
            [s.get("reg_number"), s.get("full_name"), "", ""]
            for s in students
            if s.get("class_level") == class_level
        ]
    if not rows:
        rows = [list(TEMPLATE_EXAMPLE_ROW)]

    wb = Workbook()
    _sheet(wb, "ResultTemplate", list(TEMPLATE_HEADERS), rows)
    return _to_bytes(wb)


def _number(value: Any) -> float:
    try:
        return float(value) if value not in (None, "") else 0.0
    except (TypeError, ValueError):
        return 0.0


def parse_result_upload(data: bytes) -> list[BulkScoreRow]:
    """Parse the first sheet of an uploaded result template.

    Missing or non-numeric scores count as 0. Rows without a reg number are
    skipped. `is_valid` is False when CA + exam exceeds the maximum total.
    """
    try:
        wb = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except Exception as e:
        raise SpreadsheetError("Error parsing file.") from e

    try:
        return _read_rows(wb.worksheets[0])
    finally:
        wb.close()


def _read_rows(ws: Any) -> list[BulkScoreRow]:
    """Rows of a result sheet, keyed by its header row."""
    rows = ws.iter_rows(values_only=True)
    header = next(rows, None)
    if not header:
        return []
    index = {str(h).strip(): i for i, h in enumerate(header) if h is not None}
    if "RegNumber" not in index:
        raise SpreadsheetError("Missing RegNumber column.")

    def cell(row: tuple, name: str) -> Any:
        i = index.get(name)
        return row[i] if i is not None and i < len(row) else None

    parsed: list[BulkScoreRow] = []
    for row in rows:
        reg = cell(row, "RegNumber")
        if reg is None or not str(reg).strip():
            continue
        ca = _number(cell(row, "CAScore"))
        exam = _number(cell(row, "ExamScore"))
        total = ca + exam
        grade, remark = calculate_grade(total)
        parsed.append(
            BulkScoreRow(
                reg_number=str(reg).strip(),
                student_name=str(cell(row, "StudentName") or ""),
                ca=ca,
                exam=exam,
                total=total,
                grade=grade,
                remark=remark,
                is_valid=total <= MAX_TOTAL,
            )
        )
    return parsed
