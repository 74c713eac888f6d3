"""Grading and score entry.

Grade bands (total out of 100):
    >= 70  A  Excellent
    >= 60  B  Very Good
    >= 50  C  Credit
    >= 45  D  Pass
    >= 40  E  Fair
    else   F  Fail

Score entry is read-modify-write on the whole result record: the current
record is fetched, one subject is replaced or appended, totals are recomputed
and the record is written back. Two teachers saving different subjects for the
same student at the same moment can overwrite each other; there is no version
check.
"""

from dataclasses import dataclass, field
import logging
from typing import Any

from school_portal.services.sync import TableAccessor
from school_portal.stores.tables import RESULTS

logger = logging.getLogger("uvicorn.error")

MAX_TOTAL = 100

_GRADE_BANDS: list[tuple[float, str, str]] = [
    (70, "A", "Excellent"),
    (60, "B", "Very Good"),
    (50, "C", "Credit"),
    (45, "D", "Pass"),
    (40, "E", "Fair"),
]


class ScoreError(ValueError):
    pass


@dataclass
class BulkScoreRow:
    """A parsed row from an uploaded result sheet."""

    reg_number: str
    student_name: str
    ca: float
    exam: float
    total: float
    grade: str
    remark: str
    is_valid: bool


@dataclass
class BulkApplyReport:
    saved: int = 0
    rejected: list[dict[str, Any]] = field(default_factory=list)


def calculate_grade(total: float) -> tuple[str, str]:
    """Return (grade, remark) for a subject total."""
    for threshold, grade, remark in _GRADE_BANDS:
        if total >= threshold:
            return grade, remark
    return "F", "Fail"


def build_subject_result(subject: str, ca: float, exam: float) -> dict[str, Any]:
    """Build one subject line. Raises ScoreError on out-of-range scores."""
    if ca < 0 or exam < 0:
        raise ScoreError("Scores cannot be negative")
    total = ca + exam
    if total > MAX_TOTAL:
        raise ScoreError(f"Total score cannot exceed {MAX_TOTAL}")
    grade, remark = calculate_grade(total)
    return {
        "subject": subject,
        "ca": ca,
        "exam": exam,
        "total": total,
        "grade": grade,
        "remark": remark,
    }


def summarize(scores: list[dict[str, Any]]) -> tuple[float, float]:
    """Return (total_score, average) over subject lines."""
    if not scores:
        return 0.0, 0.0
    total = float(sum(float(s.get("total") or 0) for s in scores))
    return total, round(total / len(scores), 1)


def merge_subject(scores: list[dict[str, Any]], line: dict[str, Any]) -> list[dict[str, Any]]:
    """Replace the line for the same subject (case-insensitive) or append it."""
    key = line["subject"].strip().lower()
    merged = [s for s in scores if str(s.get("subject", "")).strip().lower() != key]
    merged.append(line)
    return merged


def find_result(
    rows: list[dict[str, Any]],
    student_id: str,
    term: str,
    session: str,
) -> dict[str, Any] | None:
    for row in rows:
        if row.get("student_id") == student_id and row.get("term") == term and row.get("session") == session:
            return row
    return None


async def record_subject_score(
    accessor: TableAccessor,
    student: dict[str, Any],
    subject: str,
    ca: float,
    exam: float,
    term: str,
    session: str,
) -> dict[str, Any]:
    """Save one subject score for a student and recompute the sheet totals.

    Returns:
        The written result record.
    """
    line = build_subject_result(subject, ca, exam)

    rows = await accessor.fetch(RESULTS)
    current = find_result(rows, student["id"], term, session)

    if current is None:
        record: dict[str, Any] = {
            "student_id": student["id"],
            "student_name": student.get("full_name"),
            "reg_number": student.get("reg_number"),
            "class_level": student.get("class_level"),
            "term": term,
            "session": session,
            "scores": [],
        }
    else:
        record = dict(current)

    record["scores"] = merge_subject(list(record.get("scores") or []), line)
    record["total_score"], record["average"] = summarize(record["scores"])
    # Totals changed, so any earlier position is stale until ranks are recomputed
    record["position"] = None

    logger.info(
        f"[grading] saved subject={subject} reg={student.get('reg_number')} term={term} session={session}"
    )
    return await accessor.write(RESULTS, record)


async def apply_bulk_scores(
    accessor: TableAccessor,
    rows: list[BulkScoreRow],
    students: list[dict[str, Any]],
    subject: str,
    term: str,
    session: str,
) -> BulkApplyReport:
    """Save every valid row of an uploaded sheet for one subject."""
    by_reg = {str(s.get("reg_number", "")).upper(): s for s in students}
    report = BulkApplyReport()

    for row in rows:
        student = by_reg.get(row.reg_number.upper())
        if student is None:
            report.rejected.append({"regNumber": row.reg_number, "reason": "Student not found"})
            continue
        if not row.is_valid:
            report.rejected.append({"regNumber": row.reg_number, "reason": f"Total exceeds {MAX_TOTAL}"})
            continue
        try:
            await record_subject_score(accessor, student, subject, row.ca, row.exam, term, session)
        except ScoreError as e:
            report.rejected.append({"regNumber": row.reg_number, "reason": str(e)})
            continue
        report.saved += 1

    return report
