import pytest

from school_portal.services.grading import (
    BulkScoreRow,
    ScoreError,
    apply_bulk_scores,
    build_subject_result,
    calculate_grade,
    merge_subject,
    record_subject_score,
    summarize,
)
from school_portal.stores.tables import RESULTS

STUDENT = {
    "id": "stu-1",
    "full_name": "Ahmed Musa",
    "reg_number": "IMST/2024/001",
    "class_level": "JSS 1",
}


@pytest.mark.parametrize(
    ("total", "grade", "remark"),
    [
        (100, "A", "Excellent"),
        (70, "A", "Excellent"),
        (69.5, "B", "Very Good"),
        (50, "C", "Credit"),
        (45, "D", "Pass"),
        (40, "E", "Fair"),
        (39, "F", "Fail"),
        (0, "F", "Fail"),
    ],
)
def test_calculate_grade_bands(total: float, grade: str, remark: str) -> None:
    assert calculate_grade(total) == (grade, remark)


def test_build_subject_result_rejects_out_of_range() -> None:
    with pytest.raises(ScoreError):
        build_subject_result("Mathematics", 40, 61)
    with pytest.raises(ScoreError):
        build_subject_result("Mathematics", -1, 50)

    line = build_subject_result("Mathematics", 30, 50)
    assert line["total"] == 80
    assert line["grade"] == "A"


def test_summarize_rounds_average_to_one_decimal() -> None:
    assert summarize([]) == (0.0, 0.0)
    total, average = summarize([{"total": 80}, {"total": 71}, {"total": 60}])
    assert total == 211
    assert average == 70.3


def test_merge_subject_replaces_case_insensitively() -> None:
    merged = merge_subject([{"subject": "English", "total": 50}], {"subject": " english ", "total": 60})
    assert merged == [{"subject": " english ", "total": 60}]


@pytest.mark.asyncio
async def test_record_subject_score_creates_then_updates_sheet(accessor, remote):
    await record_subject_score(accessor, STUDENT, "Mathematics", 30, 50, "1st Term", "2024/2025")
    await record_subject_score(accessor, STUDENT, "English", 20, 40, "1st Term", "2024/2025")
    stored = await record_subject_score(accessor, STUDENT, "Mathematics", 25, 50, "1st Term", "2024/2025")

    assert len(remote.tables[RESULTS]) == 1
    assert sorted(s["subject"] for s in stored["scores"]) == ["English", "Mathematics"]
    assert stored["total_score"] == 135
    assert stored["average"] == 67.5
    assert stored["position"] is None
    assert stored["reg_number"] == "IMST/2024/001"


@pytest.mark.asyncio
async def test_record_subject_score_keeps_terms_apart(accessor, remote):
    await record_subject_score(accessor, STUDENT, "Mathematics", 30, 50, "1st Term", "2024/2025")
    await record_subject_score(accessor, STUDENT, "Mathematics", 30, 50, "2nd Term", "2024/2025")
    assert len(remote.tables[RESULTS]) == 2


@pytest.mark.asyncio
async def test_apply_bulk_scores_reports_rejections(accessor, remote):
    rows = [
        BulkScoreRow("IMST/2024/001", "Ahmed Musa", 30, 50, 80, "A", "Excellent", True),
        BulkScoreRow("IMST/2024/999", "Nobody", 10, 10, 20, "F", "Fail", True),
        BulkScoreRow("imst/2024/001", "Ahmed Musa", 60, 60, 120, "A", "Excellent", False),
    ]
    report = await apply_bulk_scores(accessor, rows, [STUDENT], "Physics", "1st Term", "2024/2025")

    assert report.saved == 1
    assert report.rejected == [
        {"regNumber": "IMST/2024/999", "reason": "Student not found"},
        {"regNumber": "imst/2024/001", "reason": "Total exceeds 100"},
    ]
    assert remote.tables[RESULTS][0]["scores"][0]["subject"] == "Physics"
