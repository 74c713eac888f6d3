from io import BytesIO

from openpyxl import load_workbook
import pytest

from school_portal.stores.tables import APPLICATIONS, CLASSES, RESULTS, STUDENTS

ADMIN = {"email": "admin@school.com", "password": "admin"}


@pytest.fixture
async def admin_headers(login):
    return await login("/v1/auth/login", ADMIN)


def _result(rid: str, total: float, class_level: str = "JSS 1") -> dict:
    return {
        "id": rid,
        "student_id": f"stu-{rid}",
        "class_level": class_level,
        "term": "1st Term",
        "session": "2024/2025",
        "total_score": total,
    }


@pytest.mark.asyncio
async def test_overview_seeds_default_classes(client, remote, seed, admin_headers):
    await seed(STUDENTS, [{"id": "s1"}, {"id": "s2"}])
    await seed(APPLICATIONS, [{"id": "a1", "user_id": "u1", "status": "Pending"}, {"id": "a2", "user_id": "u2", "status": "Approved"}])

    response = await client.get("/v1/admin/overview", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"totalStudents": 2, "pendingApplications": 1, "activeStaff": 0, "classes": 6}
    assert [c["name"] for c in remote.tables[CLASSES]][:2] == ["JSS 1", "JSS 2"]


@pytest.mark.asyncio
async def test_student_reg_number_format_is_enforced(client, remote, admin_headers):
    body = {"fullName": "Umar Ali", "regNumber": "IMST-2024-3", "pin": "11111", "classLevel": "JSS 1"}
    response = await client.post("/v1/admin/students", json=body, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["detail"]["error"]["code"] == "INVALID_REG_NUMBER"

    body["regNumber"] = "imst/2024/003"
    response = await client.post("/v1/admin/students", json=body, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["id"]
    assert remote.tables[STUDENTS][0]["full_name"] == "Umar Ali"


@pytest.mark.asyncio
async def test_crud_posts(client, accessor, admin_headers):
    response = await client.post(
        "/v1/admin/posts",
        json={"title": "Exams", "content": "Start Monday", "date": "2024-11-04"},
        headers=admin_headers,
    )
    post_id = response.json()["id"]

    await accessor.drain()
    assert [p["title"] for p in (await client.get("/v1/public/posts")).json()] == ["Exams"]

    response = await client.delete(f"/v1/admin/posts/{post_id}", headers=admin_headers)
    assert response.json() == {"ok": True}
    await accessor.drain()
    assert (await client.get("/v1/public/posts")).json() == []


@pytest.mark.asyncio
async def test_compute_ranks(client, remote, seed, admin_headers):
    await seed(RESULTS, [_result("a", 85), _result("b", 92), _result("c", 78), _result("d", 60, "JSS 2")])

    response = await client.post(
        "/v1/admin/ranks",
        json={"term": "1st Term", "session": "2024/2025", "classes": ["JSS 1", "JSS 2"]},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"term": "1st Term", "session": "2024/2025", "ranked": {"JSS 1": 3, "JSS 2": 1}}

    positions = {r["id"]: r["position"] for r in remote.tables[RESULTS]}
    assert positions == {"a": "2nd", "b": "1st", "c": "3rd", "d": "1st"}


@pytest.mark.asyncio
async def test_compute_ranks_reports_database_failure(client, remote, admin_headers):
    remote.fail_reads = True
    response = await client.post("/v1/admin/ranks", json={"classes": ["JSS 1"]}, headers=admin_headers)
    assert response.status_code == 503
    assert response.json()["detail"]["error"]["code"] == "RANKING_FAILED"


@pytest.mark.asyncio
async def test_exports(client, seed, admin_headers):
    await seed(
        STUDENTS,
        [
            {"id": "s1", "full_name": "Ahmed Musa", "reg_number": "IMST/2024/001", "class_level": "JSS 1", "fees_paid": True},
            {"id": "s2", "full_name": "Fatima Abdullahi", "reg_number": "IMST/2024/002", "class_level": "JSS 2"},
        ],
    )

    response = await client.get("/v1/admin/exports/students.xlsx", headers=admin_headers)
    assert response.status_code == 200
    assert len(list(load_workbook(BytesIO(response.content)).active.iter_rows())) == 3

    response = await client.get("/v1/admin/exports/fees.xlsx", params={"class": "JSS 1"}, headers=admin_headers)
    rows = list(load_workbook(BytesIO(response.content)).active.iter_rows(values_only=True))
    assert rows[1][5] == "COMPLETED"
    assert len(rows) == 2

    response = await client.get("/v1/admin/backup", headers=admin_headers)
    backup = response.json()
    assert set(backup) == {"applications", "posts", "students", "timestamp", "owner"}
    assert len(backup["students"]) == 2


@pytest.mark.asyncio
async def test_admission_letter(client, seed, admin_headers):
    await seed(STUDENTS, [{"id": "s1", "full_name": "Ahmed Musa", "reg_number": "IMST/2024/001", "pin": "12345", "class_level": "JSS 1"}])

    response = await client.get("/v1/admin/students/s1/admission-letter.pdf", headers=admin_headers)
    assert response.status_code == 200
    assert "Admission_Letter_Ahmed_Musa.pdf" in response.headers["content-disposition"]

    response = await client.get("/v1/admin/students/nope/admission-letter.pdf", headers=admin_headers)
    assert response.status_code == 404
