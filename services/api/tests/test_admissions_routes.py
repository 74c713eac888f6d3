"""End-to-end admissions flow: pay, apply, admin decision."""

import pytest

from school_portal.stores.tables import APPLICATIONS, STUDENTS

APPLICANT = {"email": "applicant@school.com", "password": "applicant"}
ADMIN = {"email": "admin@school.com", "password": "admin"}

FORM = {
    "fullName": "Zainab Sani",
    "gender": "Female",
    "dateOfBirth": "2013-04-02",
    "classApplied": "JSS 1",
    "parentName": "Sani Bello",
    "phone": "08030000000",
    "address": "Kano",
}


@pytest.mark.asyncio
async def test_application_requires_payment_first(client, login):
    headers = await login("/v1/auth/login", APPLICANT)
    response = await client.post("/v1/admissions/application", json=FORM, headers=headers)
    assert response.status_code == 402
    assert response.json()["detail"]["error"]["code"] == "PAYMENT_REQUIRED"


@pytest.mark.asyncio
async def test_manual_reference_must_be_long_enough(client, login):
    headers = await login("/v1/auth/login", APPLICANT)
    response = await client.post("/v1/admissions/payment-reference", json={"reference": "T12"}, headers=headers)
    assert response.status_code == 422
    assert response.json()["detail"]["error"]["code"] == "INVALID_REFERENCE"


@pytest.mark.asyncio
async def test_payment_return_without_reference(client, login):
    headers = await login("/v1/auth/login", APPLICANT)
    response = await client.get("/v1/admissions/payment-return", headers=headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_pay_apply_and_get_admitted(client, login, remote, accessor):
    applicant = await login("/v1/auth/login", APPLICANT)

    response = await client.get(
        "/v1/admissions/payment-return", params={"trxref": "T123456789"}, headers=applicant
    )
    assert response.status_code == 200
    assert response.json()["paymentReference"] == "T123456789"

    response = await client.post("/v1/admissions/application", json=FORM, headers=applicant)
    assert response.status_code == 200
    assert response.json()["status"] == "Pending"
    assert response.json()["fullName"] == "Zainab Sani"

    response = await client.get("/v1/admissions/application/receipt.pdf", headers=applicant)
    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")

    response = await client.get("/v1/admissions/application/form.pdf", headers=applicant)
    assert response.status_code == 200
    assert "Admission_Form_Zainab_Sani.pdf" in response.headers["content-disposition"]

    admin = await login("/v1/auth/login", ADMIN)
    await accessor.drain()
    response = await client.get("/v1/admin/applications", params={"status": "Pending"}, headers=admin)
    assert [a["userId"] for a in response.json()] == ["demo-app"]

    response = await client.post("/v1/admin/applications/demo-app/approve", headers=admin)
    assert response.status_code == 200
    student = response.json()
    assert student["fullName"] == "Zainab Sani"
    assert student["classLevel"] == "JSS 1"
    assert student["regNumber"].startswith("IMST/")
    assert len(student["pin"]) == 5

    assert remote.tables[APPLICATIONS][0]["status"] == "Approved"
    assert len(remote.tables[STUDENTS]) == 1

    # A decided application stays decided
    response = await client.post("/v1/admin/applications/demo-app/reject", headers=admin)
    assert response.status_code == 409
    response = await client.post("/v1/admissions/application", json=FORM, headers=applicant)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_approve_unknown_application(client, login):
    admin = await login("/v1/auth/login", ADMIN)
    response = await client.post("/v1/admin/applications/missing/approve", headers=admin)
    assert response.status_code == 404
    assert response.json()["detail"]["error"]["code"] == "APPLICATION_NOT_FOUND"


@pytest.mark.asyncio
async def test_payment_reference_after_approval_is_rejected(client, login, remote, seed):
    await seed(APPLICATIONS, [{"id": "a1", "user_id": "demo-app", "status": "Approved", "payment_reference": "T123456789"}])
    applicant = await login("/v1/auth/login", APPLICANT)

    response = await client.get("/v1/admissions/payment-return", params={"reference": "T555555"}, headers=applicant)
    assert response.status_code == 409
    assert response.json()["detail"]["error"]["code"] == "APPLICATION_CLOSED"

    response = await client.post("/v1/admissions/payment-reference", json={"reference": "T555555"}, headers=applicant)
    assert response.status_code == 409

    assert remote.tables[APPLICATIONS][0]["status"] == "Approved"
    assert remote.tables[APPLICATIONS][0]["payment_reference"] == "T123456789"


@pytest.mark.asyncio
async def test_approve_reports_unsaved_student(client, login, remote, seed):
    await seed(
        APPLICATIONS,
        [{"id": "a1", "user_id": "demo-app", "status": "Pending", "full_name": "Zainab Sani", "class_applied": "JSS 1"}],
    )
    remote.fail_tables.add(STUDENTS)
    admin = await login("/v1/auth/login", ADMIN)

    response = await client.post("/v1/admin/applications/demo-app/approve", headers=admin)
    assert response.status_code == 503
    assert response.json()["detail"]["error"]["code"] == "STUDENT_NOT_SAVED"
    assert remote.tables[APPLICATIONS][0]["status"] == "Pending"
