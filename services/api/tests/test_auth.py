"""Tests for the stub auth provider, sessions and route guards."""

import pytest

from school_portal.services.auth import AuthError, AuthUser, Role, SessionStore, StubAuthProvider
from school_portal.settings import DEFAULT_DEMO_ACCOUNTS
from school_portal.stores.memory import MemorySessionBackend
from school_portal.stores.tables import TEACHERS

TEACHERS_ROWS = [{"id": "t1", "full_name": "Malam Sani", "email": "Teacher@School.com", "assigned_classes": ["JSS 1"]}]


def test_sign_in_with_configured_account() -> None:
    provider = StubAuthProvider(DEFAULT_DEMO_ACCOUNTS)
    user = provider.sign_in(" ADMIN@school.com ", "admin")
    assert user == AuthUser(user_id="admin", role=Role.ADMIN, email="admin@school.com")

    with pytest.raises(AuthError):
        provider.sign_in("admin@school.com", "wrong")
    with pytest.raises(AuthError):
        provider.sign_in("nobody@school.com", "admin")


def test_teacher_sign_in_needs_known_email_and_four_character_password() -> None:
    provider = StubAuthProvider([])
    user = provider.sign_in_teacher(TEACHERS_ROWS, "teacher@school.com", "pass")
    assert user.role is Role.TEACHER
    assert user.user_id == "t1"

    with pytest.raises(AuthError, match="Invalid Teacher Credentials."):
        provider.sign_in_teacher(TEACHERS_ROWS, "teacher@school.com", "abc")
    with pytest.raises(AuthError):
        provider.sign_in_teacher(TEACHERS_ROWS, "other@school.com", "password")


@pytest.mark.asyncio
async def test_session_store_issue_resolve_revoke():
    store = SessionStore(MemorySessionBackend(), ttl=60)
    user = AuthUser(user_id="stu-1", role=Role.STUDENT)

    token = await store.issue(user)
    assert await store.resolve(token) == user

    await store.revoke(token)
    assert await store.resolve(token) is None


@pytest.mark.asyncio
async def test_session_store_drops_malformed_payload():
    backend = MemorySessionBackend()
    await backend.set("bad", {"user_id": "x", "role": "JANITOR"}, 60)
    store = SessionStore(backend, ttl=60)

    assert await store.resolve("bad") is None
    assert await backend.get("bad") is None


@pytest.mark.asyncio
async def test_login_me_logout(client, login):
    headers = await login("/v1/auth/login", {"email": "applicant@school.com", "password": "applicant"})

    response = await client.get("/v1/auth/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["role"] == "APPLICANT"

    assert (await client.post("/v1/auth/logout", headers=headers)).status_code == 200
    response = await client.get("/v1/auth/me", headers=headers)
    assert response.status_code == 401
    assert response.json()["detail"]["error"]["code"] == "SESSION_EXPIRED"


@pytest.mark.asyncio
async def test_bad_credentials_are_rejected(client):
    response = await client.post("/v1/auth/login", json={"email": "admin@school.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["detail"]["error"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_role_guards(client, login, seed):
    await seed(TEACHERS, TEACHERS_ROWS)

    assert (await client.get("/v1/admin/overview")).status_code == 401

    headers = await login("/v1/auth/login", {"email": "applicant@school.com", "password": "applicant"})
    response = await client.get("/v1/admin/overview", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"]["error"]["code"] == "FORBIDDEN"

    teacher = await login("/v1/teacher/login", {"email": "teacher@school.com", "password": "secret"})
    assert (await client.get("/v1/admissions/application", headers=teacher)).status_code == 403
