"""Authentication: stub credential provider + bearer-token sessions.

Accounts for admins and demo applicants come from Settings.demo_accounts.
Teachers sign in with the email on their staff record (any password longer
than 3 characters). Students use reg number + PIN (see services.directory).

Sessions are opaque tokens mapped to an AuthUser in a SessionBackend
(Redis in production, memory as fallback).
"""

from dataclasses import asdict, dataclass
from enum import Enum
import hmac
import logging
import secrets
from typing import Any, Protocol

logger = logging.getLogger("uvicorn.error")

MIN_TEACHER_PASSWORD_LENGTH = 4


class Role(str, Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    APPLICANT = "APPLICANT"


class AuthError(RuntimeError):
    pass


@dataclass(frozen=True)
class AuthUser:
    user_id: str
    role: Role
    email: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["role"] = self.role.value
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AuthUser":
        return cls(
            user_id=str(payload["user_id"]),
            role=Role(payload["role"]),
            email=payload.get("email"),
        )


@dataclass(frozen=True)
class StubAccount:
    email: str
    password: str
    role: Role
    user_id: str


class StubAuthProvider:
    """Credential check against a configured account list."""

    def __init__(self, accounts: list[dict[str, Any]]) -> None:
        self._accounts: dict[str, StubAccount] = {}
        for raw in accounts:
            account = StubAccount(
                email=str(raw["email"]).strip().lower(),
                password=str(raw["password"]),
                role=Role(str(raw.get("role", "APPLICANT")).upper()),
                user_id=str(raw.get("user_id") or raw["email"]),
            )
            self._accounts[account.email] = account

    def sign_in(self, email: str, password: str) -> AuthUser:
        account = self._accounts.get(email.strip().lower())
        if account is None or not hmac.compare_digest(account.password, password):
            raise AuthError("Invalid credentials")
        return AuthUser(user_id=account.user_id, role=account.role, email=account.email)

    def sign_in_teacher(self, teachers: list[dict[str, Any]], email: str, password: str) -> AuthUser:
        wanted = email.strip().lower()
        for teacher in teachers:
            if str(teacher.get("email", "")).strip().lower() == wanted:
                if len(password) < MIN_TEACHER_PASSWORD_LENGTH:
                    break
                return AuthUser(user_id=str(teacher["id"]), role=Role.TEACHER, email=wanted)
        raise AuthError("Invalid Teacher Credentials.")


class SessionBackend(Protocol):
    async def get(self, token: str) -> dict[str, Any] | None: ...

    async def set(self, token: str, payload: dict[str, Any], ttl: int) -> None: ...

    async def delete(self, token: str) -> None: ...


class SessionStore:
    """Issues and resolves bearer tokens."""

    def __init__(self, backend: SessionBackend, ttl: int) -> None:
        self.backend = backend
        self.ttl = ttl

    async def issue(self, user: AuthUser) -> str:
        token = secrets.token_urlsafe(32)
        await self.backend.set(token, user.to_payload(), self.ttl)
        logger.info(f"[auth] session issued role={user.role.value} user_id={user.user_id}")
        return token

    async def resolve(self, token: str) -> AuthUser | None:
        payload = await self.backend.get(token)
        if payload is None:
            return None
        try:
            return AuthUser.from_payload(payload)
        except (KeyError, ValueError):
            logger.warning("[auth] discarding malformed session payload")
            await self.backend.delete(token)
            return None

    async def revoke(self, token: str) -> None:
        await self.backend.delete(token)
