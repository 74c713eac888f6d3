"""FastAPI dependencies.

The accessor, session store and auth provider are created in the app lifespan
and kept on app.state; tests replace them with in-memory versions.
"""

from collections.abc import Awaitable, Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from school_portal.routes.errors import api_error
from school_portal.services.auth import AuthUser, Role, SessionStore, StubAuthProvider
from school_portal.services.sync import TableAccessor

_bearer = HTTPBearer(auto_error=False)


def get_accessor(request: Request) -> TableAccessor:
    return request.app.state.accessor


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_auth_provider(request: Request) -> StubAuthProvider:
    return request.app.state.auth_provider


def get_token(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> str:
    if credentials is None or not credentials.credentials:
        raise api_error(401, "NOT_AUTHENTICATED", "Sign in required")
    return credentials.credentials


async def current_user(
    token: str = Depends(get_token),
    sessions: SessionStore = Depends(get_session_store),
) -> AuthUser:
    user = await sessions.resolve(token)
    if user is None:
        raise api_error(401, "SESSION_EXPIRED", "Session expired or invalid, sign in again")
    return user


def require_role(*roles: Role) -> Callable[..., Awaitable[AuthUser]]:
    """Dependency allowing only the given roles."""

    async def _check(user: AuthUser = Depends(current_user)) -> AuthUser:
        if user.role not in roles:
            raise api_error(
                403,
                "FORBIDDEN",
                "You do not have access to this area",
                {"role": user.role.value},
            )
        return user

    return _check
