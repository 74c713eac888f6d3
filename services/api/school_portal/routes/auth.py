"""Sign-in endpoints for admins and applicants (stub credential provider).

Teachers and students have their own login endpoints under /v1/teacher and
/v1/portal because they authenticate against table data.
"""

from fastapi import APIRouter, Depends

from school_portal.routes.deps import current_user, get_auth_provider, get_session_store, get_token
from school_portal.routes.errors import api_error
from school_portal.schemas.payloads import LoginRequest, LoginResponse
from school_portal.services.auth import AuthError, AuthUser, SessionStore, StubAuthProvider

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    provider: StubAuthProvider = Depends(get_auth_provider),
    sessions: SessionStore = Depends(get_session_store),
) -> LoginResponse:
    try:
        user = provider.sign_in(request.email, request.password)
    except AuthError as e:
        raise api_error(401, "INVALID_CREDENTIALS", str(e))
    token = await sessions.issue(user)
    return LoginResponse(token=token, role=user.role.value, user_id=user.user_id, email=user.email)


@router.post("/logout")
async def logout(
    token: str = Depends(get_token),
    sessions: SessionStore = Depends(get_session_store),
) -> dict[str, bool]:
    await sessions.revoke(token)
    return {"ok": True}


@router.get("/me", response_model=LoginResponse)
async def me(
    token: str = Depends(get_token),
    user: AuthUser = Depends(current_user),
) -> LoginResponse:
    return LoginResponse(token=token, role=user.role.value, user_id=user.user_id, email=user.email)
