"""Admin login, logout and session endpoints."""

from fastapi import APIRouter, Depends, status

from counsel_admin.core.exceptions import AuthenticationError
from counsel_admin.core.logging import get_service_logger
from counsel_admin.core.security import (
    AdminCredentials,
    AdminSession,
    AuthProvider,
    create_session_token,
    get_auth_provider,
    get_current_admin,
    revoke_session_token,
)
from counsel_admin.models.auth import (
    AdminInfo,
    LoginResponse,
    LogoutResponse,
    SessionInfo,
)

logger = get_service_logger("auth_api")

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Admin Login",
    operation_id="login",
    description="""Authenticate the dashboard admin with email and password.

Use the returned token in the `Authorization: Bearer <token>` header.

**Example Request:**
```json
{
  "email": "admin@example.com",
  "password": "********"
}
```""",
    responses={
        401: {
            "description": "Invalid credentials",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "AUTHENTICATION_ERROR",
                            "message": "Invalid email or password",
                            "error_id": "1a2b3c4d",
                        }
                    }
                }
            },
        },
    },
)
async def login(
    credentials: AdminCredentials,
    provider: AuthProvider = Depends(get_auth_provider),
) -> LoginResponse:
    identity = provider.verify(credentials)
    if identity is None:
        logger.warning("Admin login rejected", email=credentials.email)
        raise AuthenticationError("Invalid email or password")

    token, session = create_session_token(identity)
    logger.info("Admin logged in", email=identity.email)

    return LoginResponse(
        access_token=token,
        expires_in=int((session.expires_at - session.issued_at).total_seconds()),
        expires_at=session.expires_at.isoformat(),
        admin=AdminInfo(email=identity.email, role=identity.role),
    )


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="Admin Logout",
    operation_id="logout",
    description="Revoke the current session token.",
)
async def logout(session: AdminSession = Depends(get_current_admin)) -> LogoutResponse:
    revoke_session_token(session)
    logger.info("Admin logged out", email=session.email)
    return LogoutResponse()


@router.get(
    "/me",
    response_model=SessionInfo,
    summary="Current Session",
    operation_id="getCurrentSession",
)
async def me(session: AdminSession = Depends(get_current_admin)) -> SessionInfo:
    return SessionInfo(**session.to_dict())
