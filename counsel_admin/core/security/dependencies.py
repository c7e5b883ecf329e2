"""FastAPI security dependencies."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from counsel_admin.core.logging import get_auth_logger
from .tokens import AdminSession, decode_session_token

logger = get_auth_logger()

# Security scheme for authentication
security = HTTPBearer(auto_error=False)


def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AdminSession:
    """
    FastAPI dependency resolving the admin session from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired or revoked
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = decode_session_token(credentials.credentials)
    if session is None:
        logger.warning("Authentication failed: invalid or expired session")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return session
