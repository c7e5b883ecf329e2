"""Signed admin session tokens.

Sessions are HS256 JWTs carrying the admin email and a ``jti``. Logging out
adds the ``jti`` to an in-memory revocation set until the token would have
expired anyway.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Dict, Optional

import jwt

from counsel_admin.core.config import settings
from counsel_admin.core.logging import get_auth_logger
from .providers import AdminIdentity

logger = get_auth_logger()

TOKEN_TYPE = "admin_session"

_revoked_tokens: Dict[str, datetime] = {}
_revoked_lock = Lock()


@dataclass
class AdminSession:
    """Decoded session token."""

    token_id: str
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_id": self.token_id,
            "email": self.email,
            "role": self.role,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }


def create_session_token(
    identity: AdminIdentity, expires_delta: Optional[timedelta] = None
) -> tuple[str, AdminSession]:
    """
    Issue a session token for an authenticated admin.

    Returns:
        Tuple of (encoded token, session details)
    """
    now = datetime.now(timezone.utc)
    expires_at = now + (expires_delta or timedelta(hours=settings.SESSION_DURATION_HOURS))
    session = AdminSession(
        token_id=str(uuid.uuid4()),
        email=identity.email,
        role=identity.role,
        issued_at=now,
        expires_at=expires_at,
    )
    payload = {
        "sub": identity.email,
        "role": identity.role,
        "jti": session.token_id,
        "token_type": TOKEN_TYPE,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(
        payload, settings.SESSION_SECRET_KEY, algorithm=settings.SESSION_ALGORITHM
    )
    logger.info("Admin session issued", email=identity.email, token_id=session.token_id[:8])
    return token, session


def decode_session_token(token: str) -> Optional[AdminSession]:
    """Decode and validate a session token; None if invalid, expired or revoked."""
    try:
        payload = jwt.decode(
            token,
            settings.SESSION_SECRET_KEY,
            algorithms=[settings.SESSION_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        logger.info("Session token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning("Session token invalid", error=str(e))
        return None

    if payload.get("token_type") != TOKEN_TYPE or not payload.get("sub"):
        return None

    token_id = payload.get("jti", "")
    if is_token_revoked(token_id):
        return None

    return AdminSession(
        token_id=token_id,
        email=payload["sub"],
        role=payload.get("role", "admin"),
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def revoke_session_token(session: AdminSession) -> None:
    """Revoke a session until its natural expiry."""
    now = datetime.now(timezone.utc)
    with _revoked_lock:
        # Drop entries that have expired on their own
        for token_id, expires_at in list(_revoked_tokens.items()):
            if expires_at <= now:
                del _revoked_tokens[token_id]
        _revoked_tokens[session.token_id] = session.expires_at
    logger.info("Admin session revoked", token_id=session.token_id[:8])


def is_token_revoked(token_id: str) -> bool:
    with _revoked_lock:
        return token_id in _revoked_tokens
