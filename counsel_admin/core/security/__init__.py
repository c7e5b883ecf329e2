"""Security module for admin authentication.

This module provides:
- Password hashing and verification (bcrypt)
- Pluggable credential verification (AuthProvider)
- Signed admin session tokens with revocation
- FastAPI security dependencies

Usage:
    from counsel_admin.core.security import (
        hash_password,
        create_session_token,
        get_current_admin,
    )
"""

from .password import hash_password, verify_password, pwd_context
from .providers import (
    AdminCredentials,
    AdminIdentity,
    AuthProvider,
    SettingsAuthProvider,
    get_auth_provider,
)
from .tokens import (
    AdminSession,
    create_session_token,
    decode_session_token,
    revoke_session_token,
    is_token_revoked,
)
from .dependencies import security, get_current_admin

__all__ = [
    "hash_password",
    "verify_password",
    "pwd_context",
    "AdminCredentials",
    "AdminIdentity",
    "AuthProvider",
    "SettingsAuthProvider",
    "get_auth_provider",
    "AdminSession",
    "create_session_token",
    "decode_session_token",
    "revoke_session_token",
    "is_token_revoked",
    "security",
    "get_current_admin",
]
