"""Pluggable credential verification.

The API never checks credentials itself; it asks an ``AuthProvider`` to
turn submitted credentials into an ``AdminIdentity``. The default provider
checks a single admin account configured through settings. Deployments can
swap in another provider through FastAPI dependency overrides.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Protocol

from pydantic import BaseModel, Field, field_validator

from counsel_admin.core.config import settings
from counsel_admin.core.logging import get_auth_logger
from .password import verify_password

logger = get_auth_logger()


class AdminCredentials(BaseModel):
    """Login form payload."""

    email: str = Field(..., min_length=3, max_length=255, example="admin@example.com")
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email format")
        return v


@dataclass(frozen=True)
class AdminIdentity:
    """Authenticated dashboard operator."""

    email: str
    role: str = "admin"


class AuthProvider(Protocol):
    def verify(self, credentials: AdminCredentials) -> Optional[AdminIdentity]:
        """Return the identity for valid credentials, None otherwise."""
        ...


class SettingsAuthProvider:
    """Single admin account from ADMIN_EMAIL / ADMIN_PASSWORD_HASH."""

    def __init__(
        self,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
    ):
        self._email = (email or settings.ADMIN_EMAIL or "").strip().lower()
        self._password_hash = password_hash or settings.ADMIN_PASSWORD_HASH

    @property
    def is_configured(self) -> bool:
        return bool(self._email and self._password_hash)

    def verify(self, credentials: AdminCredentials) -> Optional[AdminIdentity]:
        if not self.is_configured:
            logger.warning("Login attempted but no admin account is configured")
            return None

        if credentials.email != self._email:
            logger.warning("Login failed: unknown account")
            return None

        if not verify_password(credentials.password, self._password_hash):
            logger.warning("Login failed: wrong password", email=credentials.email)
            return None

        return AdminIdentity(email=self._email)


@lru_cache()
def get_auth_provider() -> AuthProvider:
    """Get the configured auth provider (FastAPI dependency)."""
    return SettingsAuthProvider()
