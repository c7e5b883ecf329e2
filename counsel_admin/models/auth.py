"""Authentication response schemas."""

from pydantic import BaseModel, Field


class AdminInfo(BaseModel):
    email: str
    role: str = "admin"


class LoginResponse(BaseModel):
    """Response model for a successful admin login."""

    access_token: str = Field(..., description="Signed session token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    expires_at: str = Field(..., description="Expiry timestamp (ISO format)")
    admin: AdminInfo


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = "Logged out successfully"


class SessionInfo(BaseModel):
    """Current session as returned by ``/auth/me``."""

    token_id: str
    email: str
    role: str
    issued_at: str
    expires_at: str
