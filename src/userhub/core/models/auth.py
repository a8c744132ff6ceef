"""Authentication request, response and token models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.userhub.core.models.user import EMAIL_PATTERN


class RegisterRequest(BaseModel):
    """Self-service registration; the role is always the configured default."""

    first_name: str = Field(min_length=1, max_length=16)
    last_name: str = Field(min_length=1, max_length=16)
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class AuthResponse(BaseModel):
    """Issued access token plus the identity it was issued for."""

    token: str = Field(description="Signed bearer token")
    expires_at: datetime = Field(description="Token expiry (UTC)")
    user_id: int
    full_name: str
    role: int


class TokenClaims(BaseModel):
    """Verified claims of an access token."""

    subject: str = Field(description="Subject (sub) claim: the user id")
    name: str | None = None
    email: str | None = None
    role: int | None = None
    issued_at: int | None = None
    expires_at: int | None = None
    all_claims: dict[str, Any] = Field(default_factory=dict)

    @property
    def user_id(self) -> int:
        return int(self.subject)
