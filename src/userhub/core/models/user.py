"""Request and result models for user mutations."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PHONE_PATTERN = r"^\+?[0-9 ()\-]{3,32}$"


class AddUserRequest(BaseModel):
    """Payload for creating a user."""

    first_name: str = Field(min_length=1, max_length=16)
    last_name: str = Field(min_length=1, max_length=16)
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6, max_length=255)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    role: int | None = Field(default=None, ge=0, le=255)


class UpdateUserRequest(BaseModel):
    """Partial update payload; fields left as None keep their stored value."""

    user_id: int | None = Field(
        default=None, description="When present, must match the target id"
    )
    first_name: str | None = Field(default=None, min_length=1, max_length=16)
    last_name: str | None = Field(default=None, min_length=1, max_length=16)
    email: str | None = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    role: int | None = Field(default=None, ge=0, le=255)
    status: bool | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude={"user_id"}, exclude_none=True)


class MutationStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


class MutationResult(BaseModel):
    """Outcome of a mutation. Expected failures are statuses, not exceptions."""

    status: MutationStatus
    user_id: int | None = None
    message: str
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status is MutationStatus.OK
