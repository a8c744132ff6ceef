"""Response envelope shared by all API endpoints."""

from typing import Any, Generic, TypeVar

from fastapi import HTTPException
from pydantic import BaseModel, Field, computed_field

from src.userhub.core.models.user import MutationResult, MutationStatus

T = TypeVar("T")

_MUTATION_STATUS_CODES = {
    MutationStatus.NOT_FOUND: 404,
    MutationStatus.CONFLICT: 409,
}


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every endpoint, errors included."""

    id: int | str | None = Field(default=None, description="Subject of the response")
    status_code: int = 200
    message: str | None = None
    data: T | None = None

    @computed_field
    @property
    def success(self) -> bool:
        return 200 <= self.status_code < 300


class AvatarResponse(BaseModel):
    relative_path: str
    url: str


def ensure_ok(result: MutationResult, detail: str | None = None) -> MutationResult:
    """Raise the HTTP error matching a failed mutation, else return it."""
    if not result.ok:
        raise HTTPException(
            status_code=_MUTATION_STATUS_CODES[result.status],
            detail=detail or result.message,
        )
    return result


def error_body(status_code: int, message: Any, data: Any = None) -> dict[str, Any]:
    return ApiResponse[Any](
        status_code=status_code, message=str(message), data=data
    ).model_dump(mode="json")
