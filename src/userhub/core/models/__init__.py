"""Models shared by the directory services and the HTTP layer."""

from .auth import AuthResponse, LoginRequest, RegisterRequest, TokenClaims
from .directory import PagedResult, QuerySpecification, SortField
from .user import (
    AddUserRequest,
    MutationResult,
    MutationStatus,
    UpdateUserRequest,
)

__all__ = [
    "AddUserRequest",
    "AuthResponse",
    "LoginRequest",
    "MutationResult",
    "MutationStatus",
    "PagedResult",
    "QuerySpecification",
    "RegisterRequest",
    "SortField",
    "TokenClaims",
    "UpdateUserRequest",
]
