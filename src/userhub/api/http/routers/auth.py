"""Registration, login and token introspection endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from src.userhub.api.http.deps import get_auth_service, get_current_claims
from src.userhub.api.http.schemas import ApiResponse, ensure_ok
from src.userhub.core import messages
from src.userhub.core.models.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenClaims,
)
from src.userhub.core.services import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=ApiResponse[dict[str, int]])
def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[dict[str, int]]:
    """Register a user with the default role."""
    result = ensure_ok(
        auth_service.register(request), detail=messages.EMAIL_ALREADY_EXISTS
    )
    return ApiResponse(
        id=result.user_id,
        message=messages.USER_REGISTERED,
        data={"user_id": result.user_id},
    )


@router.post("/login", response_model=ApiResponse[AuthResponse])
def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthResponse]:
    """Exchange email and password for an access token."""
    auth = auth_service.login(request)
    if auth is None:
        raise HTTPException(status_code=401, detail=messages.INVALID_CREDENTIALS)
    return ApiResponse(id=auth.user_id, message=messages.LOGIN_SUCCESSFUL, data=auth)


@router.get("/myinfo", response_model=ApiResponse[dict[str, Any]])
def my_info(
    claims: TokenClaims = Depends(get_current_claims),
) -> ApiResponse[dict[str, Any]]:
    """Identity of the caller as carried by its token."""
    return ApiResponse(
        id=claims.user_id,
        message=messages.USER_INFO_RETRIEVED,
        data={"user_id": claims.user_id, "full_name": claims.name, "role": claims.role},
    )
