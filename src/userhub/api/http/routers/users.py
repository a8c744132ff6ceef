"""User directory endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from loguru import logger

from src.userhub.api.http.deps import (
    get_cache,
    get_current_claims,
    get_user_directory_service,
    get_user_management_service,
    require_admin,
)
from src.userhub.api.http.schemas import ApiResponse, AvatarResponse, ensure_ok
from src.userhub.core import messages
from src.userhub.core.cache import ReadThroughCache
from src.userhub.core.models import (
    AddUserRequest,
    PagedResult,
    QuerySpecification,
    UpdateUserRequest,
)
from src.userhub.core.services import UserDirectoryService, UserManagementService
from src.userhub.core.storage import (
    DisallowedExtensionError,
    EmptyFileError,
    FileStorageError,
    FileTooLargeError,
)
from src.userhub.entities.core.user import User
from src.userhub.runtime.context import get_config

router = APIRouter(prefix="/user", tags=["users"])

_REJECTED_UPLOADS = (EmptyFileError, DisallowedExtensionError, FileTooLargeError)


def _avatar_response(request: Request, reference: str) -> AvatarResponse:
    base_url = str(request.base_url).rstrip("/")
    return AvatarResponse(relative_path=reference, url=f"{base_url}/{reference}")


@router.get(
    "/all",
    response_model=ApiResponse[PagedResult[User]],
    dependencies=[Depends(require_admin)],
)
def get_all_users(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1),
    search: str | None = Query(None),
    sort_by: str | None = Query(None),
    desc: bool = Query(False),
    directory: UserDirectoryService = Depends(get_user_directory_service),
) -> ApiResponse[PagedResult[User]]:
    """Filtered, sorted and paginated listing of live users."""
    spec = QuerySpecification(
        page=page, size=size, search=search, sort_by=sort_by, desc=desc
    )
    result = directory.get_all_users(spec)
    if not result.items:
        raise HTTPException(status_code=404, detail=messages.NO_USERS_FOUND)
    return ApiResponse(message=messages.SUCCESS, data=result)


@router.get(
    "",
    response_model=ApiResponse[list[User]],
    dependencies=[Depends(require_admin)],
)
def get_user_details(
    directory: UserDirectoryService = Depends(get_user_directory_service),
) -> ApiResponse[list[User]]:
    """Every live user, newest first."""
    return ApiResponse(message=messages.SUCCESS, data=directory.get_user_details())


@router.post("", response_model=ApiResponse[Any])
def add_user(
    request: AddUserRequest,
    users: UserManagementService = Depends(get_user_management_service),
) -> ApiResponse[Any]:
    result = ensure_ok(users.add_user(request))
    return ApiResponse(id=result.user_id, message=result.message)


@router.post(
    "/clear-cache",
    response_model=ApiResponse[Any],
    dependencies=[Depends(require_admin)],
)
def clear_cache(cache: ReadThroughCache = Depends(get_cache)) -> ApiResponse[Any]:
    cache.clear()
    return ApiResponse(message=messages.CACHE_CLEARED)


@router.get(
    "/{user_id}",
    response_model=ApiResponse[User],
    dependencies=[Depends(require_admin)],
)
def get_user_by_id(
    user_id: int,
    directory: UserDirectoryService = Depends(get_user_directory_service),
) -> ApiResponse[User]:
    user = directory.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail=messages.USER_NOT_FOUND)
    return ApiResponse(id=user.id, message=messages.SUCCESS, data=user)


@router.put(
    "/{user_id}",
    response_model=ApiResponse[User],
    dependencies=[Depends(require_admin)],
)
def update_user(
    user_id: int,
    request: UpdateUserRequest,
    users: UserManagementService = Depends(get_user_management_service),
) -> ApiResponse[User]:
    """Partially update a user; the body's user_id, when given, must match the path."""
    if request.user_id is not None and request.user_id != user_id:
        raise HTTPException(status_code=400, detail=messages.INVALID_REQUEST)
    result = ensure_ok(users.update_user(user_id, request))
    return ApiResponse(id=user_id, message=result.message, data=result.data)


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[Any],
    dependencies=[Depends(require_admin)],
)
def delete_user(
    user_id: int,
    users: UserManagementService = Depends(get_user_management_service),
) -> ApiResponse[Any]:
    result = ensure_ok(users.delete_user(user_id))
    return ApiResponse(id=user_id, message=result.message)


@router.post(
    "/{user_id}/avatar",
    response_model=ApiResponse[AvatarResponse],
    dependencies=[Depends(get_current_claims)],
)
def upload_avatar(
    user_id: int,
    request: Request,
    file: UploadFile | None = File(None),
    users: UserManagementService = Depends(get_user_management_service),
) -> ApiResponse[AvatarResponse]:
    """Replace a user's avatar. Any authenticated caller may upload."""
    if file is None:
        raise HTTPException(status_code=400, detail=messages.FILE_REQUIRED)

    # Read one byte past the limit so oversized uploads are still detected
    content = file.file.read(get_config().uploads.max_avatar_bytes + 1)
    if not content:
        raise HTTPException(status_code=400, detail=messages.FILE_REQUIRED)

    try:
        result = users.update_avatar(user_id, content, file.filename or "")
    except _REJECTED_UPLOADS as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except FileStorageError as e:
        logger.error(f"Avatar upload for user {user_id} failed: {e}")
        raise HTTPException(status_code=500, detail=messages.AVATAR_UPLOAD_ERROR) from e

    ensure_ok(result)
    return ApiResponse(
        id=user_id,
        message=messages.AVATAR_UPLOADED,
        data=_avatar_response(request, result.data),
    )


@router.get("/{user_id}/avatar", response_model=ApiResponse[AvatarResponse])
def get_avatar(
    user_id: int,
    request: Request,
    directory: UserDirectoryService = Depends(get_user_directory_service),
) -> ApiResponse[AvatarResponse]:
    user = directory.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail=messages.USER_NOT_FOUND)
    if not user.avatar or not user.avatar.strip():
        raise HTTPException(status_code=404, detail=messages.NO_AVATAR_FOUND)
    return ApiResponse(
        id=user_id,
        message=messages.SUCCESS,
        data=_avatar_response(request, user.avatar),
    )
