"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from src.userhub.api.http.app_data import ApplicationDependencies
from src.userhub.core.cache import ReadThroughCache
from src.userhub.core.models.auth import TokenClaims
from src.userhub.core.services import (
    AuthService,
    CredentialHasher,
    JwtGeneratorService,
    JwtVerificationService,
    UserDirectoryService,
    UserManagementService,
)
from src.userhub.core.storage import FileStorage
from src.userhub.runtime.context import get_config


def get_db_session(request: Request) -> Generator[Session]:
    """Get a database session scoped to the request."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_cache(request: Request) -> ReadThroughCache:
    """Get the process-wide directory cache."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.cache


def get_file_storage(request: Request) -> FileStorage:
    """Get the file storage backend."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.file_storage


def get_credential_hasher(request: Request) -> CredentialHasher:
    """Get the password hasher."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.hasher


def get_jwt_generation_service(request: Request) -> JwtGeneratorService:
    """Get the JWT generation service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.jwt_generation_service


def get_jwt_verify_service(request: Request) -> JwtVerificationService:
    """Get the JWT verification service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.jwt_verify_service


def get_user_directory_service(
    db_session: Session = Depends(get_db_session),
    cache: ReadThroughCache = Depends(get_cache),
) -> UserDirectoryService:
    return UserDirectoryService(db_session, cache)


def get_user_management_service(
    db_session: Session = Depends(get_db_session),
    cache: ReadThroughCache = Depends(get_cache),
    hasher: CredentialHasher = Depends(get_credential_hasher),
    file_storage: FileStorage = Depends(get_file_storage),
) -> UserManagementService:
    return UserManagementService(db_session, cache, hasher, file_storage)


def get_auth_service(
    db_session: Session = Depends(get_db_session),
    user_management: UserManagementService = Depends(get_user_management_service),
    hasher: CredentialHasher = Depends(get_credential_hasher),
    jwt_generator: JwtGeneratorService = Depends(get_jwt_generation_service),
) -> AuthService:
    return AuthService(db_session, user_management, hasher, jwt_generator)


def get_current_claims(
    request: Request,
    jwt_verify: JwtVerificationService = Depends(get_jwt_verify_service),
) -> TokenClaims:
    """Authenticate the request using a Bearer token."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Missing Bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = auth_header.split(" ", 1)[1].strip()
    claims = jwt_verify.verify_jwt(token)
    request.state.claims = claims
    return claims


def require_admin(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
    """Require the authenticated caller to hold an administrative role."""
    if claims.role not in get_config().users.admin_roles:
        raise HTTPException(status_code=403, detail="Administrator role required")
    return claims
