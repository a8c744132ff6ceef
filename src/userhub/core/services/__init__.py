"""Core services exports."""

# Auth Services
from .auth.auth_service import AuthService
from .auth.credentials import CredentialHasher

# Database Service
from .database.db_session import DbSessionService

# Directory
from .directory.query_engine import DirectoryQueryEngine

# JWT Services
from .jwt.jwt_gen import JwtGeneratorService
from .jwt.jwt_verify import JwtVerificationService

# User Services
from .user.user_directory import UserDirectoryService
from .user.user_management import UserManagementService

__all__ = [
    # Auth Services
    "AuthService",
    "CredentialHasher",
    # Database Service
    "DbSessionService",
    # Directory
    "DirectoryQueryEngine",
    # JWT Services
    "JwtGeneratorService",
    "JwtVerificationService",
    # User Services
    "UserDirectoryService",
    "UserManagementService",
]
