from dataclasses import dataclass

from src.userhub.core.cache import ReadThroughCache
from src.userhub.core.services import (
    CredentialHasher,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
)
from src.userhub.core.storage import FileStorage


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    cache: ReadThroughCache
    file_storage: FileStorage
    hasher: CredentialHasher
    jwt_generation_service: JwtGeneratorService
    jwt_verify_service: JwtVerificationService
