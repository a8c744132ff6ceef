from loguru import logger
from sqlmodel import Session

from src.userhub.core.models.auth import AuthResponse, LoginRequest, RegisterRequest
from src.userhub.core.models.user import AddUserRequest, MutationResult
from src.userhub.core.services.auth.credentials import CredentialHasher
from src.userhub.core.services.jwt.jwt_gen import JwtGeneratorService
from src.userhub.core.services.user.user_management import UserManagementService
from src.userhub.entities.core.user import User, UserRepository


class AuthService:
    """Registration and password login."""

    def __init__(
        self,
        db_session: Session,
        user_management: UserManagementService,
        hasher: CredentialHasher,
        jwt_generator: JwtGeneratorService,
    ):
        self._user_repo = UserRepository(db_session)
        self._user_management = user_management
        self._hasher = hasher
        self._jwt_generator = jwt_generator

    def register(self, request: RegisterRequest) -> MutationResult:
        """Create a user with the configured default role."""
        return self._user_management.add_user(
            AddUserRequest(**request.model_dump(), role=None)
        )

    def login(self, request: LoginRequest) -> AuthResponse | None:
        """Check credentials and issue an access token.

        Returns:
            The issued token, or None when the email is unknown or the
            password does not match
        """
        row = self._user_repo.find_live_by_email(request.email)
        if row is None or not self._hasher.verify(row.password_hash, request.password):
            logger.info("Failed login attempt for {}", request.email.strip().lower())
            return None

        user = User.from_row(row)
        token, expires_at = self._jwt_generator.generate_access_token(user)
        logger.info("User {} logged in", user.id)
        return AuthResponse(
            token=token,
            expires_at=expires_at,
            user_id=user.id,
            full_name=user.full_name,
            role=user.role,
        )
