from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.userhub.core import messages
from src.userhub.core.cache import CacheKeys, ReadThroughCache
from src.userhub.core.models.user import (
    AddUserRequest,
    MutationResult,
    MutationStatus,
    UpdateUserRequest,
)
from src.userhub.core.services.auth.credentials import CredentialHasher
from src.userhub.core.storage.file_storage import FileStorage
from src.userhub.entities.core._base import utcnow
from src.userhub.entities.core.user import User, UserRepository, UserTable
from src.userhub.entities.core.user.repository import normalize_email
from src.userhub.runtime.context import get_config


class UserManagementService:
    """Creates, updates and soft-deletes users, keeping the cache coherent.

    Every committed write drops the snapshot entry and advances the cache
    generation before the call returns. Expected failures (unknown user,
    duplicate email) come back as a ``MutationResult`` status; storage and
    database faults propagate.
    """

    def __init__(
        self,
        db_session: Session,
        cache: ReadThroughCache,
        hasher: CredentialHasher,
        file_storage: FileStorage,
    ):
        self._user_repo = UserRepository(db_session)
        self._cache = cache
        self._hasher = hasher
        self._file_storage = file_storage

    def _invalidate(self, action: str, user_id: int | None) -> None:
        self._cache.invalidate(CacheKeys.USERS_ALL)
        generation = self._cache.bump_generation()
        logger.info(
            "User {} {}; directory cache invalidated (generation {})",
            user_id,
            action,
            generation,
        )

    def _commit(
        self, action: str, user_id: int | None, email_conflict_possible: bool = True
    ) -> bool:
        """Commit staged changes.

        Returns False when the live-email index rejects them. Writes that never
        touch the email re-raise the IntegrityError instead.
        """
        try:
            self._user_repo.save_changes()
        except IntegrityError as e:
            self._user_repo.discard_changes()
            if not email_conflict_possible:
                logger.error(f"Integrity error while committing user {user_id} {action}: {e}")
                raise
            logger.warning("User {} {} rejected: email already in use", user_id, action)
            return False
        except Exception as e:
            logger.error(f"Error while committing user {user_id} {action}: {e}")
            self._user_repo.discard_changes()
            raise
        return True

    def add_user(self, request: AddUserRequest) -> MutationResult:
        email = normalize_email(request.email)
        if self._user_repo.find_live_by_email(email) is not None:
            return MutationResult(
                status=MutationStatus.CONFLICT, message=messages.USER_ALREADY_EXISTS
            )

        role = request.role if request.role is not None else get_config().users.default_role
        row = UserTable(
            first_name=request.first_name.strip(),
            last_name=request.last_name.strip(),
            email=email,
            password_hash=self._hasher.hash(request.password),
            phone=request.phone,
            role=role,
            status=True,
            created_at=utcnow(),
        )

        try:
            user_id = self._user_repo.insert(row)
        except IntegrityError:
            self._user_repo.discard_changes()
            logger.warning("Insert for {} rejected: email already in use", email)
            return MutationResult(
                status=MutationStatus.CONFLICT, message=messages.USER_ALREADY_EXISTS
            )

        if not self._commit("add", user_id):
            return MutationResult(
                status=MutationStatus.CONFLICT, message=messages.USER_ALREADY_EXISTS
            )

        self._invalidate("added", user_id)
        return MutationResult(
            status=MutationStatus.OK,
            user_id=user_id,
            message=messages.USER_ADDED,
            data=User.from_row(row),
        )

    def update_user(self, user_id: int, request: UpdateUserRequest) -> MutationResult:
        """Apply the non-empty fields of ``request``; last write wins."""
        row = self._user_repo.find_live_by_id(user_id)
        if row is None:
            return MutationResult(
                status=MutationStatus.NOT_FOUND,
                user_id=user_id,
                message=messages.USER_DOES_NOT_EXIST,
            )

        changes = request.changes()
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
            if self._user_repo.email_in_use(changes["email"], exclude_id=row.id):
                return MutationResult(
                    status=MutationStatus.CONFLICT,
                    user_id=user_id,
                    message=messages.EMAIL_ALREADY_EXISTS,
                )
        for name in ("first_name", "last_name"):
            if name in changes:
                changes[name] = changes[name].strip()

        for field, value in changes.items():
            setattr(row, field, value)
        row.updated_at = utcnow()
        self._user_repo.stage(row)

        if not self._commit("update", user_id):
            return MutationResult(
                status=MutationStatus.CONFLICT,
                user_id=user_id,
                message=messages.EMAIL_ALREADY_EXISTS,
            )

        self._invalidate("updated", user_id)
        return MutationResult(
            status=MutationStatus.OK,
            user_id=user_id,
            message=messages.USER_UPDATED,
            data=User.from_row(row),
        )

    def delete_user(self, user_id: int) -> MutationResult:
        """Soft-delete a user. Deleting an already deleted user is NOT_FOUND."""
        row = self._user_repo.find_live_by_id(user_id)
        if row is None:
            return MutationResult(
                status=MutationStatus.NOT_FOUND,
                user_id=user_id,
                message=messages.USER_DOES_NOT_EXIST,
            )

        row.deleted_at = utcnow()
        self._user_repo.stage(row)
        self._commit("delete", user_id, email_conflict_possible=False)

        self._invalidate("deleted", user_id)
        return MutationResult(
            status=MutationStatus.OK, user_id=user_id, message=messages.USER_DELETED
        )

    def update_avatar(self, user_id: int, content: bytes, filename: str) -> MutationResult:
        """Store a new avatar and point the user at it.

        The previous file is removed only after the new reference is
        committed, and failing to remove it never fails the call.

        Raises:
            FileStorageError: When the upload is rejected or cannot be stored
        """
        row = self._user_repo.find_live_by_id(user_id)
        if row is None:
            return MutationResult(
                status=MutationStatus.NOT_FOUND,
                user_id=user_id,
                message=messages.USER_NOT_FOUND,
            )

        folder = get_config().uploads.avatars_folder
        reference = self._file_storage.save(content, filename, folder)
        previous = row.avatar

        row.avatar = reference
        row.updated_at = utcnow()
        self._user_repo.stage(row)
        try:
            self._commit("avatar update", user_id, email_conflict_possible=False)
        except Exception:
            self._discard_file(reference)
            raise

        if previous and previous.strip():
            self._discard_file(previous)

        self._invalidate("avatar updated", user_id)
        return MutationResult(
            status=MutationStatus.OK,
            user_id=user_id,
            message=messages.AVATAR_UPLOADED,
            data=reference,
        )

    def _discard_file(self, reference: str) -> None:
        try:
            if not self._file_storage.delete(reference):
                logger.debug("Avatar {} was already gone", reference)
        except Exception as e:
            logger.warning("Failed to delete avatar {}: {}", reference, e)
