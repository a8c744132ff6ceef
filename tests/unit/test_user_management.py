"""Unit tests for user mutations and their cache invalidation."""

from collections.abc import Callable
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.userhub.core.cache import CacheKeys, ReadThroughCache
from src.userhub.core.models import (
    AddUserRequest,
    MutationStatus,
    UpdateUserRequest,
)
from src.userhub.core.services import CredentialHasher, UserManagementService
from src.userhub.core.storage import (
    DisallowedExtensionError,
    FileStorageError,
    InMemoryFileStorage,
)
from src.userhub.entities.core.user import User, UserRepository, UserTable
from src.userhub.runtime.config.config_data import ConfigData
from src.userhub.runtime.context import with_context

PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 16


def _request(email: str, **overrides) -> AddUserRequest:
    fields = {
        "first_name": "Test",
        "last_name": "User",
        "email": email,
        "password": "secret-pw",
    }
    fields.update(overrides)
    return AddUserRequest(**fields)


class TestAddUser:
    """Test user creation."""

    def test_add_user_persists_hash_and_default_role(
        self,
        session: Session,
        user_management_service: UserManagementService,
        hasher: CredentialHasher,
    ):
        result = user_management_service.add_user(_request("  New@Example.com "))

        assert result.status is MutationStatus.OK
        row = UserRepository(session).find_live_by_id(result.user_id)
        assert row.email == "new@example.com"
        assert row.role == 1
        assert row.status is True
        assert row.password_hash != "secret-pw"
        assert hasher.verify(row.password_hash, "secret-pw")
        assert isinstance(result.data, User)

    def test_role_default_follows_config(
        self, session: Session, user_management_service: UserManagementService
    ):
        override = ConfigData()
        override.users.default_role = 5
        with with_context(override):
            result = user_management_service.add_user(_request("cfg@example.com"))

        assert result.data.role == 5

    def test_explicit_role_wins(self, user_management_service: UserManagementService):
        result = user_management_service.add_user(_request("admin@example.com", role=2))

        assert result.data.role == 2

    def test_duplicate_email_conflicts_case_insensitively(
        self, session: Session, user_management_service: UserManagementService
    ):
        """Adding A@x.io while a@x.io is live returns CONFLICT and inserts nothing."""
        user_management_service.add_user(_request("a@x.io"))

        result = user_management_service.add_user(_request("A@x.io"))

        assert result.status is MutationStatus.CONFLICT
        assert len(UserRepository(session).list_live()) == 1

    def test_store_uniqueness_violation_maps_to_conflict(
        self, user_management_service: UserManagementService, cache: ReadThroughCache
    ):
        """The losing side of an add/add race sees CONFLICT, not an error."""
        repo = user_management_service._user_repo
        repo.find_live_by_email = Mock(return_value=None)
        repo.insert = Mock(side_effect=IntegrityError("INSERT", {}, Exception("unique")))
        generation = cache.generation

        result = user_management_service.add_user(_request("race@x.io"))

        assert result.status is MutationStatus.CONFLICT
        assert cache.generation == generation

    def test_unexpected_commit_failure_propagates(
        self, user_management_service: UserManagementService
    ):
        repo = user_management_service._user_repo
        repo.save_changes = Mock(side_effect=RuntimeError("disk full"))
        repo.discard_changes = Mock()

        with pytest.raises(RuntimeError, match="disk full"):
            user_management_service.add_user(_request("err@x.io"))
        repo.discard_changes.assert_called_once()


class TestUpdateUser:
    """Test partial updates."""

    def test_partial_update_keeps_other_fields(
        self,
        session: Session,
        user_management_service: UserManagementService,
        add_user: Callable[..., User],
    ):
        user = add_user("Ann", "Lee", "ann@x.io")

        result = user_management_service.update_user(
            user.id, UpdateUserRequest(first_name="Anna")
        )

        assert result.status is MutationStatus.OK
        row = UserRepository(session).find_live_by_id(user.id)
        assert row.first_name == "Anna"
        assert row.last_name == "Lee"
        assert row.email == "ann@x.io"
        assert row.updated_at is not None

    def test_update_unknown_user(self, user_management_service: UserManagementService):
        result = user_management_service.update_user(404, UpdateUserRequest(first_name="X"))

        assert result.status is MutationStatus.NOT_FOUND

    def test_email_taken_by_other_user_conflicts_and_changes_nothing(
        self,
        session: Session,
        user_management_service: UserManagementService,
        add_user: Callable[..., User],
    ):
        """Moving user 7's email onto user 9's returns CONFLICT; row 7 is unchanged."""
        first = add_user("First", "User", "first@x.io")
        second = add_user("Second", "User", "second@x.io")

        result = user_management_service.update_user(
            first.id, UpdateUserRequest(first_name="Renamed", email="SECOND@x.io")
        )

        assert result.status is MutationStatus.CONFLICT
        session.expire_all()
        row = UserRepository(session).find_live_by_id(first.id)
        assert row.email == "first@x.io"
        assert row.first_name == "First"
        assert second.id != first.id

    def test_keeping_own_email_is_not_a_conflict(
        self, user_management_service: UserManagementService, add_user: Callable[..., User]
    ):
        user = add_user("Own", "Email", "own@x.io")

        result = user_management_service.update_user(
            user.id, UpdateUserRequest(email="OWN@x.io", phone="+1 555 0100")
        )

        assert result.status is MutationStatus.OK
        assert result.data.phone == "+1 555 0100"

    def test_email_of_deleted_user_is_free(
        self, user_management_service: UserManagementService, add_user: Callable[..., User]
    ):
        gone = add_user("Gone", "User", "gone@x.io")
        user = add_user("Live", "User", "live@x.io")
        user_management_service.delete_user(gone.id)

        result = user_management_service.update_user(
            user.id, UpdateUserRequest(email="gone@x.io")
        )

        assert result.status is MutationStatus.OK


class TestDeleteUser:
    """Test soft deletion."""

    def test_delete_is_soft_and_second_delete_is_not_found(
        self,
        session: Session,
        user_management_service: UserManagementService,
        add_user: Callable[..., User],
    ):
        user = add_user("Del", "User", "del@x.io")

        first = user_management_service.delete_user(user.id)
        row = session.get(UserTable, user.id)
        deleted_at = row.deleted_at

        second = user_management_service.delete_user(user.id)

        assert first.status is MutationStatus.OK
        assert second.status is MutationStatus.NOT_FOUND
        assert deleted_at is not None
        assert row.deleted_at == deleted_at
        assert UserRepository(session).find_live_by_id(user.id) is None

    def test_integrity_failure_propagates_and_keeps_user(
        self,
        session: Session,
        user_management_service: UserManagementService,
        cache: ReadThroughCache,
        add_user: Callable[..., User],
    ):
        """A delete the store rejects is an error, never a silent OK."""
        user = add_user("Del", "User", "del@x.io")
        generation = cache.generation
        repo = user_management_service._user_repo
        repo.save_changes = Mock(side_effect=IntegrityError("UPDATE", {}, Exception("fk")))

        with pytest.raises(IntegrityError):
            user_management_service.delete_user(user.id)

        assert cache.generation == generation
        assert UserRepository(session).find_live_by_id(user.id) is not None


class TestInvalidation:
    """Test that every committed write keeps cached reads coherent."""

    @pytest.mark.parametrize("mutation", ["add", "update", "delete", "avatar"])
    def test_each_mutation_drops_snapshot_and_bumps_generation(
        self,
        user_management_service: UserManagementService,
        cache: ReadThroughCache,
        add_user: Callable[..., User],
        mutation: str,
    ):
        user = add_user("Cache", "User", "cache@x.io")
        cache.set(CacheKeys.USERS_ALL, ["stale"], ttl=300)
        generation = cache.generation

        if mutation == "add":
            result = user_management_service.add_user(_request("other@x.io"))
        elif mutation == "update":
            result = user_management_service.update_user(
                user.id, UpdateUserRequest(last_name="Changed")
            )
        elif mutation == "delete":
            result = user_management_service.delete_user(user.id)
        else:
            result = user_management_service.update_avatar(user.id, PNG, "me.png")

        assert result.ok
        assert CacheKeys.USERS_ALL not in cache
        assert cache.generation == generation + 1

    def test_failed_mutations_leave_cache_alone(
        self,
        user_management_service: UserManagementService,
        cache: ReadThroughCache,
        add_user: Callable[..., User],
    ):
        add_user("Cache", "User", "cache@x.io")
        cache.set(CacheKeys.USERS_ALL, ["cached"], ttl=300)
        generation = cache.generation

        user_management_service.add_user(_request("cache@x.io"))
        user_management_service.delete_user(999)

        assert cache.get(CacheKeys.USERS_ALL) == ["cached"]
        assert cache.generation == generation


class TestUpdateAvatar:
    """Test avatar replacement."""

    def test_upload_stores_reference(
        self,
        session: Session,
        user_management_service: UserManagementService,
        file_storage: InMemoryFileStorage,
        add_user: Callable[..., User],
    ):
        user = add_user("Pic", "User", "pic@x.io")

        result = user_management_service.update_avatar(user.id, PNG, "Me.PNG")

        assert result.status is MutationStatus.OK
        assert result.data.startswith("uploads/avatars/")
        assert result.data.endswith(".png")
        assert file_storage.read(result.data) == PNG
        assert UserRepository(session).find_live_by_id(user.id).avatar == result.data

    def test_replacing_removes_previous_file(
        self,
        user_management_service: UserManagementService,
        file_storage: InMemoryFileStorage,
        add_user: Callable[..., User],
    ):
        user = add_user("Pic", "User", "pic@x.io")
        old = user_management_service.update_avatar(user.id, PNG, "a.png").data

        new = user_management_service.update_avatar(user.id, PNG, "b.png").data

        assert new != old
        assert not file_storage.exists(old)
        assert file_storage.exists(new)

    def test_old_file_delete_failure_is_swallowed(
        self,
        session: Session,
        user_management_service: UserManagementService,
        file_storage: InMemoryFileStorage,
        add_user: Callable[..., User],
    ):
        user = add_user("Pic", "User", "pic@x.io")
        user_management_service.update_avatar(user.id, PNG, "a.png")
        file_storage.delete = Mock(side_effect=OSError("permission denied"))

        result = user_management_service.update_avatar(user.id, PNG, "b.png")

        assert result.status is MutationStatus.OK
        assert UserRepository(session).find_live_by_id(user.id).avatar == result.data

    def test_rejected_upload_propagates_and_changes_nothing(
        self,
        session: Session,
        user_management_service: UserManagementService,
        cache: ReadThroughCache,
        add_user: Callable[..., User],
    ):
        user = add_user("Pic", "User", "pic@x.io")
        generation = cache.generation

        with pytest.raises(DisallowedExtensionError):
            user_management_service.update_avatar(user.id, PNG, "evil.exe")

        assert UserRepository(session).find_live_by_id(user.id).avatar is None
        assert cache.generation == generation

    def test_storage_failure_propagates(
        self,
        user_management_service: UserManagementService,
        file_storage: InMemoryFileStorage,
        add_user: Callable[..., User],
    ):
        user = add_user("Pic", "User", "pic@x.io")
        file_storage.save = Mock(side_effect=FileStorageError("bucket unavailable"))

        with pytest.raises(FileStorageError, match="bucket unavailable"):
            user_management_service.update_avatar(user.id, PNG, "a.png")

    def test_unknown_user(self, user_management_service: UserManagementService):
        result = user_management_service.update_avatar(404, PNG, "a.png")

        assert result.status is MutationStatus.NOT_FOUND

    def test_integrity_failure_discards_new_file_and_keeps_old(
        self,
        session: Session,
        user_management_service: UserManagementService,
        file_storage: InMemoryFileStorage,
        cache: ReadThroughCache,
        add_user: Callable[..., User],
    ):
        user = add_user("Pic", "User", "pic@x.io")
        old = user_management_service.update_avatar(user.id, PNG, "a.png").data
        generation = cache.generation

        saved = []
        original_save = file_storage.save

        def _recording_save(content, filename, folder):
            reference = original_save(content, filename, folder)
            saved.append(reference)
            return reference

        file_storage.save = _recording_save
        repo = user_management_service._user_repo
        repo.save_changes = Mock(side_effect=IntegrityError("UPDATE", {}, Exception("fk")))

        with pytest.raises(IntegrityError):
            user_management_service.update_avatar(user.id, PNG, "b.png")

        assert len(saved) == 1
        assert not file_storage.exists(saved[0])
        assert file_storage.exists(old)
        assert cache.generation == generation
        assert UserRepository(session).find_live_by_id(user.id).avatar == old
