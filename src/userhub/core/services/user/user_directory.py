from loguru import logger
from sqlmodel import Session

from src.userhub.core.cache import CacheKeys, ReadThroughCache
from src.userhub.core.models.directory import PagedResult, QuerySpecification
from src.userhub.core.services.directory.query_engine import DirectoryQueryEngine
from src.userhub.entities.core.user import User, UserRepository
from src.userhub.runtime.context import get_config


class UserDirectoryService:
    """Cached reads over the user directory.

    Returned objects may be shared with other callers through the cache and
    must be treated as read-only.
    """

    def __init__(self, db_session: Session, cache: ReadThroughCache):
        self._user_repo = UserRepository(db_session)
        self._engine = DirectoryQueryEngine(self._user_repo)
        self._cache = cache

    def get_user_details(self) -> list[User]:
        """Snapshot of every live user, newest first."""
        ttl = get_config().cache.snapshot_ttl_seconds

        def _load() -> list[User]:
            users = self._engine.snapshot()
            logger.info("Cached {} users under {}", len(users), CacheKeys.USERS_ALL)
            return users

        return self._cache.get_or_compute(CacheKeys.USERS_ALL, ttl, _load)

    def paged_key(self, spec: QuerySpecification) -> str:
        """Cache key for ``spec`` under the configured invalidation mode."""
        if get_config().cache.paged_invalidation == "generation":
            return CacheKeys.users_paged(spec, self._cache.generation)
        return CacheKeys.users_paged(spec)

    def get_all_users(self, spec: QuerySpecification) -> PagedResult[User]:
        ttl = get_config().cache.page_ttl_seconds
        key = self.paged_key(spec)

        def _load() -> PagedResult[User]:
            result = self._engine.execute(spec)
            logger.info("Cached page {} ({} of {} users)", key, len(result.items), result.total)
            return result

        return self._cache.get_or_compute(key, ttl, _load)

    def get_user_by_id(self, user_id: int) -> User | None:
        row = self._user_repo.find_live_by_id(user_id)
        return None if row is None else User.from_row(row)
