"""Centralized cache key derivation."""

from urllib.parse import quote

from src.userhub.core.models.directory import QuerySpecification


def _encode(part: str) -> str:
    # Free-text parts are percent-encoded, '_' included, so the separator
    # between key segments stays unambiguous.
    return quote(part, safe="").replace("_", "%5F")


class CacheKeys:
    """Deterministic keys for cached directory reads."""

    USERS_ALL = "users:all"

    @staticmethod
    def user_by_id(user_id: int) -> str:
        return f"users:{user_id}"

    @staticmethod
    def users_paged(spec: QuerySpecification, generation: int | None = None) -> str:
        """Key for one page of a filtered, sorted listing.

        Search and sort are trimmed and lower-cased before encoding, so specs
        that differ only in casing or surrounding whitespace share a key.

        Args:
            spec: The listing query
            generation: Directory version to embed; None omits it

        Returns:
            e.g. ``users:paged:g3:2_10_ann_firstname_0``
        """
        prefix = "users:paged:" if generation is None else f"users:paged:g{generation}:"
        return (
            f"{prefix}{spec.page}_{spec.size}_"
            f"{_encode(spec.normalized_search)}_{_encode(spec.normalized_sort)}_"
            f"{1 if spec.desc else 0}"
        )
