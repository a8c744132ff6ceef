"""Filtered, sorted, paginated listings over live users."""

from typing import Any

from loguru import logger
from sqlalchemy import ColumnElement, func, or_
from sqlmodel import col

from src.userhub.core.models.directory import PagedResult, QuerySpecification, SortField
from src.userhub.entities.core.user import User, UserRepository, UserTable

_SORT_COLUMNS = {
    SortField.FIRST_NAME: UserTable.first_name,
    SortField.LAST_NAME: UserTable.last_name,
    SortField.EMAIL: UserTable.email,
    SortField.CREATED_AT: UserTable.created_at,
}


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_predicate(term: str) -> ColumnElement[bool] | None:
    """Case-insensitive substring match on email, first name or last name."""
    term = term.strip().lower()
    if not term:
        return None
    pattern = _like_pattern(term)
    return or_(
        func.lower(col(UserTable.email)).like(pattern, escape="\\"),
        func.lower(col(UserTable.first_name)).like(pattern, escape="\\"),
        func.lower(col(UserTable.last_name)).like(pattern, escape="\\"),
    )


def sort_clauses(sort_field: SortField | None, desc: bool) -> list[Any]:
    """Ordering for a listing.

    A known field honors ``desc`` and ties break on id ascending. Unknown or
    absent fields order by id ascending whatever ``desc`` says.
    """
    id_ascending = col(UserTable.id).asc()
    if sort_field is None:
        return [id_ascending]
    column = col(_SORT_COLUMNS[sort_field])
    return [column.desc() if desc else column.asc(), id_ascending]


def page_window(page: int, size: int) -> tuple[int, int]:
    """Translate page/size into (skip, take), clamping both at zero."""
    take = max(size, 0)
    skip = max(page - 1, 0) * take
    return skip, take


class DirectoryQueryEngine:
    """Executes a ``QuerySpecification`` against the user store.

    The engine raises no domain errors: an empty page is a normal result and
    out-of-range page/size values are clamped rather than rejected.
    """

    def __init__(self, repository: UserRepository) -> None:
        self._repository = repository

    def execute(self, spec: QuerySpecification) -> PagedResult[User]:
        skip, take = page_window(spec.page, spec.size)
        rows, total = self._repository.query_live(
            where=search_predicate(spec.normalized_search),
            order_by=sort_clauses(spec.sort_field, spec.desc),
            skip=skip,
            take=take,
        )
        logger.debug(
            "Directory query page={} size={} search={!r} sort={!r} desc={} -> {}/{}",
            spec.page,
            spec.size,
            spec.normalized_search,
            spec.normalized_sort,
            spec.desc,
            len(rows),
            total,
        )
        return PagedResult[User](
            page=spec.page,
            size=spec.size,
            total=total,
            items=[User.from_row(row) for row in rows],
        )

    def snapshot(self) -> list[User]:
        """All live users, newest first."""
        rows = self._repository.list_live(
            order_by=[col(UserTable.created_at).desc(), col(UserTable.id).desc()]
        )
        return [User.from_row(row) for row in rows]
