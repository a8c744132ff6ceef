"""User repository: soft-delete aware data access."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, func
from sqlmodel import Session, col, select

from src.userhub.entities.core.user.table import UserTable


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """Data-access layer for users.

    Every read is scoped to live rows (``deleted_at IS NULL``). Writes are
    staged on the session and committed by ``save_changes``.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @staticmethod
    def _live():
        return select(UserTable).where(col(UserTable.deleted_at).is_(None))

    def find_live_by_id(self, user_id: int) -> UserTable | None:
        statement = self._live().where(UserTable.id == user_id)
        return self._session.exec(statement).first()

    def find_live_by_email(self, email: str) -> UserTable | None:
        statement = self._live().where(UserTable.email == normalize_email(email))
        return self._session.exec(statement).first()

    def email_in_use(self, email: str, exclude_id: int | None = None) -> bool:
        """Whether a live user other than ``exclude_id`` holds ``email``."""
        row = self.find_live_by_email(email)
        return row is not None and row.id != exclude_id

    def query_live(
        self,
        where: ColumnElement[bool] | None,
        order_by: Sequence[Any],
        skip: int,
        take: int,
    ) -> tuple[list[UserTable], int]:
        """Run a filtered, ordered, windowed query over live rows.

        Args:
            where: Optional extra predicate combined with the liveness filter
            order_by: Ordering clauses applied before the window
            skip: Rows to skip (must be >= 0)
            take: Maximum rows to return (must be >= 0)

        Returns:
            Tuple of (rows in the window, total matching rows before windowing)
        """
        statement = self._live()
        if where is not None:
            statement = statement.where(where)

        count_statement = select(func.count()).select_from(statement.subquery())
        total = self._session.exec(count_statement).one()

        if take == 0:
            return [], total

        page_statement = statement.order_by(*order_by).offset(skip).limit(take)
        rows = list(self._session.exec(page_statement).all())
        return rows, total

    def list_live(self, order_by: Sequence[Any] = ()) -> list[UserTable]:
        statement = self._live()
        if order_by:
            statement = statement.order_by(*order_by)
        return list(self._session.exec(statement).all())

    def insert(self, row: UserTable) -> int:
        """Stage a new row and flush it so the store assigns its id."""
        row.email = normalize_email(row.email)
        self._session.add(row)
        self._session.flush()
        if row.id is None:
            raise RuntimeError("Store did not assign an id to the inserted user")
        return row.id

    def stage(self, row: UserTable) -> None:
        self._session.add(row)

    def save_changes(self) -> None:
        self._session.commit()

    def discard_changes(self) -> None:
        self._session.rollback()
