"""User database table model."""

from sqlalchemy import Index, text
from sqlmodel import Field

from src.userhub.entities.core._base import EntityTable

_LIVE_ROWS = text("deleted_at IS NULL")


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    Emails are stored trimmed and lower-cased, so the partial unique index
    enforces case-insensitive uniqueness among live rows. It is the final
    arbiter when two registrations for the same address race each other.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index(
            "ux_users_live_email",
            "email",
            unique=True,
            sqlite_where=_LIVE_ROWS,
            postgresql_where=_LIVE_ROWS,
        ),
    )

    first_name: str = Field(max_length=16)
    last_name: str = Field(max_length=16)
    email: str = Field(max_length=255)
    password_hash: str
    phone: str | None = Field(default=None, max_length=32)
    role: int = Field(default=1)
    avatar: str | None = None
    status: bool = Field(default=True)
