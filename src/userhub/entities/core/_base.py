from datetime import UTC, datetime

from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(UTC)


class Entity(BaseModel):
    """Base entity class for rows identified by a store-assigned integer id."""

    id: int = PydanticField(description="Unique identifier assigned by the store")

    created_at: datetime = PydanticField(default_factory=utcnow)
    updated_at: datetime | None = None


class EntityTable(SQLModel, table=False):
    """Base table with an auto-incrementing id and soft-delete timestamps.

    A row is live while ``deleted_at`` is NULL. Rows are never physically
    removed so that historical references stay resolvable.
    """

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="Unique identifier for the entity",
    )

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime | None = Field(default=None)
    deleted_at: datetime | None = Field(default=None, index=True)

    @property
    def is_live(self) -> bool:
        return self.deleted_at is None
