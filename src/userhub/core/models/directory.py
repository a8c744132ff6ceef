"""Query and page models for directory listings."""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

T = TypeVar("T")


class SortField(str, Enum):
    """Columns a listing can be ordered by."""

    FIRST_NAME = "firstname"
    LAST_NAME = "lastname"
    EMAIL = "email"
    CREATED_AT = "createdat"

    @classmethod
    def parse(cls, value: str | None) -> SortField | None:
        """Map a caller-supplied sort name to a field; unknown names give None."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class QuerySpecification(BaseModel):
    """Page window, search and ordering of a directory listing.

    Page and size are not range-checked here; the HTTP layer rejects values
    below 1 and the query engine clamps whatever reaches it.
    """

    page: int = Field(default=1, description="1-based page number")
    size: int = Field(default=10, description="Items per page")
    search: str | None = Field(
        default=None, description="Case-insensitive substring of email or names"
    )
    sort_by: str | None = Field(
        default=None, description="firstname, lastname, email or createdat"
    )
    desc: bool = Field(default=False, description="Descending order")

    @property
    def normalized_search(self) -> str:
        return (self.search or "").strip().lower()

    @property
    def normalized_sort(self) -> str:
        return (self.sort_by or "").strip().lower()

    @property
    def sort_field(self) -> SortField | None:
        return SortField.parse(self.sort_by)


class PagedResult(BaseModel, Generic[T]):
    """One page of a listing plus the size of the whole match set."""

    page: int
    size: int
    total: int = Field(description="Matching rows before paging")
    items: list[T] = Field(default_factory=list)

    @computed_field
    @property
    def total_pages(self) -> int:
        if self.size < 1:
            return 0
        return -(-self.total // self.size)
