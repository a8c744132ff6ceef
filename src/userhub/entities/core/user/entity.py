"""User domain entity."""

from typing import Any

from pydantic import Field, computed_field

from src.userhub.entities.core._base import Entity
from src.userhub.entities.core.user.table import UserTable


class User(Entity):
    """User as seen by callers of the directory.

    This is the projection of a ``UserTable`` row: the credential is dropped
    and the full name is computed.
    """

    first_name: str = Field(description="User's first name")
    last_name: str = Field(description="User's last name")
    email: str = Field(description="User's email address")
    phone: str | None = Field(default=None, description="User's phone number")
    role: int = Field(description="Role code")
    avatar: str | None = Field(default=None, description="Stored avatar reference")
    status: bool = Field(default=True, description="Whether the account is active")

    @computed_field
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_row(cls, row: UserTable) -> "User":
        return cls.model_validate(row, from_attributes=True)

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.first_name == other.first_name
            and self.last_name == other.last_name
            and self.email == other.email
            and self.phone == other.phone
            and self.role == other.role
            and self.avatar == other.avatar
            and self.status == other.status
        )

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash((
            self.id,
            self.first_name,
            self.last_name,
            self.email,
            self.phone,
            self.role,
            self.avatar,
            self.status,
        ))
