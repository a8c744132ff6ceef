"""User entity module.

This module contains all User-related classes organized by responsibility:
- User: Projection returned to callers (no credential)
- UserTable: Database persistence model
- UserRepository: Soft-delete aware data access layer
"""

from .entity import User
from .repository import UserRepository
from .table import UserTable

__all__ = ["User", "UserTable", "UserRepository"]
