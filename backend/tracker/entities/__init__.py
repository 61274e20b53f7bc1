"""Domain entities: in-process wrappers owning one row's identity and timestamps."""

from tracker.entities.base import BaseEntity
from tracker.entities.user import User

__all__ = ["BaseEntity", "User"]
