"""
Behavior Tracker Backend: Entity Base Class
===========================================

What:  Shared identity and timestamp lifecycle for every domain entity.
How:   `id` is immutable after construction and must be a UUID v4.
       `created_at` never changes; `updated_at` only moves forward, through
       `touch()`, which every mutator calls.

Lifecycle:
    construct ──▶ zero or more mutations (each one touches) ──▶ row deleted
                                                                by the store

Serialization:
    to_json()    → {"id", "created_at", "updated_at"} with ISO-8601 strings
    from_json()  → accepts snake_case or camelCase keys, ISO strings or
                   datetime objects
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from tracker.exceptions import InvalidIdError
from tracker.timestamps import parse_timestamp, to_iso, utcnow
from tracker.validation.fields import is_uuid4

E = TypeVar("E", bound="BaseEntity")


def pick(data: Mapping[str, Any], snake: str, camel: str) -> Any:
    """Value under the snake_case key, falling back to the camelCase one."""
    value = data.get(snake)
    if value is None:
        value = data.get(camel)
    return value


class BaseEntity(ABC):
    """
    Abstract base for entities backed by one row.

    Subclasses list their mutable fields in `_mutable_fields` so `update()`
    can reject unknown or immutable names, and implement `to_row()`.
    """

    _mutable_fields: frozenset = frozenset()

    def __init__(
        self,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        if id is None:
            id = str(uuid.uuid4())
        else:
            self.validate_id(id)
            id = id.lower()
        now = utcnow()
        self._id = id
        self._created_at = parse_timestamp(created_at) or now
        self.updated_at = parse_timestamp(updated_at) or now

    @property
    def id(self) -> str:
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @staticmethod
    def validate_id(value: Any) -> None:
        if not is_uuid4(value):
            raise InvalidIdError(value)

    def touch(self) -> None:
        # Clock steps backwards must not move updated_at behind its last value
        self.updated_at = max(utcnow(), self.updated_at)

    def update(self, **changes: Any) -> None:
        """Assigns `changes` to mutable fields, then touches."""
        unknown = set(changes) - self._mutable_fields
        if unknown:
            raise AttributeError(
                f"{type(self).__name__} cannot update field(s): {', '.join(sorted(unknown))}"
            )
        for name, value in changes.items():
            setattr(self, name, value)
        self.touch()

    # ── Serialization ─────────────────────────────────────────────────────

    @abstractmethod
    def to_row(self) -> Dict[str, Any]:
        """Column values for the entity's table, with native datetimes."""

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }

    @classmethod
    def _props_from_json(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "id": data.get("id"),
            "created_at": parse_timestamp(pick(data, "created_at", "createdAt")),
            "updated_at": parse_timestamp(pick(data, "updated_at", "updatedAt")),
        }

    @classmethod
    def from_json(cls: Type[E], data: Mapping[str, Any]) -> E:
        return cls(**cls._props_from_json(data))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BaseEntity) or type(other) is not type(self):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id})>"
