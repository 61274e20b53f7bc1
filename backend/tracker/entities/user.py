"""
Behavior Tracker Backend: User Entity
=====================================

What:  An account: normalized email, password hash, last sign-in time.
How:   Email is trimmed and lowercased, then checked with the same rule the
       request schemas use. The hash is only changed via set_password_hash()
       and sign-ins via record_sign_in(); both touch updated_at.

Three serialized forms:
    to_dto()   → UserDTO, the strict wire shape (no password hash)
    to_json()  → storage JSON with ISO strings, hash included
    to_row()   → column values for the users table (native datetimes)
"""

from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from tracker.entities.base import BaseEntity, pick
from tracker.exceptions import EmptyHashError, InvalidEmailError
from tracker.schemas.dtos import UserDTO
from tracker.timestamps import parse_timestamp, to_iso, utcnow
from tracker.validation.fields import normalize_email


class User(BaseEntity):
    _mutable_fields = frozenset({"last_sign_in_at"})

    def __init__(
        self,
        email: str,
        password_hash: str = "",
        last_sign_in_at: Optional[datetime] = None,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        super().__init__(id=id, created_at=created_at, updated_at=updated_at)
        self._email = self.validate_email(email)
        self._password_hash = password_hash or ""
        self.last_sign_in_at = parse_timestamp(last_sign_in_at)

    @property
    def email(self) -> str:
        return self._email

    @staticmethod
    def validate_email(value: Any) -> str:
        """Returns the normalized email or raises InvalidEmailError."""
        try:
            return normalize_email(value)
        except PydanticValidationError:
            raise InvalidEmailError(value) from None

    # ── Password ──────────────────────────────────────────────────────────

    @property
    def password_hash(self) -> str:
        return self._password_hash

    def set_password_hash(self, password_hash: str) -> None:
        if not password_hash or not password_hash.strip():
            raise EmptyHashError()
        self._password_hash = password_hash
        self.touch()

    def has_password(self) -> bool:
        return len(self._password_hash) > 0

    # ── Sign-in tracking ──────────────────────────────────────────────────

    def record_sign_in(self) -> None:
        self.last_sign_in_at = utcnow()
        self.touch()

    # ── Serialization ─────────────────────────────────────────────────────

    def to_dto(self) -> UserDTO:
        return UserDTO(
            id=self.id,
            email=self.email,
            created_at=to_iso(self.created_at),
            updated_at=to_iso(self.updated_at),
            last_sign_in_at=to_iso(self.last_sign_in_at),
        )

    @classmethod
    def from_dto(cls, dto: UserDTO) -> "User":
        return cls(
            id=dto.id,
            email=dto.email,
            created_at=parse_timestamp(dto.created_at),
            updated_at=parse_timestamp(dto.updated_at),
            last_sign_in_at=parse_timestamp(dto.last_sign_in_at),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            **super().to_json(),
            "email": self.email,
            "password_hash": self.password_hash,
            "last_sign_in_at": to_iso(self.last_sign_in_at),
        }

    @classmethod
    def _props_from_json(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            **super()._props_from_json(data),
            "email": data.get("email"),
            "password_hash": pick(data, "password_hash", "passwordHash") or "",
            "last_sign_in_at": parse_timestamp(pick(data, "last_sign_in_at", "lastSignInAt")),
        }

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "password_hash": self.password_hash,
            "last_sign_in_at": self.last_sign_in_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
