"""
Behavior Tracker Backend: users Table
=====================================

What:  Account rows backing the User entity.
How:   Written from `User.to_row()`, read back through `User.from_json()`.

The password hash is stored alongside the account but never leaves the
process: UserDTO has no field for it.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tracker.database import Base
from tracker.models.mixins import TimestampMixin


class UserRecord(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    # Stored already normalized (lowercase, trimmed) by the User entity
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False, default="")
    last_sign_in_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    def __repr__(self) -> str:
        return f"<UserRecord(id={self.id}, email='{self.email}')>"
