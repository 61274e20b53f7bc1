"""
Behavior Tracker Backend: profiles Table
========================================

What:  Per-user display data and organization membership.
Key:   `user_id` is both the primary key and a foreign key to users, so a
       profile id is the owning user's id.
"""

from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tracker.database import Base
from tracker.models.mixins import TimestampMixin


class Profile(TimestampMixin, Base):
    __tablename__ = "profiles"

    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    organization_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    # admin | user | parent
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_profiles_organization_id", "organization_id"),
        CheckConstraint("role IN ('admin', 'user', 'parent')", name="ck_profiles_role"),
    )
