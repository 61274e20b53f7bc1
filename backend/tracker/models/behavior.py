"""
Behavior Tracker Backend: Behavior Tables
=========================================

What:  `behavior_categories` (lookup of behavior kinds) and `behavior_logs`
       (one observation of a student by a staff user).

Query Patterns:
    - Logs for a student, newest first:
      WHERE student_id = :id ORDER BY created_at DESC
      → idx_behavior_logs_student_created
    - Logs in a date window: WHERE created_at BETWEEN :from AND :to
"""

import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tracker.database import Base
from tracker.models.mixins import TimestampMixin


class BehaviorCategory(Base):
    __tablename__ = "behavior_categories"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)


class BehaviorLog(TimestampMixin, Base):
    __tablename__ = "behavior_logs"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    behavior_category_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("behavior_categories.id"),
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    mood: Mapped[str] = mapped_column(String(50), nullable=False)
    # aggressive | sensory
    intent: Mapped[str] = mapped_column(String(20), nullable=False)

    __table_args__ = (
        Index("idx_behavior_logs_student_created", "student_id", "created_at"),
        Index("idx_behavior_logs_created_at", "created_at"),
        CheckConstraint("intent IN ('aggressive', 'sensory')", name="ck_behavior_logs_intent"),
    )

    def __repr__(self) -> str:
        return f"<BehaviorLog(id={self.id}, student_id={self.student_id}, intent='{self.intent}')>"
