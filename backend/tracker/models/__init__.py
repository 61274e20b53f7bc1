"""
Behavior Tracker Backend: ORM Table Models
==========================================

What:  SQLAlchemy declarative models for every table in the hosted store.
Why:   Registers tables on `Base.metadata`, which the DatabaseClient uses to
       resolve table names and Alembic uses for migrations.

Foreign keys are declared here and enforced by Postgres; nothing in the
application walks relationships in memory.
"""

from tracker.models.behavior import BehaviorCategory, BehaviorLog
from tracker.models.organization import Organization
from tracker.models.profile import Profile
from tracker.models.student import Student
from tracker.models.user import UserRecord

__all__ = [
    "BehaviorCategory",
    "BehaviorLog",
    "Organization",
    "Profile",
    "Student",
    "UserRecord",
]
