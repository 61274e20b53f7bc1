"""Request schemas for /api/behavior-logs."""

from typing import Optional

from tracker.validation.factories import RequestSchema, date_range_schema, pagination_schema, sorting_schema
from tracker.validation.fields import Intent, Mood, Notes, UuidStr

SORTABLE_FIELDS = ("created_at", "mood", "intent")


class CreateBehaviorLogRequest(RequestSchema):
    student_id: UuidStr
    behavior_category_id: UuidStr
    notes: Optional[Notes] = None
    mood: Mood
    intent: Intent


class UpdateBehaviorLogRequest(RequestSchema):
    behavior_log_id: UuidStr
    behavior_category_id: Optional[UuidStr] = None
    # "" or null clears the notes
    notes: Optional[Notes] = None
    mood: Optional[Mood] = None
    intent: Optional[Intent] = None


class BehaviorLogFilters(
    pagination_schema(default_limit=20),
    sorting_schema(SORTABLE_FIELDS, "created_at", "desc"),
    date_range_schema(),
):
    student_id: Optional[UuidStr] = None
    user_id: Optional[UuidStr] = None
    behavior_category_id: Optional[UuidStr] = None
    intent: Optional[Intent] = None
    mood: Optional[Mood] = None
