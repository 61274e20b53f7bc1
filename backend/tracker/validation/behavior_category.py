"""Request schemas for /api/behavior-categories."""

from tracker.validation.factories import RequestSchema
from tracker.validation.fields import GeneralName, UuidStr


class CreateBehaviorCategoryRequest(RequestSchema):
    name: GeneralName


class UpdateBehaviorCategoryRequest(RequestSchema):
    behavior_category_id: UuidStr
    name: GeneralName
