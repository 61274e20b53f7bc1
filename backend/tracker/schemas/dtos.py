"""
Behavior Tracker Backend: Wire DTOs
===================================

What:  The snake_case, ISO-8601 shapes every resource is returned in.
How:   Built from database rows with `Model.model_validate(row)`; datetime
       and date values become ISO strings, UUID objects become strings.

Design Decision:
    DTOs never carry secrets. `users.password_hash` exists in the row but
    UserDTO declares no field for it, and unknown keys are ignored.
"""

from datetime import date, datetime
from typing import Annotated, Any, Optional
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict

from tracker.timestamps import to_iso
from tracker.validation.fields import Intent


def _iso(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return to_iso(value)
    return value


def _str_id(value: Any) -> Any:
    return str(value) if isinstance(value, UUID) else value


IsoString = Annotated[str, BeforeValidator(_iso)]
IdString = Annotated[str, BeforeValidator(_str_id)]


class DTO(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class UserDTO(DTO):
    id: IdString
    email: str
    created_at: IsoString
    updated_at: Optional[IsoString] = None
    last_sign_in_at: Optional[IsoString] = None


class ProfileDTO(DTO):
    user_id: IdString
    organization_id: IdString
    avatar: Optional[str] = None
    role: str
    first_name: str
    last_name: str
    created_at: IsoString
    updated_at: IsoString


class BehaviorCategoryDTO(DTO):
    id: IdString
    name: str


class BehaviorLogDTO(DTO):
    id: IdString
    created_at: IsoString
    updated_at: IsoString
    user_id: IdString
    student_id: IdString
    behavior_category_id: IdString
    notes: Optional[str] = None
    mood: str
    intent: Intent


class StudentDTO(DTO):
    id: IdString
    first_name: str
    last_name: str
    created_at: IsoString
    updated_at: IsoString
    # calendar date, "YYYY-MM-DD"
    dob: Optional[IsoString] = None
    organization_id: IdString


class OrganizationDTO(DTO):
    id: IdString
    name: str
    created_at: Optional[IsoString] = None
    updated_at: Optional[IsoString] = None
