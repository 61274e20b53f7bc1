"""
Behavior Tracker Backend: Request ↔ Row Mappers
================================================

What:  Pure functions between validated camelCase request models, the
       snake_case row payloads the DatabaseClient writes, and the DTOs the
       API returns.
How:   Create-mappers build a full row. Update-mappers look only at the
       request's `model_fields_set`, so a field the client left out never
       reaches the UPDATE statement.

Partial-update rules:
    absent from the request         → omitted from the partial row
    sent as null/"" on a nullable   → stored as None (notes, dob, avatar)
    sent as null on a required col  → omitted
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel

from tracker.schemas.dtos import (
    BehaviorCategoryDTO,
    BehaviorLogDTO,
    OrganizationDTO,
    ProfileDTO,
    StudentDTO,
    UserDTO,
)
from tracker.validation.behavior_category import CreateBehaviorCategoryRequest, UpdateBehaviorCategoryRequest
from tracker.validation.behavior_log import CreateBehaviorLogRequest, UpdateBehaviorLogRequest
from tracker.validation.organization import CreateOrganizationRequest, UpdateOrganizationRequest
from tracker.validation.profile import CreateProfileRequest, UpdateProfileRequest
from tracker.validation.student import BulkCreateStudentsRequest, CreateStudentRequest, UpdateStudentRequest

D = TypeVar("D", bound=BaseModel)


def _partial(
    request: BaseModel,
    columns: Mapping[str, str],
    nullable: Iterable[str] = (),
    convert: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Builds a partial row from the request fields in `columns`
    (attribute → column) that the client actually sent.
    """
    nullable = set(nullable)
    convert = convert or {}
    updates: Dict[str, Any] = {}
    for attribute, column in columns.items():
        if attribute not in request.model_fields_set:
            continue
        value = getattr(request, attribute)
        if value is None or value == "":
            if attribute in nullable:
                updates[column] = None
            continue
        if attribute in convert:
            value = convert[attribute](value)
        updates[column] = value
    return updates


def _date_only(value: Any) -> Any:
    return value.date() if value is not None else None


def row_to_dto(dto_class: Type[D], row: Mapping[str, Any]) -> D:
    return dto_class.model_validate(dict(row))


def rows_to_dtos(dto_class: Type[D], rows: Iterable[Mapping[str, Any]]) -> List[D]:
    return [row_to_dto(dto_class, row) for row in rows]


# ── Users ─────────────────────────────────────────────────────────────────

def user_dto_to_frontend(dto: UserDTO) -> Dict[str, Any]:
    return {
        "id": dto.id,
        "email": dto.email,
        "createdAt": dto.created_at,
        "lastSignInAt": dto.last_sign_in_at,
    }


# ── Behavior logs ─────────────────────────────────────────────────────────

def behavior_log_create_to_row(request: CreateBehaviorLogRequest, user_id: str) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "student_id": request.student_id,
        "behavior_category_id": request.behavior_category_id,
        "notes": request.notes or None,
        "mood": request.mood,
        "intent": request.intent,
    }


def behavior_log_update_to_partial(request: UpdateBehaviorLogRequest) -> Dict[str, Any]:
    return _partial(
        request,
        {
            "behavior_category_id": "behavior_category_id",
            "notes": "notes",
            "mood": "mood",
            "intent": "intent",
        },
        nullable=("notes",),
    )


def behavior_log_dto_to_frontend(dto: BehaviorLogDTO) -> Dict[str, Any]:
    return {
        "id": dto.id,
        "createdAt": dto.created_at,
        "updatedAt": dto.updated_at,
        "userId": dto.user_id,
        "studentId": dto.student_id,
        "behaviorCategoryId": dto.behavior_category_id,
        "notes": dto.notes,
        "mood": dto.mood,
        "intent": dto.intent,
    }


# ── Students ──────────────────────────────────────────────────────────────

def student_create_to_row(request: CreateStudentRequest) -> Dict[str, Any]:
    return {
        "first_name": request.first_name,
        "last_name": request.last_name,
        "dob": _date_only(request.dob),
        "organization_id": request.organization_id,
    }


def bulk_students_to_rows(request: BulkCreateStudentsRequest) -> List[Dict[str, Any]]:
    """One row per entry; entries without an organizationId inherit the request's."""
    return [
        {
            "first_name": student.first_name,
            "last_name": student.last_name,
            "dob": _date_only(student.dob),
            "organization_id": student.organization_id or request.organization_id,
        }
        for student in request.students
    ]


def student_update_to_partial(request: UpdateStudentRequest) -> Dict[str, Any]:
    return _partial(
        request,
        {
            "first_name": "first_name",
            "last_name": "last_name",
            "dob": "dob",
            "organization_id": "organization_id",
        },
        nullable=("dob",),
        convert={"dob": _date_only},
    )


def student_dto_to_frontend(dto: StudentDTO) -> Dict[str, Any]:
    return {
        "id": dto.id,
        "firstName": dto.first_name,
        "lastName": dto.last_name,
        "createdAt": dto.created_at,
        "updatedAt": dto.updated_at,
        "dob": dto.dob,
        "organizationId": dto.organization_id,
    }


# ── Profiles ──────────────────────────────────────────────────────────────

def profile_create_to_row(request: CreateProfileRequest) -> Dict[str, Any]:
    return {
        "user_id": request.user_id,
        "organization_id": request.organization_id,
        "role": request.role,
        "first_name": request.first_name,
        "last_name": request.last_name,
        "avatar": request.avatar or None,
    }


def profile_update_to_partial(request: UpdateProfileRequest) -> Dict[str, Any]:
    return _partial(
        request,
        {
            "organization_id": "organization_id",
            "role": "role",
            "first_name": "first_name",
            "last_name": "last_name",
            "avatar": "avatar",
        },
        nullable=("avatar",),
    )


def profile_dto_to_frontend(dto: ProfileDTO) -> Dict[str, Any]:
    return {
        "userId": dto.user_id,
        "organizationId": dto.organization_id,
        "role": dto.role,
        "firstName": dto.first_name,
        "lastName": dto.last_name,
        "avatar": dto.avatar,
        "createdAt": dto.created_at,
        "updatedAt": dto.updated_at,
    }


# ── Behavior categories ───────────────────────────────────────────────────

def behavior_category_create_to_row(request: CreateBehaviorCategoryRequest) -> Dict[str, Any]:
    return {"name": request.name}


def behavior_category_update_to_partial(request: UpdateBehaviorCategoryRequest) -> Dict[str, Any]:
    return {"name": request.name}


def behavior_category_dto_to_frontend(dto: BehaviorCategoryDTO) -> Dict[str, Any]:
    return {"id": dto.id, "name": dto.name}


# ── Organizations ─────────────────────────────────────────────────────────

def organization_create_to_row(request: CreateOrganizationRequest) -> Dict[str, Any]:
    return {"name": request.name}


def organization_update_to_partial(request: UpdateOrganizationRequest) -> Dict[str, Any]:
    return {"name": request.name}


def organization_dto_to_frontend(dto: OrganizationDTO) -> Dict[str, Any]:
    return {"id": dto.id, "name": dto.name}
