"""
Behavior Tracker Backend: Student Routes
========================================

POST  /api/students               → create one student
POST  /api/students/bulk          → create 1-100 students in one transaction
GET   /api/students               → page through an organization's students
GET   /api/students/{student_id}  → one student
PATCH /api/students/{student_id}  → partial update

Bulk create is all-or-nothing: a single bad row (unknown organization)
rolls back the whole batch and the response is 409.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from tracker.database import DatabaseClient, RowQuery, get_db_client
from tracker.dependencies import json_body, query_params
from tracker.exceptions import NotFoundError
from tracker.mappers import (
    bulk_students_to_rows,
    row_to_dto,
    rows_to_dtos,
    student_create_to_row,
    student_update_to_partial,
)
from tracker.routes.common import ERROR_RESPONSES, merge_path, offset_for, paginated, path_id, require_changes
from tracker.schemas.dtos import StudentDTO
from tracker.schemas.responses import ApiResponse, PaginatedResponse
from tracker.validation import validate_or_raise
from tracker.validation.student import (
    BulkCreateStudentsRequest,
    CreateStudentRequest,
    StudentSearchRequest,
    UpdateStudentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/students",
    tags=["Students"],
    responses=ERROR_RESPONSES,
)

TABLE = "students"


@router.post("", status_code=201, response_model=ApiResponse[StudentDTO])
async def create_student(
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[StudentDTO]:
    request = validate_or_raise(CreateStudentRequest, body)
    [row] = await db.insert(TABLE, [student_create_to_row(request)])
    logger.info("Created student %s in organization %s", row["id"], request.organization_id)
    return ApiResponse(data=row_to_dto(StudentDTO, row), message="Student created")


@router.post("/bulk", status_code=201, response_model=ApiResponse[List[StudentDTO]])
async def bulk_create_students(
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[List[StudentDTO]]:
    request = validate_or_raise(BulkCreateStudentsRequest, body)
    rows = await db.insert(TABLE, bulk_students_to_rows(request))
    logger.info("Bulk-created %d students", len(rows))
    return ApiResponse(
        data=rows_to_dtos(StudentDTO, rows),
        message=f"{len(rows)} students created",
    )


@router.get("", response_model=PaginatedResponse[StudentDTO])
async def search_students(
    params: Dict[str, str] = Depends(query_params),
    db: DatabaseClient = Depends(get_db_client),
) -> PaginatedResponse[StudentDTO]:
    search = validate_or_raise(StudentSearchRequest, params, "Invalid search parameters")
    query = RowQuery(
        match={"organization_id": search.organization_id},
        search=search.query,
        search_columns=("first_name", "last_name"),
        order_by="last_name",
        limit=search.limit,
        offset=offset_for(search.page, search.limit),
    )
    rows = await db.select(TABLE, query)
    total = await db.count(TABLE, query)
    return paginated(StudentDTO, rows, search.page, search.limit, total)


@router.get("/{student_id}", response_model=ApiResponse[StudentDTO])
async def get_student(
    student_id: str,
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[StudentDTO]:
    student_id = path_id("student_id", student_id)
    row = await db.select_one(TABLE, id=student_id)
    if row is None:
        raise NotFoundError(resource="Student", resource_id=student_id)
    return ApiResponse(data=row_to_dto(StudentDTO, row))


@router.patch("/{student_id}", response_model=ApiResponse[StudentDTO])
async def update_student(
    student_id: str,
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[StudentDTO]:
    request = validate_or_raise(UpdateStudentRequest, merge_path(body, studentId=student_id))
    changes = require_changes(student_update_to_partial(request))
    rows = await db.update(TABLE, changes, id=request.student_id)
    if not rows:
        raise NotFoundError(resource="Student", resource_id=request.student_id)
    return ApiResponse(data=row_to_dto(StudentDTO, rows[0]), message="Student updated")
