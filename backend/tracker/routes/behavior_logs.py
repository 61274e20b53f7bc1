"""
Behavior Tracker Backend: Behavior Log Routes
=============================================

POST  /api/behavior-logs                    → record an observation (bearer token;
                                              the author is the token's user)
GET   /api/behavior-logs                    → filter, sort and page logs
GET   /api/behavior-logs/{behavior_log_id}  → one log
PATCH /api/behavior-logs/{behavior_log_id}  → partial update ("" or null clears notes)
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from tracker.database import DatabaseClient, RowQuery, get_db_client
from tracker.dependencies import get_current_user_id, json_body, query_params
from tracker.exceptions import NotFoundError
from tracker.mappers import behavior_log_create_to_row, behavior_log_update_to_partial, row_to_dto
from tracker.routes.common import ERROR_RESPONSES, merge_path, offset_for, paginated, path_id, require_changes
from tracker.schemas.dtos import BehaviorLogDTO
from tracker.schemas.responses import ApiResponse, ErrorResponse, PaginatedResponse
from tracker.validation import validate_or_raise
from tracker.validation.behavior_log import (
    BehaviorLogFilters,
    CreateBehaviorLogRequest,
    UpdateBehaviorLogRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/behavior-logs",
    tags=["Behavior Logs"],
    responses=ERROR_RESPONSES,
)

TABLE = "behavior_logs"

# filter attribute → column matched by equality
EQUALITY_FILTERS = ("student_id", "user_id", "behavior_category_id", "intent", "mood")


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[BehaviorLogDTO],
    responses={401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}},
)
async def create_behavior_log(
    body: Dict[str, Any] = Depends(json_body),
    user_id: str = Depends(get_current_user_id),
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[BehaviorLogDTO]:
    request = validate_or_raise(CreateBehaviorLogRequest, body)
    [row] = await db.insert(TABLE, [behavior_log_create_to_row(request, user_id)])
    logger.info("User %s logged behavior %s for student %s", user_id, row["id"], request.student_id)
    return ApiResponse(data=row_to_dto(BehaviorLogDTO, row), message="Behavior log created")


@router.get("", response_model=PaginatedResponse[BehaviorLogDTO])
async def filter_behavior_logs(
    params: Dict[str, str] = Depends(query_params),
    db: DatabaseClient = Depends(get_db_client),
) -> PaginatedResponse[BehaviorLogDTO]:
    filters = validate_or_raise(BehaviorLogFilters, params, "Invalid filter parameters")
    match = {
        column: getattr(filters, column)
        for column in EQUALITY_FILTERS
        if getattr(filters, column) is not None
    }
    query = RowQuery(
        match=match,
        range_column="created_at",
        lower=filters.date_from,
        upper=filters.date_to,
        order_by=filters.sort_by,
        descending=filters.sort_order == "desc",
        limit=filters.limit,
        offset=offset_for(filters.page, filters.limit),
    )
    rows = await db.select(TABLE, query)
    total = await db.count(TABLE, query)
    return paginated(BehaviorLogDTO, rows, filters.page, filters.limit, total)


@router.get("/{behavior_log_id}", response_model=ApiResponse[BehaviorLogDTO])
async def get_behavior_log(
    behavior_log_id: str,
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[BehaviorLogDTO]:
    behavior_log_id = path_id("behavior_log_id", behavior_log_id)
    row = await db.select_one(TABLE, id=behavior_log_id)
    if row is None:
        raise NotFoundError(resource="Behavior log", resource_id=behavior_log_id)
    return ApiResponse(data=row_to_dto(BehaviorLogDTO, row))


@router.patch("/{behavior_log_id}", response_model=ApiResponse[BehaviorLogDTO])
async def update_behavior_log(
    behavior_log_id: str,
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[BehaviorLogDTO]:
    request = validate_or_raise(
        UpdateBehaviorLogRequest, merge_path(body, behaviorLogId=behavior_log_id)
    )
    changes = require_changes(behavior_log_update_to_partial(request))
    rows = await db.update(TABLE, changes, id=request.behavior_log_id)
    if not rows:
        raise NotFoundError(resource="Behavior log", resource_id=request.behavior_log_id)
    return ApiResponse(data=row_to_dto(BehaviorLogDTO, rows[0]), message="Behavior log updated")
