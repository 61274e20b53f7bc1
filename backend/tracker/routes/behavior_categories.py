"""
Behavior Tracker Backend: Behavior Category Routes
==================================================

Categories are a small lookup list (e.g. "Hitting", "Covering ears"), so
the list endpoint returns all of them sorted by name without paging.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from tracker.database import DatabaseClient, RowQuery, get_db_client
from tracker.dependencies import json_body
from tracker.exceptions import NotFoundError
from tracker.mappers import (
    behavior_category_create_to_row,
    behavior_category_update_to_partial,
    row_to_dto,
    rows_to_dtos,
)
from tracker.routes.common import ERROR_RESPONSES, merge_path, require_changes
from tracker.schemas.dtos import BehaviorCategoryDTO
from tracker.schemas.responses import ApiResponse
from tracker.validation import validate_or_raise
from tracker.validation.behavior_category import (
    CreateBehaviorCategoryRequest,
    UpdateBehaviorCategoryRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/behavior-categories",
    tags=["Behavior Categories"],
    responses=ERROR_RESPONSES,
)

TABLE = "behavior_categories"


@router.post("", status_code=201, response_model=ApiResponse[BehaviorCategoryDTO])
async def create_behavior_category(
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[BehaviorCategoryDTO]:
    request = validate_or_raise(CreateBehaviorCategoryRequest, body)
    [row] = await db.insert(TABLE, [behavior_category_create_to_row(request)])
    logger.info("Created behavior category %s", row["id"])
    return ApiResponse(data=row_to_dto(BehaviorCategoryDTO, row), message="Behavior category created")


@router.get("", response_model=ApiResponse[List[BehaviorCategoryDTO]])
async def list_behavior_categories(
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[List[BehaviorCategoryDTO]]:
    rows = await db.select(TABLE, RowQuery(order_by="name"))
    return ApiResponse(data=rows_to_dtos(BehaviorCategoryDTO, rows))


@router.patch("/{behavior_category_id}", response_model=ApiResponse[BehaviorCategoryDTO])
async def update_behavior_category(
    behavior_category_id: str,
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[BehaviorCategoryDTO]:
    request = validate_or_raise(
        UpdateBehaviorCategoryRequest, merge_path(body, behaviorCategoryId=behavior_category_id)
    )
    # behavior_categories has no timestamp columns
    changes = require_changes(behavior_category_update_to_partial(request), timestamped=False)
    rows = await db.update(TABLE, changes, id=request.behavior_category_id)
    if not rows:
        raise NotFoundError(resource="Behavior category", resource_id=request.behavior_category_id)
    return ApiResponse(data=row_to_dto(BehaviorCategoryDTO, rows[0]), message="Behavior category updated")
