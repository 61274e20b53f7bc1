"""
Behavior Tracker Backend: Profile Routes
========================================

A profile is keyed by its user's id, so `{user_id}` addresses both.

POST  /api/profiles            → create the profile of an existing user
GET   /api/profiles            → filter by organization, role, name, created-at
GET   /api/profiles/{user_id}  → one profile
PATCH /api/profiles/{user_id}  → partial update (avatar: null clears it)
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from tracker.database import DatabaseClient, RowQuery, get_db_client
from tracker.dependencies import json_body, query_params
from tracker.exceptions import NotFoundError
from tracker.mappers import profile_create_to_row, profile_update_to_partial, row_to_dto
from tracker.routes.common import ERROR_RESPONSES, merge_path, offset_for, paginated, path_id, require_changes
from tracker.schemas.dtos import ProfileDTO
from tracker.schemas.responses import ApiResponse, PaginatedResponse
from tracker.validation import validate_or_raise
from tracker.validation.profile import CreateProfileRequest, ProfileSearchRequest, UpdateProfileRequest

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/profiles",
    tags=["Profiles"],
    responses=ERROR_RESPONSES,
)

TABLE = "profiles"


@router.post("", status_code=201, response_model=ApiResponse[ProfileDTO])
async def create_profile(
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[ProfileDTO]:
    request = validate_or_raise(CreateProfileRequest, body)
    [row] = await db.insert(TABLE, [profile_create_to_row(request)])
    logger.info("Created profile for user %s", row["user_id"])
    return ApiResponse(data=row_to_dto(ProfileDTO, row), message="Profile created")


@router.get("", response_model=PaginatedResponse[ProfileDTO])
async def search_profiles(
    params: Dict[str, str] = Depends(query_params),
    db: DatabaseClient = Depends(get_db_client),
) -> PaginatedResponse[ProfileDTO]:
    search = validate_or_raise(ProfileSearchRequest, params, "Invalid search parameters")
    match = {}
    if search.organization_id:
        match["organization_id"] = search.organization_id
    if search.role:
        match["role"] = search.role
    query = RowQuery(
        match=match,
        search=search.query,
        search_columns=("first_name", "last_name"),
        range_column="created_at",
        lower=search.created_after,
        upper=search.created_before,
        order_by="last_name",
        limit=search.limit,
        offset=offset_for(search.page, search.limit),
    )
    rows = await db.select(TABLE, query)
    total = await db.count(TABLE, query)
    return paginated(ProfileDTO, rows, search.page, search.limit, total)


@router.get("/{user_id}", response_model=ApiResponse[ProfileDTO])
async def get_profile(
    user_id: str,
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[ProfileDTO]:
    user_id = path_id("user_id", user_id)
    row = await db.select_one(TABLE, user_id=user_id)
    if row is None:
        raise NotFoundError(resource="Profile", resource_id=user_id)
    return ApiResponse(data=row_to_dto(ProfileDTO, row))


@router.patch("/{user_id}", response_model=ApiResponse[ProfileDTO])
async def update_profile(
    user_id: str,
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[ProfileDTO]:
    request = validate_or_raise(UpdateProfileRequest, merge_path(body, profileId=user_id))
    changes = require_changes(profile_update_to_partial(request))
    rows = await db.update(TABLE, changes, user_id=request.profile_id)
    if not rows:
        raise NotFoundError(resource="Profile", resource_id=request.profile_id)
    return ApiResponse(data=row_to_dto(ProfileDTO, rows[0]), message="Profile updated")
