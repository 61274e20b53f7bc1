"""
Behavior Tracker Backend: Organization Routes
=============================================

POST  /api/organizations                    → create
GET   /api/organizations                    → search (query, sort, created-at window)
GET   /api/organizations/{organization_id}  → one organization
PATCH /api/organizations/{organization_id}  → rename
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from tracker.database import DatabaseClient, RowQuery, get_db_client
from tracker.dependencies import json_body, query_params
from tracker.exceptions import NotFoundError
from tracker.mappers import organization_create_to_row, organization_update_to_partial, row_to_dto
from tracker.routes.common import ERROR_RESPONSES, merge_path, offset_for, paginated, path_id, require_changes
from tracker.schemas.dtos import OrganizationDTO
from tracker.schemas.responses import ApiResponse, PaginatedResponse
from tracker.validation import validate_or_raise
from tracker.validation.organization import (
    CreateOrganizationRequest,
    OrganizationSearchRequest,
    UpdateOrganizationRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/organizations",
    tags=["Organizations"],
    responses=ERROR_RESPONSES,
)

TABLE = "organizations"


@router.post("", status_code=201, response_model=ApiResponse[OrganizationDTO])
async def create_organization(
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[OrganizationDTO]:
    request = validate_or_raise(CreateOrganizationRequest, body)
    [row] = await db.insert(TABLE, [organization_create_to_row(request)])
    logger.info("Created organization %s", row["id"])
    return ApiResponse(data=row_to_dto(OrganizationDTO, row), message="Organization created")


@router.get("", response_model=PaginatedResponse[OrganizationDTO])
async def search_organizations(
    params: Dict[str, str] = Depends(query_params),
    db: DatabaseClient = Depends(get_db_client),
) -> PaginatedResponse[OrganizationDTO]:
    search = validate_or_raise(OrganizationSearchRequest, params, "Invalid search parameters")
    query = RowQuery(
        search=search.query,
        search_columns=("name",),
        range_column="created_at",
        lower=search.date_from,
        upper=search.date_to,
        order_by=search.sort_by,
        descending=search.sort_order == "desc",
        limit=search.limit,
        offset=offset_for(search.page, search.limit),
    )
    rows = await db.select(TABLE, query)
    total = await db.count(TABLE, query)
    return paginated(OrganizationDTO, rows, search.page, search.limit, total)


@router.get("/{organization_id}", response_model=ApiResponse[OrganizationDTO])
async def get_organization(
    organization_id: str,
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[OrganizationDTO]:
    organization_id = path_id("organization_id", organization_id)
    row = await db.select_one(TABLE, id=organization_id)
    if row is None:
        raise NotFoundError(resource="Organization", resource_id=organization_id)
    return ApiResponse(data=row_to_dto(OrganizationDTO, row))


@router.patch("/{organization_id}", response_model=ApiResponse[OrganizationDTO])
async def update_organization(
    organization_id: str,
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
) -> ApiResponse[OrganizationDTO]:
    request = validate_or_raise(
        UpdateOrganizationRequest, merge_path(body, organizationId=organization_id)
    )
    changes = require_changes(organization_update_to_partial(request))
    rows = await db.update(TABLE, changes, id=request.organization_id)
    if not rows:
        raise NotFoundError(resource="Organization", resource_id=request.organization_id)
    return ApiResponse(data=row_to_dto(OrganizationDTO, rows[0]), message="Organization updated")
