"""
Behavior Tracker Backend: Response Envelopes
============================================

Every JSON body the API returns is one of these shapes:

    ApiResponse        {success, data?, message?}
    PaginatedResponse  {success, data: [...], pagination: {page, limit, total,
                        totalPages, hasNext, hasPrev}}
    ErrorResponse      {success: false, error, message, statusCode, request_id,
                        validation_errors?}
    HealthResponse     {status, database, time, version}
"""

import math
from typing import Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from tracker.schemas.dtos import ProfileDTO, UserDTO

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")
    has_next: bool = Field(alias="hasNext")
    has_prev: bool = Field(alias="hasPrev")


class PaginatedResponse(BaseModel, Generic[T]):
    success: bool = True
    data: List[T]
    pagination: Pagination
    message: Optional[str] = None


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    """Page metadata; an empty result still reports one page."""
    total_pages = max(1, math.ceil(total / limit)) if limit else 1
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


class ErrorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: Literal[False] = False
    error: str
    message: str
    status_code: int = Field(alias="statusCode")
    request_id: Optional[str] = None
    validation_errors: Optional[List[Dict[str, str]]] = None


class HealthResponse(BaseModel):
    status: Literal["ok", "error"]
    database: Literal["connected", "disconnected"]
    time: str
    version: str
    detail: Optional[str] = None


class AuthResponse(BaseModel):
    user: UserDTO
    profile: Optional[ProfileDTO] = None
    token: str
    token_type: str = "bearer"
    expires_in: int
