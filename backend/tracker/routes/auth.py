"""
Behavior Tracker Backend: Auth Routes
=====================================

POST /api/auth/sign-up          → create an account, returns a bearer token
POST /api/auth/sign-in          → verify credentials, returns a bearer token
POST /api/auth/change-password  → replace the hash after re-checking the old password
GET  /api/auth/me               → the bearer token's account and profile
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from tracker.database import DatabaseClient, get_db_client
from tracker.dependencies import get_current_user_id, json_body
from tracker.mappers import row_to_dto
from tracker.schemas.dtos import ProfileDTO, UserDTO
from tracker.routes.common import ERROR_RESPONSES
from tracker.schemas.responses import ApiResponse, AuthResponse, ErrorResponse
from tracker.services.auth_service import AuthService, get_auth_service
from tracker.validation import validate_or_raise
from tracker.validation.auth import ChangePasswordRequest, SignInRequest, SignUpRequest

router = APIRouter(
    prefix="/api/auth",
    tags=["Auth"],
    responses={
        **ERROR_RESPONSES,
        401: {"description": "Missing or invalid credentials", "model": ErrorResponse},
    },
)


@router.post("/sign-up", status_code=201, response_model=ApiResponse[AuthResponse])
async def sign_up(
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthResponse]:
    request = validate_or_raise(SignUpRequest, body)
    return ApiResponse(data=await auth.sign_up(db, request), message="Account created")


@router.post("/sign-in", response_model=ApiResponse[AuthResponse])
async def sign_in(
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthResponse]:
    request = validate_or_raise(SignInRequest, body)
    return ApiResponse(data=await auth.sign_in(db, request))


@router.post("/change-password", response_model=ApiResponse[UserDTO])
async def change_password(
    body: Dict[str, Any] = Depends(json_body),
    db: DatabaseClient = Depends(get_db_client),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserDTO]:
    request = validate_or_raise(ChangePasswordRequest, body)
    user = await auth.change_password(db, request)
    return ApiResponse(data=user.to_dto(), message="Password changed")


@router.get("/me", response_model=ApiResponse[Dict[str, Any]])
async def me(
    user_id: str = Depends(get_current_user_id),
    db: DatabaseClient = Depends(get_db_client),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[Dict[str, Any]]:
    user = await auth.get_user(db, user_id)
    profile_row = await db.select_one("profiles", user_id=user.id)
    return ApiResponse(
        data={
            "user": user.to_dto(),
            "profile": row_to_dto(ProfileDTO, profile_row) if profile_row else None,
        }
    )
