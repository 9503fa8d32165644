"""Account and session management routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth.dependencies import get_auth_service, get_current_user, raise_http
from auth.exceptions import AuthException
from auth.schemas import ApiResponse, SessionInfo, UpdateProfileRequest
from auth.services.auth_service import AuthService

router = APIRouter()


@router.get("/me", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def me(current_user: dict = Depends(get_current_user)) -> ApiResponse:
    return ApiResponse(success=True, message="User retrieved", data={"user": current_user})


@router.put("/me", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def update_me(
    payload: UpdateProfileRequest,
    current_user: dict = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        user = await auth_service.update_profile(current_user["id"], payload.name)
    except AuthException as exc:
        raise_http(exc)
    return ApiResponse(success=True, message="User updated", data={"user": user})


@router.get("/sessions", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def list_sessions(
    current_user: dict = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    sessions = await auth_service.list_sessions(current_user["id"])
    return ApiResponse(
        success=True,
        message="Active sessions",
        data={"sessions": [SessionInfo(**session.public()).model_dump() for session in sessions]},
    )


@router.delete("/sessions/{session_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def revoke_session(
    session_id: str,
    current_user: dict = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        await auth_service.revoke_session(current_user["id"], session_id)
    except AuthException as exc:
        raise_http(exc)
    return ApiResponse(success=True, message="Session revoked", data={})


@router.get("/login-history", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def login_history(
    current_user: dict = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    attempts = await auth_service.login_history(current_user["id"])
    return ApiResponse(success=True, message="Login history", data={"attempts": attempts})
