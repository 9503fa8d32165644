"""Auth API routes."""

from __future__ import annotations

from fastapi import APIRouter, Cookie, Depends, Request, Response, status
from fastapi.responses import RedirectResponse

from auth.config import AuthConfig
from auth.dependencies import (
    enforce_email_rate_limit,
    enforce_login_rate_limit,
    enforce_register_rate_limit,
    get_auth_config,
    get_auth_service,
    get_current_user,
    is_mobile_client,
    raise_http,
    set_cookie,
)
from auth.exceptions import AuthException, WeakPassword
from auth.schemas import (
    ApiResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from auth.services.auth_service import AuthService

router = APIRouter()


def _weak_password_response(exc: WeakPassword) -> ApiResponse:
    return ApiResponse(success=False, message=exc.message, data={"errors": exc.violations})


def _clear_token_cookies(response: Response, config: AuthConfig) -> None:
    response.delete_cookie("access_token", domain=config.COOKIE_DOMAIN)
    response.delete_cookie("refresh_token", domain=config.COOKIE_DOMAIN)


@router.post("/register", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    response: Response,
    _: None = Depends(enforce_register_rate_limit),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        user = await auth_service.register(payload.email, payload.password, payload.name)
    except WeakPassword as exc:
        response.status_code = exc.status_code
        return _weak_password_response(exc)
    except AuthException as exc:
        raise_http(exc)

    return ApiResponse(
        success=True,
        message="User created. Check your email to activate the account.",
        data={"user": user},
    )


@router.get("/verify-email/{token}")
async def verify_email(
    token: str,
    _: None = Depends(enforce_email_rate_limit),
    config: AuthConfig = Depends(get_auth_config),
    auth_service: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    try:
        await auth_service.verify_email(token)
    except AuthException:
        return RedirectResponse(
            url=f"{config.WEB_URL}/login?verified=false",
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )
    return RedirectResponse(
        url=f"{config.WEB_URL}/login?verified=true",
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )


@router.post("/login", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    _: None = Depends(enforce_login_rate_limit),
    config: AuthConfig = Depends(get_auth_config),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        result = await auth_service.login(
            payload.email,
            payload.password,
            device_info=request.headers.get("user-agent"),
            ip_address=request.client.host if request.client else None,
        )
    except AuthException as exc:
        raise_http(exc)

    tokens = result["tokens"]
    data: dict = {"user": result["user"]}
    if is_mobile_client(request, config):
        data["access_token"] = tokens["access_token"]
        data["refresh_token"] = tokens["refresh_token"]
    else:
        set_cookie(response, config, "access_token", tokens["access_token"], max_age=config.access_token_ttl_seconds)
        set_cookie(response, config, "refresh_token", tokens["refresh_token"], max_age=config.refresh_token_ttl_seconds)

    return ApiResponse(success=True, message="Login successful", data=data)


@router.post("/refresh", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def refresh(
    request: Request,
    response: Response,
    payload: RefreshRequest | None = None,
    refresh_token: str | None = Cookie(default=None),
    config: AuthConfig = Depends(get_auth_config),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    token = refresh_token or (payload.refresh_token if payload else None)
    if not token:
        raise_http(AuthException("Refresh token not provided", status_code=401))

    try:
        result = await auth_service.refresh(token)
    except AuthException as exc:
        raise_http(exc)

    data: dict = {}
    if is_mobile_client(request, config):
        data["access_token"] = result["access_token"]
    else:
        set_cookie(response, config, "access_token", result["access_token"], max_age=config.access_token_ttl_seconds)

    return ApiResponse(success=True, message="Token refreshed", data=data)


@router.post("/logout", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def logout(
    response: Response,
    payload: RefreshRequest | None = None,
    refresh_token: str | None = Cookie(default=None),
    config: AuthConfig = Depends(get_auth_config),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    await auth_service.logout(refresh_token or (payload.refresh_token if payload else None))
    _clear_token_cookies(response, config)
    return ApiResponse(success=True, message="Logged out", data={})


@router.post("/logout-all", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def logout_all(
    response: Response,
    current_user: dict = Depends(get_current_user),
    config: AuthConfig = Depends(get_auth_config),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    revoked = await auth_service.logout_all(current_user["id"])
    _clear_token_cookies(response, config)
    return ApiResponse(
        success=True,
        message="Logged out from all devices",
        data={"revoked_sessions": revoked},
    )


@router.post("/forgot-password", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def forgot_password(
    payload: ForgotPasswordRequest,
    _: None = Depends(enforce_email_rate_limit),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    await auth_service.forgot_password(payload.email)
    return ApiResponse(
        success=True,
        message="If the email exists, you will receive instructions to reset your password.",
        data={},
    )


@router.post("/reset-password", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def reset_password(
    payload: ResetPasswordRequest,
    response: Response,
    _: None = Depends(enforce_email_rate_limit),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        await auth_service.reset_password(payload.token, payload.new_password)
    except WeakPassword as exc:
        response.status_code = exc.status_code
        return _weak_password_response(exc)
    except AuthException as exc:
        raise_http(exc)

    return ApiResponse(success=True, message="Password reset. Please sign in again.", data={})
