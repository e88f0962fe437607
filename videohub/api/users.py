"""User account and session endpoints."""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Body, Cookie, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from videohub.api.dependencies import get_current_user, get_session_manager
from videohub.api.errors import raise_for
from videohub.config import get_settings
from videohub.models.auth import (
    ApiResponse,
    ChangePasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
)
from videohub.models.user import User
from videohub.services.session_manager import SessionManager

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def _respond(status_code: int, data: Any, message: str) -> JSONResponse:
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=True)
    body = ApiResponse(status_code=status_code, data=data, message=message)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def _set_token_cookies(response: JSONResponse, tokens: TokenPair) -> None:
    secure = get_settings().cookie_secure
    response.set_cookie(ACCESS_COOKIE, tokens.access_token, httponly=True, secure=secure)
    response.set_cookie(REFRESH_COOKIE, tokens.refresh_token, httponly=True, secure=secure)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    session_manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Create a new account.

    Raises:
        HTTPException 400: If a field is missing or blank
        HTTPException 409: If the username or email is taken
    """
    result = await session_manager.register(
        full_name=request.full_name,
        username=request.username,
        email=request.email,
        password=request.password,
    )
    if not result.ok:
        raise_for(result)

    return _respond(status.HTTP_201_CREATED, result.value, "User registered successfully")


@router.post("/login")
async def login(
    request: LoginRequest,
    session_manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Login with username or email and password.

    Sets HttpOnly accessToken and refreshToken cookies and also returns both
    tokens in the body.

    Raises:
        HTTPException 400: If neither username nor email is given
        HTTPException 404: If no such user exists
        HTTPException 401: If the password is wrong
    """
    result = await session_manager.login(request.identifier, request.password)
    if not result.ok:
        raise_for(result)

    response = _respond(status.HTTP_200_OK, result.value, "User logged in successfully")
    _set_token_cookies(response, result.value)
    return response


@router.post("/logout")
async def logout(
    current_user: User = Depends(get_current_user),
    session_manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Revoke the current refresh token and clear both cookies."""
    result = await session_manager.logout(current_user.id)
    if not result.ok:
        raise_for(result)

    secure = get_settings().cookie_secure
    response = _respond(status.HTTP_200_OK, {}, "User logged out")
    response.delete_cookie(ACCESS_COOKIE, httponly=True, secure=secure)
    response.delete_cookie(REFRESH_COOKIE, httponly=True, secure=secure)
    return response


@router.post("/refresh-token")
async def refresh_token(
    refresh_cookie: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE),
    request: Optional[RefreshRequest] = Body(default=None),
    session_manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Exchange a refresh token (cookie or body) for a new token pair.

    The presented token is rotated: it cannot be used again.

    Raises:
        HTTPException 401: If the token is missing, invalid, expired or reused
    """
    presented = refresh_cookie or (request.refresh_token if request else None)

    result = await session_manager.refresh(presented)
    if not result.ok:
        raise_for(result)

    response = _respond(status.HTTP_200_OK, result.value, "Access token refreshed")
    _set_token_cookies(response, result.value)
    return response


@router.post("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    session_manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Change the current user's password.

    Raises:
        HTTPException 400: If the new password is missing
        HTTPException 401: If the current password is wrong
    """
    result = await session_manager.change_password(
        current_user.id,
        request.current_password,
        request.new_password,
    )
    if not result.ok:
        raise_for(result)

    return _respond(status.HTTP_200_OK, {}, "Password changed successfully")


@router.get("/current-user")
async def current_user(current_user: User = Depends(get_current_user)) -> JSONResponse:
    """Get the authenticated user."""
    return _respond(status.HTTP_200_OK, current_user, "Current user fetched successfully")
