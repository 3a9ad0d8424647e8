import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Cookie, Depends
from fastapi.responses import JSONResponse

from homeserve import config
from homeserve.auth_gateway import AuthGateway, get_auth_gateway
from homeserve.errors import ApiError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

TOKEN_COOKIE = "token"


def _error_response(exc: Exception, default: str) -> JSONResponse:
    message = exc.message if isinstance(exc, ApiError) and exc.message else default
    return JSONResponse(status_code=400, content={"message": message})


def _with_token_cookie(content: Dict[str, Any], token: str) -> JSONResponse:
    response = JSONResponse(content=content)
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        httponly=True,
        secure=config.APP_ENV == "production",
        samesite="lax",
        path="/",
    )
    return response


@router.post("/login")
async def login(
    payload: Dict[str, Any] = Body(...),
    gateway: AuthGateway = Depends(get_auth_gateway),
):
    try:
        data = await gateway.login(payload)
    except ApiError as exc:
        logger.error("Login error: %s", exc.message)
        return _error_response(exc, "Login failed")
    return _with_token_cookie({"user": data.get("user"), "message": "Logged in successfully"}, data["token"])


@router.post("/register")
async def register(
    payload: Dict[str, Any] = Body(...),
    gateway: AuthGateway = Depends(get_auth_gateway),
):
    try:
        data = await gateway.register(payload)
    except ApiError as exc:
        logger.error("Registration error: %s", exc.message)
        return _error_response(exc, "Registration failed")
    return _with_token_cookie({"user": data.get("user"), "message": "Registration successful"}, data["token"])


@router.post("/forgot-password")
async def forgot_password(
    payload: Dict[str, Any] = Body(...),
    gateway: AuthGateway = Depends(get_auth_gateway),
):
    email = payload.get("email")
    if not isinstance(email, str) or not email.strip():
        return JSONResponse(status_code=400, content={"message": "Email is required"})
    try:
        await gateway.forgot_password(email.strip())
    except ApiError as exc:
        logger.error("Forgot password error: %s", exc.message)
        return _error_response(exc, "Failed to process request")
    return {"message": "Password reset instructions sent"}


@router.post("/reset-password")
async def reset_password(
    payload: Dict[str, Any] = Body(...),
    gateway: AuthGateway = Depends(get_auth_gateway),
):
    try:
        await gateway.reset_password(payload)
    except ApiError as exc:
        logger.error("Password reset error: %s", exc.message)
        return _error_response(exc, "Failed to reset password")
    return {"message": "Password reset successful"}


@router.post("/logout")
async def logout(
    token: Optional[str] = Cookie(default=None),
    gateway: AuthGateway = Depends(get_auth_gateway),
):
    if token:
        try:
            await gateway.logout(token)
        except ApiError as exc:
            logger.error("Logout error: %s", exc.message)
    response = JSONResponse(content={"message": "Logged out"})
    response.delete_cookie(TOKEN_COOKIE, path="/")
    return response
