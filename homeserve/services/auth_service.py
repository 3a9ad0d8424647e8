import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from homeserve.errors import ApiError, ResponseValidationError
from homeserve.http_client import ApiClient
from homeserve.models import (
    AuthResponse,
    ForgotPasswordData,
    LoginCredentials,
    RegisterData,
    ResetPasswordData,
    User,
)
from homeserve.services.appointment_service import validate_input

logger = logging.getLogger(__name__)

LANDING_PATHS = {"admin": "/admin", "provider": "/provider"}
DEFAULT_LANDING_PATH = "/dashboard"


def landing_path_for(user_type: Optional[str]) -> str:
    return LANDING_PATHS.get(user_type or "", DEFAULT_LANDING_PATH)


class AuthService:
    """Sign-in state for the client session.

    Every operation resets ``error`` and keeps the failing :class:`ApiError`
    there before re-raising, so forms can show field-level messages.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.user: Optional[User] = None
        self.loading = False
        self.error: Optional[ApiError] = None

    @property
    def session(self):
        return self.api.session

    def _payload(self, model_type, data) -> Dict[str, Any]:
        try:
            return validate_input(model_type, data).to_payload()
        except ApiError as exc:
            self.error = exc
            raise

    async def _call(self, method: str, path: str, json: Any = None) -> Any:
        self.loading = True
        self.error = None
        try:
            return await self.api.request(method, path, json=json)
        except ApiError as exc:
            self.error = exc
            raise
        finally:
            self.loading = False

    async def login(self, credentials: Union[LoginCredentials, Dict[str, Any]]) -> str:
        body = await self._call("POST", "/auth/login", json=self._payload(LoginCredentials, credentials))
        try:
            auth = AuthResponse.model_validate(body)
        except ValidationError as exc:
            self.error = ResponseValidationError("Unexpected login response from server.")
            raise self.error from exc
        self.user = auth.user
        self.session.update(
            token=auth.token,
            username=auth.user.name,
            email=auth.user.email,
            user_type=auth.user.user_type,
        )
        logger.info("Login successful, user type: %s", auth.user.user_type)
        return landing_path_for(auth.user.user_type)

    async def register(self, data: Union[RegisterData, Dict[str, Any]]) -> str:
        await self._call("POST", "/auth/register", json=self._payload(RegisterData, data))
        return "/login?registered=true"

    async def logout(self) -> str:
        try:
            await self.api.post("/auth/logout")
        except ApiError as exc:
            logger.error("Logout error: %s", exc.message)
        finally:
            self.session.clear()
            self.user = None
        return "/login"

    async def forgot_password(self, data: Union[ForgotPasswordData, Dict[str, Any]]) -> None:
        await self._call("POST", "/auth/forgot-password", json=self._payload(ForgotPasswordData, data))

    async def reset_password(self, data: Union[ResetPasswordData, Dict[str, Any]]) -> str:
        await self._call("POST", "/auth/reset-password", json=self._payload(ResetPasswordData, data))
        return "/login?reset=success"

    async def resend_verification(self) -> None:
        await self._call("POST", "/auth/resend-verification")

    async def load_current_user(self) -> Optional[User]:
        if not self.session.is_authenticated:
            return None
        try:
            body = await self.api.get("/user")
            user = User.model_validate(body)
        except (ApiError, ValidationError):
            self.session.clear()
            self.user = None
            raise
        self.user = user
        self.session.update(username=user.name or None, email=user.email or None)
        return user
