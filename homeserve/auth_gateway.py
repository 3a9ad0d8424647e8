import logging
from typing import Any, Dict, Optional

import httpx

from homeserve import config
from homeserve.errors import NetworkError, ResponseValidationError, ServerError

logger = logging.getLogger(__name__)


class AuthGateway:
    """Forwards auth requests from the web app to the backend ``/auth`` endpoints."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = (api_url or config.API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT_SECONDS
        self.transport = transport

    async def _post(
        self,
        path: str,
        payload: Dict[str, Any],
        default_error: str,
        token: Optional[str] = None,
    ) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(f"{self.api_url}{path}", json=payload, headers=headers)
        except httpx.TransportError as exc:
            raise NetworkError(f"Connection error: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        if response.is_error:
            message = body.get("message") if isinstance(body.get("message"), str) else None
            errors = body.get("errors") if isinstance(body.get("errors"), dict) else None
            raise ServerError(message or default_error, errors=errors, status_code=response.status_code)
        return body

    async def login(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = await self._post("/auth/login", payload, "Login failed")
        if not body.get("token"):
            raise ResponseValidationError("Login failed")
        return body

    async def register(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = await self._post("/auth/register", payload, "Registration failed")
        if not body.get("token"):
            raise ResponseValidationError("Registration failed")
        return body

    async def forgot_password(self, email: str) -> Dict[str, Any]:
        return await self._post("/auth/forgot-password", {"email": email}, "Failed to send reset link")

    async def reset_password(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post("/auth/reset-password", payload, "Password reset failed")

    async def logout(self, token: str) -> None:
        await self._post("/auth/logout", {}, "Logout failed", token=token)


auth_gateway = AuthGateway()


def get_auth_gateway() -> AuthGateway:
    return auth_gateway
