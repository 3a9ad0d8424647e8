import logging
from typing import Any, Callable, Dict, Optional

import httpx

from homeserve import config
from homeserve.errors import (
    ApiError,
    NetworkError,
    ResponseValidationError,
    ServerError,
    UnauthorizedError,
)
from homeserve.session_store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "X-Requested-With": "XMLHttpRequest",
}

LOGIN_PATH = "/login"


class ApiClient:
    """JSON client for the marketplace backend.

    Attaches the bearer token held by ``session`` to every request and turns
    every failure into an :class:`ApiError`. A 401 answer purges the session
    and calls ``on_unauthorized`` with the login path before raising.
    """

    def __init__(
        self,
        session: SessionStore,
        base_url: Optional[str] = None,
        on_unauthorized: Optional[Callable[[str], None]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.base_url = (base_url or f"{config.BACKEND_URL}/api").rstrip("/")
        self.on_unauthorized = on_unauthorized
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=DEFAULT_HEADERS,
            timeout=timeout if timeout is not None else config.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def _auth_headers(self) -> Dict[str, str]:
        token = self.session.token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers=self._auth_headers(),
            )
        except httpx.TransportError as exc:
            logger.error("API request error (no response): method=%s url=%s error=%s", method, path, exc)
            raise NetworkError(f"Connection error: {exc}") from exc

        if response.is_error:
            raise self._server_error(method, path, response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.error("API response was not JSON: method=%s url=%s", method, path)
            raise ResponseValidationError("Unexpected response from server.", status_code=response.status_code) from exc

    def _server_error(self, method: str, path: str, response: httpx.Response) -> ApiError:
        body = _safe_json(response)
        logger.error(
            "API error: status=%s reason=%s url=%s method=%s body=%s",
            response.status_code,
            response.reason_phrase,
            path,
            method,
            body,
        )
        message = body.get("message") if isinstance(body.get("message"), str) else None
        errors = body.get("errors") if isinstance(body.get("errors"), dict) else None
        message = message or response.reason_phrase or f"Request failed with status {response.status_code}"

        if response.status_code == 401:
            self._purge_session()
            return UnauthorizedError(message, errors=errors, status_code=401)
        return ServerError(message, errors=errors, status_code=response.status_code)

    def _purge_session(self) -> None:
        self.session.clear()
        if self.on_unauthorized is not None:
            self.on_unauthorized(LOGIN_PATH)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)


def _safe_json(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
