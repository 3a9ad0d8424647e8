from typing import Dict, List, Literal, Optional

ErrorKind = Literal["network", "server", "validation"]


class ApiError(Exception):
    """Base class for every failure surfaced by the client layers.

    ``kind`` tells callers whether the request never reached the backend
    (``network``), the backend answered with a non-2xx status (``server``)
    or the answer did not have the expected shape (``validation``).
    """

    kind: ErrorKind = "server"

    def __init__(
        self,
        message: str,
        errors: Optional[Dict[str, List[str]]] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.errors: Dict[str, List[str]] = dict(errors or {})
        self.status_code = status_code

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "errors": self.errors}


class NetworkError(ApiError):
    kind: ErrorKind = "network"


class ServerError(ApiError):
    kind: ErrorKind = "server"


class ResponseValidationError(ApiError):
    kind: ErrorKind = "validation"


class UnauthorizedError(ServerError):
    pass
