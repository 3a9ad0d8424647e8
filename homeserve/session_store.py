from threading import Lock
from typing import Dict, Optional

SESSION_KEYS = ("token", "username", "email", "user_type")


class SessionStore:
    """Holds the credentials of the signed-in user for one client session."""

    def __init__(self, token: Optional[str] = None):
        self._lock = Lock()
        self._values: Dict[str, str] = {}
        if token:
            self._values["token"] = token

    @property
    def token(self) -> Optional[str]:
        return self.get("token")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: Optional[str]) -> None:
        if key not in SESSION_KEYS:
            raise KeyError(f"Unknown session key: {key}")
        with self._lock:
            if value:
                self._values[key] = value
            else:
                self._values.pop(key, None)

    def update(self, **values: Optional[str]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._values)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)
