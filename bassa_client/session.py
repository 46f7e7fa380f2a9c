from __future__ import annotations

import threading


class Session:
    """Login token owned by one client; written by login, read by every request."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._token = ""

    @property
    def token(self) -> str | None:
        with self._lock:
            return self._token or None

    def set(self, token: str) -> None:
        with self._lock:
            self._token = token

    def clear(self) -> None:
        self.set("")

    def headers(self) -> dict[str, str]:
        token = self.token
        return {"token": token} if token else {}
