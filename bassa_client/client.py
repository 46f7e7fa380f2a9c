from __future__ import annotations

import logging
import os
from typing import Any, Iterable
from urllib.parse import quote

import httpx

from .config_types import ClientConfig
from .errors import ResponseError
from .transport import Transport
from .validation import require, validate_email

log = logging.getLogger(__name__)


def _seg(value: Any) -> str:
    return quote(str(value), safe="")


class BassaClient:
    """
    Client for the Bassa download manager API.

    Every call is a single request; the session token obtained by `login`
    is sent as the ``token`` header on all later calls. Only HTTP 200 counts
    as success, anything else raises `ResponseError`.

    Example:
        >>> with BassaClient(ClientConfig(base_url="http://localhost:5000")) as bassa:
        ...     bassa.login("rand", "pass")
        ...     bassa.add_download("https://example.org/file.iso")
    """

    def __init__(self, cfg: ClientConfig, *, transport: httpx.BaseTransport | None = None):
        self._t = Transport(cfg, transport=transport)

    def close(self) -> None:
        self._t.close()

    def __enter__(self) -> BassaClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<BassaClient base_url={self._t.config.base_url!r}>"

    @property
    def token(self) -> str | None:
        return self._t.session.token

    # --- auth ---
    def login(self, username: str, password: str) -> str:
        """Log in and keep the returned token for the rest of the session."""
        require(username=username, password=password)
        path = "/api/login"
        r = self._t.send("POST", path, data={"user_name": username, "password": password})
        self._t.raise_for_status(r, "POST", path)
        token = r.headers.get("token")
        if not token:
            raise ResponseError(r.status_code, "login response carried no token header", None)
        self._t.session.set(token)
        log.debug("logged in as %s", username)
        return token

    def logout(self) -> None:
        """Forget the session token locally; the server is not contacted."""
        self._t.session.clear()

    # --- users ---
    def add_regular_user(self, username: str, password: str, email: str) -> Any:
        require(username=username, password=password, email=email)
        validate_email(email)
        return self._t.request(
            "POST", "/api/regularuser",
            data={"user_name": username, "password": password, "email": email},
        )

    def add_user(self, username: str, password: str, email: str, auth_level: int = 1) -> Any:
        require(username=username, password=password, email=email, auth_level=auth_level)
        validate_email(email)
        return self._t.request(
            "POST", "/api/user",
            data={"user_name": username, "password": password, "email": email, "auth": str(auth_level)},
        )

    def remove_user(self, username: str) -> Any:
        require(username=username)
        return self._t.request("DELETE", f"/api/user/{_seg(username)}")

    def update_user(
            self,
            username: str,
            new_username: str,
            password: str,
            auth_level: int,
            email: str,
    ) -> Any:
        require(
            username=username,
            new_username=new_username,
            password=password,
            auth_level=auth_level,
            email=email,
        )
        validate_email(email)
        body = {
            "user_name": new_username,
            "password": password,
            "auth_level": str(auth_level),
            "email": email,
        }
        return self._t.request("PUT", f"/api/user/{_seg(username)}", data=body)

    def get_user(self) -> Any:
        return self._t.request("GET", "/api/user")

    def get_signup_requests(self) -> Any:
        return self._t.request("GET", "/api/user/requests")

    def approve_user(self, username: str) -> Any:
        require(username=username)
        return self._t.request("POST", f"/api/user/approve/{_seg(username)}")

    def get_blocked_users(self) -> Any:
        return self._t.request("GET", "/api/user/blocked")

    def block_user(self, username: str) -> Any:
        require(username=username)
        return self._t.request("POST", f"/api/user/blocked/{_seg(username)}")

    def unblock_user(self, username: str) -> Any:
        require(username=username)
        return self._t.request("DELETE", f"/api/user/blocked/{_seg(username)}")

    def get_user_downloads(self, limit: int = 1) -> Any:
        """Downloads added by the logged-in user, paged by `limit`."""
        require(limit=limit)
        return self._t.request("GET", f"/api/user/downloads/{_seg(limit)}")

    def get_heaviest_users(self) -> Any:
        """Top ten users by downloaded size."""
        return self._t.request("GET", "/api/user/heavy")

    # --- downloads ---
    def start_download(self, server_key: str | None = None) -> Any:
        key = server_key or self._t.config.server_key
        return self._t.request("GET", "/api/download/start", headers={"key": key})

    def kill_download(self, server_key: str | None = None) -> Any:
        key = server_key or self._t.config.server_key
        return self._t.request("GET", "/api/download/kill", headers={"key": key})

    def add_download(self, link: str) -> Any:
        require(link=link)
        return self._t.request("POST", "/api/download", json_body={"link": link})

    def remove_download(self, download_id: int | str) -> Any:
        require(download_id=download_id)
        return self._t.request("DELETE", f"/api/download/{_seg(download_id)}")

    def rate_download(self, download_id: int | str, rate: int) -> Any:
        require(download_id=download_id, rate=rate)
        return self._t.request("POST", f"/api/download/{_seg(download_id)}", json_body={"rate": rate})

    def get_downloads(self, limit: int) -> Any:
        """All downloads, paged by `limit` (0 is a valid page)."""
        require(limit=limit)
        return self._t.request("GET", f"/api/downloads/{_seg(limit)}")

    def get_download(self, download_id: int | str) -> Any:
        require(download_id=download_id)
        return self._t.request("GET", f"/api/download/{_seg(download_id)}")

    # --- files ---
    def start_compression(self, gids: Iterable[str] | str) -> Any:
        """Ask the server to zip the downloads identified by `gids`."""
        gid_list = [gids] if isinstance(gids, str) else list(gids or ())
        require(gids=gid_list)
        return self._t.request("POST", "/api/compress", json_body={"gid": gid_list})

    def get_compression_progress(self, progress_id: int | str) -> Any:
        require(progress_id=progress_id)
        return self._t.request("GET", f"/api/compression-progress/{_seg(progress_id)}")

    def send_file_from_path(self, gid: str) -> Any:
        require(gid=gid)
        return self._t.request("GET", "/api/file", params={"gid": gid})

    def download_file(self, gid: str, dest: str | os.PathLike[str]) -> int:
        """Save the file served for `gid` to `dest`; returns the byte count."""
        require(gid=gid, dest=str(dest) if dest is not None else None)
        return self._t.download("/api/file", os.fspath(dest), params={"gid": gid})
