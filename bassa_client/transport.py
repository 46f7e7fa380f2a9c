from __future__ import annotations

import json
import logging
import os
from importlib import metadata
from typing import Any

import httpx

from . import console
from .config_types import ClientConfig
from .errors import AuthError, IncompleteParams, NetworkError, ResponseDecodeError, ResponseError
from .retry import RetryTransport
from .session import Session
from .validation import validate_base_url

log = logging.getLogger(__name__)


def client_version() -> str:
    try:
        return metadata.version("bassa-client")
    except metadata.PackageNotFoundError:
        return "0.0.0"


class Transport:
    def __init__(self, cfg: ClientConfig, *, transport: httpx.BaseTransport | None = None):
        missing = []
        if not (cfg.base_url or "").strip():
            missing.append("base_url")
        if not cfg.timeout_s or cfg.timeout_s <= 0:
            missing.append("timeout_s")
        if missing:
            raise IncompleteParams(missing)
        validate_base_url(cfg.base_url)

        self._cfg = cfg
        self.session = Session()
        headers = {"User-Agent": cfg.user_agent or f"bassa-client/{client_version()}"}

        self._client = httpx.Client(
            base_url=cfg.base_url.rstrip("/"),
            timeout=cfg.timeout_s,
            headers=headers,
            transport=RetryTransport.from_config(cfg, transport),
            follow_redirects=True,
        )

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    def close(self) -> None:
        self._client.close()

    def send(
            self,
            method: str,
            path: str,
            *,
            data: dict[str, Any] | None = None,
            json_body: Any | None = None,
            params: dict[str, Any] | None = None,
            headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request with the session token attached; no status check."""
        merged = self.session.headers()
        if headers:
            merged.update(headers)
        log.debug("%s %s", method, path)
        try:
            return self._client.request(
                method, path, data=data, json=json_body, params=params, headers=merged
            )
        except httpx.RequestError as e:
            log.debug("%s %s failed: %s", method, path, e)
            raise NetworkError(str(e)) from e

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and decode the JSON body of a 200 response."""
        r = self.send(method, path, **kwargs)
        self.raise_for_status(r, method, path)
        return self.decode(r, method, path)

    def download(self, path: str, dest: str, *, params: dict[str, Any] | None = None) -> int:
        """Stream a 200 response body into `dest`; returns bytes written."""
        written = 0
        part = f"{dest}.part"
        log.debug("GET %s -> %s", path, dest)
        try:
            with self._client.stream("GET", path, params=params, headers=self.session.headers()) as r:
                self.raise_for_status(r, "GET", path)
                with open(part, "wb") as f:
                    for chunk in r.iter_bytes():
                        f.write(chunk)
                        written += len(chunk)
            os.replace(part, dest)
        except httpx.RequestError as e:
            raise NetworkError(str(e)) from e
        finally:
            if os.path.exists(part):
                os.remove(part)
        return written

    def raise_for_status(self, r: httpx.Response, method: str, path: str) -> None:
        if r.status_code == 200:
            return

        # Try parse body as json for better errors / output
        r.read()
        msg = f"{method} {path} failed with {r.status_code}"
        details = None
        try:
            data = r.json()
        except ValueError:
            data = None
        if data is not None:
            details = json.dumps(data, indent=2, ensure_ascii=False)
            if isinstance(data, dict) and (data.get("error") or data.get("message")):
                msg = str(data.get("error") or data.get("message"))
        elif r.text:
            details = r.text[:1000]

        log.debug("%s %s -> %s", method, path, r.status_code)
        if r.status_code in (401, 403):
            raise AuthError(r.status_code, msg, details)
        raise ResponseError(r.status_code, msg, details)

    def decode(self, r: httpx.Response, method: str, path: str) -> Any:
        if not r.content.strip():
            return None
        try:
            data = r.json()
        except ValueError as e:
            raise ResponseDecodeError(
                r.status_code, f"{method} {path} returned a non-JSON body", r.text[:1000]
            ) from e
        if self._cfg.echo_json:
            console.print_json(data)
        return data
