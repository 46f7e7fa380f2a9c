from __future__ import annotations

import os
import tomllib
from dataclasses import replace
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from .config_types import ClientConfig, DEFAULT_SERVER_KEY

APP_NAME = "bassa"
CONFIG_FILENAME = "config.toml"
BASE_URL_DEFAULT = "http://localhost:5000"

ENV_API_URL = "BASSA_API_URL"
ENV_TIMEOUT = "BASSA_TIMEOUT"
ENV_RETRIES = "BASSA_RETRIES"
ENV_BACKOFF_FACTOR = "BASSA_BACKOFF_FACTOR"
ENV_SERVER_KEY = "BASSA_SERVER_KEY"

# keys read from the top level of the file or from a [profiles.<name>] table
_KEYS = ("base_url", "timeout_s", "retries", "backoff_factor", "backoff_strategy", "server_key")
BACKOFF_STRATEGIES = ("exponential", "constant")


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> ClientConfig:
    return ClientConfig(base_url=BASE_URL_DEFAULT)


def normalize_base_url(raw: str | None) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    value = value.rstrip("/")
    lowered = value.lower()
    if lowered.startswith(("http://", "https://", "ftp://", "ftps://")):
        return value

    host = value.split("/", 1)[0]
    host = host.split(":", 1)[0].lower()
    if host in {"localhost", "127.0.0.1", "0.0.0.0"}:
        scheme = "http://"
    else:
        scheme = "https://"
    return f"{scheme}{value}"


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def to_toml(cfg: ClientConfig) -> dict[str, Any]:
    return {
        "base_url": cfg.base_url,
        "timeout_s": float(cfg.timeout_s),
        "retries": int(cfg.retries),
        "backoff_factor": float(cfg.backoff_factor),
        "backoff_strategy": cfg.backoff_strategy,
        "server_key": cfg.server_key,
    }


def _coerce(key: str, value: Any) -> Any:
    if key == "base_url":
        return normalize_base_url(str(value))
    if key in ("timeout_s", "backoff_factor"):
        return float(value)
    if key == "retries":
        return int(value)
    if key == "backoff_strategy" and value not in BACKOFF_STRATEGIES:
        raise ValueError("expected one of " + ", ".join(BACKOFF_STRATEGIES))
    return str(value)


def from_toml(data: dict[str, Any], profile: str | None = None) -> ClientConfig:
    values: dict[str, Any] = {}
    sources = [data]
    if profile:
        profiles_raw = data.get("profiles") or {}
        prof = profiles_raw.get(profile) if isinstance(profiles_raw, dict) else None
        if isinstance(prof, dict):
            sources.append(prof)

    for source in sources:
        for key in _KEYS:
            raw = source.get(key)
            if raw is None or raw == "":
                continue
            try:
                values[key] = _coerce(key, raw)
            except (TypeError, ValueError) as e:
                raise ValueError(f"{key}: invalid value {raw!r} in {config_path()}") from e

    if not values.get("base_url"):
        values["base_url"] = BASE_URL_DEFAULT
    values.setdefault("server_key", DEFAULT_SERVER_KEY)
    return ClientConfig(**values)


def apply_env(cfg: ClientConfig) -> ClientConfig:
    overrides: dict[str, Any] = {}
    for env, key in (
        (ENV_API_URL, "base_url"),
        (ENV_TIMEOUT, "timeout_s"),
        (ENV_RETRIES, "retries"),
        (ENV_BACKOFF_FACTOR, "backoff_factor"),
        (ENV_SERVER_KEY, "server_key"),
    ):
        raw = os.getenv(env, "").strip()
        if not raw:
            continue
        try:
            overrides[key] = _coerce(key, raw)
        except (TypeError, ValueError) as e:
            raise ValueError(f"{env}: invalid value {raw!r}") from e
    return replace(cfg, **overrides) if overrides else cfg


def load_config(profile: str | None = None) -> ClientConfig:
    """
    Resolve client settings: file defaults, then the named profile, then env.

    A missing config file is not an error.
    """
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        cfg = from_toml(data, profile)
    except FileNotFoundError:
        cfg = default_config()
    return apply_env(cfg)


def save_config(cfg: ClientConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path
