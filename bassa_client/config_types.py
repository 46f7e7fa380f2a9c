from __future__ import annotations
from dataclasses import dataclass
from typing import Literal

DEFAULT_SERVER_KEY = "123456789"
RETRY_STATUSES = (429, 500, 502, 503, 504)
# same set urllib3 treats as idempotent
RETRY_METHODS = frozenset({"DELETE", "GET", "HEAD", "OPTIONS", "PUT", "TRACE"})


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    timeout_s: float = 5.0
    retries: int = 1
    backoff_factor: float = 1.0
    backoff_strategy: Literal["exponential", "constant"] = "exponential"
    backoff_max: float = 120.0
    backoff_jitter: float = 0.0
    retry_statuses: tuple[int, ...] = RETRY_STATUSES
    retry_methods: frozenset[str] = RETRY_METHODS
    server_key: str = DEFAULT_SERVER_KEY
    user_agent: str | None = None
    echo_json: bool = False
