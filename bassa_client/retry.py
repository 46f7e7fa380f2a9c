from __future__ import annotations

import logging
import time
from typing import Callable, Iterable

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
    wait_random,
)

from .config_types import ClientConfig, RETRY_METHODS, RETRY_STATUSES

log = logging.getLogger(__name__)

# transport failures worth another attempt; UnsupportedProtocol and friends are not
RETRY_ERRORS = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)


class RetryTransport(httpx.BaseTransport):
    """
    Wraps another httpx transport and retries throttled/failed exchanges.

    Only idempotent methods are retried. A retryable status that is still
    returned on the final attempt is passed through unchanged so the caller
    sees the real response.
    """

    def __init__(
        self,
        inner: httpx.BaseTransport | None = None,
        *,
        retries: int = 1,
        backoff_factor: float = 1.0,
        backoff_strategy: str = "exponential",
        backoff_max: float = 120.0,
        backoff_jitter: float = 0.0,
        statuses: Iterable[int] = RETRY_STATUSES,
        methods: Iterable[str] = RETRY_METHODS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if backoff_strategy not in ("exponential", "constant"):
            raise ValueError(f"unknown backoff strategy: {backoff_strategy!r}")
        self._inner = inner or httpx.HTTPTransport()
        self._retries = max(0, int(retries))
        self._statuses = frozenset(int(s) for s in statuses)
        self._methods = frozenset(m.upper() for m in methods)
        self._sleep = sleep
        if backoff_strategy == "constant":
            self._wait = wait_fixed(backoff_factor) + wait_random(0, backoff_jitter)
        else:
            self._wait = wait_exponential(multiplier=backoff_factor, max=backoff_max)

    @classmethod
    def from_config(
        cls,
        cfg: ClientConfig,
        inner: httpx.BaseTransport | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "RetryTransport":
        return cls(
            inner,
            retries=cfg.retries,
            backoff_factor=cfg.backoff_factor,
            backoff_strategy=cfg.backoff_strategy,
            backoff_max=cfg.backoff_max,
            backoff_jitter=cfg.backoff_jitter,
            statuses=cfg.retry_statuses,
            methods=cfg.retry_methods,
            sleep=sleep,
        )

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        if self._retries == 0 or request.method.upper() not in self._methods:
            return self._inner.handle_request(request)

        retrying = Retrying(
            stop=stop_after_attempt(self._retries + 1),
            wait=self._wait,
            retry=retry_if_exception_type(RETRY_ERRORS) | retry_if_result(self._retryable),
            before_sleep=self._before_sleep,
            retry_error_callback=self._give_up,
            sleep=self._sleep,
        )
        return retrying(self._inner.handle_request, request)

    def close(self) -> None:
        self._inner.close()

    def _retryable(self, response: httpx.Response) -> bool:
        return response.status_code in self._statuses

    def _before_sleep(self, state: RetryCallState) -> None:
        request = state.args[0]
        outcome = state.outcome
        if outcome is not None and not outcome.failed:
            response = outcome.result()
            reason = str(response.status_code)
            response.close()
        else:
            reason = repr(outcome.exception()) if outcome is not None else "unknown"
        delay = state.next_action.sleep if state.next_action else 0.0
        log.warning(
            "%s %s -> %s, retrying in %.2fs (attempt %d/%d)",
            request.method,
            request.url.path,
            reason,
            delay,
            state.attempt_number,
            self._retries + 1,
        )

    @staticmethod
    def _give_up(state: RetryCallState) -> httpx.Response:
        # re-raises the last transport error, or hands back the last response
        return state.outcome.result()
