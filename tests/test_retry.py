import httpx
import pytest

from bassa_client import NetworkError, ResponseError
from bassa_client.retry import RetryTransport


def _flaky(statuses):
    calls = []
    queue = list(statuses)

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(queue.pop(0), json={"attempt": len(calls)})

    return handler, calls


def test_retries_503_until_success(make_client, server) -> None:
    server.queue(httpx.Response(503), httpx.Response(503), httpx.Response(200, json=[{"id": 1}]))
    client = make_client(retries=2)

    assert client.get_downloads(5) == [{"id": 1}]
    assert len(server.requests) == 3


def test_exhausted_retries_surface_last_status(make_client, server) -> None:
    server.queue(httpx.Response(502), httpx.Response(503))
    client = make_client(retries=1)

    with pytest.raises(ResponseError) as exc:
        client.get_user()

    assert exc.value.status_code == 503
    assert len(server.requests) == 2


def test_post_is_not_retried_by_default(make_client, server) -> None:
    server.queue(httpx.Response(503), httpx.Response(200, json={}))
    client = make_client(retries=3)

    with pytest.raises(ResponseError) as exc:
        client.add_download("https://example.org/a.iso")

    assert exc.value.status_code == 503
    assert len(server.requests) == 1


def test_non_retryable_status_is_not_retried(make_client, server) -> None:
    server.queue(httpx.Response(404), httpx.Response(200, json={}))
    client = make_client(retries=3)

    with pytest.raises(ResponseError):
        client.get_download(1)
    assert len(server.requests) == 1


def test_connect_errors_are_retried_then_wrapped(make_client, server) -> None:
    server.queue(httpx.ConnectError("refused"), httpx.ConnectError("refused again"))
    client = make_client(retries=1)

    with pytest.raises(NetworkError, match="refused again"):
        client.get_user()
    assert len(server.requests) == 2


def test_exponential_backoff_waits() -> None:
    handler, calls = _flaky([429, 500, 504, 200])
    sleeps: list[float] = []
    t = RetryTransport(httpx.MockTransport(handler), retries=3, backoff_factor=0.5, sleep=sleeps.append)

    with httpx.Client(transport=t, base_url="http://localhost") as c:
        r = c.get("/api/user")

    assert r.status_code == 200
    assert len(calls) == 4
    assert sleeps == [0.5, 1.0, 2.0]


def test_exponential_backoff_is_capped() -> None:
    handler, _ = _flaky([500, 500, 500, 200])
    sleeps: list[float] = []
    t = RetryTransport(
        httpx.MockTransport(handler), retries=3, backoff_factor=10, backoff_max=15, sleep=sleeps.append
    )

    with httpx.Client(transport=t, base_url="http://localhost") as c:
        c.get("/")

    assert sleeps == [10, 15, 15]


def test_constant_backoff_waits() -> None:
    handler, calls = _flaky([503, 503, 200])
    sleeps: list[float] = []
    t = RetryTransport(
        httpx.MockTransport(handler),
        retries=2,
        backoff_factor=0.25,
        backoff_strategy="constant",
        sleep=sleeps.append,
    )

    with httpx.Client(transport=t, base_url="http://localhost") as c:
        c.delete("/api/download/1")

    assert len(calls) == 3
    assert sleeps == [0.25, 0.25]


def test_unknown_backoff_strategy_rejected() -> None:
    with pytest.raises(ValueError):
        RetryTransport(httpx.MockTransport(lambda r: httpx.Response(200)), backoff_strategy="linear")


def test_unsupported_protocol_is_not_retried(make_client, server) -> None:
    server.queue(httpx.UnsupportedProtocol("Request URL has an unsupported protocol 'ftp://'."))
    client = make_client(retries=2)

    with pytest.raises(NetworkError):
        client.get_user()
    assert len(server.requests) == 1


def test_read_timeout_is_retried(make_client, server) -> None:
    server.queue(httpx.ReadTimeout("slow"), httpx.Response(200, json={"user_name": "rand"}))
    client = make_client(retries=1)

    assert client.get_user() == {"user_name": "rand"}
    assert len(server.requests) == 2
