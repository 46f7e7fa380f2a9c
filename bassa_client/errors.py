from __future__ import annotations


class BassaClientError(Exception):
    """Base client error."""


class InvalidURL(BassaClientError):
    """Base URL is not a well-formed http(s)/ftp(s) URL."""


class IncompleteParams(BassaClientError):
    def __init__(self, missing: list[str] | tuple[str, ...] = ()):
        self.missing = list(missing)
        if self.missing:
            msg = "missing or empty: " + ", ".join(self.missing)
        else:
            msg = "some fields are not valid or empty"
        super().__init__(msg)


class InvalidEmailFormat(BassaClientError):
    def __init__(self, email: str):
        super().__init__(f"invalid email format: {email!r}")
        self.email = email


class NetworkError(BassaClientError):
    """Transport/network layer error."""


class ResponseError(BassaClientError):
    def __init__(self, status_code: int, message: str, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AuthError(ResponseError):
    """Auth-related API error."""


class ResponseDecodeError(ResponseError):
    """Successful status, but the body is not JSON."""
