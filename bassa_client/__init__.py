from .client import BassaClient
from .config_types import ClientConfig
from .errors import (
    AuthError,
    BassaClientError,
    IncompleteParams,
    InvalidEmailFormat,
    InvalidURL,
    NetworkError,
    ResponseDecodeError,
    ResponseError,
)

__all__ = [
    "BassaClient",
    "ClientConfig",
    "AuthError",
    "BassaClientError",
    "IncompleteParams",
    "InvalidEmailFormat",
    "InvalidURL",
    "NetworkError",
    "ResponseDecodeError",
    "ResponseError",
]
