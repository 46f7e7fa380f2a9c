from __future__ import annotations

import re
from typing import Any

from .errors import IncompleteParams, InvalidEmailFormat, InvalidURL

URL_RE = re.compile(
    r"^(?:http|ftp)s?://"
    r"(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+(?:[A-Z]{2,6}\.?|[A-Z0-9-]{2,}\.?)|"
    r"localhost|"
    r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})"
    r"(?::\d+)?"
    r"(?:/?|[/?]\S+)$",
    re.IGNORECASE,
)

EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


def is_missing(value: Any) -> bool:
    """None, blank strings and empty collections count as missing; 0 does not."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def require(**params: Any) -> None:
    missing = [name for name, value in params.items() if is_missing(value)]
    if missing:
        raise IncompleteParams(missing)


def validate_email(email: str) -> str:
    if not isinstance(email, str) or not EMAIL_RE.match(email):
        raise InvalidEmailFormat(email)
    return email


def validate_base_url(url: str) -> str:
    if not URL_RE.match(url):
        raise InvalidURL(f"invalid base URL: {url!r}")
    return url
