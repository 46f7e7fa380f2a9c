from __future__ import annotations

import json
from typing import Any

from rich.console import Console

console = Console(stderr=True)


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, ensure_ascii=False, default=str))
