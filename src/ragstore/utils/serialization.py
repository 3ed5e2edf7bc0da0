from __future__ import annotations

import dataclasses
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Mapping


def json_sanitize(x: Any) -> Any:
    """
    Convert values found in payloads and results into JSON-safe types.
    - Enum -> its value
    - dataclass instances -> dict of their fields
    - datetime/date -> ISO string, Path -> str
    - set/tuple/list -> list, mappings -> dict with str keys (recursively)
    - anything else -> str(x)
    """
    if x is None or isinstance(x, (str, int, float, bool)):
        return x

    if isinstance(x, Enum):
        return json_sanitize(x.value)

    if dataclasses.is_dataclass(x) and not isinstance(x, type):
        return {f.name: json_sanitize(getattr(x, f.name)) for f in dataclasses.fields(x)}

    if isinstance(x, (datetime, date)):
        return x.isoformat()

    if isinstance(x, Path):
        return str(x)

    if isinstance(x, set):
        return [json_sanitize(v) for v in sorted(x, key=str)]

    if isinstance(x, (list, tuple)):
        return [json_sanitize(v) for v in x]

    if isinstance(x, Mapping):
        return {str(k): json_sanitize(v) for k, v in x.items()}

    return str(x)
