from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, List

LIST_DELIMITER = ";"
_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


def to_any(v: Any) -> Any:
    return v


def to_str(v: Any) -> str:
    return str(v)


def to_int(v: Any) -> int:
    if isinstance(v, str):
        v = v.strip()
    return int(v)


def to_float(v: Any) -> float:
    return float(v)


def to_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in _TRUTHY


def to_json(v: Any) -> Any:
    return json.loads(v) if isinstance(v, str) else v


def to_list(v: Any) -> List[Any]:
    """Lists pass through; anything else is split on ';' with blanks dropped."""
    if isinstance(v, list):
        return v
    if isinstance(v, tuple):
        return list(v)
    return [s.strip() for s in str(v).split(LIST_DELIMITER) if s.strip()]


def strip(v: Any) -> Any:
    return v.strip() if isinstance(v, str) else v


def lower(v: Any) -> Any:
    return v.lower() if isinstance(v, str) else v


def upper(v: Any) -> Any:
    return v.upper() if isinstance(v, str) else v


def slug(v: Any) -> Any:
    if not isinstance(v, str):
        return v
    s = v.strip().lower()
    return re.sub(r"[^a-z0-9]+", "-", s).strip("-")


BUILTIN_CONVERTERS: Dict[str, Callable[[Any], Any]] = {
    # casts
    "any": to_any,
    "str": to_str,
    "int": to_int,
    "float": to_float,
    "bool": to_bool,
    "json": to_json,
    "list": to_list,
    # string transforms
    "strip": strip,
    "lower": lower,
    "upper": upper,
    "slug": slug,
}


def list_converters() -> List[str]:
    return sorted(BUILTIN_CONVERTERS)
