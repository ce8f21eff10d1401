"""
Response Interpretation - JSON decoding, path lookup and comparison.
"""

import json
from typing import Any, Iterable


class _Missing:
    """Marker for a path that does not resolve to a value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def parse_json_body(body: bytes) -> Any:
    """
    Decode a response body as JSON.

    Raises:
        ValueError: If the body is empty or not valid JSON
    """
    if not body or not body.strip():
        raise ValueError("Empty response body")
    return json.loads(body.decode("utf-8"))


def get_nested_value(data: Any, path: str) -> Any:
    """
    Walk a dot-delimited path.

    Dict keys are looked up by name and list items by integer index.
    Returns MISSING as soon as a segment cannot be resolved. A JSON
    null at the end of the path is a value (None), not MISSING.
    """
    current = data
    for segment in path.split("."):
        if current is MISSING or current is None:
            return MISSING
        if isinstance(current, dict):
            current = current.get(segment, MISSING)
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            current = current[index] if index < len(current) else MISSING
        else:
            return MISSING
    return current


def extract_fields(data: Any, fields: Iterable[str]) -> dict[str, Any]:
    """Capture the given paths, silently skipping unresolved ones."""
    extracted: dict[str, Any] = {}
    for field_path in fields:
        value = get_nested_value(data, field_path)
        if value is not MISSING:
            extracted[field_path] = value
    return extracted


def strict_equals(actual: Any, expected: Any) -> bool:
    """
    Type-sensitive equality between JSON values.

    ``True`` never equals ``1`` or ``"true"``; integers and floats
    compare numerically with each other.
    """
    if actual is MISSING or expected is MISSING:
        return actual is expected
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    if isinstance(actual, (int, float)) and isinstance(expected, (int, float)):
        return actual == expected
    if actual is None or expected is None:
        return actual is None and expected is None
    if type(actual) is not type(expected):
        return False
    return actual == expected
