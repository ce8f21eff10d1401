"""
Eligibility Export - Columns for registration spreadsheets.

Extracted data is persisted per registration; exports add one column
per extracted field, in the order fields are first seen.
"""

from typing import Any, Iterable, List, Mapping, Optional, Tuple


COLUMN_PREFIX = "Elegibilidade: "


def collect_keys(records: Iterable[Optional[Mapping[str, Any]]]) -> List[str]:
    """Union of extracted-data keys across records, first-seen order."""
    keys: List[str] = []
    seen = set()
    for data in records:
        if not isinstance(data, Mapping):
            continue
        for key in data:
            if key not in seen:
                seen.add(key)
                keys.append(key)
    return keys


def format_value(value: Any) -> str:
    """Render a cell value; absent and null values become empty strings."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def eligibility_columns(
    records: Iterable[Optional[Mapping[str, Any]]],
) -> Tuple[List[str], List[List[str]]]:
    """
    Build export headers and row cells for extracted eligibility data.

    Args:
        records: Extracted data of each registration (None when a
            registration has none), in export row order

    Returns:
        (headers, rows) where rows align with the input records
    """
    records = list(records)
    keys = collect_keys(records)
    headers = [f"{COLUMN_PREFIX}{key}" for key in keys]

    rows: List[List[str]] = []
    for data in records:
        data = data if isinstance(data, Mapping) else {}
        rows.append([format_value(data.get(key)) for key in keys])

    return headers, rows
