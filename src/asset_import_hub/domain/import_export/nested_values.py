"""
Dotted-path access into nested records.

Records are plain dicts produced by the document layer. Paths address nested
mappings only: ``specifications.dimensions.length`` walks three dict levels.
Numeric-looking segments are ordinary keys and lists are leaf values, so
``parts.0`` means the key ``"0"``, never a list index.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, MutableMapping
from typing import Any, Dict, List, Optional, Sequence

from asset_import_hub.domain.field_discovery.models import FieldDefinition

PATH_SEPARATOR = "."


def split_path(path: str, separator: str = PATH_SEPARATOR) -> List[str]:
    """
    Split a dotted path into segments.

    Raises:
        ValueError: On an empty path or an empty segment (``a..b``, ``.a``).
    """
    if not isinstance(path, str) or not path:
        raise ValueError(f"Invalid path {path!r}: path must be a non-empty string")
    segments = path.split(separator)
    if any(segment == "" for segment in segments):
        raise ValueError(f"Invalid path {path!r}: empty path segment")
    return segments


def get_value(record: Optional[Mapping[str, Any]], path: str, default: Any = None) -> Any:
    """
    Read the value at ``path``, or ``default`` when any segment is missing.

    A malformed path (``a..b``, ``""``) addresses nothing and also yields
    ``default``.

    >>> get_value({"a": {"b": 1}}, "a.b")
    1
    >>> get_value({"a": 5}, "a.b", "n/a")
    'n/a'
    """
    try:
        segments = split_path(path)
    except ValueError:
        return default

    current: Any = record
    for segment in segments:
        if not isinstance(current, Mapping) or segment not in current:
            return default
        current = current[segment]
    return current


def set_value(record: MutableMapping[str, Any], path: str, value: Any) -> None:
    """
    Assign ``value`` at ``path``, creating intermediate dicts as needed.

    A non-mapping found where an intermediate level is expected is replaced by
    an empty dict. Sibling keys are left untouched.

    Raises:
        ValueError: On an empty path or an empty path segment.
    """
    _assign(record, split_path(path), value)


def _assign(record: MutableMapping[str, Any], segments: List[str], value: Any) -> None:
    current = record
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, MutableMapping):
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = value


def _flat_cell(value: Any, delimiter: str) -> Any:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return delimiter.join("" if item is None else str(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, sort_keys=True, default=str)
    return value


def flat_column_keys(fields: Sequence[FieldDefinition]) -> List[str]:
    """
    Column key per field: its label, or its path when the label is shared.

    Keys come out in field order.
    """
    label_counts: Dict[str, int] = {}
    for field in fields:
        label_counts[field.label] = label_counts.get(field.label, 0) + 1
    return [
        field.label if label_counts[field.label] == 1 else field.path for field in fields
    ]


def flatten(
    record: Mapping[str, Any],
    fields: Sequence[FieldDefinition],
    delimiter: str = ",",
) -> Dict[str, Any]:
    """
    Render a record as one flat row keyed by field label.

    Lists become delimiter-joined strings, missing values become ``""`` and
    nested mappings at a field path are rendered as JSON.
    """
    row: Dict[str, Any] = {}
    for key, field in zip(flat_column_keys(fields), fields):
        row[key] = _flat_cell(get_value(record, field.path), delimiter)
    return row


def unflatten(flat: Mapping[str, Any], separator: str = PATH_SEPARATOR) -> Dict[str, Any]:
    """Rebuild a nested record from path-keyed values, skipping empty ones."""
    record: Dict[str, Any] = {}
    for path, value in flat.items():
        if value is None or (isinstance(value, str) and value == ""):
            continue
        _assign(record, split_path(path, separator), value)
    return record


__all__ = [
    "flat_column_keys",
    "flatten",
    "get_value",
    "set_value",
    "split_path",
    "unflatten",
]
