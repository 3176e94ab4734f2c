"""
Cell value parsing utilities for spreadsheet sample sniffing and coercion.

This module centralizes how raw cell values (strings, numbers, booleans, dates
or pandas missing markers) are recognized as dates, numbers and booleans, so
that column pattern matching and import coercion agree on what parses.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Callable, List, Optional, Pattern, Sequence, Tuple, Union

import pandas as pd

logger = logging.getLogger(__name__)

SUPPORTED_DATE_FORMATS = (
    "YYYY-MM-DD, YYYY-MM-DDTHH:MM[:SS][.ffffff][Z|+HH:MM], MM/DD/YYYY, M/D/YYYY"
)

TRUE_WORDS = frozenset({"true", "t", "yes", "y"})
FALSE_WORDS = frozenset({"false", "f", "no", "n"})

_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_THOUSANDS_PATTERN = re.compile(r"(?<=\d),(?=\d{3}(\D|$))")

DateParser = Callable[[re.Match[str]], date]


def is_empty_value(value: Any) -> bool:
    """True for None, pandas missing markers (NaN/NaT) and blank strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _format_date_error(value: Any) -> str:
    return f"Cannot parse '{value}' as date. Supported formats: {SUPPORTED_DATE_FORMATS}"


def _parse_iso(match: re.Match[str]) -> date:
    raw = match.group(0)
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    fraction = match.group(3)
    if fraction:
        # fromisoformat before 3.11 takes exactly 3 or 6 fractional digits
        raw = raw.replace(fraction, fraction.ljust(7, "0"), 1)
    if "T" in raw or " " in raw:
        return datetime.fromisoformat(raw.replace(" ", "T")).date()
    return date.fromisoformat(raw)


def _parse_us_slash(match: re.Match[str]) -> date:
    month = int(match.group(1))
    day = int(match.group(2))
    year = int(match.group(3))
    return date(year, month, day)


_DATE_PATTERNS: List[Tuple[Pattern[str], DateParser]] = [
    (
        re.compile(
            r"^\d{4}-\d{2}-\d{2}"
            r"([T ]\d{2}:\d{2}(:\d{2}(\.\d{1,6})?)?([Zz]|[+-]\d{2}:\d{2})?)?$"
        ),
        _parse_iso,
    ),
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), _parse_us_slash),
]


def parse_date_value(value: Union[str, date, datetime, None]) -> date:
    """
    Parse a cell value into a Python ``date``.

    Supported inputs:
    - ``date``/``datetime``/``pandas.Timestamp`` objects (passthrough)
    - ISO-8601 strings: ``2025-01-15`` or ``2025-01-15T08:30:00Z``
    - US style strings: ``01/15/2025`` or ``1/5/2025``

    Raises:
        ValueError: If the value is empty or in none of the supported formats
    """
    if is_empty_value(value):
        raise ValueError(_format_date_error(value))

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        raise ValueError(_format_date_error(value))

    raw = value.strip()
    for pattern, parser in _DATE_PATTERNS:
        match = pattern.match(raw)
        if not match:
            continue
        try:
            return parser(match)
        except ValueError as exc:
            raise ValueError(_format_date_error(value)) from exc

    raise ValueError(_format_date_error(value))


def parse_date_or_none(value: Any) -> Optional[date]:
    """Lenient wrapper returning ``None`` for values that are not dates."""
    try:
        return parse_date_value(value)
    except ValueError:
        logger.debug("Unable to parse date value %r", value)
        return None


def parse_number_value(value: Any) -> Union[int, float]:
    """
    Parse a cell value into an ``int`` or ``float``.

    Strings may carry thousands separators (``1,234.5``). Booleans are not
    numbers here even though Python treats them as ints.

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, bool) or is_empty_value(value):
        raise ValueError(f"Cannot parse '{value}' as number")

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        return value

    if not isinstance(value, str):
        raise ValueError(f"Cannot parse '{value}' as number")

    raw = _THOUSANDS_PATTERN.sub("", value.strip())
    if not _NUMBER_PATTERN.match(raw):
        raise ValueError(f"Cannot parse '{value}' as number")

    if re.match(r"^[+-]?\d+$", raw):
        return int(raw)
    return float(raw)


def parse_boolean_value(value: Any, allow_numeric: bool = True) -> bool:
    """
    Parse a cell value into a ``bool``.

    Accepts real booleans and the words true/false, yes/no, t/f, y/n in any
    case. With ``allow_numeric`` the values 1/0 (numbers or strings) are also
    accepted.

    Raises:
        ValueError: If the value is not a recognized boolean
    """
    if isinstance(value, bool):
        return value

    if allow_numeric and isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)

    if isinstance(value, str):
        word = value.strip().lower()
        if word in TRUE_WORDS or (allow_numeric and word == "1"):
            return True
        if word in FALSE_WORDS or (allow_numeric and word == "0"):
            return False

    raise ValueError(f"Cannot parse '{value}' as boolean")


def _parses(parser: Callable[[Any], Any], value: Any) -> bool:
    try:
        parser(value)
    except ValueError:
        return False
    return True


_KIND_PARSERS: List[Tuple[str, Callable[[Any], Any]]] = [
    ("boolean", lambda v: parse_boolean_value(v, allow_numeric=False)),
    ("date", parse_date_value),
    ("number", parse_number_value),
]


def classify_sample_values(values: Sequence[Any], min_ratio: float = 0.8) -> Optional[str]:
    """
    Decide which value kind a column's sample values share.

    Kinds are checked in order boolean, date, number; the first kind for which
    at least ``min_ratio`` of the values parse is returned. Empty values must be
    filtered out by the caller.

    Returns:
        "boolean", "date", "number", or None when no kind is dominant
    """
    if not values:
        return None

    total = len(values)
    for kind, parser in _KIND_PARSERS:
        parsed = sum(1 for value in values if _parses(parser, value))
        if parsed / total >= min_ratio:
            return kind
    return None
