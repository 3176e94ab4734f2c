"""
Header text normalization used by column matching and alias lookup.

Normalization steps for ``normalize_header`` (applied in order):
1) Convert non-string types to string (None -> "")
2) Replace full-width spaces (U+3000) with half-width
3) Lowercase and strip leading/trailing whitespace
4) Collapse runs of whitespace and underscores into a single space

``loosen_header`` builds on that and additionally drops punctuation and reduces
simple English plurals, so "Asset_Tags" and "asset-tag" compare equal.
"""

import re
from collections import Counter
from typing import Any, List, Sequence

_SEPARATOR_RUN = re.compile(r"[\s_]+")
_NON_ALNUM = re.compile(r"[^0-9a-z ]+")


def normalize_header(value: Any) -> str:
    """
    Normalize a header (or alias, label, path) for comparison.

    Args:
        value: Raw header value (any type accepted)

    Returns:
        Lowercased text with whitespace/underscore runs collapsed to one space

    Example:
        >>> normalize_header("  Unit__ID ")
        'unit id'
    """
    text = "" if value is None else str(value)
    text = text.replace("　", " ").lower().strip()
    return _SEPARATOR_RUN.sub(" ", text).strip()


def _singularize(word: str) -> str:
    if len(word) <= 3:
        return word
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith(("sses", "xes", "ches", "shes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith(("ss", "us", "is")):
        return word[:-1]
    return word


def loosen_header(value: Any) -> str:
    """
    Normalize and then drop punctuation and plural endings word by word.

    Example:
        >>> loosen_header("Asset-Tags")
        'asset tag'
    """
    text = _NON_ALNUM.sub(" ", normalize_header(value))
    words = [_singularize(word) for word in text.split()]
    return " ".join(words)


def humanize_segment(segment: str) -> str:
    """
    Turn a path segment into a display label.

    Example:
        >>> humanize_segment("asset_group_code")
        'Asset Group Code'
    """
    words = [w for w in re.split(r"[_\-\s]+", segment.strip()) if w]
    return " ".join(word[:1].upper() + word[1:] for word in words)


def find_duplicate_headers(headers: Sequence[str]) -> List[str]:
    """Return header strings occurring more than once, in first-seen order."""
    counts = Counter(headers)
    duplicates: List[str] = []
    for header in headers:
        if counts[header] > 1 and header not in duplicates:
            duplicates.append(header)
    return duplicates
