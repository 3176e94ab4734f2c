"""Edit-distance similarity for fuzzy header matching."""

from rapidfuzz.distance import Levenshtein


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance where insertions, deletions and substitutions each cost 1."""
    return Levenshtein.distance(a, b)


def similarity_percent(a: str, b: str) -> float:
    """
    Similarity as ``(1 - distance / max(len(a), len(b))) * 100``.

    Two empty strings are considered identical (100.0).

    Example:
        >>> round(similarity_percent("equipmnt type", "equipment type"), 2)
        92.86
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 100.0
    return (1 - levenshtein_distance(a, b) / longest) * 100
