"""
Matching techniques for the column mapping pipeline.

Each matcher looks at one header and returns a ``MatchCandidate`` when its rule
clears the threshold, or ``None``. The service decides the order in which they
run; the matchers themselves are independent and side-effect free.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from asset_import_hub.config.alias_schema import AliasTable
from asset_import_hub.domain.column_mapping.history import HistoricalMappingStore
from asset_import_hub.domain.column_mapping.models import MappingTechnique
from asset_import_hub.domain.field_discovery.models import DataType, FieldDefinition
from asset_import_hub.utils.header_normalizer import (
    humanize_segment,
    loosen_header,
    normalize_header,
)
from asset_import_hub.utils.text_similarity import similarity_percent
from asset_import_hub.utils.value_parser import classify_sample_values

KIND_TO_DATA_TYPE: Dict[str, DataType] = {
    "boolean": DataType.BOOLEAN,
    "date": DataType.DATE,
    "number": DataType.NUMBER,
}


@dataclass(frozen=True)
class MatchCandidate:
    target_path: str
    confidence: int
    technique: MappingTechnique


@dataclass
class _IndexedField:
    definition: FieldDefinition
    order: int
    exact_forms: List[str] = field(default_factory=list)
    loose_forms: List[str] = field(default_factory=list)
    fuzzy_forms: List[str] = field(default_factory=list)


class FieldIndex:
    """
    Precomputed comparison forms for a field list, in field order.

    ``alias_table`` aliases join the fuzzy comparison forms of their target
    field, so a misspelled known alias still lands on the right field.
    """

    def __init__(
        self,
        fields: Sequence[FieldDefinition],
        alias_table: Optional[AliasTable] = None,
    ):
        self.entries: List[_IndexedField] = []
        self.by_path: Dict[str, FieldDefinition] = {}
        table_aliases = alias_table.by_target() if alias_table is not None else {}
        for order, definition in enumerate(fields):
            if definition.path in self.by_path:
                continue
            self.by_path[definition.path] = definition

            label = normalize_header(definition.label)
            path = normalize_header(definition.path)
            humanized = normalize_header(humanize_segment(definition.last_segment))
            aliases = [normalize_header(a) for a in definition.aliases if a.strip()]
            aliases += [
                e.normalized
                for e in table_aliases.get(definition.path, [])
                if e.confidence > 0
            ]

            self.entries.append(
                _IndexedField(
                    definition=definition,
                    order=order,
                    exact_forms=_unique([label, path]),
                    loose_forms=_unique(
                        [
                            loosen_header(definition.label),
                            loosen_header(definition.path),
                            loosen_header(definition.last_segment),
                        ]
                    ),
                    fuzzy_forms=_unique([label, path, humanized] + aliases),
                )
            )

    def __contains__(self, path: object) -> bool:
        return path in self.by_path


def _unique(values: List[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def match_historical(
    normalized_header: str,
    document_type: str,
    history: Optional[HistoricalMappingStore],
    index: FieldIndex,
    confidence: int,
) -> Optional[MatchCandidate]:
    """Previously confirmed choice for this header, if its target still exists."""
    if history is None or not normalized_header:
        return None
    target = history.lookup(document_type, normalized_header)
    if target is None or target not in index:
        return None
    return MatchCandidate(target, confidence, MappingTechnique.HISTORICAL)


def match_alias(
    normalized_header: str,
    alias_table: AliasTable,
    index: FieldIndex,
) -> Optional[MatchCandidate]:
    """Exact (normalized) hit in the alias table for a field that exists."""
    if not normalized_header:
        return None
    entry = alias_table.lookup(normalized_header, targets=index)
    if entry is None:
        return None
    return MatchCandidate(entry.target_path, entry.confidence, MappingTechnique.ALIAS)


def match_exact(
    header: str,
    index: FieldIndex,
    exact_confidence: int,
    loose_confidence: int,
) -> Optional[MatchCandidate]:
    """
    Header equals a field's label or path.

    Full equality after normalization scores ``exact_confidence``; equality
    only after loosening (punctuation, plurals, last path segment) scores
    ``loose_confidence``. Full matches anywhere in the field list win over
    loose matches.
    """
    normalized = normalize_header(header)
    if not normalized:
        return None
    for entry in index.entries:
        if normalized in entry.exact_forms:
            return MatchCandidate(
                entry.definition.path, exact_confidence, MappingTechnique.EXACT
            )

    loose = loosen_header(header)
    if not loose:
        return None
    for entry in index.entries:
        if loose in entry.loose_forms:
            return MatchCandidate(
                entry.definition.path, loose_confidence, MappingTechnique.EXACT
            )
    return None


def match_fuzzy(
    normalized_header: str,
    index: FieldIndex,
    threshold: int,
    cap: int,
) -> Optional[MatchCandidate]:
    """
    Best edit-distance similarity between the header and each field.

    A field scores its best comparison form (label, path, humanized last
    segment, declared aliases). Ties go to the shortest label, then field order.
    """
    if not normalized_header:
        return None

    best: Optional[_IndexedField] = None
    best_score = -1.0
    for entry in index.entries:
        score = max(similarity_percent(normalized_header, form) for form in entry.fuzzy_forms)
        if best is None or score > best_score or (
            score == best_score
            and len(entry.definition.label) < len(best.definition.label)
        ):
            best, best_score = entry, score

    if best is None or best_score < threshold:
        return None
    confidence = min(_round_half_up(best_score), cap)
    return MatchCandidate(best.definition.path, confidence, MappingTechnique.FUZZY)


def match_pattern(
    sample_values: Sequence[Any],
    available_fields: Sequence[FieldDefinition],
    min_ratio: float,
    confidence: int,
) -> Optional[MatchCandidate]:
    """
    Infer the target from what the column's sample values look like.

    Only proposes a field when the values are dominated by one kind and exactly
    one still-unclaimed scalar field has the matching data type.
    """
    kind = classify_sample_values(sample_values, min_ratio)
    if kind is None:
        return None

    data_type = KIND_TO_DATA_TYPE[kind]
    candidates = [
        f for f in available_fields if f.data_type is data_type and not f.is_array
    ]
    if len(candidates) != 1:
        return None
    return MatchCandidate(candidates[0].path, confidence, MappingTechnique.PATTERN)


__all__ = [
    "FieldIndex",
    "MatchCandidate",
    "match_alias",
    "match_exact",
    "match_fuzzy",
    "match_historical",
    "match_pattern",
]
