"""
Column mapping service: propose a target field for every spreadsheet header.

Per header the techniques run in priority order and the first one that clears
its threshold wins:

1. historical - a mapping the user confirmed in an earlier session
2. alias      - a known synonym from the alias table or the form metadata
3. exact      - header equals a field label or path
4. fuzzy      - edit-distance similarity to a field
5. pattern    - sample values look like dates/numbers/booleans and exactly
                one unclaimed field of that type is left
6. none       - left unmapped

Afterwards every target is claimed at most once: the highest-confidence header
keeps it (earliest header on a tie) and the others fall back to unmapped.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from asset_import_hub.config import AliasEntry, AliasTable, Settings, get_settings
from asset_import_hub.config.alias_loader import load_alias_table
from asset_import_hub.domain.column_mapping.history import HistoricalMappingStore
from asset_import_hub.domain.column_mapping.matchers import (
    FieldIndex,
    MatchCandidate,
    match_alias,
    match_exact,
    match_fuzzy,
    match_historical,
    match_pattern,
)
from asset_import_hub.domain.column_mapping.models import (
    ColumnMapping,
    summarize_mappings,
)
from asset_import_hub.domain.exceptions import InvalidInputError
from asset_import_hub.domain.field_discovery.models import FieldDefinition
from asset_import_hub.utils.header_normalizer import (
    find_duplicate_headers,
    normalize_header,
)
from asset_import_hub.utils.logging import get_logger
from asset_import_hub.utils.value_parser import is_empty_value

logger = get_logger(__name__)

SampleRow = Any  # sequence of cell values aligned with headers, or a header-keyed mapping


def validate_headers(headers: Sequence[Any], document_type: str = "") -> List[str]:
    """
    Check headers are a non-empty list of distinct strings.

    Raises:
        InvalidInputError: On an empty list, a non-string header or duplicates.
    """
    if headers is None or len(headers) == 0:
        raise InvalidInputError("No column headers supplied", document_type=document_type)

    for position, header in enumerate(headers):
        if not isinstance(header, str):
            raise InvalidInputError(
                f"Header at position {position} is not a string "
                f"({type(header).__name__})",
                document_type=document_type,
            )

    duplicates = find_duplicate_headers(list(headers))
    if duplicates:
        raise InvalidInputError(
            f"Duplicate column headers: {duplicates}",
            document_type=document_type,
            column=duplicates[0],
        )
    return list(headers)


def column_sample_values(
    sample_rows: Optional[Sequence[SampleRow]],
    position: int,
    header: str,
    limit: int,
) -> List[Any]:
    """First ``limit`` non-empty values of one column across the sample rows."""
    values: List[Any] = []
    for row in sample_rows or []:
        if isinstance(row, Mapping):
            value = row.get(header)
        elif position < len(row):
            value = row[position]
        else:
            value = None
        if is_empty_value(value):
            continue
        values.append(value)
        if len(values) >= limit:
            break
    return values


def resolve_target_collisions(mappings: Sequence[ColumnMapping]) -> List[ColumnMapping]:
    """
    Let each target path be claimed by at most one mapping.

    The highest confidence keeps the target; on equal confidence the earliest
    mapping does. Losers are demoted to unmapped.
    """
    winners: Dict[str, int] = {}
    for position, mapping in enumerate(mappings):
        if not mapping.is_mapped:
            continue
        current = winners.get(mapping.target_path)
        if current is None or mapping.confidence > mappings[current].confidence:
            winners[mapping.target_path] = position

    resolved: List[ColumnMapping] = []
    for position, mapping in enumerate(mappings):
        if mapping.is_mapped and winners[mapping.target_path] != position:
            logger.debug(
                "column_mapper.collision_demoted",
                source_column=mapping.source_column,
                target_path=mapping.target_path,
                confidence=mapping.confidence,
                kept_column=mappings[winners[mapping.target_path]].source_column,
            )
            resolved.append(ColumnMapping.unmapped(mapping.source_column))
        else:
            resolved.append(mapping)
    return resolved


class ColumnMapper:
    """
    Rule-based column mapper.

    Args:
        alias_table: Alias table to use. When omitted, the table configured in
            settings is loaded for the document type of each run.
        settings: Thresholds and confidence bands (defaults to get_settings()).
    """

    def __init__(
        self,
        alias_table: Optional[AliasTable] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.alias_table = alias_table

    def _alias_table_for(
        self, document_type: str, fields: Sequence[FieldDefinition]
    ) -> AliasTable:
        table = self.alias_table
        if table is None:
            table = load_alias_table(
                self.settings.get_alias_table_path(),
                document_type=document_type or None,
                default_confidence=self.settings.alias_confidence,
            )

        declared = [
            AliasEntry(
                alias=alias,
                target_path=field.path,
                confidence=self.settings.alias_confidence,
            )
            for field in fields
            for alias in field.aliases
            if alias.strip()
        ]
        return table.extended(declared) if declared else table

    def _match_header(
        self,
        header: str,
        document_type: str,
        index: FieldIndex,
        alias_table: AliasTable,
        history: Optional[HistoricalMappingStore],
    ) -> Optional[MatchCandidate]:
        s = self.settings
        normalized = normalize_header(header)
        return (
            match_historical(normalized, document_type, history, index, s.historical_confidence)
            or match_alias(normalized, alias_table, index)
            or match_exact(header, index, s.exact_confidence, s.loose_exact_confidence)
            or match_fuzzy(normalized, index, s.fuzzy_threshold, s.fuzzy_confidence_cap)
        )

    def map_columns(
        self,
        headers: Sequence[str],
        sample_rows: Optional[Sequence[SampleRow]],
        fields: Sequence[FieldDefinition],
        history: Optional[HistoricalMappingStore] = None,
        document_type: str = "",
    ) -> List[ColumnMapping]:
        """
        Propose one mapping per header, in header order.

        Args:
            headers: Column headers exactly as read from the sheet
            sample_rows: Data rows (cell sequences aligned with headers, or
                header-keyed mappings) used for pattern sniffing
            fields: Target fields from field discovery
            history: Optional store of previously confirmed mappings
            document_type: Document type used for history and alias lookup

        Returns:
            List of ColumnMapping, same length and order as ``headers``

        Raises:
            InvalidInputError: If headers are empty, duplicated or not strings.
        """
        headers = validate_headers(headers, document_type)
        alias_table = self._alias_table_for(document_type, fields)
        index = FieldIndex(fields, alias_table)

        candidates: List[Optional[MatchCandidate]] = [
            self._match_header(header, document_type, index, alias_table, history)
            for header in headers
        ]

        # Pattern matching only considers fields nobody has claimed so far
        claimed = {c.target_path for c in candidates if c is not None}
        for position, header in enumerate(headers):
            if candidates[position] is not None:
                continue
            values = column_sample_values(
                sample_rows, position, header, self.settings.pattern_sample_limit
            )
            if not values:
                continue
            candidate = match_pattern(
                values,
                [f for f in index.by_path.values() if f.path not in claimed],
                self.settings.pattern_min_ratio,
                self.settings.pattern_confidence,
            )
            if candidate is not None:
                candidates[position] = candidate
                claimed.add(candidate.target_path)

        mappings = [
            ColumnMapping(
                source_column=header,
                target_path=candidate.target_path,
                confidence=candidate.confidence,
                technique=candidate.technique,
            )
            if candidate is not None
            else ColumnMapping.unmapped(header)
            for header, candidate in zip(headers, candidates)
        ]
        mappings = resolve_target_collisions(mappings)

        summary = summarize_mappings(mappings)
        logger.info(
            "column_mapper.run_complete",
            document_type=document_type,
            total=summary.total,
            mapped=summary.mapped,
            by_technique={k: v for k, v in summary.by_technique.items() if v},
            unmapped_columns=summary.unmapped_columns,
        )
        return mappings


def map_columns(
    headers: Sequence[str],
    sample_rows: Optional[Sequence[SampleRow]],
    fields: Sequence[FieldDefinition],
    history: Optional[HistoricalMappingStore] = None,
    document_type: str = "",
    alias_table: Optional[AliasTable] = None,
    settings: Optional[Settings] = None,
) -> List[ColumnMapping]:
    """Convenience wrapper around ``ColumnMapper(...).map_columns(...)``."""
    mapper = ColumnMapper(alias_table=alias_table, settings=settings)
    return mapper.map_columns(
        headers, sample_rows, fields, history=history, document_type=document_type
    )
