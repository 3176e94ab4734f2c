"""Result types for column mapping runs."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

UNMAPPED = "unmapped"


class MappingTechnique(str, Enum):
    """Rule that produced a mapping, in pipeline priority order."""

    HISTORICAL = "historical"
    ALIAS = "alias"
    EXACT = "exact"
    FUZZY = "fuzzy"
    PATTERN = "pattern"
    NONE = "none"


class ConfidenceBand(str, Enum):
    """Display bands used when reviewing suggestions."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


def classify_confidence(confidence: int) -> ConfidenceBand:
    if confidence >= 90:
        return ConfidenceBand.HIGH
    if confidence >= 70:
        return ConfidenceBand.MEDIUM
    if confidence > 0:
        return ConfidenceBand.LOW
    return ConfidenceBand.NONE


class ColumnMapping(BaseModel):
    """
    One proposed correspondence between a source column and a target field.

    ``confidence == 0`` and ``technique == none`` exactly when
    ``target_path == UNMAPPED``.
    """

    model_config = ConfigDict(frozen=True)

    source_column: str = Field(..., description="Original header, unmodified")
    target_path: str = Field(UNMAPPED, min_length=1, description="Field path or 'unmapped'")
    confidence: int = Field(0, ge=0, le=100, description="Match confidence 0-100")
    technique: MappingTechnique = Field(MappingTechnique.NONE)

    @model_validator(mode="after")
    def validate_unmapped_consistency(self) -> "ColumnMapping":
        unmapped = self.target_path == UNMAPPED
        if unmapped != (self.confidence == 0) or unmapped != (
            self.technique is MappingTechnique.NONE
        ):
            raise ValueError(
                "unmapped columns must have confidence 0 and technique 'none', "
                "and mapped columns must have neither "
                f"(source_column={self.source_column!r}, target_path={self.target_path!r}, "
                f"confidence={self.confidence}, technique={self.technique.value})"
            )
        return self

    @classmethod
    def unmapped(cls, source_column: str) -> "ColumnMapping":
        return cls(source_column=source_column)

    @property
    def is_mapped(self) -> bool:
        return self.target_path != UNMAPPED

    @property
    def band(self) -> ConfidenceBand:
        return classify_confidence(self.confidence)


class MappingSummary(BaseModel):
    """Counts of a mapping run per confidence band and technique."""

    total: int
    mapped: int
    by_band: Dict[str, int]
    by_technique: Dict[str, int]
    unmapped_columns: List[str]


def summarize_mappings(mappings: Sequence[ColumnMapping]) -> MappingSummary:
    by_band = {band.value: 0 for band in ConfidenceBand}
    by_technique = {technique.value: 0 for technique in MappingTechnique}
    for mapping in mappings:
        by_band[mapping.band.value] += 1
        by_technique[mapping.technique.value] += 1

    unmapped = [m.source_column for m in mappings if not m.is_mapped]
    return MappingSummary(
        total=len(mappings),
        mapped=len(mappings) - len(unmapped),
        by_band=by_band,
        by_technique=by_technique,
        unmapped_columns=unmapped,
    )


__all__ = [
    "UNMAPPED",
    "MappingTechnique",
    "ConfidenceBand",
    "ColumnMapping",
    "MappingSummary",
    "classify_confidence",
    "summarize_mappings",
]
