"""
Schema for the column alias table.

The alias table is a shipped configuration artifact: for each target field path
it lists header spellings that are known to mean that field, each with the
confidence reported when a header matches it exactly (after normalization).
"""

from typing import Container, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from asset_import_hub.utils.header_normalizer import normalize_header

DEFAULT_ALIAS_CONFIDENCE = 98


class AliasEntry(BaseModel):
    """One accepted alias for a target field path."""

    model_config = ConfigDict(frozen=True)

    alias: str = Field(..., min_length=1, description="Header spelling as configured")
    target_path: str = Field(..., min_length=1, description="Target field path")
    confidence: int = Field(
        DEFAULT_ALIAS_CONFIDENCE, ge=0, le=100, description="Reported confidence"
    )

    @property
    def normalized(self) -> str:
        return normalize_header(self.alias)


class AliasTable(BaseModel):
    """
    Ordered collection of alias entries.

    When the same normalized alias is declared for more than one path, the
    entry declared first wins on lookup.
    """

    model_config = ConfigDict(frozen=True)

    entries: Tuple[AliasEntry, ...] = ()

    def lookup(
        self, normalized_header: str, targets: Optional[Container[str]] = None
    ) -> Optional[AliasEntry]:
        """
        Return the first enabled entry whose normalized alias equals the header.

        Entries with confidence 0 are disabled and never returned. When
        ``targets`` is given, entries pointing anywhere else are skipped so a
        later entry for an existing field can still match.
        """
        for entry in self.entries:
            if entry.confidence == 0 or entry.normalized != normalized_header:
                continue
            if targets is None or entry.target_path in targets:
                return entry
        return None

    def by_target(self) -> Dict[str, List[AliasEntry]]:
        grouped: Dict[str, List[AliasEntry]] = {}
        for entry in self.entries:
            grouped.setdefault(entry.target_path, []).append(entry)
        return grouped

    def extended(self, entries: List[AliasEntry]) -> "AliasTable":
        """New table with ``entries`` appended (lower lookup precedence)."""
        return AliasTable(entries=self.entries + tuple(entries))


__all__ = ["AliasEntry", "AliasTable", "DEFAULT_ALIAS_CONFIDENCE"]
