"""
Historical mapping stores: confirmed user choices from earlier import sessions.

The column mapper only talks to the ``HistoricalMappingStore`` protocol.
Durability and tenant scoping belong to the host application; the two stores
here cover tests, scripts and single-user command-line use. Entries never
expire; a newer confirmation for the same key replaces the older one.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple, Union, runtime_checkable

import yaml

from asset_import_hub.domain.exceptions import AliasTableError
from asset_import_hub.utils.header_normalizer import normalize_header
from asset_import_hub.utils.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class HistoricalMappingStore(Protocol):
    """Interface the column mapper uses to read and record confirmed choices."""

    def lookup(self, document_type: str, normalized_header: str) -> Optional[str]:
        ...

    def record_confirmed_mapping(
        self, document_type: str, header: str, target_path: str
    ) -> None:
        ...


class InMemoryHistoryStore:
    """Dict-backed store keyed by ``(document_type, normalized_header)``."""

    def __init__(self, entries: Optional[Dict[Tuple[str, str], str]] = None):
        self._entries: Dict[Tuple[str, str], str] = {}
        for (document_type, header), target_path in (entries or {}).items():
            self._entries[(document_type, normalize_header(header))] = target_path

    def lookup(self, document_type: str, normalized_header: str) -> Optional[str]:
        return self._entries.get((document_type, normalize_header(normalized_header)))

    def record_confirmed_mapping(
        self, document_type: str, header: str, target_path: str
    ) -> None:
        key = (document_type, normalize_header(header))
        previous = self._entries.get(key)
        self._entries[key] = target_path
        logger.info(
            "history.mapping_confirmed",
            document_type=document_type,
            header=key[1],
            target_path=target_path,
            replaced=previous,
        )

    def entries(self) -> Dict[Tuple[str, str], str]:
        return dict(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class YamlHistoryStore(InMemoryHistoryStore):
    """
    History store persisted to a YAML file after every confirmation.

    File layout mirrors the alias table: document type → normalized header →
    target path.

        asset:
          equipment no: asset_tag
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.debug("history.file_not_found", file_path=str(self.path))
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise AliasTableError(f"Invalid YAML in {self.path}: {e}") from e

        if content is None:
            return
        if not isinstance(content, dict):
            raise AliasTableError(
                f"Invalid history format in {self.path}: expected dict, "
                f"got {type(content).__name__}"
            )

        for document_type, section in content.items():
            if not isinstance(section, dict):
                raise AliasTableError(
                    f"Invalid history section in {self.path}",
                    document_type=str(document_type),
                )
            for header, target_path in section.items():
                if not isinstance(header, str) or not isinstance(target_path, str):
                    raise AliasTableError(
                        f"Invalid history entry in {self.path}: expected string "
                        "header and target path",
                        document_type=str(document_type),
                    )
                self._entries[(str(document_type), normalize_header(header))] = (
                    target_path.strip()
                )

        logger.debug(
            "history.file_loaded", file_path=str(self.path), entry_count=len(self)
        )

    def _dump(self) -> None:
        content: Dict[str, Dict[str, str]] = {}
        for (document_type, header), target_path in sorted(self._entries.items()):
            content.setdefault(document_type, {})[header] = target_path

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(content, f, allow_unicode=True, sort_keys=True)

    def record_confirmed_mapping(
        self, document_type: str, header: str, target_path: str
    ) -> None:
        super().record_confirmed_mapping(document_type, header, target_path)
        self._dump()


__all__ = ["HistoricalMappingStore", "InMemoryHistoryStore", "YamlHistoryStore"]
