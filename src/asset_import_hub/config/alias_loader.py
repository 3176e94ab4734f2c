"""
YAML loader for column alias tables.

File layout (top-level keys are document types, plus an optional ``common``
section applied to every document type):

    common:
      site_code:
        - plant code
        - alias: facility
          confidence: 95
    asset:
      asset_tag:
        - equipment id

An alias is either a plain string (reported at the default alias confidence) or
a mapping with ``alias`` and an optional integer ``confidence``.

Behavior:
- Missing file: empty table, debug log (no exception)
- Empty file: empty table
- Invalid YAML or unexpected shapes: AliasTableError naming the file
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog
import yaml
from pydantic import ValidationError

from asset_import_hub.config.alias_schema import (
    DEFAULT_ALIAS_CONFIDENCE,
    AliasEntry,
    AliasTable,
)
from asset_import_hub.domain.exceptions import AliasTableError

logger = structlog.get_logger(__name__)

COMMON_SECTION = "common"

# Environment variable for a custom alias table location
ALIAS_TABLE_ENV_VAR = "AIH_ALIAS_TABLE_PATH"


def _read_yaml_document(file_path: Path) -> Any:
    """Read a YAML file; return None when it is missing or empty."""
    if not file_path.exists():
        logger.debug("alias_loader.file_not_found", file_path=str(file_path))
        return None

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(
            "alias_loader.yaml_parse_error", file_path=str(file_path), error=str(e)
        )
        raise AliasTableError(f"Invalid YAML in {file_path}: {e}") from e

    if content is None:
        logger.debug("alias_loader.empty_file", file_path=str(file_path))
    return content


def _parse_alias_item(
    item: Any,
    target_path: str,
    default_confidence: int,
    file_path: Path,
) -> AliasEntry:
    if isinstance(item, str):
        raw: Dict[str, Any] = {"alias": item.strip(), "confidence": default_confidence}
    elif isinstance(item, dict) and isinstance(item.get("alias"), str):
        raw = {
            "alias": item["alias"].strip(),
            "confidence": item.get("confidence", default_confidence),
        }
    else:
        raise AliasTableError(
            f"Invalid alias entry in {file_path}: expected string or "
            f"{{alias, confidence}} mapping, got {type(item).__name__}",
            column=target_path,
        )

    try:
        return AliasEntry(target_path=target_path, **raw)
    except ValidationError as e:
        raise AliasTableError(
            f"Invalid alias entry in {file_path}: {e}", column=target_path
        ) from e


def _parse_section(
    section_name: str,
    section: Any,
    default_confidence: int,
    file_path: Path,
) -> List[AliasEntry]:
    if section is None:
        return []
    if not isinstance(section, dict):
        raise AliasTableError(
            f"Invalid alias section in {file_path}: expected mapping of field "
            f"path to aliases, got {type(section).__name__}",
            document_type=section_name,
        )

    entries: List[AliasEntry] = []
    for target_path, aliases in section.items():
        if not isinstance(target_path, str) or not target_path.strip():
            raise AliasTableError(
                f"Invalid target path {target_path!r} in {file_path}",
                document_type=section_name,
            )
        if isinstance(aliases, (str, dict)):
            aliases = [aliases]
        if not isinstance(aliases, list):
            raise AliasTableError(
                f"Invalid alias list in {file_path}: expected list, "
                f"got {type(aliases).__name__}",
                document_type=section_name,
                column=target_path,
            )
        for item in aliases:
            entries.append(
                _parse_alias_item(item, target_path.strip(), default_confidence, file_path)
            )
    return entries


def get_alias_table_path() -> Path:
    """
    Resolve the alias table path.

    Checks AIH_ALIAS_TABLE_PATH first, then falls back to the settings value
    (which itself defaults to the table shipped with the package).
    """
    env_path = os.environ.get(ALIAS_TABLE_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()

    from asset_import_hub.config.settings import get_settings

    return get_settings().get_alias_table_path()


def load_alias_table(
    path: Optional[Union[str, Path]] = None,
    document_type: Optional[str] = None,
    default_confidence: int = DEFAULT_ALIAS_CONFIDENCE,
) -> AliasTable:
    """
    Load the alias table for one document type (or for all of them).

    Entries of the document type's own section come first and therefore win
    over ``common`` entries for the same alias. With ``document_type=None``
    every section is loaded in file order.

    Args:
        path: Alias YAML file. Defaults to ``get_alias_table_path()``.
        document_type: Section to load in addition to ``common``.
        default_confidence: Confidence for aliases without an explicit value.

    Returns:
        AliasTable (possibly empty)

    Raises:
        AliasTableError: If the file is not valid YAML or has the wrong shape.

    Example:
        >>> table = load_alias_table(document_type="asset")
        >>> table.lookup("equipment id").target_path
        'asset_tag'
    """
    file_path = Path(path) if path is not None else get_alias_table_path()
    content = _read_yaml_document(file_path)
    if content is None:
        return AliasTable()

    if not isinstance(content, dict):
        logger.error(
            "alias_loader.invalid_format",
            file_path=str(file_path),
            actual_type=type(content).__name__,
        )
        raise AliasTableError(
            f"Invalid alias table format in {file_path}: "
            f"expected dict, got {type(content).__name__}"
        )

    if document_type is None:
        section_names = [str(name) for name in content.keys()]
    else:
        section_names = [document_type, COMMON_SECTION]

    entries: List[AliasEntry] = []
    for name in section_names:
        entries.extend(
            _parse_section(name, content.get(name), default_confidence, file_path)
        )

    logger.debug(
        "alias_loader.table_loaded",
        file_path=str(file_path),
        document_type=document_type,
        entry_count=len(entries),
    )
    return AliasTable(entries=tuple(entries))
