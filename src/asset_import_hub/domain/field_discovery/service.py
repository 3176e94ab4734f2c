"""
Field discovery: turn form metadata into addressable import/export fields.

Adding a field to a document type's form automatically makes it importable and
exportable; nothing here is specific to one document type. The form definition
is fetched by the caller (metadata provider) and passed in, so discovery is a
pure function of its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import yaml
from pydantic import ValidationError

from asset_import_hub.domain.exceptions import MetadataError
from asset_import_hub.domain.field_discovery.form_schema import (
    FormNode,
    parse_form_definition,
)
from asset_import_hub.domain.field_discovery.models import DataType, FieldDefinition
from asset_import_hub.utils.header_normalizer import humanize_segment
from asset_import_hub.utils.logging import get_logger

logger = get_logger(__name__)

NUMBER_WIDGETS = frozenset(
    {"number", "integer", "decimal", "currency", "percent", "slider", "rate"}
)
BOOLEAN_WIDGETS = frozenset({"checkbox", "switch", "toggle", "boolean"})
DATE_WIDGETS = frozenset({"date", "datetime", "date-picker", "datepicker", "time"})
CHOICE_WIDGETS = frozenset({"select", "radio", "dropdown", "enum", "multiselect"})
ARRAY_WIDGETS = frozenset({"tags", "multiselect", "multi-select"})

StaticFieldInput = Union[FieldDefinition, Mapping[str, Any]]


def infer_data_type(widget_type: Optional[str], has_options: bool = False) -> DataType:
    """
    Map a form widget/type name onto a semantic data type.

    Choice widgets only become ``enum`` when they declare options; without
    options the allowed values are unknown and the field is treated as text.
    """
    widget = (widget_type or "text").strip().lower()
    if widget in NUMBER_WIDGETS:
        return DataType.NUMBER
    if widget in BOOLEAN_WIDGETS:
        return DataType.BOOLEAN
    if widget in DATE_WIDGETS:
        return DataType.DATE
    if widget in CHOICE_WIDGETS and has_options:
        return DataType.ENUM
    return DataType.TEXT


def _option_values(options: Optional[List[Any]]) -> List[str]:
    values: List[str] = []
    for option in options or []:
        if isinstance(option, Mapping):
            value = option.get("value", option.get("label"))
        else:
            value = option
        if value is not None:
            values.append(str(value))
    return values


def _leaf_field(node: FormNode, path: str) -> FieldDefinition:
    options = _option_values(node.options)
    data_type = infer_data_type(node.type, has_options=bool(options))
    return FieldDefinition(
        path=path,
        label=node.label or humanize_segment(path.rsplit(".", 1)[-1]),
        data_type=data_type,
        required=node.required,
        options=tuple(options) if data_type is DataType.ENUM else None,
        aliases=tuple(node.aliases),
        is_array=node.type.strip().lower() in ARRAY_WIDGETS,
    )


def _walk(nodes: Iterable[FormNode], prefix: List[str], out: List[FieldDefinition]) -> None:
    for node in nodes:
        path_parts = prefix + [node.key]
        if node.is_repeating:
            # One slot for the whole repeating group; children are not expanded
            out.append(
                FieldDefinition(
                    path=".".join(path_parts),
                    label=node.label or humanize_segment(node.key),
                    data_type=DataType.TEXT,
                    required=node.required,
                    aliases=tuple(node.aliases),
                    is_array=True,
                )
            )
        elif node.is_group:
            _walk(node.children or [], prefix if node.flatten else path_parts, out)
        else:
            out.append(_leaf_field(node, ".".join(path_parts)))


def _coerce_static(static_fields: Sequence[StaticFieldInput]) -> List[FieldDefinition]:
    result: List[FieldDefinition] = []
    for item in static_fields:
        if isinstance(item, FieldDefinition):
            result.append(item)
            continue
        try:
            result.append(FieldDefinition.model_validate(dict(item)))
        except (TypeError, ValueError, ValidationError) as e:
            raise MetadataError(f"Invalid static field definition: {e}") from e
    return result


def merge_static_fields(
    discovered: Sequence[FieldDefinition],
    static_fields: Sequence[StaticFieldInput],
) -> List[FieldDefinition]:
    """
    Merge curated static definitions into discovered ones by path.

    Discovered definitions win on collision, but a field required by either
    source stays required. Static-only fields are appended in their own order.
    """
    static_by_path: Dict[str, FieldDefinition] = {}
    for field in _coerce_static(static_fields):
        if field.path in static_by_path:
            logger.warning("field_discovery.duplicate_static_field", path=field.path)
            continue
        static_by_path[field.path] = field

    merged: List[FieldDefinition] = []
    for field in discovered:
        static = static_by_path.pop(field.path, None)
        if static is not None and static.required and not field.required:
            field = field.model_copy(update={"required": True})
        merged.append(field)

    merged.extend(static_by_path.values())
    return merged


def discover_fields(
    document_type: str,
    form_definition: Any,
    static_fields: Optional[Sequence[StaticFieldInput]] = None,
) -> List[FieldDefinition]:
    """
    Discover all addressable fields of a document type.

    Args:
        document_type: Document type the form describes (company, site, ...)
        form_definition: Form tree supplied by the metadata provider
        static_fields: Curated definitions merged in at lower precedence

    Returns:
        Fields in depth-first pre-order of the form tree, followed by
        static-only fields. May be empty.

    Raises:
        MetadataError: If the form definition is absent or malformed, or two
            form nodes resolve to the same path.

    Example:
        >>> form = {"fields": [{"key": "specifications", "type": "group", "children": [
        ...     {"key": "weight", "type": "number"}]}]}
        >>> [f.path for f in discover_fields("asset", form)]
        ['specifications.weight']
    """
    nodes = parse_form_definition(form_definition, document_type)

    discovered: List[FieldDefinition] = []
    _walk(nodes, [], discovered)

    seen = set()
    for field in discovered:
        if field.path in seen:
            raise MetadataError(
                "Duplicate field path in form definition",
                document_type=document_type,
                column=field.path,
            )
        seen.add(field.path)

    fields = merge_static_fields(discovered, static_fields or [])

    logger.info(
        "field_discovery.fields_discovered",
        document_type=document_type,
        discovered_count=len(discovered),
        static_only_count=len(fields) - len(discovered),
        required_count=sum(1 for f in fields if f.required),
    )
    return fields


@dataclass(frozen=True)
class HierarchyLevel:
    """One level of the company → site → asset group → asset hierarchy."""

    document_type: str
    prefix: str
    form_definition: Any


def discover_hierarchy_fields(levels: Sequence[HierarchyLevel]) -> List[FieldDefinition]:
    """
    Discover fields from every hierarchy level for a combined import.

    Asset imports may create the owning company, site and asset group on the
    fly, so the mapping step offers the fields of every level. Each level's
    fields are re-rooted under its document type (``site.code``) and labelled
    with the level prefix (``"Site/Facility: Code"``).

    Raises:
        MetadataError: If a level's form is malformed or a document type
            appears twice.
    """
    fields: List[FieldDefinition] = []
    seen_types = set()
    for level in levels:
        if level.document_type in seen_types:
            raise MetadataError(
                "Hierarchy level listed twice", document_type=level.document_type
            )
        seen_types.add(level.document_type)

        for field in discover_fields(level.document_type, level.form_definition):
            extra_aliases = (
                f"{level.prefix} {field.label}",
                f"{level.document_type}_{field.path}",
            )
            fields.append(
                field.model_copy(
                    update={
                        "path": f"{level.document_type}.{field.path}",
                        "label": f"{level.prefix}: {field.label}",
                        "aliases": field.aliases + extra_aliases,
                    }
                )
            )

    logger.info(
        "field_discovery.hierarchy_fields_discovered",
        levels=[level.document_type for level in levels],
        field_count=len(fields),
    )
    return fields


def load_static_fields(path: Union[str, Path]) -> List[FieldDefinition]:
    """
    Load curated static field definitions from a YAML list.

    Raises:
        MetadataError: If the file is missing, not valid YAML, or not a list of
            field mappings.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise MetadataError(f"Static field file not found: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise MetadataError(f"Invalid YAML in {file_path}: {e}") from e

    if content is None:
        return []
    if not isinstance(content, list) or not all(isinstance(i, dict) for i in content):
        raise MetadataError(
            f"Invalid static field file {file_path}: expected a list of mappings"
        )
    return _coerce_static(content)
