"""Field discovery from form metadata."""

from asset_import_hub.domain.field_discovery.form_schema import (
    FormNode,
    form_definition_from_gadgets,
    parse_form_definition,
)
from asset_import_hub.domain.field_discovery.models import DataType, FieldDefinition
from asset_import_hub.domain.field_discovery.service import (
    HierarchyLevel,
    discover_fields,
    discover_hierarchy_fields,
    infer_data_type,
    load_static_fields,
    merge_static_fields,
)

__all__ = [
    "DataType",
    "FieldDefinition",
    "FormNode",
    "HierarchyLevel",
    "discover_fields",
    "discover_hierarchy_fields",
    "form_definition_from_gadgets",
    "infer_data_type",
    "load_static_fields",
    "merge_static_fields",
    "parse_form_definition",
]
