"""
Structural validation of form-definition trees.

A form definition is a tree of group and field nodes:

    {
        "fields": [
            {"key": "asset_tag", "type": "text", "label": "Asset Tag", "required": true},
            {"key": "specifications", "type": "group", "children": [
                {"key": "dimensions", "type": "group", "children": [
                    {"key": "length", "type": "number"},
                    {"key": "width", "type": "number"}
                ]}
            ]},
            {"key": "inspections", "type": "group", "repeat": true, "children": [...]}
        ]
    }

``children`` and ``fields`` are interchangeable, as are ``key`` and ``id``.
Nodes are validated into ``FormNode`` models so traversal code can rely on the
shape; any structural problem is reported as ``MetadataError``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from asset_import_hub.domain.exceptions import MetadataError

GROUP_TYPES = frozenset({"group", "section", "fieldset", "object"})
REPEATING_TYPES = frozenset({"array", "repeater", "list"})
CHILD_KEYS = ("children", "fields")
FORM_GADGET_TYPE = "document-form-gadget"


class FormNode(BaseModel):
    """A validated node of the form tree (group or leaf field)."""

    model_config = ConfigDict(extra="allow", frozen=True)

    key: str = Field(..., min_length=1)
    type: str = "text"
    label: Optional[str] = None
    required: bool = False
    options: Optional[List[Any]] = None
    aliases: List[str] = Field(default_factory=list)
    repeat: bool = False
    flatten: bool = False
    children: Optional[List["FormNode"]] = None

    @property
    def is_group(self) -> bool:
        return self.children is not None or self.type.lower() in GROUP_TYPES

    @property
    def is_repeating(self) -> bool:
        return self.repeat or self.type.lower() in REPEATING_TYPES


FormNode.model_rebuild()


def _child_list(raw: Mapping[str, Any], location: str, document_type: str) -> Optional[List[Any]]:
    for child_key in CHILD_KEYS:
        if child_key in raw:
            children = raw[child_key]
            if not isinstance(children, list):
                raise MetadataError(
                    f"Node '{location}' has non-list '{child_key}' "
                    f"({type(children).__name__})",
                    document_type=document_type,
                )
            return children
    return None


def _normalize_node(raw: Any, location: str, document_type: str) -> Dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise MetadataError(
            f"Form node at '{location}' must be a mapping, got {type(raw).__name__}",
            document_type=document_type,
        )

    key = raw.get("key", raw.get("id"))
    if not isinstance(key, str) or not key.strip():
        raise MetadataError(
            f"Form node at '{location}' is missing a 'key'", document_type=document_type
        )

    node = {k: v for k, v in raw.items() if k not in ("id", *CHILD_KEYS)}
    node["key"] = key.strip()
    if node.get("label") is None and isinstance(raw.get("title"), str):
        node["label"] = raw["title"]

    children = _child_list(raw, f"{location}/{node['key']}", document_type)
    if children is not None:
        node["children"] = [
            _normalize_node(child, f"{location}/{node['key']}[{i}]", document_type)
            for i, child in enumerate(children)
        ]
    return node


def parse_form_definition(form_definition: Any, document_type: str = "") -> List[FormNode]:
    """
    Validate a form-definition tree and return its top-level nodes.

    Raises:
        MetadataError: If the definition is absent or malformed.
    """
    if form_definition is None:
        raise MetadataError("Form definition is missing", document_type=document_type)
    if not isinstance(form_definition, Mapping):
        raise MetadataError(
            "Form definition must be a mapping, got "
            f"{type(form_definition).__name__}",
            document_type=document_type,
        )

    top_level = _child_list(form_definition, "<root>", document_type)
    if top_level is None:
        raise MetadataError(
            "Form definition has no 'fields' list", document_type=document_type
        )

    normalized = [
        _normalize_node(raw, f"<root>[{i}]", document_type)
        for i, raw in enumerate(top_level)
    ]
    try:
        return [FormNode.model_validate(node) for node in normalized]
    except ValidationError as e:
        raise MetadataError(
            f"Form definition failed validation: {e}", document_type=document_type
        ) from e


def form_definition_from_gadgets(form_document: Any, document_type: str = "") -> Dict[str, Any]:
    """
    Adapt a workspace form document into a form-definition tree.

    Workspace form documents keep their fields as a flat ``gadgetOptions`` list
    on the ``document-form-gadget``; sections and groups there only drive layout
    (fields reference them by ``sectionId``/``groupId``), so they are dropped and
    every other option becomes a top-level leaf keyed by its ``id``.

    Raises:
        MetadataError: If no document form gadget with gadget options exists.
    """
    if not isinstance(form_document, Mapping):
        raise MetadataError(
            "Form document must be a mapping", document_type=document_type
        )

    gadgets = form_document.get("gadgets")
    if not isinstance(gadgets, list):
        raise MetadataError(
            "Form document has no 'gadgets' list", document_type=document_type
        )

    form_gadget = next(
        (
            g
            for g in gadgets
            if isinstance(g, Mapping) and g.get("type") == FORM_GADGET_TYPE
        ),
        None,
    )
    gadget_options = None
    if form_gadget is not None and isinstance(form_gadget.get("config"), Mapping):
        gadget_options = form_gadget["config"].get("gadgetOptions")
    if not isinstance(gadget_options, list):
        raise MetadataError(
            f"No gadgetOptions found on a '{FORM_GADGET_TYPE}'",
            document_type=document_type,
        )

    fields: List[Dict[str, Any]] = []
    for option in gadget_options:
        if not isinstance(option, Mapping):
            raise MetadataError(
                "gadgetOptions entries must be mappings", document_type=document_type
            )
        if option.get("type") in ("section", "group"):
            continue
        leaf = dict(option)
        leaf["type"] = option.get("fieldType") or option.get("type") or "text"
        fields.append(leaf)

    return {"fields": fields}


__all__ = [
    "FormNode",
    "parse_form_definition",
    "form_definition_from_gadgets",
]
