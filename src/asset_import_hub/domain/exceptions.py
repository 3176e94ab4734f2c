"""
Exception hierarchy for field discovery, column mapping and alias loading.

Only structural problems with the inputs are raised. Outcomes such as "no match
found" are returned as data on the mapping results instead.
"""

from typing import Optional


class AssetImportError(Exception):
    """
    Base exception for all import/export core errors.

    Args:
        message: Error description
        document_type: Document type being processed (optional)
        column: Source column or field path involved (optional)
    """

    def __init__(
        self,
        message: str,
        document_type: Optional[str] = None,
        column: Optional[str] = None,
    ):
        self.document_type = document_type
        self.column = column

        # Build contextual error message
        context_parts = []
        if document_type:
            context_parts.append(f"document_type='{document_type}'")
        if column is not None:
            context_parts.append(f"column='{column}'")

        if context_parts:
            full_message = f"{message} ({', '.join(context_parts)})"
        else:
            full_message = message

        super().__init__(full_message)


class MetadataError(AssetImportError):
    """Raised when a form definition is missing or structurally malformed."""

    pass


class InvalidInputError(AssetImportError):
    """Raised when column headers are empty, duplicated or not strings."""

    pass


class AliasTableError(AssetImportError):
    """Raised when an alias table or history YAML file cannot be used."""

    pass
