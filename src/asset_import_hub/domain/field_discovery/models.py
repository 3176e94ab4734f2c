"""Core types for discovered import/export fields."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class DataType(str, Enum):
    """Semantic value types a target field can hold."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ENUM = "enum"


class FieldDefinition(BaseModel):
    """
    One discoverable/mappable target field.

    ``path`` addresses the value inside a nested record using dotted notation
    (``specifications.dimensions.length``); it is unique within one discovery
    result.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    path: str = Field(..., min_length=1, description="Dotted path inside a record")
    label: str = Field(..., description="Human-readable display name")
    data_type: DataType = Field(DataType.TEXT, description="Semantic value type")
    required: bool = Field(False, description="Target schema mandates a value")
    options: Optional[Tuple[str, ...]] = Field(
        None, description="Allowed values when data_type is enum"
    )
    aliases: Tuple[str, ...] = Field(
        (), description="Alternative header spellings declared in metadata"
    )
    is_array: bool = Field(
        False, description="Single slot holding a list of values"
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, value: str) -> str:
        value = value.strip()
        if not value or any(not segment for segment in value.split(".")):
            raise ValueError(f"Invalid field path {value!r}: empty path segment")
        return value

    @model_validator(mode="after")
    def validate_options(self) -> "FieldDefinition":
        if self.options is not None and self.data_type is not DataType.ENUM:
            raise ValueError(
                f"options are only allowed for enum fields (path={self.path!r})"
            )
        return self

    @property
    def last_segment(self) -> str:
        return self.path.rsplit(".", 1)[-1]


__all__ = ["DataType", "FieldDefinition"]
