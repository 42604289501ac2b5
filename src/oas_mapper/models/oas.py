"""Pydantic models for reference-resolved OpenAPI schema nodes.

These models give a typed, validated structure to the schema objects of an
already-dereferenced OpenAPI document. Field names follow the raw OpenAPI
keywords (``additionalProperties``, ``uniqueItems``) so documents can be
validated directly from their JSON form. The lowering engine only reads them
through the `mapping.facade.OASSchema` wrapper.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SchemaNode(BaseModel):
    """A single OpenAPI / JSON-Schema definition unit."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    # OpenAPI 3.1 allows a list of type names; 3.0 documents use a single string.
    type: List[str] = Field(default_factory=list)
    format: str = ""
    description: Optional[str] = None
    properties: Dict[str, "SchemaNode"] = Field(default_factory=dict)
    # JSON-Schema allows a boolean here; booleans carry no value shape.
    additionalProperties: Optional[Union["SchemaNode", bool]] = None
    items: Optional["SchemaNode"] = None
    required: List[str] = Field(default_factory=list)
    default: Optional[Any] = None
    uniqueItems: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> List[str]:
        """Accept a single type string as well as a list of them."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return list(v)

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v: Any) -> str:
        return v or ""


SchemaNode.model_rebuild()
