"""Schema node classification into a single target attribute kind.

The classifier consumes a node's full declared type-tag set plus its shape
(properties, additional properties, items) and yields exactly one
`AttributeKind`. Raw tags are never carried past this point.

Decision order (first match wins):
    1. Untyped or scalar-typed node without structure → scalar kind by
       (type, format)
    2. Array with items → LIST / SET, or LIST_NESTED / SET_NESTED when the
       item is an object with properties
    3. Object with additional properties and no properties → MAP, or
       MAP_NESTED when the value is an object with properties
    4. Object with properties → SINGLE_NESTED (an additionalProperties
       overlay is ignored; properties take precedence)
    5. Anything else, including a node whose only type tag is ``null``
       → UnsupportedSchemaError

Untyped nodes carrying structure are classified as if typed: properties or
additionalProperties imply ``object``, items imply ``array``.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..errors import UnsupportedSchemaError, format_path
from .facade import (
    SCALAR_TYPES,
    TYPE_ARRAY,
    TYPE_BOOLEAN,
    TYPE_INTEGER,
    TYPE_NUMBER,
    TYPE_OBJECT,
    TYPE_STRING,
    OASSchema,
)

logger = logging.getLogger(__name__)

__all__ = ["AttributeKind", "classify", "effective_type", "is_nested_object"]

FORMAT_DOUBLE = "double"
FORMAT_FLOAT = "float"
FORMAT_INT32 = "int32"
FORMAT_INT64 = "int64"


class AttributeKind(str, Enum):
    BOOL = "bool"
    FLOAT64 = "float64"
    INT64 = "int64"
    NUMBER = "number"
    STRING = "string"
    LIST = "list"
    SET = "set"
    MAP = "map"
    LIST_NESTED = "list_nested"
    SET_NESTED = "set_nested"
    MAP_NESTED = "map_nested"
    SINGLE_NESTED = "single_nested"

    @property
    def is_scalar(self) -> bool:
        return self in _SCALAR_KINDS

    @property
    def is_nested(self) -> bool:
        return self in _NESTED_KINDS


_SCALAR_KINDS = frozenset(
    {AttributeKind.BOOL, AttributeKind.FLOAT64, AttributeKind.INT64, AttributeKind.NUMBER, AttributeKind.STRING}
)
_NESTED_KINDS = frozenset(
    {AttributeKind.LIST_NESTED, AttributeKind.SET_NESTED, AttributeKind.MAP_NESTED, AttributeKind.SINGLE_NESTED}
)


def effective_type(schema: OASSchema) -> Optional[str]:
    """Declared type, or the type implied by an untyped node's structure."""
    declared = schema.type
    if declared is not None:
        return declared
    if schema.has_properties or schema.additional_properties is not None:
        return TYPE_OBJECT
    if schema.items is not None:
        return TYPE_ARRAY
    return None


def is_nested_object(schema: OASSchema) -> bool:
    """True when the node is an object with its own properties."""
    return effective_type(schema) == TYPE_OBJECT and schema.has_properties


def _scalar_kind(schema: OASSchema, type_: Optional[str]) -> Optional[AttributeKind]:
    fmt = schema.format
    if type_ == TYPE_BOOLEAN:
        return AttributeKind.BOOL
    if type_ == TYPE_INTEGER:
        return AttributeKind.INT64
    if type_ == TYPE_NUMBER:
        if fmt == FORMAT_FLOAT:
            logger.debug("number/float at %s lowered to float64 (source precision is 32-bit)", format_path(schema.path))
            return AttributeKind.FLOAT64
        if fmt == FORMAT_DOUBLE:
            return AttributeKind.FLOAT64
        return AttributeKind.NUMBER
    if type_ == TYPE_STRING:
        return AttributeKind.STRING
    if type_ is None:
        if fmt in (FORMAT_INT32, FORMAT_INT64):
            return AttributeKind.INT64
        if fmt in (FORMAT_FLOAT, FORMAT_DOUBLE):
            return AttributeKind.FLOAT64
        return AttributeKind.STRING
    return None


def classify(schema: OASSchema, *, prefer_set: bool = False) -> AttributeKind:
    """Classify a schema node into the attribute kind it lowers to.

    Args:
        schema: Node to classify
        prefer_set: Caller requests set semantics for arrays (arrays declaring
            ``uniqueItems`` are sets regardless)

    Returns:
        The single AttributeKind for the node

    Raises:
        SchemaError: conflicting type tags or misplaced keywords
        UnsupportedSchemaError: no classification rule matches
    """
    if schema.type_tags and schema.type is None:
        raise UnsupportedSchemaError("null is the only declared type", path=schema.path)

    type_ = effective_type(schema)
    has_structure = (
        schema.has_properties or schema.additional_properties is not None or schema.items is not None
    )

    if type_ is None or (type_ in SCALAR_TYPES and not has_structure):
        kind = _scalar_kind(schema, type_)
        if kind is not None:
            return kind

    if type_ == TYPE_ARRAY and schema.items is not None:
        as_set = prefer_set or schema.unique_items
        if is_nested_object(schema.items):
            return AttributeKind.SET_NESTED if as_set else AttributeKind.LIST_NESTED
        return AttributeKind.SET if as_set else AttributeKind.LIST

    if type_ == TYPE_OBJECT:
        if schema.is_map:
            return AttributeKind.MAP_NESTED if is_nested_object(schema.additional_properties) else AttributeKind.MAP
        if schema.has_properties:
            if schema.additional_properties is not None:
                logger.debug(
                    "object at %s declares both properties and additionalProperties; additionalProperties ignored",
                    format_path(schema.path),
                )
            return AttributeKind.SINGLE_NESTED

    raise UnsupportedSchemaError(
        f"unsupported schema shape (type={sorted(schema.type_tags)}, format='{schema.format}')",
        path=schema.path,
    )
