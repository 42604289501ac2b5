"""Read-only facade over a reference-resolved OpenAPI schema node.

`OASSchema` normalizes the handful of schema facts the classifier and the
lowering engine need (declared type, format, description, properties,
additional properties, items, required names) and attaches the dotted
attribute path used in error messages. It never mutates the wrapped node.

Accessor rules:
    - ``type``: single non-null declared tag, ``None`` when untyped; several
      non-null tags raise SchemaError
    - ``additional_properties``: boolean values are absent; a schema value on
      a node declaring a non-object type raises SchemaError
    - ``items``: absent on object-typed nodes; declared on another non-array
      type raises SchemaError
"""
from __future__ import annotations

from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from ..errors import SchemaError, format_path
from ..models.oas import SchemaNode

__all__ = [
    "OASSchema",
    "as_schema",
    "TYPE_STRING",
    "TYPE_INTEGER",
    "TYPE_NUMBER",
    "TYPE_BOOLEAN",
    "TYPE_ARRAY",
    "TYPE_OBJECT",
    "TYPE_NULL",
    "SCALAR_TYPES",
    "FORMAT_PASSWORD",
]

TYPE_STRING = "string"
TYPE_INTEGER = "integer"
TYPE_NUMBER = "number"
TYPE_BOOLEAN = "boolean"
TYPE_ARRAY = "array"
TYPE_OBJECT = "object"
TYPE_NULL = "null"

SCALAR_TYPES = frozenset({TYPE_STRING, TYPE_INTEGER, TYPE_NUMBER, TYPE_BOOLEAN})

FORMAT_PASSWORD = "password"


class OASSchema:
    """Wrapper exposing normalized accessors for one schema node."""

    __slots__ = ("schema", "path")

    def __init__(self, schema: SchemaNode, path: Tuple[str, ...] = ()) -> None:
        self.schema = schema
        self.path = tuple(path)

    def __repr__(self) -> str:
        return f"OASSchema(path={format_path(self.path)!r}, type={self.schema.type!r})"

    def child(self, name: str, schema: SchemaNode) -> "OASSchema":
        return OASSchema(schema, self.path + (name,))

    # ------------------------------------------------------------ type / format

    @property
    def type_tags(self) -> FrozenSet[str]:
        return frozenset(self.schema.type)

    @property
    def type(self) -> Optional[str]:
        """Single declared non-null type, or None for an untyped node."""
        tags = [t for t in self.schema.type if t != TYPE_NULL]
        distinct = sorted(set(tags))
        if not distinct:
            return None
        if len(distinct) > 1:
            raise SchemaError(
                f"conflicting type tags {distinct}; only one non-null type is supported",
                path=self.path,
            )
        return distinct[0]

    @property
    def format(self) -> str:
        return self.schema.format

    @property
    def description(self) -> Optional[str]:
        return self.schema.description or None

    @property
    def default(self) -> Any:
        return self.schema.default

    @property
    def unique_items(self) -> bool:
        return self.schema.uniqueItems

    @property
    def is_sensitive(self) -> bool:
        return self.type in (TYPE_STRING, None) and self.format == FORMAT_PASSWORD

    # ------------------------------------------------------------ structure

    @property
    def required_names(self) -> FrozenSet[str]:
        return frozenset(self.schema.required)

    @property
    def properties(self) -> Dict[str, "OASSchema"]:
        """Child schemas keyed by property name, in declaration order."""
        return {name: self.child(name, node) for name, node in self.schema.properties.items()}

    @property
    def property_names(self) -> List[str]:
        return list(self.schema.properties)

    def property_schema(self, name: str, attribute_name: Optional[str] = None) -> "OASSchema":
        """Child schema for property ``name``, pathed under its attribute name."""
        return self.child(attribute_name or name, self.schema.properties[name])

    @property
    def has_properties(self) -> bool:
        return bool(self.schema.properties)

    @property
    def additional_properties(self) -> Optional["OASSchema"]:
        ap = self.schema.additionalProperties
        if ap is None or isinstance(ap, bool):
            return None
        declared = self.type
        if declared is not None and declared != TYPE_OBJECT:
            raise SchemaError(
                f"additionalProperties declared on non-object type '{declared}'",
                path=self.path,
            )
        # Map values have no property name of their own.
        return OASSchema(ap, self.path)

    @property
    def items(self) -> Optional["OASSchema"]:
        if self.schema.items is None:
            return None
        declared = self.type
        if declared == TYPE_OBJECT:
            return None
        if declared is not None and declared != TYPE_ARRAY:
            raise SchemaError(
                f"items declared on non-array type '{declared}'",
                path=self.path,
            )
        return OASSchema(self.schema.items, self.path)

    @property
    def is_map(self) -> bool:
        """True for a pure map: additional properties present, properties empty."""
        return self.additional_properties is not None and not self.has_properties


def as_schema(
    node: Union[OASSchema, SchemaNode, Mapping[str, Any]],
    path: Tuple[str, ...] = (),
) -> OASSchema:
    """Wrap a node (model, raw mapping, or existing facade) in an `OASSchema`."""
    if isinstance(node, OASSchema):
        return node
    if isinstance(node, SchemaNode):
        return OASSchema(node, path)
    try:
        return OASSchema(SchemaNode.model_validate(node), path)
    except ValidationError as e:
        raise SchemaError(f"invalid schema node: {e.error_count()} validation error(s)", path=path) from e
