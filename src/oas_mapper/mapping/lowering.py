"""Recursive lowering of OpenAPI schema nodes into provider attributes.

This module holds the one traversal shared by resource and data-source
output. `AttributeLowerer` walks an object node's properties in declaration
order, resolves each child's computability against the parent's required
names, classifies the child and builds the matching attribute variant,
recursing into nested objects, map values and array items.

The two output targets differ only in leaf construction (`policy.TargetRules`):
resource attributes carry static defaults decoded from the schema, data
source attributes never do.

Public Functions:
    lower_resource_attributes: Object node → sibling resource attributes
    lower_data_source_attributes: Object node → sibling data source attributes
    lower_single_nested_resource: Object node → one single-nested resource attribute
    lower_single_nested_data_source: Object node → one single-nested data source attribute

Depth:
    The root object sits at depth 0 and every property, map value, array item
    or element type adds one level. Exceeding ``policy.max_depth`` raises
    RecursionLimitError instead of exhausting the interpreter stack.

Errors:
    Every error carries the dotted attribute path of the failing node. In
    collect mode (``policy.collect_errors``) sibling failures are gathered and
    raised together as one MappingErrorGroup.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Union

from ..errors import (
    MappingError,
    MappingErrorGroup,
    RecursionLimitError,
    UnsupportedSchemaError,
    format_path,
)
from ..models.oas import SchemaNode
from ..models.spec import (
    Attribute,
    BoolAttribute,
    BoolDefault,
    ComputedOptionalRequired,
    Float64Attribute,
    Float64Default,
    Int64Attribute,
    Int64Default,
    ListAttribute,
    ListNestedAttribute,
    MapAttribute,
    MapNestedAttribute,
    NestedAttributeObject,
    NumberAttribute,
    SetAttribute,
    SetNestedAttribute,
    SingleNestedAttribute,
    StringAttribute,
    StringDefault,
)
from .classifier import AttributeKind, classify
from .computability import resolve_computability
from .element_types import build_element_type
from .facade import OASSchema, as_schema
from .naming import assign_names
from .policy import AttributeOverride, LoweringPolicy, OutputTarget, rules_for

logger = logging.getLogger(__name__)

__all__ = [
    "AttributeLowerer",
    "SchemaInput",
    "lower_attributes",
    "lower_single_nested",
    "lower_resource_attributes",
    "lower_data_source_attributes",
    "lower_single_nested_resource",
    "lower_single_nested_data_source",
]

SchemaInput = Union[OASSchema, SchemaNode, Mapping[str, Any]]

# Terraform only accepts defaults on computed attributes.
_NEEDS_COMPUTED_FOR_DEFAULT = (ComputedOptionalRequired.REQUIRED, ComputedOptionalRequired.OPTIONAL)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _is_float64(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


def _is_int64(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and _INT64_MIN <= value <= _INT64_MAX


class AttributeLowerer:
    """One lowering run for a single output target.

    Instances hold no state beyond the target rules, the policy and the set of
    attribute paths visited (used to report override entries that matched
    nothing). Build a fresh instance per run.
    """

    def __init__(self, target: OutputTarget, policy: Optional[LoweringPolicy] = None) -> None:
        self.target = OutputTarget(target)
        self.rules = rules_for(self.target)
        self.policy = policy or LoweringPolicy()
        self.visited_paths: Set[str] = set()
        self._builders: Dict[AttributeKind, Callable[..., Attribute]] = {
            AttributeKind.BOOL: self._bool,
            AttributeKind.FLOAT64: self._float64,
            AttributeKind.INT64: self._int64,
            AttributeKind.NUMBER: self._number,
            AttributeKind.STRING: self._string,
            AttributeKind.LIST: self._list,
            AttributeKind.SET: self._set,
            AttributeKind.MAP: self._map,
            AttributeKind.LIST_NESTED: self._list_nested,
            AttributeKind.SET_NESTED: self._set_nested,
            AttributeKind.MAP_NESTED: self._map_nested,
            AttributeKind.SINGLE_NESTED: self._single_nested,
        }

    # ------------------------------------------------------------------ traversal

    def lower_object_attributes(
        self,
        schema: OASSchema,
        *,
        depth: int,
        parent_is_fully_computed: bool = False,
    ) -> List[Attribute]:
        """Lower every property of an object node, in declaration order."""
        pairs = assign_names(
            schema.property_names, normalize=self.policy.normalize_names, path=schema.path
        )
        required = schema.required_names
        attributes: List[Attribute] = []
        errors: List[MappingError] = []
        for source, target in pairs:
            child = schema.property_schema(source, target)
            try:
                status = resolve_computability(
                    required,
                    source,
                    parent_is_fully_computed,
                    path=child.path,
                    policy=self.policy,
                )
                attributes.append(self.lower_attribute(target, child, status, depth=depth + 1))
            except MappingError as e:
                if not self.policy.collect_errors:
                    raise
                errors.extend(e.flatten() if isinstance(e, MappingErrorGroup) else [e])
        if errors:
            raise MappingErrorGroup(errors, path=schema.path)
        return attributes

    def lower_attribute(
        self,
        name: str,
        schema: OASSchema,
        status: ComputedOptionalRequired,
        *,
        depth: int,
    ) -> Attribute:
        """Lower one schema node into the attribute called ``name``."""
        if depth > self.policy.max_depth:
            raise RecursionLimitError(self.policy.max_depth, path=schema.path)
        kind = classify(schema, prefer_set=self.policy.prefer_sets)
        dotted = format_path(schema.path)
        self.visited_paths.add(dotted)
        override = self.policy.override_for(dotted)
        description = schema.description
        if override is not None and override.description is not None:
            description = override.description
        attribute = self._builders[kind](name, schema, status, description, depth, override)
        logger.debug(
            "lowered %s attribute path=%s kind=%s status=%s",
            self.target.value,
            dotted,
            kind.value,
            status.value,
        )
        return attribute

    # ------------------------------------------------------------------ leaves

    def _static_default(self, schema: OASSchema, accept: Callable[[Any], bool]) -> Any:
        if not self.rules.allow_static_defaults or schema.default is None:
            return None
        if not accept(schema.default):
            logger.debug(
                "ignoring default %r at %s: not decodable for this attribute type",
                schema.default,
                format_path(schema.path),
            )
            return None
        return schema.default

    @staticmethod
    def _status_with_default(status: ComputedOptionalRequired, default: Any) -> ComputedOptionalRequired:
        if default is not None and status in _NEEDS_COMPUTED_FOR_DEFAULT:
            return ComputedOptionalRequired.COMPUTED_OPTIONAL
        return status

    @staticmethod
    def _warn_sensitive_override(schema: OASSchema, override: Optional[AttributeOverride]) -> None:
        if override is not None and override.sensitive is not None:
            logger.warning(
                "sensitive override at %s ignored: only string attributes can be sensitive",
                format_path(schema.path),
            )

    def _bool(self, name, schema, status, description, depth, override) -> Attribute:
        self._warn_sensitive_override(schema, override)
        default = self._static_default(schema, lambda v: isinstance(v, bool))
        return Attribute(
            name=name,
            boolean=BoolAttribute(
                computed_optional_required=self._status_with_default(status, default),
                description=description,
                default=BoolDefault(static=default) if default is not None else None,
            ),
        )

    def _float64(self, name, schema, status, description, depth, override) -> Attribute:
        self._warn_sensitive_override(schema, override)
        default = self._static_default(schema, _is_float64)
        return Attribute(
            name=name,
            float64=Float64Attribute(
                computed_optional_required=self._status_with_default(status, default),
                description=description,
                default=Float64Default(static=float(default)) if default is not None else None,
            ),
        )

    def _int64(self, name, schema, status, description, depth, override) -> Attribute:
        self._warn_sensitive_override(schema, override)
        default = self._static_default(schema, _is_int64)
        return Attribute(
            name=name,
            int64=Int64Attribute(
                computed_optional_required=self._status_with_default(status, default),
                description=description,
                default=Int64Default(static=default) if default is not None else None,
            ),
        )

    def _number(self, name, schema, status, description, depth, override) -> Attribute:
        self._warn_sensitive_override(schema, override)
        return Attribute(
            name=name,
            number=NumberAttribute(computed_optional_required=status, description=description),
        )

    def _string(self, name, schema, status, description, depth, override) -> Attribute:
        sensitive = schema.is_sensitive
        if override is not None and override.sensitive is not None:
            sensitive = override.sensitive
        default = self._static_default(schema, lambda v: isinstance(v, str))
        return Attribute(
            name=name,
            string=StringAttribute(
                computed_optional_required=self._status_with_default(status, default),
                description=description,
                sensitive=True if sensitive else None,
                default=StringDefault(static=default) if default is not None else None,
            ),
        )

    # ------------------------------------------------------------------ collections

    def _list(self, name, schema, status, description, depth, override) -> Attribute:
        self._warn_sensitive_override(schema, override)
        element_type = build_element_type(schema.items, depth=depth + 1, policy=self.policy)
        return Attribute(
            name=name,
            list=ListAttribute(
                computed_optional_required=status, description=description, element_type=element_type
            ),
        )

    def _set(self, name, schema, status, description, depth, override) -> Attribute:
        self._warn_sensitive_override(schema, override)
        element_type = build_element_type(schema.items, depth=depth + 1, policy=self.policy)
        return Attribute(
            name=name,
            set=SetAttribute(
                computed_optional_required=status, description=description, element_type=element_type
            ),
        )

    def _map(self, name, schema, status, description, depth, override) -> Attribute:
        self._warn_sensitive_override(schema, override)
        element_type = build_element_type(
            schema.additional_properties, depth=depth + 1, policy=self.policy
        )
        return Attribute(
            name=name,
            map=MapAttribute(
                computed_optional_required=status, description=description, element_type=element_type
            ),
        )

    # ------------------------------------------------------------------ nested

    def _nested_object(self, element: OASSchema, status, depth: int) -> NestedAttributeObject:
        if depth > self.policy.max_depth:
            raise RecursionLimitError(self.policy.max_depth, path=element.path)
        attributes = self.lower_object_attributes(
            element,
            depth=depth,
            parent_is_fully_computed=status == ComputedOptionalRequired.COMPUTED,
        )
        return NestedAttributeObject(attributes=attributes)

    def _list_nested(self, name, schema, status, description, depth, override) -> Attribute:
        self._warn_sensitive_override(schema, override)
        nested = self._nested_object(schema.items, status, depth + 1)
        return Attribute(
            name=name,
            list_nested=ListNestedAttribute(
                computed_optional_required=status, description=description, nested_object=nested
            ),
        )

    def _set_nested(self, name, schema, status, description, depth, override) -> Attribute:
        self._warn_sensitive_override(schema, override)
        nested = self._nested_object(schema.items, status, depth + 1)
        return Attribute(
            name=name,
            set_nested=SetNestedAttribute(
                computed_optional_required=status, description=description, nested_object=nested
            ),
        )

    def _map_nested(self, name, schema, status, description, depth, override) -> Attribute:
        self._warn_sensitive_override(schema, override)
        nested = self._nested_object(schema.additional_properties, status, depth + 1)
        return Attribute(
            name=name,
            map_nested=MapNestedAttribute(
                computed_optional_required=status, description=description, nested_object=nested
            ),
        )

    def _single_nested(self, name, schema, status, description, depth, override) -> Attribute:
        self._warn_sensitive_override(schema, override)
        attributes = self.lower_object_attributes(
            schema,
            depth=depth,
            parent_is_fully_computed=status == ComputedOptionalRequired.COMPUTED,
        )
        return Attribute(
            name=name,
            single_nested=SingleNestedAttribute(
                computed_optional_required=status, description=description, attributes=attributes
            ),
        )

    # ------------------------------------------------------------------ bookkeeping

    def report_unused_overrides(self) -> List[str]:
        """Log and return override paths that matched no lowered attribute."""
        unused = [p for p in self.policy.overrides if p not in self.visited_paths]
        for path in unused:
            logger.warning("override for '%s' matched no %s attribute", path, self.target.value)
        return unused


def _require_object(schema: OASSchema) -> None:
    kind = classify(schema)
    if kind is not AttributeKind.SINGLE_NESTED:
        raise UnsupportedSchemaError(
            f"expected an object schema with properties, got {kind.value}", path=schema.path
        )


def lower_attributes(
    node: SchemaInput,
    target: OutputTarget,
    policy: Optional[LoweringPolicy] = None,
) -> List[Attribute]:
    """Lower an object node's properties into sibling attributes for ``target``."""
    schema = as_schema(node)
    _require_object(schema)
    lowerer = AttributeLowerer(target, policy)
    attributes = lowerer.lower_object_attributes(schema, depth=0)
    lowerer.report_unused_overrides()
    return attributes


def lower_single_nested(
    name: str,
    node: SchemaInput,
    status: ComputedOptionalRequired,
    target: OutputTarget,
    policy: Optional[LoweringPolicy] = None,
) -> Attribute:
    """Lower an object node into one single-nested attribute called ``name``."""
    schema = as_schema(node, (name,))
    _require_object(schema)
    lowerer = AttributeLowerer(target, policy)
    attribute = lowerer.lower_attribute(name, schema, status, depth=0)
    lowerer.report_unused_overrides()
    return attribute


def lower_resource_attributes(
    node: SchemaInput, policy: Optional[LoweringPolicy] = None
) -> List[Attribute]:
    return lower_attributes(node, OutputTarget.RESOURCE, policy)


def lower_data_source_attributes(
    node: SchemaInput, policy: Optional[LoweringPolicy] = None
) -> List[Attribute]:
    return lower_attributes(node, OutputTarget.DATA_SOURCE, policy)


def lower_single_nested_resource(
    name: str,
    node: SchemaInput,
    status: ComputedOptionalRequired,
    policy: Optional[LoweringPolicy] = None,
) -> Attribute:
    return lower_single_nested(name, node, status, OutputTarget.RESOURCE, policy)


def lower_single_nested_data_source(
    name: str,
    node: SchemaInput,
    status: ComputedOptionalRequired,
    policy: Optional[LoweringPolicy] = None,
) -> Attribute:
    return lower_single_nested(name, node, status, OutputTarget.DATA_SOURCE, policy)
