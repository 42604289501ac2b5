"""Element-type construction for plain (non-nested) collection attributes.

List, set and map attributes whose elements are not nested attributes carry
an `ElementType` describing each element. Element types recurse: an array of
arrays becomes a list of list, a map of objects becomes a map of object with
ordered attribute types.
"""
from __future__ import annotations

from ..errors import RecursionLimitError
from ..models.spec import (
    BoolType,
    ElementType,
    Float64Type,
    Int64Type,
    ListType,
    MapType,
    NumberType,
    ObjectAttributeType,
    ObjectType,
    SetType,
    StringType,
)
from .classifier import AttributeKind, classify
from .facade import OASSchema
from .naming import assign_names
from .policy import LoweringPolicy

__all__ = ["build_element_type"]

_SCALAR_ELEMENTS = {
    AttributeKind.BOOL: lambda: ElementType(boolean=BoolType()),
    AttributeKind.FLOAT64: lambda: ElementType(float64=Float64Type()),
    AttributeKind.INT64: lambda: ElementType(int64=Int64Type()),
    AttributeKind.NUMBER: lambda: ElementType(number=NumberType()),
    AttributeKind.STRING: lambda: ElementType(string=StringType()),
}


def build_element_type(schema: OASSchema, *, depth: int, policy: LoweringPolicy) -> ElementType:
    """Build the element type describing values of ``schema``.

    Args:
        schema: Item node of an array or value node of a map
        depth: Nesting depth of ``schema`` (checked against the policy ceiling)
        policy: Lowering policy

    Raises:
        RecursionLimitError: depth exceeds ``policy.max_depth``
        SchemaError / UnsupportedSchemaError: from classification
    """
    if depth > policy.max_depth:
        raise RecursionLimitError(policy.max_depth, path=schema.path)

    kind = classify(schema, prefer_set=policy.prefer_sets)
    if kind.is_scalar:
        return _SCALAR_ELEMENTS[kind]()

    if kind in (AttributeKind.LIST, AttributeKind.LIST_NESTED):
        return ElementType(list=ListType(element_type=build_element_type(schema.items, depth=depth + 1, policy=policy)))
    if kind in (AttributeKind.SET, AttributeKind.SET_NESTED):
        return ElementType(set=SetType(element_type=build_element_type(schema.items, depth=depth + 1, policy=policy)))
    if kind in (AttributeKind.MAP, AttributeKind.MAP_NESTED):
        value = schema.additional_properties
        return ElementType(map=MapType(element_type=build_element_type(value, depth=depth + 1, policy=policy)))

    # SINGLE_NESTED: an object element with one attribute type per property.
    attribute_types = [
        ObjectAttributeType(
            name=target,
            element_type=build_element_type(
                schema.property_schema(source, target), depth=depth + 1, policy=policy
            ),
        )
        for source, target in assign_names(
            schema.property_names, normalize=policy.normalize_names, path=schema.path
        )
    ]
    return ElementType(object=ObjectType(attribute_types=attribute_types))
