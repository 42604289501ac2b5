"""Public facade for OpenAPI schema to provider attribute lowering.

This module provides the stable public API for converting reference-resolved
OpenAPI schema nodes into the attribute trees consumed by the provider code
generator. All traversal logic is delegated to `oas_mapper.mapping.lowering`
and its helpers in the `oas_mapper.mapping` package.

Public Functions:
    lower_resource_attributes: Object schema → ordered resource attributes
    lower_data_source_attributes: Object schema → ordered data source attributes
    lower_single_nested_resource: Object schema → one single-nested resource attribute
    lower_single_nested_data_source: Object schema → one single-nested data source attribute
    lower_with_settings: Lower using a policy built from application settings
    attributes_to_spec: Serialize attributes to codegen specification JSON shape

Re-exports:
    LoweringPolicy, AttributeOverride, OutputTarget, ComputedOptionalRequired
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .config import Settings, get_settings
from .mapping.lowering import (
    SchemaInput,
    lower_attributes,
    lower_data_source_attributes,
    lower_resource_attributes,
    lower_single_nested,
    lower_single_nested_data_source,
    lower_single_nested_resource,
)
from .mapping.policy import AttributeOverride, LoweringPolicy, OutputTarget
from .models.spec import Attribute, ComputedOptionalRequired

__all__ = [
    "lower_resource_attributes",
    "lower_data_source_attributes",
    "lower_single_nested_resource",
    "lower_single_nested_data_source",
    "lower_with_settings",
    "attributes_to_spec",
    "LoweringPolicy",
    "AttributeOverride",
    "OutputTarget",
    "ComputedOptionalRequired",
]


def lower_with_settings(
    node: SchemaInput,
    target: OutputTarget = OutputTarget.RESOURCE,
    *,
    name: Optional[str] = None,
    status: ComputedOptionalRequired = ComputedOptionalRequired.COMPUTED_OPTIONAL,
    settings: Optional[Settings] = None,
) -> List[Attribute]:
    """Lower ``node`` with a policy derived from application settings.

    Args:
        node: Reference-resolved object schema (model, mapping or facade)
        target: Resource or data source output
        name: When set, lower the node as one single-nested attribute with this
            name instead of as sibling attributes
        status: Computability of the single-nested attribute (ignored without ``name``)
        settings: Explicit settings; defaults to the cached environment settings

    Returns:
        Ordered attribute list (one element when ``name`` is given)
    """
    policy = LoweringPolicy.from_settings(settings or get_settings())
    if name:
        return [lower_single_nested(name, node, status, target, policy)]
    return lower_attributes(node, target, policy)


def attributes_to_spec(attributes: Sequence[Attribute]) -> List[Dict[str, Any]]:
    """Dump attributes in the codegen specification JSON shape (unset fields omitted)."""
    return [a.model_dump(mode="json", by_alias=True, exclude_none=True) for a in attributes]
