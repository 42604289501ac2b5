"""Pydantic models for the provider code generator's intermediate representation.

These models define the attribute tree handed to the external rendering stage.
Field names follow the Terraform Plugin Framework codegen specification so
that ``model_dump(by_alias=True, exclude_none=True)`` produces the JSON shape
that stage consumes. They are the target data structure of the lowering
engine in `mapping.lowering`.

Each `Attribute` and `ElementType` is a discriminated value: exactly one
variant field is populated, which the model validators enforce.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ComputedOptionalRequired(str, Enum):
    """Who supplies an attribute's value: practitioner, provider, or either."""

    COMPUTED = "computed"
    COMPUTED_OPTIONAL = "computed_optional"
    OPTIONAL = "optional"
    REQUIRED = "required"


class _SpecModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def _populated(model: BaseModel, fields: List[str]) -> List[str]:
    return [f for f in fields if getattr(model, f) is not None]


# ---------------------------------------------------------------- element types


class BoolType(_SpecModel):
    pass


class Float64Type(_SpecModel):
    pass


class Int64Type(_SpecModel):
    pass


class NumberType(_SpecModel):
    pass


class StringType(_SpecModel):
    pass


class ListType(_SpecModel):
    element_type: "ElementType"


class SetType(_SpecModel):
    element_type: "ElementType"


class MapType(_SpecModel):
    element_type: "ElementType"


class ObjectAttributeType(_SpecModel):
    """One named field of an object element type."""

    name: str
    element_type: "ElementType"


class ObjectType(_SpecModel):
    attribute_types: List[ObjectAttributeType] = Field(default_factory=list)


ELEMENT_TYPE_VARIANTS = ["boolean", "float64", "int64", "number", "string", "list", "set", "map", "object"]


class ElementType(_SpecModel):
    """Element type of a plain (non-nested) collection attribute."""

    boolean: Optional[BoolType] = Field(default=None, alias="bool")
    float64: Optional[Float64Type] = None
    int64: Optional[Int64Type] = None
    number: Optional[NumberType] = None
    string: Optional[StringType] = None
    list: Optional[ListType] = None
    set: Optional[SetType] = None
    map: Optional[MapType] = None
    object: Optional[ObjectType] = None

    @model_validator(mode="after")
    def _exactly_one_variant(self) -> "ElementType":
        populated = _populated(self, ELEMENT_TYPE_VARIANTS)
        if len(populated) != 1:
            raise ValueError(f"element type must set exactly one variant, got {populated or 'none'}")
        return self


# ---------------------------------------------------------------- defaults


class BoolDefault(_SpecModel):
    static: bool


class Float64Default(_SpecModel):
    static: float


class Int64Default(_SpecModel):
    static: int


class StringDefault(_SpecModel):
    static: str


# ---------------------------------------------------------------- attributes


class _AttributeBody(_SpecModel):
    computed_optional_required: ComputedOptionalRequired
    description: Optional[str] = None


class BoolAttribute(_AttributeBody):
    # Static defaults are only ever populated for resource attributes.
    default: Optional[BoolDefault] = None


class Float64Attribute(_AttributeBody):
    default: Optional[Float64Default] = None


class Int64Attribute(_AttributeBody):
    default: Optional[Int64Default] = None


class NumberAttribute(_AttributeBody):
    pass


class StringAttribute(_AttributeBody):
    sensitive: Optional[bool] = None
    default: Optional[StringDefault] = None


class ListAttribute(_AttributeBody):
    element_type: ElementType


class SetAttribute(_AttributeBody):
    element_type: ElementType


class MapAttribute(_AttributeBody):
    element_type: ElementType


class NestedAttributeObject(_SpecModel):
    attributes: List["Attribute"] = Field(default_factory=list)


class ListNestedAttribute(_AttributeBody):
    nested_object: NestedAttributeObject


class SetNestedAttribute(_AttributeBody):
    nested_object: NestedAttributeObject


class MapNestedAttribute(_AttributeBody):
    nested_object: NestedAttributeObject


class SingleNestedAttribute(_AttributeBody):
    attributes: List["Attribute"] = Field(default_factory=list)


ATTRIBUTE_VARIANTS = [
    "boolean",
    "float64",
    "int64",
    "number",
    "string",
    "list",
    "set",
    "map",
    "list_nested",
    "set_nested",
    "map_nested",
    "single_nested",
]


class Attribute(_SpecModel):
    """One node of the attribute tree: a name plus exactly one variant."""

    name: str
    boolean: Optional[BoolAttribute] = Field(default=None, alias="bool")
    float64: Optional[Float64Attribute] = None
    int64: Optional[Int64Attribute] = None
    number: Optional[NumberAttribute] = None
    string: Optional[StringAttribute] = None
    list: Optional[ListAttribute] = None
    set: Optional[SetAttribute] = None
    map: Optional[MapAttribute] = None
    list_nested: Optional[ListNestedAttribute] = None
    set_nested: Optional[SetNestedAttribute] = None
    map_nested: Optional[MapNestedAttribute] = None
    single_nested: Optional[SingleNestedAttribute] = None

    @model_validator(mode="after")
    def _exactly_one_variant(self) -> "Attribute":
        populated = _populated(self, ATTRIBUTE_VARIANTS)
        if len(populated) != 1:
            raise ValueError(
                f"attribute '{self.name}' must set exactly one variant, got {populated or 'none'}"
            )
        return self

    @property
    def variant_name(self) -> str:
        return _populated(self, ATTRIBUTE_VARIANTS)[0]

    @property
    def body(self) -> _AttributeBody:
        """The populated variant (shared fields: computability, description)."""
        return getattr(self, self.variant_name)

    @property
    def computed_optional_required(self) -> ComputedOptionalRequired:
        return self.body.computed_optional_required


ListType.model_rebuild()
SetType.model_rebuild()
MapType.model_rebuild()
ObjectAttributeType.model_rebuild()
NestedAttributeObject.model_rebuild()
SingleNestedAttribute.model_rebuild()
ListNestedAttribute.model_rebuild()
SetNestedAttribute.model_rebuild()
MapNestedAttribute.model_rebuild()
Attribute.model_rebuild()
