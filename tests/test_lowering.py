from __future__ import annotations

import logging

import pytest

from oas_mapper.errors import (
    MappingErrorGroup,
    NameCollisionError,
    RecursionLimitError,
    SchemaError,
    UnsupportedSchemaError,
)
from oas_mapper.mapper import (
    lower_data_source_attributes,
    lower_resource_attributes,
    lower_single_nested_data_source,
    lower_single_nested_resource,
)
from oas_mapper.mapping.policy import AttributeOverride, LoweringPolicy
from oas_mapper.models.spec import (
    ComputedOptionalRequired,
    ElementType,
    Int64Type,
    ListType,
    ObjectAttributeType,
    ObjectType,
    StringType,
)

CO = ComputedOptionalRequired.COMPUTED_OPTIONAL
REQ = ComputedOptionalRequired.REQUIRED


def _obj(properties, required=None, **extra):
    node = {"type": "object", "properties": properties}
    if required:
        node["required"] = required
    node.update(extra)
    return node


def _by_name(attributes):
    return {a.name: a for a in attributes}


def test_output_order_matches_declaration_order():
    schema = _obj(
        {
            "zeta": {"type": "string"},
            "alpha": {"type": "integer"},
            "mid": {"type": "boolean"},
            "beta": _obj({"y": {"type": "string"}, "x": {"type": "string"}}),
        }
    )
    attrs = lower_resource_attributes(schema)
    assert [a.name for a in attrs] == ["zeta", "alpha", "mid", "beta"]
    assert [a.name for a in attrs[3].single_nested.attributes] == ["y", "x"]


def test_scalar_leaves():
    schema = _obj(
        {
            "flag": {"type": "boolean", "description": "a flag"},
            "count": {"type": "integer", "format": "int32"},
            "ratio": {"type": "number", "format": "double"},
            "amount": {"type": "number"},
            "secret": {"type": "string", "format": "password"},
            "plain": {"type": "string"},
        },
        required=["count"],
    )
    attrs = _by_name(lower_resource_attributes(schema))
    assert attrs["flag"].boolean.description == "a flag"
    assert attrs["flag"].boolean.computed_optional_required is CO
    assert attrs["count"].int64.computed_optional_required is REQ
    assert attrs["ratio"].float64 is not None
    assert attrs["amount"].number is not None
    assert attrs["secret"].string.sensitive is True
    assert attrs["plain"].string.sensitive is None
    assert attrs["plain"].string.description is None


def test_sensitivity_never_set_outside_strings():
    schema = _obj(
        {
            "pin": {"type": "integer", "format": "password"},
            "pw": {"format": "password"},
        }
    )
    attrs = _by_name(lower_resource_attributes(schema))
    assert attrs["pin"].variant_name == "int64"
    assert not hasattr(attrs["pin"].int64, "sensitive")
    assert attrs["pw"].string.sensitive is True


def test_required_propagates_at_every_level():
    schema = _obj(
        {"outer": _obj({"inner": {"type": "string"}, "other": {"type": "string"}}, required=["inner"])},
        required=["outer"],
    )
    [outer] = lower_resource_attributes(schema)
    assert outer.computed_optional_required is REQ
    inner = _by_name(outer.single_nested.attributes)
    assert inner["inner"].computed_optional_required is REQ
    assert inner["other"].computed_optional_required is CO


def test_list_and_set_element_types():
    schema = _obj(
        {
            "tags": {"type": "array", "items": {"type": "string"}},
            "ids": {"type": "array", "uniqueItems": True, "items": {"type": "integer"}},
            "matrix": {"type": "array", "items": {"type": "array", "items": {"type": "integer"}}},
        }
    )
    attrs = _by_name(lower_resource_attributes(schema))
    assert attrs["tags"].list.element_type == ElementType(string=StringType())
    assert attrs["ids"].set.element_type == ElementType(int64=Int64Type())
    assert attrs["matrix"].list.element_type == ElementType(
        list=ListType(element_type=ElementType(int64=Int64Type()))
    )


def test_list_of_objects_inside_list_becomes_object_element_type():
    item = {"type": "object", "properties": {"k": {"type": "string"}, "v": {"type": "integer"}}}
    schema = _obj({"rows": {"type": "array", "items": {"type": "array", "items": item}}})
    [rows] = lower_resource_attributes(schema)
    assert rows.list.element_type == ElementType(
        list=ListType(
            element_type=ElementType(
                object=ObjectType(
                    attribute_types=[
                        ObjectAttributeType(name="k", element_type=ElementType(string=StringType())),
                        ObjectAttributeType(name="v", element_type=ElementType(int64=Int64Type())),
                    ]
                )
            )
        )
    )


def test_list_and_set_nested():
    item = _obj({"id": {"type": "string"}, "size": {"type": "integer"}}, required=["id"])
    schema = _obj(
        {
            "disks": {"type": "array", "items": item, "description": "attached disks"},
            "rules": {"type": "array", "uniqueItems": True, "items": item},
        }
    )
    attrs = _by_name(lower_data_source_attributes(schema))
    disks = attrs["disks"].list_nested
    assert disks.description == "attached disks"
    nested = _by_name(disks.nested_object.attributes)
    assert nested["id"].computed_optional_required is REQ
    assert nested["size"].computed_optional_required is CO
    assert attrs["rules"].set_nested is not None


def test_object_with_properties_and_additional_properties_uses_properties():
    schema = _obj(
        {
            "hybrid": _obj(
                {"known": {"type": "string"}},
                additionalProperties={"type": "integer"},
            )
        }
    )
    [hybrid] = lower_resource_attributes(schema)
    assert hybrid.variant_name == "single_nested"
    assert [a.name for a in hybrid.single_nested.attributes] == ["known"]


@pytest.mark.parametrize("lower", [lower_resource_attributes, lower_data_source_attributes])
def test_lowering_is_idempotent(lower):
    schema = _obj(
        {
            "a": {"type": "string", "default": "x"},
            "b": _obj({"c": {"type": "array", "items": _obj({"d": {"type": "number"}})}}),
            "m": {"type": "object", "additionalProperties": {"type": "boolean"}},
        }
    )
    assert lower(schema) == lower(schema)


def test_static_defaults_only_on_resources():
    schema = _obj(
        {
            "name": {"type": "string", "default": "web"},
            "replicas": {"type": "integer", "default": 3},
            "ratio": {"type": "number", "format": "double", "default": 1},
            "enabled": {"type": "boolean", "default": True},
        },
        required=["name"],
    )
    resource = _by_name(lower_resource_attributes(schema))
    assert resource["name"].string.default.static == "web"
    # Terraform forbids defaults on required attributes.
    assert resource["name"].computed_optional_required is CO
    assert resource["replicas"].int64.default.static == 3
    assert resource["ratio"].float64.default.static == 1.0
    assert resource["enabled"].boolean.default.static is True

    data_source = _by_name(lower_data_source_attributes(schema))
    assert data_source["name"].string.default is None
    assert data_source["name"].computed_optional_required is REQ
    assert data_source["replicas"].int64.default is None
    assert data_source["enabled"].boolean.default is None


def test_mistyped_default_is_ignored():
    schema = _obj({"replicas": {"type": "integer", "default": "three"}}, required=["replicas"])
    [replicas] = lower_resource_attributes(schema)
    assert replicas.int64.default is None
    assert replicas.computed_optional_required is REQ


def test_out_of_range_numeric_defaults_are_ignored():
    schema = _obj(
        {
            "huge": {"type": "number", "format": "double", "default": 10**400},
            "wide": {"type": "integer", "format": "int64", "default": 2**63},
            "low": {"type": "integer", "format": "int64", "default": -(2**63) - 1},
            "edge": {"type": "integer", "format": "int64", "default": 2**63 - 1},
            "inf": {"type": "number", "format": "double", "default": float("inf")},
        },
        required=["huge", "wide"],
    )
    attrs = _by_name(lower_resource_attributes(schema))
    assert attrs["huge"].float64.default is None
    assert attrs["huge"].computed_optional_required is REQ
    assert attrs["wide"].int64.default is None
    assert attrs["wide"].computed_optional_required is REQ
    assert attrs["low"].int64.default is None
    assert attrs["edge"].int64.default.static == 2**63 - 1
    assert attrs["inf"].float64.default is None


def test_out_of_range_default_does_not_break_collect_mode():
    schema = _obj(
        {
            "huge": {"type": "number", "format": "double", "default": 10**400},
            "bad": {"type": "object"},
        }
    )
    with pytest.raises(MappingErrorGroup) as exc:
        lower_resource_attributes(schema, LoweringPolicy(collect_errors=True))
    assert [e.path for e in exc.value.errors] == [("bad",)]


def test_unsupported_child_names_its_path():
    schema = _obj({"outer": _obj({"empty": {"type": ["object"]}})})
    with pytest.raises(UnsupportedSchemaError) as exc:
        lower_resource_attributes(schema)
    assert exc.value.path == ("outer", "empty")
    assert str(exc.value).startswith("outer.empty:")


def test_unsupported_inside_map_value_names_map_path():
    schema = _obj(
        {"m": {"type": "object", "additionalProperties": _obj({"bad": {"type": "object"}})}}
    )
    with pytest.raises(UnsupportedSchemaError) as exc:
        lower_data_source_attributes(schema)
    assert exc.value.dotted_path == "m.bad"


def test_root_must_be_object_with_properties():
    with pytest.raises(UnsupportedSchemaError) as exc:
        lower_resource_attributes({"type": ["object"]})
    assert exc.value.dotted_path == "<root>"
    with pytest.raises(UnsupportedSchemaError):
        lower_resource_attributes({"type": "object", "additionalProperties": {"type": "string"}})


def test_schema_errors_carry_path():
    schema = _obj({"bad": {"type": ["string", "integer"]}})
    with pytest.raises(SchemaError) as exc:
        lower_resource_attributes(schema)
    assert exc.value.path == ("bad",)


def _deep(levels):
    node = {"type": "string"}
    for i in range(levels):
        node = _obj({f"l{i}": node})
    return node


def test_recursion_limit():
    policy = LoweringPolicy(max_depth=3)
    lower_resource_attributes(_deep(3), policy=policy)
    with pytest.raises(RecursionLimitError) as exc:
        lower_resource_attributes(_deep(4), policy=policy)
    assert exc.value.limit == 3
    assert len(exc.value.path) == 4


def test_recursion_limit_applies_to_element_types():
    node = {"type": "string"}
    for _ in range(5):
        node = {"type": "array", "items": node}
    policy = LoweringPolicy(max_depth=3)
    with pytest.raises(RecursionLimitError):
        lower_resource_attributes(_obj({"nested": node}), policy=policy)


def test_names_are_normalized():
    schema = _obj({"displayName": {"type": "string"}, "HTTPPort": {"type": "integer"}}, required=["displayName"])
    attrs = lower_resource_attributes(schema)
    assert [a.name for a in attrs] == ["display_name", "http_port"]
    # Required matching uses the declared property name.
    assert attrs[0].computed_optional_required is REQ


def test_names_kept_verbatim_without_normalization():
    schema = _obj({"displayName": {"type": "string"}})
    [attr] = lower_resource_attributes(schema, policy=LoweringPolicy(normalize_names=False))
    assert attr.name == "displayName"


def test_name_collision():
    schema = _obj({"fooBar": {"type": "string"}, "foo_bar": {"type": "string"}})
    with pytest.raises(NameCollisionError) as exc:
        lower_resource_attributes(schema)
    assert exc.value.name == "foo_bar"
    assert exc.value.sources == ["fooBar", "foo_bar"]


def test_fail_fast_by_default():
    schema = _obj({"a": {"type": "object"}, "b": {"type": "array"}})
    with pytest.raises(UnsupportedSchemaError):
        lower_resource_attributes(schema)


def test_collect_errors_reports_every_failure():
    schema = _obj(
        {
            "a": {"type": "object"},
            "ok": {"type": "string"},
            "nested": _obj({"b": {"type": "array"}, "c": {"type": ["string", "integer"]}}),
        }
    )
    with pytest.raises(MappingErrorGroup) as exc:
        lower_resource_attributes(schema, policy=LoweringPolicy(collect_errors=True))
    errors = exc.value.flatten()
    assert [e.dotted_path for e in errors] == ["a", "nested.b", "nested.c"]
    assert isinstance(errors[2], SchemaError)
    assert "nested.b" in str(exc.value)


def test_overrides_force_computability_sensitivity_and_description():
    schema = _obj({"id": {"type": "string"}, "creds": _obj({"token": {"type": "string"}})})
    policy = LoweringPolicy(
        overrides={
            "id": AttributeOverride(
                computed_optional_required=ComputedOptionalRequired.COMPUTED,
                description="server assigned",
            ),
            "creds.token": AttributeOverride(sensitive=True),
        }
    )
    attrs = _by_name(lower_resource_attributes(schema, policy=policy))
    assert attrs["id"].computed_optional_required is ComputedOptionalRequired.COMPUTED
    assert attrs["id"].string.description == "server assigned"
    token = attrs["creds"].single_nested.attributes[0]
    assert token.string.sensitive is True


def test_computed_override_cascades_to_children():
    schema = _obj({"status": _obj({"phase": {"type": "string"}, "ready": {"type": "boolean"}})})
    policy = LoweringPolicy(
        overrides={"status": AttributeOverride(computed_optional_required=ComputedOptionalRequired.COMPUTED)}
    )
    [status] = lower_data_source_attributes(schema, policy=policy)
    assert status.computed_optional_required is ComputedOptionalRequired.COMPUTED
    assert all(
        a.computed_optional_required is ComputedOptionalRequired.COMPUTED
        for a in status.single_nested.attributes
    )


def test_sensitive_override_on_non_string_is_ignored(caplog):
    schema = _obj({"port": {"type": "integer"}})
    policy = LoweringPolicy(overrides={"port": AttributeOverride(sensitive=True)})
    with caplog.at_level(logging.WARNING, logger="oas_mapper.mapping.lowering"):
        [port] = lower_resource_attributes(schema, policy=policy)
    assert port.variant_name == "int64"
    assert "only string attributes can be sensitive" in caplog.text


def test_unused_override_is_reported(caplog):
    schema = _obj({"a": {"type": "string"}})
    policy = LoweringPolicy(overrides={"missing.path": AttributeOverride(sensitive=True)})
    with caplog.at_level(logging.WARNING, logger="oas_mapper.mapping.lowering"):
        lower_resource_attributes(schema, policy=policy)
    assert "missing.path" in caplog.text


def test_single_nested_entry_points():
    schema = _obj({"size": {"type": "integer"}}, required=["size"], description="machine spec")
    resource = lower_single_nested_resource("spec", schema, REQ)
    assert resource.name == "spec"
    assert resource.single_nested.computed_optional_required is REQ
    assert resource.single_nested.description == "machine spec"
    assert resource.single_nested.attributes[0].computed_optional_required is REQ

    data_source = lower_single_nested_data_source("spec", schema, CO)
    assert data_source.single_nested.computed_optional_required is CO
    assert data_source.single_nested.attributes == resource.single_nested.attributes


def test_single_nested_entry_rejects_non_objects():
    with pytest.raises(UnsupportedSchemaError) as exc:
        lower_single_nested_resource("spec", {"type": "string"}, CO)
    assert exc.value.dotted_path == "spec"
