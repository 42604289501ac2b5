"""Explicit lowering configuration threaded through every recursive call.

`LoweringPolicy` bundles every tunable of a lowering run: the default
computability applied to non-required properties, path-keyed overrides, the
recursion ceiling, batch vs. fail-fast error handling, and name
normalization. Nothing here is global state; callers build one policy and
pass it to the entry points in `mapping.lowering`.

`OutputTarget` selects the attribute family being produced. The targets share
one traversal and differ only in `TargetRules`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional

from pydantic import BaseModel, ConfigDict

from ..models.spec import ComputedOptionalRequired

if TYPE_CHECKING:  # pragma: no cover
    from ..config import Settings

__all__ = [
    "AttributeOverride",
    "LoweringPolicy",
    "OutputTarget",
    "TargetRules",
    "rules_for",
    "DEFAULT_MAX_DEPTH",
]

DEFAULT_MAX_DEPTH = 64


class OutputTarget(str, Enum):
    RESOURCE = "resource"
    DATA_SOURCE = "data_source"


@dataclass(frozen=True)
class TargetRules:
    """Leaf-construction rules that differ between output targets."""

    # Static defaults are plan-time behavior; data sources never plan.
    allow_static_defaults: bool


_TARGET_RULES = {
    OutputTarget.RESOURCE: TargetRules(allow_static_defaults=True),
    OutputTarget.DATA_SOURCE: TargetRules(allow_static_defaults=False),
}


def rules_for(target: OutputTarget) -> TargetRules:
    return _TARGET_RULES[OutputTarget(target)]


class AttributeOverride(BaseModel):
    """Forced facts for the attribute at one dotted path."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    computed_optional_required: Optional[ComputedOptionalRequired] = None
    sensitive: Optional[bool] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class LoweringPolicy:
    default_computability: ComputedOptionalRequired = ComputedOptionalRequired.COMPUTED_OPTIONAL
    overrides: Dict[str, AttributeOverride] = field(default_factory=dict)
    max_depth: int = DEFAULT_MAX_DEPTH
    collect_errors: bool = False
    normalize_names: bool = True
    # Lower every array as a set, not only those declaring uniqueItems.
    prefer_sets: bool = False

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError("max_depth must be >= 1")

    def override_for(self, dotted_path: str) -> Optional[AttributeOverride]:
        return self.overrides.get(dotted_path)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "LoweringPolicy":
        """Build a policy from application settings, loading the override file if set."""
        from ..overrides import load_overrides

        overrides = load_overrides(settings.OVERRIDES_FILE) if settings.OVERRIDES_FILE else {}
        return cls(
            default_computability=ComputedOptionalRequired(settings.DEFAULT_COMPUTABILITY),
            overrides=overrides,
            max_depth=settings.MAX_SCHEMA_DEPTH,
            collect_errors=settings.COLLECT_ERRORS,
            normalize_names=settings.NORMALIZE_NAMES,
            prefer_sets=settings.PREFER_SETS,
        )
