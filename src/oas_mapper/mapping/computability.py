"""Required / optional / computed status resolution for child attributes.

OpenAPI has no notion of a provider-computed value, so every property that is
not listed in its parent's ``required`` array falls back to the policy default
(``computed_optional`` unless configured otherwise). Resolution precedence:

1. Required: child name present in the parent's required names (wins over
   any override or computed parent)
2. Override: explicit computability keyed by the child's dotted path
3. Computed parent: children of a fully computed object are computed
4. Policy default
"""
from __future__ import annotations

import logging
from typing import AbstractSet, Optional, Tuple

from ..errors import format_path
from ..models.spec import ComputedOptionalRequired
from .policy import LoweringPolicy

logger = logging.getLogger(__name__)

__all__ = ["resolve_computability"]

_DEFAULT_POLICY = LoweringPolicy()


def resolve_computability(
    required_names: AbstractSet[str],
    child_name: str,
    parent_is_fully_computed: bool = False,
    *,
    path: Tuple[str, ...] = (),
    policy: Optional[LoweringPolicy] = None,
) -> ComputedOptionalRequired:
    """Determine the computability of one child property.

    Args:
        required_names: The parent's declared required property names
        child_name: Property name as declared in the schema
        parent_is_fully_computed: True when the parent attribute is computed
        path: Dotted attribute path of the child (override lookup key)
        policy: Lowering policy (default computability and overrides)

    Returns:
        The resolved ComputedOptionalRequired status
    """
    policy = policy or _DEFAULT_POLICY
    if child_name in required_names:
        return ComputedOptionalRequired.REQUIRED

    dotted = format_path(path)
    override = policy.override_for(dotted)
    if override is not None and override.computed_optional_required is not None:
        logger.debug("computability override applied path=%s value=%s", dotted, override.computed_optional_required.value)
        return override.computed_optional_required

    if parent_is_fully_computed:
        return ComputedOptionalRequired.COMPUTED
    return policy.default_computability
