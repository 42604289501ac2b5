"""Property name → Terraform attribute identifier normalization.

Terraform attribute names must be lowercase snake_case identifiers. OpenAPI
property names are frequently camelCase or contain punctuation, so each name
is normalized before it becomes an attribute name and sibling collisions are
detected per nesting level.
"""
from __future__ import annotations

import re
from typing import Dict, Iterable, List, Tuple

from ..errors import NameCollisionError, SchemaError

__all__ = ["to_identifier", "assign_names"]

_CAMEL_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_CAMEL_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")
_INVALID = re.compile(r"[^a-z0-9_]+")
_UNDERSCORES = re.compile(r"_+")


def to_identifier(name: str) -> str:
    """Convert a property name to a snake_case identifier.

    Examples:
        ``nestedMapProp`` → ``nested_map_prop``; ``HTTPStatus`` →
        ``http_status``; ``x-rate.limit`` → ``x_rate_limit``.
    """
    out = _CAMEL_ACRONYM.sub(r"\1_\2", name)
    out = _CAMEL_LOWER_UPPER.sub(r"\1_\2", out)
    out = _INVALID.sub("_", out.lower())
    out = _UNDERSCORES.sub("_", out).strip("_")
    return out


def assign_names(
    names: Iterable[str], *, normalize: bool, path: Tuple[str, ...] = ()
) -> List[Tuple[str, str]]:
    """Pair every property name with its attribute name, preserving order.

    Raises:
        NameCollisionError: two properties share one attribute name
        SchemaError: a property name has no identifier characters
    """
    seen: Dict[str, List[str]] = {}
    pairs: List[Tuple[str, str]] = []
    for source in names:
        target = to_identifier(source) if normalize else source
        if not target:
            raise SchemaError(
                f"property name '{source}' normalizes to an empty identifier", path=path
            )
        seen.setdefault(target, []).append(source)
        pairs.append((source, target))
    for target, sources in seen.items():
        if len(sources) > 1:
            raise NameCollisionError(target, sources, path=path)
    return pairs
