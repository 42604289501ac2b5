"""File-based attribute overrides.

Overrides force the computability, sensitivity or description of individual
attributes, keyed by dotted attribute path (``nested_map_prop.pw``). The file
is a JSON object::

    {
      "id": {"computed_optional_required": "computed"},
      "credentials.token": {"sensitive": true}
    }

The document is validated with a pydantic `TypeAdapter`; malformed content
raises `pydantic.ValidationError` and a missing file raises
`FileNotFoundError`, both left to the caller.
"""
from __future__ import annotations

import logging
from typing import Dict

from pydantic import TypeAdapter

from .mapping.policy import AttributeOverride

logger = logging.getLogger(__name__)

_OVERRIDES_ADAPTER = TypeAdapter(Dict[str, AttributeOverride])


def parse_overrides(raw: str) -> Dict[str, AttributeOverride]:
    """Validate a JSON override document."""
    return _OVERRIDES_ADAPTER.validate_json(raw)


def load_overrides(path: str) -> Dict[str, AttributeOverride]:
    """Load and validate the override file at ``path``.

    Args:
        path: Path to the JSON override document

    Returns:
        Mapping of dotted attribute path to AttributeOverride
    """
    with open(path, "r", encoding="utf-8") as f:
        overrides = parse_overrides(f.read())
    logger.info("Loaded %d attribute override(s) from %s", len(overrides), path)
    return overrides


__all__ = ["load_overrides", "parse_overrides"]
