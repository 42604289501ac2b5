"""Internal mapping subpackage for decomposed schema lowering logic.

This package contains the core implementation of OpenAPI schema node to
provider attribute lowering, decomposed into focused, single-responsibility
modules. All functions within this package are pure (no file, network or
process I/O) and deterministic.

The public API remains in the top-level `mapper.py` facade. Callers should
not import directly from this package unless accessing internal helpers for
testing purposes.

Modules:
    facade: Read-only normalized accessors over a schema node
    classifier: Schema node → single AttributeKind decision
    computability: Required / optional / computed status resolution
    element_types: Element types of plain list, set and map attributes
    naming: Property name → attribute identifier normalization
    policy: Explicit lowering configuration and output target rules
    lowering: Shared recursive traversal for resource and data source output

Design Invariants:
    - Output attribute order equals property declaration order
    - Identical input and policy produce structurally identical output
    - Required status always wins over overrides and computed defaults
    - Only string attributes are ever marked sensitive
"""
from __future__ import annotations

from . import classifier as classifier  # noqa: F401
from . import computability as computability  # noqa: F401
from . import facade as facade  # noqa: F401

__all__ = ["classifier", "computability", "facade"]
