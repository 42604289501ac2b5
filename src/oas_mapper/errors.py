"""Exception hierarchy for schema lowering failures.

Every error carries the dotted attribute path from the document root so the
caller can report the precise location of a failure. Errors are terminal for
the subtree being built; the input is static data so nothing is retried.

Exceptions:
    MappingError: Base class (path-qualified message)
    SchemaError: Malformed node (conflicting type tags, misplaced keywords)
    UnsupportedSchemaError: Node shape matches no classification rule
    RecursionLimitError: Nesting exceeds the configured ceiling
    NameCollisionError: Two sibling properties normalize to one attribute name
    MappingErrorGroup: Several errors gathered in batch (collect) mode
"""
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

__all__ = [
    "MappingError",
    "SchemaError",
    "UnsupportedSchemaError",
    "RecursionLimitError",
    "NameCollisionError",
    "MappingErrorGroup",
    "format_path",
]

ROOT_LABEL = "<root>"


def format_path(path: Sequence[str]) -> str:
    """Render a path tuple as a dotted string (``<root>`` when empty)."""
    return ".".join(path) if path else ROOT_LABEL


class MappingError(Exception):
    """Base error raised while lowering a schema node."""

    def __init__(self, message: str, *, path: Sequence[str] = ()) -> None:
        self.reason = message
        self.path: Tuple[str, ...] = tuple(path)
        super().__init__(f"{format_path(self.path)}: {message}")

    @property
    def dotted_path(self) -> str:
        return format_path(self.path)


class SchemaError(MappingError):
    """The node is malformed for the requested shape."""


class UnsupportedSchemaError(MappingError):
    """No classification rule matches the node."""


class RecursionLimitError(MappingError):
    """Schema nesting is deeper than the configured ceiling."""

    def __init__(self, limit: int, *, path: Sequence[str] = ()) -> None:
        self.limit = limit
        super().__init__(f"schema nesting exceeds maximum depth of {limit}", path=path)


class NameCollisionError(MappingError):
    """Two sibling properties produce the same attribute name."""

    def __init__(self, name: str, sources: Iterable[str], *, path: Sequence[str] = ()) -> None:
        self.name = name
        self.sources: List[str] = list(sources)
        quoted = ", ".join(f"'{s}'" for s in self.sources)
        super().__init__(
            f"properties {quoted} all map to attribute name '{name}'", path=path
        )


class MappingErrorGroup(MappingError):
    """Several independent lowering failures reported together."""

    def __init__(self, errors: Sequence[MappingError], *, path: Sequence[str] = ()) -> None:
        self.errors: List[MappingError] = list(errors)
        lines = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"{len(self.errors)} attribute(s) failed to lower:\n{lines}", path=path)

    def flatten(self) -> List[MappingError]:
        """Return leaf errors, expanding nested groups."""
        out: List[MappingError] = []
        for err in self.errors:
            if isinstance(err, MappingErrorGroup):
                out.extend(err.flatten())
            else:
                out.append(err)
        return out
