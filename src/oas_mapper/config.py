"""Application configuration management using Pydantic Settings.

This module defines the `Settings` class, which loads configuration parameters
from environment variables and a `.env` file. It centralizes every tunable of
a lowering run: logging level, recursion ceiling, default computability, error
mode, name normalization and the optional override file.

The `get_settings` function provides a cached, singleton instance of the
configuration. The lowering engine never reads settings directly; callers
turn them into an explicit `LoweringPolicy` via `LoweringPolicy.from_settings`.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict as _SettingsConfigDict

from .models.spec import ComputedOptionalRequired


class Settings(BaseSettings):
    """Defines all application configuration parameters.

    Values come from environment variables or a `.env` file. Enum-like values
    are normalized case-insensitively so ``DEFAULT_COMPUTABILITY=Computed``
    and ``computed`` are equivalent.
    """

    model_config = _SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Python's own stack limit is ~1000 frames and each level costs a few.
    MAX_SCHEMA_DEPTH: int = Field(
        default=64,
        ge=1,
        le=200,
        description="Maximum schema nesting depth before lowering fails with RecursionLimitError",
    )
    DEFAULT_COMPUTABILITY: str = Field(
        default=ComputedOptionalRequired.COMPUTED_OPTIONAL.value,
        description=(
            "Computability for properties not listed in their parent's required names "
            "(computed | computed_optional | optional | required)"
        ),
    )
    COLLECT_ERRORS: bool = Field(
        default=False,
        description="Collect sibling failures and report them together instead of failing fast",
    )
    NORMALIZE_NAMES: bool = Field(
        default=True,
        description="Convert property names to snake_case attribute identifiers",
    )
    PREFER_SETS: bool = Field(
        default=False,
        description="Lower every array as a set (arrays declaring uniqueItems are always sets)",
    )
    OVERRIDES_FILE: Optional[str] = Field(
        default=None,
        description="Path to a JSON file mapping dotted attribute paths to forced overrides",
    )

    @field_validator("DEFAULT_COMPUTABILITY", mode="before")
    @classmethod
    def normalize_computability(cls, v: Any) -> str:
        """Lowercase and validate the default computability value."""
        if isinstance(v, ComputedOptionalRequired):
            return v.value
        value = str(v).strip().lower()
        valid = [c.value for c in ComputedOptionalRequired]
        if value not in valid:
            raise ValueError(f"DEFAULT_COMPUTABILITY must be one of {valid}, got '{v}'")
        return value

    @field_validator("OVERRIDES_FILE", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        """Treat a blank override path as unset."""
        if v is None:
            return None
        if isinstance(v, str):
            trimmed = v.strip()
            return trimmed or None
        return None


@lru_cache(maxsize=1)
def get_settings() -> Settings:  # pragma: no cover - trivial
    """Return a cached, singleton instance of the application settings."""
    return Settings()
