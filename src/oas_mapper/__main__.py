"""Main CLI entry point for oas-mapper.

This module provides a command-line interface using Typer to run the lowering
engine on a schema stored as JSON:
1.  Loading configuration (environment, `.env`, CLI overrides).
2.  Validating the reference-resolved schema node document.
3.  Lowering it into resource or data source attributes (oas_mapper.mapper).
4.  Writing the attributes in codegen specification JSON shape.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from .config import Settings, get_settings
from .errors import MappingError
from .mapper import attributes_to_spec, lower_with_settings
from .mapping.policy import OutputTarget
from .models.oas import SchemaNode
from .models.spec import ComputedOptionalRequired

# Load .env file if present (before any config access)
_env_file = find_dotenv(usecwd=True)
if _env_file:
    load_dotenv(_env_file)

app = typer.Typer(help="OpenAPI schema to provider attribute lowering CLI")


@app.callback()
def main() -> None:  # pragma: no cover - simple callback
    """oas-mapper CLI.

    Use a subcommand like 'lower' to run a process.
    """
    pass


@app.command(help="Lower a reference-resolved schema node into provider attributes.")
def lower(
    schema_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON file holding one resolved schema node"
    ),
    target: OutputTarget = typer.Option(
        OutputTarget.RESOURCE, help="Attribute family to produce"
    ),
    name: Optional[str] = typer.Option(
        None,
        help="Lower the schema as one single nested attribute with this name instead of sibling attributes",
    ),
    status: ComputedOptionalRequired = typer.Option(
        ComputedOptionalRequired.COMPUTED_OPTIONAL,
        help="Computability of the single nested attribute (only used with --name)",
    ),
    overrides_file: Optional[str] = typer.Option(
        None, help="Path to override JSON (defaults to settings.OVERRIDES_FILE)"
    ),
    max_depth: Optional[int] = typer.Option(
        None, min=1, help="Override MAX_SCHEMA_DEPTH for this run"
    ),
    collect_errors: Optional[bool] = typer.Option(
        None,
        "--collect-errors/--fail-fast",
        help="Report every failing attribute at once. If not specified, uses COLLECT_ERRORS from config/env.",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write JSON here instead of stdout"
    ),
) -> None:
    """Lower one schema document and emit the attribute list as JSON."""
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    logger = logging.getLogger(__name__)

    update: Dict[str, Any] = {}
    if overrides_file is not None:
        update["OVERRIDES_FILE"] = overrides_file
    if max_depth is not None:
        update["MAX_SCHEMA_DEPTH"] = max_depth
    if collect_errors is not None:
        update["COLLECT_ERRORS"] = collect_errors
    try:
        effective = Settings.model_validate({**settings.model_dump(), **update}) if update else settings
    except ValidationError as e:
        typer.echo(f"Invalid options: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        node = SchemaNode.model_validate_json(schema_file.read_text(encoding="utf-8"))
    except ValidationError as e:
        typer.echo(f"Invalid schema document {schema_file}: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        attributes = lower_with_settings(node, target, name=name, status=status, settings=effective)
    except MappingError as e:
        typer.echo(f"Lowering failed: {e}", err=True)
        raise typer.Exit(code=1)
    except (OSError, ValidationError) as e:
        typer.echo(f"Could not load overrides from {effective.OVERRIDES_FILE}: {e}", err=True)
        raise typer.Exit(code=1)

    logger.info("Lowered %s into %d %s attribute(s)", schema_file, len(attributes), target.value)
    payload = json.dumps(attributes_to_spec(attributes), indent=2, ensure_ascii=False)
    if output is not None:
        output.write_text(payload + "\n", encoding="utf-8")
        typer.echo(f"Wrote {len(attributes)} attribute(s) to {output}")
    else:
        typer.echo(payload)


if __name__ == "__main__":  # pragma: no cover
    app()
