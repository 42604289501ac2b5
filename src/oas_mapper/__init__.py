"""Package initialization for oas-mapper.

Having this file allows relative imports (e.g. `from .models import ...`) to
resolve under tooling (mypy/ruff) and matches the CLI usage pattern
`python -m oas_mapper lower` documented in the README.
"""

__all__ = []
