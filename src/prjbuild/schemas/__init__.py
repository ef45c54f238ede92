"""prjbuild JSON Schema definitions and validation utilities.

Schemas:
    - settings.schema.json: configuration file (roots to scan and the
      global, solution and project policy tiers)

Usage:
    from prjbuild.schemas import validate_settings

    with open("prjbuild.json") as f:
        data = json.load(f)
    validate_settings(data)  # Raises jsonschema.ValidationError if invalid
"""

from __future__ import annotations

import json
from functools import cache
from importlib.resources import files
from typing import Any

import jsonschema


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'settings.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("prjbuild.schemas").joinpath(name).read_text()
    result: dict[str, Any] = json.loads(schema_text)
    return result


@cache
def get_settings_schema() -> dict[str, Any]:
    """Get the settings file schema."""
    return _load_schema("settings.schema.json")


def validate_settings(data: dict[str, Any]) -> None:
    """Validate configuration data against the settings schema.

    Args:
        data: Parsed configuration file

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_settings_schema())


__all__ = [
    "get_settings_schema",
    "validate_settings",
]
