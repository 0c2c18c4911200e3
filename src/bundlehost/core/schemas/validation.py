"""Shared schema validation utilities.

Schemas are JSON Schema documents stored as YAML files under
``bundlehost.data/schemas/`` and loaded in a single, consistent way.
"""
from __future__ import annotations

from typing import Any, Dict, List

import jsonschema
from jsonschema import Draft202012Validator

from bundlehost.core.exceptions import ConfigError
from bundlehost.core.utils.io import read_yaml
from bundlehost.data import get_data_path


class SchemaValidationError(ConfigError):
    """Raised when schema validation fails."""


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema dict.

    Automatically appends ``.schema.yaml`` if no extension is present.

    Args:
        schema_name: Relative schema path under the schemas root
            (e.g., "config/config" or "config/config.schema.yaml").

    Raises:
        FileNotFoundError: If schema file doesn't exist.
        ValueError: If schema is not a YAML mapping.
    """
    lowered = schema_name.lower()
    if not (lowered.endswith(".yaml") or lowered.endswith(".yml")):
        schema_name = f"{schema_name}.schema.yaml"

    schema_path = get_data_path("schemas", schema_name)
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_name} (searched {schema_path.parent})")

    schema = read_yaml(schema_path, default=None, raise_on_error=True)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema must be a YAML mapping, got {type(schema).__name__}")
    return schema


def validate_payload(payload: Dict[str, Any], schema_name: str) -> None:
    """Validate a payload against a schema.

    Raises:
        SchemaValidationError: If validation fails.
    """
    schema = load_schema(schema_name)
    try:
        jsonschema.validate(instance=payload, schema=schema)
    except jsonschema.ValidationError as exc:
        location = ".".join(str(p) for p in exc.absolute_path) or "<root>"
        raise SchemaValidationError(
            f"Validation failed against schema '{schema_name}' at {location}: {exc.message}",
            context={"schema": schema_name, "path": location},
        ) from exc


def validate_payload_safe(payload: Dict[str, Any], schema_name: str) -> List[str]:
    """Validate a payload and return list of error messages (empty if valid)."""
    try:
        schema = load_schema(schema_name)
    except Exception as e:
        return [f"Schema loading failed: {e}"]

    validator = Draft202012Validator(schema)
    errors: List[str] = []
    for error in sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path]):
        location = ".".join(str(p) for p in error.absolute_path) or "<root>"
        errors.append(f"{location}: {error.message}")
    return errors


__all__ = ["SchemaValidationError", "load_schema", "validate_payload", "validate_payload_safe"]
