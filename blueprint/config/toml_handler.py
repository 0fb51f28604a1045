"""
TOML File I/O Handler.

This module provides TOML parsing and writing with comment preservation.

Key features:
- Parse TOML files using tomllib (Python 3.11+)
- Write TOML files using tomlkit (preserves comments and formatting)
- Generate commented plugin configuration templates from schemas
"""

import tomllib
from pathlib import Path
from typing import Any

import tomlkit

from blueprint.config.schema import normalize_schema


class TOMLError(Exception):
    """Base exception for TOML-related errors."""

    pass


def read_toml(file_path: Path) -> dict[str, Any]:
    """
    Read and parse a TOML file.

    Args:
        file_path: Path to the TOML file

    Returns:
        Parsed TOML data as dictionary

    Raises:
        TOMLError: If file cannot be read or parsed
    """
    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise TOMLError(f"TOML file not found: {file_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise TOMLError(f"Failed to parse TOML file {file_path}: {e}") from e
    except OSError as e:
        raise TOMLError(f"Failed to read TOML file {file_path}: {e}") from e


def write_toml(file_path: Path, data: dict[str, Any]) -> None:
    """
    Write data to a TOML file using tomlkit.

    Args:
        file_path: Path to the TOML file
        data: Data to write (a plain dict or a tomlkit document)

    Raises:
        TOMLError: If file cannot be written
    """
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            tomlkit.dump(data, f)
    except (OSError, TypeError, ValueError) as e:
        raise TOMLError(f"Failed to write TOML file {file_path}: {e}") from e


def _constraint_comment(field_schema: dict[str, Any]) -> str | None:
    constraints = []
    for key in ("minimum", "maximum", "minLength", "maxLength", "minItems", "maxItems"):
        if key in field_schema:
            constraints.append(f"{key}: {field_schema[key]}")
    if "enum" in field_schema:
        constraints.append(f"choices: {field_schema['enum']}")
    if "pattern" in field_schema:
        constraints.append(f"pattern: {field_schema['pattern']}")
    return ", ".join(constraints) if constraints else None


def generate_toml_from_schema(
    plugin_name: str, schema: dict[str, Any], config_data: dict[str, Any]
) -> str:
    """
    Generate TOML content from schema with descriptive comments.

    Fields without a value or a default are written as comments, since TOML
    has no null.

    Args:
        plugin_name: Name of the plugin (used as section header)
        schema: Object schema or flat field map
        config_data: Configuration data (field_name -> value)

    Returns:
        TOML string with comments
    """
    schema = normalize_schema(schema)
    required = set(schema.get("required", []))

    doc = tomlkit.document()
    doc.add(tomlkit.comment(f"Configuration for {plugin_name}"))
    doc.add(tomlkit.nl())

    plugin_table = tomlkit.table()

    for field_name, field_schema in schema.get("properties", {}).items():
        if field_schema.get("description"):
            plugin_table.add(tomlkit.comment(field_schema["description"]))

        constraints = _constraint_comment(field_schema)
        if constraints:
            plugin_table.add(tomlkit.comment(f"Constraints: {constraints}"))

        value = config_data.get(field_name, field_schema.get("default"))
        if value is None:
            marker = "required" if field_name in required else "optional"
            plugin_table.add(tomlkit.comment(f"{field_name} = ... ({marker})"))
        else:
            plugin_table.add(field_name, value)
        plugin_table.add(tomlkit.nl())

    doc.add(plugin_name, plugin_table)

    return tomlkit.dumps(doc)


def write_config_template(
    file_path: Path,
    plugin_name: str,
    schema: dict[str, Any],
    config_data: dict[str, Any] | None = None,
) -> None:
    """
    Write a commented configuration template for a plugin.

    Raises:
        TOMLError: If file cannot be written
    """
    content = generate_toml_from_schema(plugin_name, schema, config_data or {})
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise TOMLError(f"Failed to write TOML file {file_path}: {e}") from e
