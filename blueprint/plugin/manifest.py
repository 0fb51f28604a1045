"""
Plugin Manifest System.

This module provides manifest parsing and validation for plugins.

Key features:
- blueprint.json parsing
- [tool.blueprint.plugin] tables in pyproject.toml
- Required-field validation before any plugin object is constructed
- Dependency identifiers classified at parse time
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from blueprint.plugin.dependency import Dependency, parse_dependencies

MANIFEST_FILE = "blueprint.json"
PYPROJECT_FILE = "pyproject.toml"

REQUIRED_FIELDS = ("name", "version", "class", "description")


class ManifestError(Exception):
    """Base exception for manifest-related errors."""

    pass


class ValidationError(ManifestError):
    """Raised when manifest validation fails."""

    pass


@dataclass
class Manifest:
    """
    Represents a plugin manifest.

    Attributes:
        name: Plugin name (unique identifier)
        version: Plugin version
        entry_point: Factory reference (the manifest's "class" field)
        description: Plugin description
        author: Plugin author
        dependencies: Parsed dependency declarations, in declaration order
        config: Plugin configuration object
        path: Plugin directory, if discovered on disk
        source: File the manifest was read from
        raw_data: Raw manifest data
    """

    name: str
    version: str
    entry_point: str
    description: str
    author: str = ""
    dependencies: list[Dependency] = field(default_factory=list)
    config: dict[str, Any] = field(default_factory=dict)
    path: Path | None = None
    source: str = MANIFEST_FILE
    raw_data: dict[str, Any] = field(default_factory=dict)

    @property
    def dependency_map(self) -> dict[str, str]:
        """Dependencies as declared: identifier -> constraint."""
        return {dep.raw: dep.constraint for dep in self.dependencies}


def manifest_from_dict(
    data: dict[str, Any], path: Path | None = None, source: str = MANIFEST_FILE
) -> Manifest:
    """
    Build a Manifest from already-decoded data.

    Args:
        data: Manifest data
        path: Plugin directory
        source: File the data came from

    Returns:
        Manifest object

    Raises:
        ValidationError: If manifest is invalid
    """
    validate_manifest_structure(data)

    return Manifest(
        name=data["name"],
        version=data["version"],
        entry_point=data["class"],
        description=data["description"],
        author=data.get("author", ""),
        dependencies=parse_dependencies(data.get("dependencies", {})),
        config=dict(data.get("config", {})),
        path=path,
        source=source,
        raw_data=data,
    )


def parse_manifest(manifest_path: Path) -> Manifest:
    """
    Parse a blueprint.json file.

    Args:
        manifest_path: Path to blueprint.json

    Returns:
        Manifest object

    Raises:
        ManifestError: If file cannot be read or parsed
        ValidationError: If manifest is invalid
    """
    try:
        with open(manifest_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest file not found: {manifest_path}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Failed to parse manifest JSON: {e}") from e
    except Exception as e:
        raise ManifestError(f"Failed to read manifest file: {e}") from e

    if not isinstance(data, dict):
        raise ValidationError("Manifest must be a JSON object")

    return manifest_from_dict(data, path=manifest_path.parent, source=MANIFEST_FILE)


def parse_pyproject_manifest(pyproject_path: Path) -> Manifest | None:
    """
    Parse the [tool.blueprint.plugin] table of a pyproject.toml.

    Fields missing from the table are taken from [project] (name, version,
    description, first author).

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Manifest object, or None if the project does not declare a plugin

    Raises:
        ManifestError: If file cannot be read or parsed
        ValidationError: If manifest is invalid
    """
    from blueprint.config.toml_handler import TOMLError, read_toml

    try:
        data = read_toml(pyproject_path)
    except TOMLError as e:
        raise ManifestError(str(e)) from e

    plugin_table = data.get("tool", {}).get("blueprint", {}).get("plugin")
    if plugin_table is None:
        return None

    project = data.get("project", {})
    manifest_data: dict[str, Any] = {
        "name": project.get("name"),
        "version": project.get("version"),
        "description": project.get("description"),
        "author": _format_author(project.get("authors", [])),
    }
    manifest_data.update(plugin_table)
    manifest_data = {k: v for k, v in manifest_data.items() if v is not None}

    return manifest_from_dict(
        manifest_data, path=pyproject_path.parent, source=PYPROJECT_FILE
    )


def _format_author(authors: list[dict[str, str]]) -> str | None:
    if not authors:
        return None
    author = authors[0]
    name = author.get("name", "Unknown")
    email = f" <{author['email']}>" if author.get("email") else ""
    return name + email


def validate_manifest_structure(data: dict[str, Any]) -> None:
    """
    Validate manifest structure and required fields.

    Args:
        data: Parsed manifest data

    Raises:
        ValidationError: If manifest structure is invalid
    """
    missing = [f for f in REQUIRED_FIELDS if not data.get(f)]
    if missing:
        raise ValidationError(f"Missing required field: {', '.join(missing)}")

    # Validate name (alphanumeric + hyphens/underscores)
    name = data["name"]
    if not isinstance(name, str) or not re.match(r"^[a-z0-9][a-z0-9_-]*$", name):
        raise ValidationError(
            f"Invalid plugin name: {name}. "
            f"Must be lowercase alphanumeric with hyphens or underscores only."
        )

    version = data["version"]
    if not isinstance(version, str) or not re.match(r"^\d+\.\d+\.\d+", version):
        raise ValidationError(
            f"Invalid version: {version}. Must be semantic version (e.g., '1.0.0')"
        )

    if not isinstance(data["class"], str):
        raise ValidationError(f"Invalid class reference: {data['class']!r}")

    if not isinstance(data["description"], str):
        raise ValidationError("'description' field must be a string")

    if "author" in data and not isinstance(data["author"], str):
        raise ValidationError("'author' field must be a string")

    if "dependencies" in data:
        if not isinstance(data["dependencies"], dict):
            raise ValidationError("'dependencies' field must be a dictionary")
        for dep_name, constraint in data["dependencies"].items():
            if not isinstance(dep_name, str):
                raise ValidationError(f"Dependency name must be string: {dep_name}")
            if not isinstance(constraint, str):
                raise ValidationError(
                    f"Dependency constraint must be string: {constraint}"
                )

    if "config" in data and not isinstance(data["config"], dict):
        raise ValidationError("'config' field must be an object")
