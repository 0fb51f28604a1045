"""
Configuration Schema System.

This module provides schema declaration and validation for plugin configurations.

Key features:
- JSON-schema flavoured field definitions (type, lengths, ranges, enum, pattern)
- Array item and nested object validation
- Custom predicates
- Every violation reported in one failure
- Default values applied after validation
- Fluent SchemaBuilder

Example usage:
    schema = (
        ConfigSchemaValidator.schema()
        .string("table", required=True, minLength=1)
        .integer("retention_days", default=30, minimum=1)
        .enum("driver", ["database", "file"], default="database")
        .build()
    )

    validator = ConfigSchemaValidator()
    validator.register_schema("auditing", schema)
    config = validator.validate("auditing", {"table": "audits"})
"""

import copy
import math
import re
from collections.abc import Callable
from typing import Any


class SchemaError(Exception):
    """Base exception for schema-related errors."""

    pass


class SchemaValidationFailure(SchemaError):
    """Raised when a configuration violates its schema. Carries every error."""

    def __init__(self, subject: str, errors: list[str]):
        self.subject = subject
        self.errors = list(errors)
        super().__init__(
            f"Plugin '{subject}' configuration validation failed:\n"
            + "\n".join(self.errors)
        )


_TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "string": lambda v: isinstance(v, str),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
    "array": lambda v: isinstance(v, (list, tuple)),
    "object": lambda v: isinstance(v, dict),
    "null": lambda v: v is None,
}

_TYPE_ALIASES = {"int": "integer", "float": "number", "bool": "boolean"}


def _is_object_schema(schema: dict[str, Any]) -> bool:
    return schema.get("type") == "object" or isinstance(schema.get("required"), list)


def normalize_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize a schema into object form.

    Plugins may declare a flat field map ({"field": {"type": ...}}); it is
    wrapped as {"type": "object", "properties": ..., "required": [...]}, where
    fields flagged with "required": True are collected. A mapping is taken
    as an object schema when it declares "type": "object" or a list of
    required names. Nested object fields are normalized the same way.

    Args:
        schema: Object schema or flat field map

    Returns:
        Object schema
    """
    if not schema:
        return schema
    if not _is_object_schema(schema):
        return _normalize_properties(schema, {"type": "object"})
    if "properties" not in schema:
        return schema
    return _normalize_properties(schema["properties"], schema)


def _normalize_properties(
    fields: dict[str, Any], schema: dict[str, Any]
) -> dict[str, Any]:
    properties = {}
    required = list(schema.get("required") or [])
    for name, field_schema in fields.items():
        field_schema = dict(field_schema)
        flag = field_schema.get("required")
        if isinstance(flag, bool):
            del field_schema["required"]
            if flag and name not in required:
                required.append(name)
        if field_schema.get("type") == "object" and "properties" in field_schema:
            field_schema = _normalize_properties(field_schema["properties"], field_schema)
        properties[name] = field_schema
    return {**schema, "type": "object", "properties": properties, "required": required}


def check_type(value: Any, type_name: str) -> bool:
    """
    Check a value against a schema type name.

    Unknown type names accept any value.
    """
    type_name = _TYPE_ALIASES.get(type_name, type_name)
    check = _TYPE_CHECKS.get(type_name)
    return True if check is None else check(value)


def validate_object(
    schema: dict[str, Any], config: dict[str, Any], prefix: str = ""
) -> list[str]:
    """
    Validate a configuration object against an object schema.

    Args:
        schema: Object schema
        config: Configuration to validate
        prefix: Field path prefix for nested objects

    Returns:
        List of error messages (empty if valid)
    """
    errors: list[str] = []
    properties = schema.get("properties")
    if properties is None:
        return errors

    for name in schema.get("required", []):
        if config.get(name) is None:
            errors.append(f"Required field '{prefix}{name}' is missing")

    for name, field_schema in properties.items():
        if config.get(name) is None:
            continue
        errors.extend(validate_field(f"{prefix}{name}", config[name], field_schema))

    return errors


def validate_field(field: str, value: Any, field_schema: dict[str, Any]) -> list[str]:
    """
    Validate a single field value.

    Args:
        field: Field path used in messages
        value: Value to check
        field_schema: Field schema

    Returns:
        List of error messages (empty if valid)
    """
    errors: list[str] = []

    # A wrong type makes the remaining checks meaningless
    type_name = field_schema.get("type")
    if type_name is not None and not check_type(value, type_name):
        return [f"Field '{field}' must be of type '{type_name}'"]

    if isinstance(value, str):
        _validate_string(field, value, field_schema, errors)
    elif isinstance(value, (list, tuple)):
        _validate_array(field, value, field_schema, errors)
    elif isinstance(value, dict):
        errors.extend(validate_object(field_schema, value, prefix=f"{field}."))
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        _validate_numeric(field, value, field_schema, errors)

    if "enum" in field_schema and value not in field_schema["enum"]:
        allowed = ", ".join(str(v) for v in field_schema["enum"])
        errors.append(f"Field '{field}' must be one of: {allowed}")

    if "pattern" in field_schema and isinstance(value, str):
        try:
            matched = re.search(field_schema["pattern"], value)
        except re.error as e:
            errors.append(f"Field '{field}' has an invalid pattern: {e}")
        else:
            if not matched:
                errors.append(f"Field '{field}' does not match required pattern")

    predicate = field_schema.get("validate")
    if callable(predicate):
        try:
            result = predicate(value)
        except Exception as e:
            result = str(e)
        if result is not True:
            message = "invalid value" if result is False or result is None else result
            errors.append(f"Field '{field}' validation failed: {message}")

    return errors


def _validate_string(
    field: str, value: str, field_schema: dict[str, Any], errors: list[str]
) -> None:
    min_length = field_schema.get("minLength")
    max_length = field_schema.get("maxLength")
    if min_length is not None and len(value) < min_length:
        errors.append(f"Field '{field}' must be at least {min_length} characters long")
    if max_length is not None and len(value) > max_length:
        errors.append(f"Field '{field}' must not exceed {max_length} characters")


def _validate_array(
    field: str, value: list[Any], field_schema: dict[str, Any], errors: list[str]
) -> None:
    min_items = field_schema.get("minItems")
    max_items = field_schema.get("maxItems")
    if min_items is not None and len(value) < min_items:
        errors.append(f"Field '{field}' must have at least {min_items} items")
    if max_items is not None and len(value) > max_items:
        errors.append(f"Field '{field}' must not have more than {max_items} items")

    if field_schema.get("uniqueItems"):
        # Items may be unhashable (dicts, lists)
        if any(item in value[:i] for i, item in enumerate(value)):
            errors.append(f"Field '{field}' must contain unique items")

    items_schema = field_schema.get("items")
    if items_schema:
        for index, item in enumerate(value):
            errors.extend(validate_field(f"{field}[{index}]", item, items_schema))


def _validate_numeric(
    field: str, value: int | float, field_schema: dict[str, Any], errors: list[str]
) -> None:
    minimum = field_schema.get("minimum")
    maximum = field_schema.get("maximum")
    multiple_of = field_schema.get("multipleOf")

    if minimum is not None and value < minimum:
        errors.append(f"Field '{field}' must be at least {minimum}")
    if maximum is not None and value > maximum:
        errors.append(f"Field '{field}' must not exceed {maximum}")
    if multiple_of:
        quotient = value / multiple_of
        if not math.isclose(quotient, round(quotient), abs_tol=1e-9):
            errors.append(f"Field '{field}' must be a multiple of {multiple_of}")


def apply_defaults(schema: dict[str, Any], config: dict[str, Any]) -> dict[str, Any]:
    """
    Fill fields absent from config with their declared defaults.

    Args:
        schema: Object schema
        config: Configuration (not modified)

    Returns:
        New configuration dictionary
    """
    result = dict(config)
    for name, field_schema in schema.get("properties", {}).items():
        if result.get(name) is None and "default" in field_schema:
            result[name] = copy.deepcopy(field_schema["default"])
    return result


def defaults_for(schema: dict[str, Any]) -> dict[str, Any]:
    """
    Generate a default configuration from a schema.

    Args:
        schema: Object schema or flat field map

    Returns:
        A dictionary with default values for every field that declares one
    """
    return apply_defaults(normalize_schema(schema), {})


class ConfigSchemaValidator:
    """Validates plugin configurations against registered schemas."""

    def __init__(self):
        self._schemas: dict[str, dict[str, Any]] = {}

    def register_schema(self, plugin_name: str, schema: dict[str, Any]) -> None:
        """
        Register a configuration schema for a plugin.

        Args:
            plugin_name: Name of the plugin
            schema: Object schema or flat field map
        """
        self._schemas[plugin_name] = normalize_schema(schema)

    def get_schema(self, plugin_name: str) -> dict[str, Any] | None:
        return self._schemas.get(plugin_name)

    def has_schema(self, plugin_name: str) -> bool:
        return plugin_name in self._schemas

    def get_schemas(self) -> dict[str, dict[str, Any]]:
        return dict(self._schemas)

    def validate(self, plugin_name: str, config: dict[str, Any]) -> dict[str, Any]:
        """
        Validate plugin configuration against its schema.

        Args:
            plugin_name: Name of the plugin
            config: Configuration to validate (not modified)

        Returns:
            Configuration with defaults applied; unchanged if no schema is
            registered

        Raises:
            SchemaValidationFailure: With every violation found
        """
        schema = self._schemas.get(plugin_name)
        if schema is None:
            return config

        errors = validate_object(schema, config)
        if errors:
            raise SchemaValidationFailure(plugin_name, errors)

        return apply_defaults(schema, config)

    @staticmethod
    def schema() -> "SchemaBuilder":
        """Create a schema builder."""
        return SchemaBuilder()


class SchemaBuilder:
    """
    Helper class for building configuration schemas.

    Each field method accepts `required` plus any schema keyword
    (default, minimum, maxLength, pattern, validate, ...).
    """

    def __init__(self):
        self._schema: dict[str, Any] = {
            "type": "object",
            "properties": {},
            "required": [],
        }

    def _add(self, name: str, base: dict[str, Any], required: bool, options: dict) -> "SchemaBuilder":
        self._schema["properties"][name] = {**base, **options}
        if required and name not in self._schema["required"]:
            self._schema["required"].append(name)
        return self

    def string(self, name: str, required: bool = False, **options: Any) -> "SchemaBuilder":
        return self._add(name, {"type": "string"}, required, options)

    def integer(self, name: str, required: bool = False, **options: Any) -> "SchemaBuilder":
        return self._add(name, {"type": "integer"}, required, options)

    def number(self, name: str, required: bool = False, **options: Any) -> "SchemaBuilder":
        return self._add(name, {"type": "number"}, required, options)

    def boolean(self, name: str, required: bool = False, **options: Any) -> "SchemaBuilder":
        return self._add(name, {"type": "boolean"}, required, options)

    def array(self, name: str, required: bool = False, **options: Any) -> "SchemaBuilder":
        return self._add(name, {"type": "array"}, required, options)

    def enum(
        self, name: str, values: list[Any], required: bool = False, **options: Any
    ) -> "SchemaBuilder":
        return self._add(name, {"enum": list(values)}, required, options)

    def build(self) -> dict[str, Any]:
        """Return a copy of the schema built so far."""
        return copy.deepcopy(self._schema)
