"""
Blueprint Configuration System - plugin config schemas and TOML settings.

This module provides:
- Schema declaration and validation for plugin configuration
- Host settings loaded from TOML
- Commented config templates generated from schemas

Example usage:
    from blueprint.config import ConfigSchemaValidator

    validator = ConfigSchemaValidator()
    validator.register_schema("auditing", {
        "table": {"type": "string", "default": "audits"},
        "retention_days": {"type": "integer", "minimum": 1},
    })
    config = validator.validate("auditing", {"retention_days": 30})
"""

from blueprint.config.schema import (
    ConfigSchemaValidator,
    SchemaBuilder,
    SchemaError,
    SchemaValidationFailure,
    defaults_for,
)
from blueprint.config.settings import Settings, SettingsError, load_settings
from blueprint.config.toml_handler import (
    TOMLError,
    generate_toml_from_schema,
    read_toml,
    write_config_template,
    write_toml,
)

__all__ = [
    "ConfigSchemaValidator",
    "SchemaBuilder",
    "SchemaError",
    "SchemaValidationFailure",
    "defaults_for",
    "Settings",
    "SettingsError",
    "load_settings",
    "TOMLError",
    "generate_toml_from_schema",
    "read_toml",
    "write_config_template",
    "write_toml",
]
