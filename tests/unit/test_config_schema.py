"""
Tests for Configuration Schema Validation.

This test suite covers:
1. Required fields and error aggregation
2. Type checks (including bool vs number)
3. String, numeric and array constraints
4. Enum, pattern and custom predicates
5. Nested objects
6. Defaults, idempotence and input immutability
7. SchemaBuilder and the flat schema shorthand
"""

import copy

import pytest

from blueprint.config.schema import (
    ConfigSchemaValidator,
    SchemaError,
    SchemaValidationFailure,
    defaults_for,
)


@pytest.fixture
def validator():
    return ConfigSchemaValidator()


def errors_for(validator, schema, config):
    validator.register_schema("plugin", schema)
    with pytest.raises(SchemaValidationFailure) as exc_info:
        validator.validate("plugin", config)
    return exc_info.value.errors


def object_schema(properties, required=()):
    return {"type": "object", "properties": properties, "required": list(required)}


class TestRequiredFields:
    """Test required field handling."""

    def test_all_missing_fields_reported(self, validator):
        schema = object_schema(
            {"a": {"type": "string"}, "b": {"type": "string"}}, required=["a", "b"]
        )

        assert errors_for(validator, schema, {}) == [
            "Required field 'a' is missing",
            "Required field 'b' is missing",
        ]

    def test_none_counts_as_missing(self, validator):
        schema = object_schema({"a": {"type": "string"}}, required=["a"])

        assert errors_for(validator, schema, {"a": None}) == [
            "Required field 'a' is missing"
        ]

    def test_failure_message(self, validator):
        validator.register_schema("auditing", object_schema({}, required=["table"]))

        with pytest.raises(SchemaError, match="Plugin 'auditing' configuration validation failed"):
            validator.validate("auditing", {})

    def test_no_schema_passes_through(self, validator):
        config = {"anything": 1}
        assert validator.validate("unknown", config) == config


class TestFieldChecks:
    """Test per-field constraint checks."""

    def test_type_mismatch(self, validator):
        schema = object_schema({"count": {"type": "integer"}})

        assert errors_for(validator, schema, {"count": "3"}) == [
            "Field 'count' must be of type 'integer'"
        ]

    def test_bool_is_not_a_number(self, validator):
        schema = object_schema({"n": {"type": "number"}, "i": {"type": "integer"}})

        assert errors_for(validator, schema, {"n": True, "i": False}) == [
            "Field 'n' must be of type 'number'",
            "Field 'i' must be of type 'integer'",
        ]

    def test_type_aliases(self, validator):
        validator.register_schema(
            "plugin",
            object_schema(
                {"i": {"type": "int"}, "f": {"type": "float"}, "b": {"type": "bool"}}
            ),
        )

        assert validator.validate("plugin", {"i": 1, "f": 1.5, "b": True}) == {
            "i": 1,
            "f": 1.5,
            "b": True,
        }

    def test_string_length(self, validator):
        schema = object_schema({"s": {"type": "string", "minLength": 2, "maxLength": 4}})

        assert errors_for(validator, schema, {"s": "a"}) == [
            "Field 's' must be at least 2 characters long"
        ]
        assert errors_for(validator, schema, {"s": "abcde"}) == [
            "Field 's' must not exceed 4 characters"
        ]

    def test_numeric_range_and_multiple(self, validator):
        schema = object_schema(
            {"n": {"type": "number", "minimum": 0, "maximum": 10, "multipleOf": 2.5}}
        )

        assert errors_for(validator, schema, {"n": -1}) == [
            "Field 'n' must be at least 0",
            "Field 'n' must be a multiple of 2.5",
        ]
        assert errors_for(validator, schema, {"n": 12.5}) == [
            "Field 'n' must not exceed 10"
        ]
        assert validator.validate("plugin", {"n": 7.5}) == {"n": 7.5}

    def test_array_constraints(self, validator):
        schema = object_schema(
            {
                "tags": {
                    "type": "array",
                    "minItems": 1,
                    "maxItems": 3,
                    "uniqueItems": True,
                    "items": {"type": "string"},
                }
            }
        )

        assert errors_for(validator, schema, {"tags": []}) == [
            "Field 'tags' must have at least 1 items"
        ]
        assert errors_for(validator, schema, {"tags": ["a", "a", 3]}) == [
            "Field 'tags' must contain unique items",
            "Field 'tags[2]' must be of type 'string'",
        ]
        assert errors_for(validator, schema, {"tags": ["a", "b", "c", "d"]}) == [
            "Field 'tags' must not have more than 3 items"
        ]

    def test_enum(self, validator):
        schema = object_schema({"driver": {"enum": ["database", "file"]}})

        assert errors_for(validator, schema, {"driver": "redis"}) == [
            "Field 'driver' must be one of: database, file"
        ]

    def test_pattern_is_searched(self, validator):
        schema = object_schema({"table": {"type": "string", "pattern": "^[a-z_]+$"}})

        assert errors_for(validator, schema, {"table": "Audits"}) == [
            "Field 'table' does not match required pattern"
        ]
        assert validator.validate("plugin", {"table": "audits"}) == {"table": "audits"}

    def test_invalid_pattern_is_reported(self, validator):
        schema = object_schema({"table": {"type": "string", "pattern": "[unclosed"}})

        [error] = errors_for(validator, schema, {"table": "audits"})

        assert error.startswith("Field 'table' has an invalid pattern:")

    def test_custom_predicate(self, validator):
        def even(value):
            return True if value % 2 == 0 else "must be even"

        schema = object_schema({"n": {"type": "integer", "validate": even}})

        assert errors_for(validator, schema, {"n": 3}) == [
            "Field 'n' validation failed: must be even"
        ]
        assert validator.validate("plugin", {"n": 4}) == {"n": 4}

    def test_predicate_exception_becomes_error(self, validator):
        def explode(value):
            raise ValueError("cannot check")

        schema = object_schema({"n": {"validate": explode}})

        assert errors_for(validator, schema, {"n": 1}) == [
            "Field 'n' validation failed: cannot check"
        ]

    def test_nested_object(self, validator):
        schema = object_schema(
            {
                "git": {
                    "type": "object",
                    "properties": {"branch": {"type": "string"}},
                    "required": ["remote"],
                }
            }
        )

        assert errors_for(validator, schema, {"git": {"branch": 1}}) == [
            "Required field 'git.remote' is missing",
            "Field 'git.branch' must be of type 'string'",
        ]

    def test_errors_across_fields_aggregate(self, validator):
        schema = object_schema(
            {"a": {"type": "string"}, "b": {"type": "integer", "minimum": 5}},
            required=["c"],
        )

        errors = errors_for(validator, schema, {"a": 1, "b": 2})

        assert errors == [
            "Required field 'c' is missing",
            "Field 'a' must be of type 'string'",
            "Field 'b' must be at least 5",
        ]


class TestDefaults:
    """Test default application."""

    def test_defaults_applied(self, validator):
        schema = object_schema(
            {
                "table": {"type": "string", "default": "audits"},
                "retention": {"type": "integer", "default": 30},
            }
        )
        validator.register_schema("plugin", schema)

        assert validator.validate("plugin", {"retention": 7}) == {
            "retention": 7,
            "table": "audits",
        }

    def test_idempotent_and_input_untouched(self, validator):
        """Validating twice should give the same result and not mutate input."""
        schema = object_schema(
            {
                "events": {"type": "array", "default": ["created"]},
                "enabled": {"type": "boolean", "default": True},
            }
        )
        validator.register_schema("plugin", schema)
        config = {"enabled": False}
        original = copy.deepcopy(config)

        first = validator.validate("plugin", config)
        second = validator.validate("plugin", config)

        assert first == second == {"enabled": False, "events": ["created"]}
        assert config == original
        assert validator.validate("plugin", first) == first

    def test_default_values_are_copied(self, validator):
        validator.register_schema(
            "plugin", object_schema({"events": {"type": "array", "default": []}})
        )

        validator.validate("plugin", {})["events"].append("x")

        assert validator.validate("plugin", {}) == {"events": []}

    def test_defaults_for(self):
        schema = {
            "table": {"type": "string", "default": "audits"},
            "token": {"type": "string", "required": True},
        }

        assert defaults_for(schema) == {"table": "audits"}


class TestSchemaForms:
    """Test SchemaBuilder and flat schemas."""

    def test_builder(self, validator):
        schema = (
            ConfigSchemaValidator.schema()
            .string("table", required=True, minLength=1)
            .integer("retention_days", default=30, minimum=1)
            .number("ratio", maximum=1.0)
            .boolean("enabled", default=True)
            .array("events", items={"type": "string"})
            .enum("driver", ["database", "file"], default="database")
            .build()
        )

        assert schema["required"] == ["table"]
        assert schema["properties"]["driver"] == {
            "enum": ["database", "file"],
            "default": "database",
        }

        validator.register_schema("auditing", schema)
        assert validator.validate("auditing", {"table": "audits"}) == {
            "table": "audits",
            "retention_days": 30,
            "enabled": True,
            "driver": "database",
        }

    def test_flat_schema_is_normalized(self, validator):
        validator.register_schema(
            "plugin",
            {
                "table": {"type": "string", "required": True},
                "limit": {"type": "integer", "default": 10},
            },
        )

        schema = validator.get_schema("plugin")

        assert schema["required"] == ["table"]
        assert "required" not in schema["properties"]["table"]
        assert errors_for(validator, validator.get_schema("plugin"), {}) == [
            "Required field 'table' is missing"
        ]

    @pytest.mark.parametrize("field", ["required", "properties"])
    def test_flat_field_named_like_schema_keyword(self, validator, field):
        validator.register_schema("plugin", {field: {"type": "string", "required": True}})

        assert validator.get_schema("plugin")["required"] == [field]
        assert errors_for(validator, validator.get_schema("plugin"), {field: 1}) == [
            f"Field '{field}' must be of type 'string'"
        ]

    def test_nested_required_flags_are_enforced(self, validator):
        validator.register_schema(
            "plugin",
            {
                "git": {
                    "type": "object",
                    "properties": {
                        "remote": {"type": "string", "required": True},
                        "branch": {"type": "string"},
                    },
                }
            },
        )

        schema = validator.get_schema("plugin")

        assert schema["properties"]["git"]["required"] == ["remote"]
        assert errors_for(validator, schema, {"git": {"branch": "main"}}) == [
            "Required field 'git.remote' is missing"
        ]

    def test_registry_queries(self, validator):
        validator.register_schema("a", object_schema({}))

        assert validator.has_schema("a")
        assert not validator.has_schema("b")
        assert list(validator.get_schemas()) == ["a"]
