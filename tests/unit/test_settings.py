"""
Tests for TOML Settings and Templates.

This test suite covers:
1. TOML read/write error handling
2. Settings loading (defaults, full file, invalid values)
3. Config template generation from schemas
"""

import tempfile
import tomllib
from pathlib import Path

import pytest

from blueprint.config.settings import (
    Settings,
    SettingsError,
    load_settings,
    save_settings,
)
from blueprint.config.toml_handler import (
    TOMLError,
    generate_toml_from_schema,
    read_toml,
    write_config_template,
    write_toml,
)


class TestTOMLHandler:
    """Test TOML file I/O."""

    def test_read_missing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(TOMLError, match="not found"):
                read_toml(Path(tmpdir) / "missing.toml")

    def test_read_invalid_toml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.toml"
            path.write_text("this is = = not toml", encoding="utf-8")

            with pytest.raises(TOMLError, match="Failed to parse"):
                read_toml(path)

    def test_write_creates_parent_dirs(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "dir" / "out.toml"

            write_toml(path, {"plugins": {"paths": ["plugins"]}})

            assert read_toml(path) == {"plugins": {"paths": ["plugins"]}}


class TestSettings:
    """Test host settings loading."""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "blueprint.toml")

        assert settings == Settings()
        assert settings.host_version == "1.0.0"

    def test_full_file(self, tmp_path):
        path = tmp_path / "blueprint.toml"
        path.write_text(
            """
[plugins]
paths = ["plugins", "vendor/plugins"]
host_version = "2.1.0"

[plugins.priorities]
auditing = 200

[plugins.config.auditing]
generate_rewind = false
table = "audits"
""",
            encoding="utf-8",
        )

        settings = load_settings(path)

        assert settings.plugin_paths == [
            tmp_path / "plugins",
            tmp_path / "vendor" / "plugins",
        ]
        assert settings.host_version == "2.1.0"
        assert settings.priority_for("auditing") == 200
        assert settings.priority_for("other") == 0
        assert settings.config_for("auditing") == {
            "generate_rewind": False,
            "table": "audits",
        }
        assert settings.config_for("other") == {}

    def test_invalid_priority(self, tmp_path):
        path = tmp_path / "blueprint.toml"
        path.write_text('[plugins.priorities]\nauditing = "high"\n', encoding="utf-8")

        with pytest.raises(SettingsError, match="must be an integer"):
            load_settings(path)

    def test_invalid_paths(self, tmp_path):
        path = tmp_path / "blueprint.toml"
        path.write_text('[plugins]\npaths = "plugins"\n', encoding="utf-8")

        with pytest.raises(SettingsError, match="list of strings"):
            load_settings(path)

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / "blueprint.toml"
        path.write_text("[plugins\n", encoding="utf-8")

        with pytest.raises(SettingsError, match="Failed to parse"):
            load_settings(path)

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "blueprint.toml"
        settings = Settings(
            plugin_paths=[tmp_path / "plugins"],
            host_version="1.4.0",
            priorities={"auditing": 5},
            plugin_config={"auditing": {"table": "audits"}},
        )

        save_settings(path, settings)

        assert load_settings(path) == settings
        assert tomllib.loads(path.read_text(encoding="utf-8"))["plugins"]["paths"] == [
            "plugins"
        ]


class TestConfigTemplate:
    """Test TOML generation from schema."""

    SCHEMA = {
        "table": {
            "type": "string",
            "default": "audits",
            "description": "Audit table name",
            "pattern": "^[a-z_]+$",
        },
        "retention_days": {"type": "integer", "minimum": 1, "maximum": 365},
        "token": {"type": "string", "required": True},
    }

    def test_comments_and_values(self):
        content = generate_toml_from_schema("auditing", self.SCHEMA, {"retention_days": 90})

        assert "# Configuration for auditing" in content
        assert "# Audit table name" in content
        assert "# Constraints: minimum: 1, maximum: 365" in content
        assert "# token = ... (required)" in content

        data = tomllib.loads(content)
        assert data == {"auditing": {"table": "audits", "retention_days": 90}}

    def test_write_template(self, tmp_path):
        path = tmp_path / "config" / "auditing.toml"

        write_config_template(path, "auditing", self.SCHEMA)

        assert tomllib.loads(path.read_text(encoding="utf-8")) == {
            "auditing": {"table": "audits"}
        }
