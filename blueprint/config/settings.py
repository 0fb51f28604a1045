"""
Host Settings.

Reads the [plugins] section of the host's TOML settings file: where to look
for plugins, the host version plugins are checked against, per-plugin load
priorities and per-plugin configuration.

Example file:
    [plugins]
    paths = ["plugins"]
    host_version = "1.0.0"

    [plugins.priorities]
    auditing = 200

    [plugins.config.auditing]
    generate_rewind = false
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from blueprint.config.toml_handler import TOMLError, read_toml, write_toml

DEFAULT_SETTINGS_FILE = Path("blueprint.toml")
DEFAULT_HOST_VERSION = "1.0.0"


class SettingsError(Exception):
    """Raised when the settings file is malformed."""

    pass


@dataclass
class Settings:
    """
    Plugin-related host settings.

    Attributes:
        plugin_paths: Directories scanned for plugin manifests
        host_version: Version passed to Plugin.is_compatible()
        priorities: Plugin name -> load priority
        plugin_config: Plugin name -> configuration
    """

    plugin_paths: list[Path] = field(default_factory=list)
    host_version: str = DEFAULT_HOST_VERSION
    priorities: dict[str, int] = field(default_factory=dict)
    plugin_config: dict[str, dict[str, Any]] = field(default_factory=dict)

    def priority_for(self, plugin_name: str) -> int:
        return self.priorities.get(plugin_name, 0)

    def config_for(self, plugin_name: str) -> dict[str, Any]:
        return dict(self.plugin_config.get(plugin_name, {}))


def load_settings(file_path: Path = DEFAULT_SETTINGS_FILE) -> Settings:
    """
    Load settings from a TOML file.

    Relative plugin paths are resolved against the settings file's directory.

    Args:
        file_path: Path to the settings file

    Returns:
        Settings (defaults if the file does not exist)

    Raises:
        SettingsError: If the file cannot be parsed or has invalid values
    """
    if not file_path.exists():
        return Settings()

    try:
        data = read_toml(file_path)
    except TOMLError as e:
        raise SettingsError(str(e)) from e

    section = data.get("plugins", {})
    if not isinstance(section, dict):
        raise SettingsError("[plugins] must be a table")

    paths = section.get("paths", [])
    if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
        raise SettingsError("plugins.paths must be a list of strings")

    host_version = section.get("host_version", DEFAULT_HOST_VERSION)
    if not isinstance(host_version, str):
        raise SettingsError("plugins.host_version must be a string")

    priorities = section.get("priorities", {})
    if not isinstance(priorities, dict):
        raise SettingsError("[plugins.priorities] must be a table")
    for name, priority in priorities.items():
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise SettingsError(f"Priority for plugin '{name}' must be an integer")

    plugin_config = section.get("config", {})
    if not isinstance(plugin_config, dict) or not all(
        isinstance(cfg, dict) for cfg in plugin_config.values()
    ):
        raise SettingsError("[plugins.config] must contain one table per plugin")

    base_dir = file_path.parent
    return Settings(
        plugin_paths=[base_dir / p for p in paths],
        host_version=host_version,
        priorities=dict(priorities),
        plugin_config={name: dict(cfg) for name, cfg in plugin_config.items()},
    )


def save_settings(file_path: Path, settings: Settings) -> None:
    """
    Write settings back to a TOML file.

    Plugin paths are written relative to the file's directory where possible.

    Raises:
        TOMLError: If file cannot be written
    """
    base_dir = file_path.parent
    paths = []
    for path in settings.plugin_paths:
        try:
            paths.append(str(path.relative_to(base_dir)))
        except ValueError:
            paths.append(str(path))

    write_toml(
        file_path,
        {
            "plugins": {
                "paths": paths,
                "host_version": settings.host_version,
                "priorities": dict(settings.priorities),
                "config": {k: dict(v) for k, v in settings.plugin_config.items()},
            }
        },
    )
