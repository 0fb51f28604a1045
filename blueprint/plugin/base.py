"""
Plugin Base Class.

Plugins are identified by name and version, declare dependencies as an
identifier -> constraint mapping, and expose register/boot hooks plus the
generators they contribute.
"""

from typing import TYPE_CHECKING, Any

from blueprint.plugin.dependency import Dependency, parse_dependencies
from blueprint.plugin.manifest import Manifest

if TYPE_CHECKING:
    from blueprint.generator.base import PluginGenerator


class Plugin:
    """
    Base class for plugins.

    Identity is declared with class attributes and may be overridden by the
    manifest the plugin was constructed from. Instances are treated as
    immutable once registered.

    Example:
        class AuditingPlugin(Plugin):
            name = "auditing"
            version = "1.2.0"
            dependencies = {"blueprint/core": "^1.0"}

            def boot(self):
                ...
    """

    name: str = ""
    version: str = "1.0.0"
    description: str = ""
    author: str = "Unknown"
    dependencies: dict[str, str] = {}
    config_schema: dict[str, Any] = {}

    def __init__(self, manifest: Manifest | None = None):
        self.manifest = manifest
        if manifest is not None:
            self.name = manifest.name
            self.version = manifest.version
            self.description = manifest.description
            self.author = manifest.author or self.author
            self.dependencies = manifest.dependency_map
        if not self.name:
            self.name = type(self).__name__
        self._requirements = parse_dependencies(self.dependencies)

    @property
    def requirements(self) -> list[Dependency]:
        """Parsed dependencies, in declaration order."""
        return list(self._requirements)

    @property
    def plugin_dependencies(self) -> list[str]:
        """Names of the plugins this plugin depends on."""
        return [dep.target for dep in self._requirements if dep.is_plugin]

    def register(self) -> None:
        """Register plugin services. Runs before boot()."""

    def boot(self) -> None:
        """Boot the plugin. Runs once every dependency is loaded."""

    def get_generators(self) -> list["PluginGenerator"]:
        return []

    def is_compatible(self, host_version: str) -> bool:
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name}@{self.version})"
