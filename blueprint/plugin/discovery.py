"""
Plugin Discovery.

This module finds plugin manifests on disk and turns them into plugin
instances through a static factory registry.

Key features:
- Scans plugin directories for blueprint.json or pyproject.toml manifests
- Invalid manifests are logged and skipped
- Entry points resolved through registered factories, never by import path
"""

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from blueprint.plugin.base import Plugin
from blueprint.plugin.errors import PluginRegistrationError
from blueprint.plugin.manifest import (
    MANIFEST_FILE,
    PYPROJECT_FILE,
    Manifest,
    ManifestError,
    parse_manifest,
    parse_pyproject_manifest,
)

PluginFactory = Callable[[Manifest], Plugin]


class PluginFactories:
    """
    Maps manifest entry-point references to plugin factories.

    Example:
        factories = PluginFactories()

        @factories.factory("auditing.AuditingPlugin")
        def make_auditing(manifest):
            return AuditingPlugin(manifest)
    """

    def __init__(self):
        self._factories: dict[str, PluginFactory] = {}

    def register(self, ref: str, factory: PluginFactory) -> None:
        """
        Register a factory for an entry-point reference.

        A plugin class can be registered directly; it is called with the
        manifest.

        Raises:
            PluginRegistrationError: If the reference is already registered
        """
        if ref in self._factories:
            raise PluginRegistrationError(f"Factory for '{ref}' already registered")
        self._factories[ref] = factory

    def factory(self, ref: str) -> Callable[[PluginFactory], PluginFactory]:
        """Decorator form of register()."""

        def decorator(func: PluginFactory) -> PluginFactory:
            self.register(ref, func)
            return func

        return decorator

    def has(self, ref: str) -> bool:
        return ref in self._factories

    def refs(self) -> list[str]:
        return list(self._factories)

    def create(self, manifest: Manifest) -> Plugin:
        """
        Create the plugin a manifest describes.

        Args:
            manifest: Validated manifest

        Returns:
            Plugin instance

        Raises:
            PluginRegistrationError: If no factory is registered for the
                manifest's entry point, or the factory fails or returns a
                non-plugin
        """
        factory = self._factories.get(manifest.entry_point)
        if factory is None:
            raise PluginRegistrationError(
                f"Plugin class '{manifest.entry_point}' not found "
                f"for plugin '{manifest.name}'"
            )

        try:
            plugin = factory(manifest)
        except Exception as e:
            raise PluginRegistrationError(
                f"Failed to create plugin '{manifest.name}': {e}"
            ) from e

        if not isinstance(plugin, Plugin):
            raise PluginRegistrationError(
                f"Factory for '{manifest.entry_point}' did not return a Plugin"
            )
        return plugin


class PluginDiscovery:
    """Discovers plugin manifests in a list of directories."""

    def __init__(self, paths: Iterable[Path] = (), logger: logging.Logger | None = None):
        """
        Initialize PluginDiscovery.

        Args:
            paths: Directories whose subdirectories are plugins
            logger: Logger for skipped manifests
        """
        self.paths = [Path(p) for p in paths]
        self._logger = logger or logging.getLogger(__name__)

    def discover(self) -> list[Manifest]:
        """
        Discover plugin manifests in every configured path.

        Returns:
            Manifests in path order, then directory name order
        """
        manifests = []
        for path in self.paths:
            manifests.extend(self.discover_from_directory(path))
        return manifests

    def discover_from_directory(self, directory: Path) -> list[Manifest]:
        """
        Discover plugin manifests in the subdirectories of a directory.

        Args:
            directory: Directory containing plugin directories

        Returns:
            Valid manifests found; missing directories yield []
        """
        if not directory.is_dir():
            return []

        manifests = []
        for plugin_dir in sorted(directory.iterdir()):
            if not plugin_dir.is_dir():
                continue

            try:
                manifest = self.get_manifest(plugin_dir)
            except ManifestError as e:
                self._logger.warning(
                    f"Failed to parse manifest for {plugin_dir.name}: {e}"
                )
                continue

            if manifest is not None:
                manifests.append(manifest)

        return manifests

    def get_manifest(self, plugin_dir: Path) -> Manifest | None:
        """
        Read a plugin directory's manifest.

        blueprint.json takes precedence over pyproject.toml.

        Returns:
            Manifest, or None if the directory holds no plugin manifest

        Raises:
            ManifestError: If a manifest exists but is unreadable or invalid
        """
        manifest_path = plugin_dir / MANIFEST_FILE
        if manifest_path.exists():
            return parse_manifest(manifest_path)

        pyproject_path = plugin_dir / PYPROJECT_FILE
        if pyproject_path.exists():
            return parse_pyproject_manifest(pyproject_path)

        return None
