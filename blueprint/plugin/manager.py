"""
Plugin Manager.

This module ties discovery, dependency resolution, configuration and
generator registration together.

Key features:
- Manifest discovery through a static factory registry
- Host compatibility check before registration
- Validated per-plugin configuration
- Fail-fast activation: resolution and config errors raise before any hook runs
- Generator registration for every plugin that loaded
"""

import logging
from collections.abc import Mapping
from typing import Any

from blueprint.config.schema import ConfigSchemaValidator, SchemaValidationFailure
from blueprint.config.settings import Settings
from blueprint.config.toml_handler import generate_toml_from_schema
from blueprint.generator.base import PluginGenerator
from blueprint.generator.composite import GenerationResult
from blueprint.generator.registry import GeneratorRegistry
from blueprint.generator.types import GeneratorOutput
from blueprint.plugin.base import Plugin
from blueprint.plugin.discovery import PluginDiscovery, PluginFactories
from blueprint.plugin.errors import MissingDependency, PluginRegistrationError
from blueprint.plugin.load_order import LoadOrderScheduler, LoadResult
from blueprint.plugin.resolver import DependencyNode


class PluginManager:
    """
    Plugin lifecycle manager.

    Plugins are registered (directly or through discovery), then activated
    once: load order is computed, configuration validated, hooks run and
    generators registered.
    """

    def __init__(
        self,
        discovery: PluginDiscovery | None = None,
        factories: PluginFactories | None = None,
        scheduler: LoadOrderScheduler | None = None,
        generator_registry: GeneratorRegistry | None = None,
        config_validator: ConfigSchemaValidator | None = None,
        host_version: str = "1.0.0",
        logger: logging.Logger | None = None,
    ):
        self._logger = logger or logging.getLogger(__name__)
        self.discovery = discovery or PluginDiscovery(logger=self._logger)
        self.factories = factories or PluginFactories()
        self.scheduler = scheduler or LoadOrderScheduler(logger=self._logger)
        self.generator_registry = generator_registry or GeneratorRegistry(
            logger=self._logger
        )
        self.config_validator = config_validator or ConfigSchemaValidator()
        self.host_version = host_version

        self._plugins: dict[str, Plugin] = {}
        self._configs: dict[str, dict[str, Any]] = {}
        self._priorities: dict[str, int] = {}
        self._generators_registered: set[str] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        factories: PluginFactories | None = None,
        logger: logging.Logger | None = None,
    ) -> "PluginManager":
        """
        Create a manager from host settings.

        Plugin paths feed discovery; priorities and configuration are applied
        when the named plugins register and activate.
        """
        manager = cls(
            discovery=PluginDiscovery(settings.plugin_paths, logger=logger),
            factories=factories,
            host_version=settings.host_version,
            logger=logger,
        )
        manager._priorities.update(settings.priorities)
        for name, config in settings.plugin_config.items():
            manager._configs[name] = dict(config)
        return manager

    # Registration

    def register_plugin(self, plugin: Plugin, priority: int | None = None) -> bool:
        """
        Register a plugin.

        Args:
            plugin: Plugin instance
            priority: Load priority; defaults to the configured priority or 0

        Returns:
            True if registered, False if a plugin with the name already was
        """
        name = plugin.name
        if name in self._plugins:
            self._logger.warning(f"Plugin '{name}' is already registered, skipping.")
            return False

        if plugin.config_schema:
            self.register_config_schema(name, plugin.config_schema)

        if priority is None:
            priority = self._priorities.get(name, 0)

        self._plugins[name] = plugin
        self.scheduler.add_plugin(plugin, priority)
        self._logger.info(f"Plugin '{name}' registered successfully.")
        return True

    def unregister_plugin(self, name: str) -> bool:
        """
        Remove a plugin, its generators and its configuration.

        Returns:
            True if removed, False if not registered

        Raises:
            DependentsStillLoaded: If loaded plugins depend on it
        """
        if name not in self._plugins:
            return False

        self.scheduler.unload_plugin(name)
        self.scheduler.remove_plugin(name)
        self.generator_registry.unregister_plugin(name)
        self._generators_registered.discard(name)
        self._configs.pop(name, None)
        del self._plugins[name]
        self._logger.info(f"Plugin '{name}' unregistered.")
        return True

    def get_plugins(self) -> dict[str, Plugin]:
        return dict(self._plugins)

    def get_plugin(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    def has_plugin(self, name: str) -> bool:
        return name in self._plugins

    def discover_plugins(self) -> list[str]:
        """
        Discover, construct and register plugins from manifests.

        A manifest that cannot be turned into a compatible, correctly
        configured plugin is logged and skipped.

        Returns:
            Names of newly registered plugins
        """
        registered = []

        for manifest in self.discovery.discover():
            try:
                plugin = self.factories.create(manifest)
            except PluginRegistrationError as e:
                self._logger.error(f"Failed to load plugin from manifest: {e}")
                continue

            if self.has_plugin(plugin.name):
                self._logger.warning(
                    f"Plugin '{plugin.name}' is already registered, skipping."
                )
                continue

            if not plugin.is_compatible(self.host_version):
                self._logger.warning(
                    f"Plugin '{plugin.name}' is not compatible with host version "
                    f"{self.host_version}."
                )
                continue

            if plugin.config_schema:
                self.register_config_schema(plugin.name, plugin.config_schema)

            if manifest.config:
                config = {**manifest.config, **self._configs.get(plugin.name, {})}
                try:
                    self.set_plugin_config(plugin.name, config)
                except SchemaValidationFailure:
                    continue

            if self.register_plugin(plugin):
                registered.append(plugin.name)

        return registered

    # Configuration

    def get_plugin_config(self, name: str) -> dict[str, Any]:
        return dict(self._configs.get(name, {}))

    def set_plugin_config(self, name: str, config: dict[str, Any]) -> None:
        """
        Validate and store a plugin's configuration.

        Raises:
            SchemaValidationFailure: If the configuration violates the schema
        """
        try:
            validated = self.config_validator.validate(name, config)
        except SchemaValidationFailure as e:
            self._logger.error(f"Plugin '{name}' configuration validation failed: {e}")
            raise

        self._configs[name] = dict(validated)

    def register_config_schema(self, name: str, schema: dict[str, Any]) -> None:
        self.config_validator.register_schema(name, schema)

    def config_template(self, name: str) -> str:
        """
        Render a commented TOML template of a plugin's configuration.

        Returns:
            TOML text; an empty table if the plugin has no schema
        """
        schema = self.config_validator.get_schema(name) or {}
        return generate_toml_from_schema(name, schema, self.get_plugin_config(name))

    # Activation

    def activate(self) -> LoadResult:
        """
        Activate registered plugins.

        Calling again activates only plugins registered since.

        Returns:
            LoadResult of the load pass

        Raises:
            DependencyResolutionError: If dependencies are unmet or cyclic
            SchemaValidationFailure: If any plugin's configuration is invalid
        """
        load_order = self.scheduler.calculate_load_order()

        self._validate_configs([plugin.name for plugin in load_order])

        result = self.scheduler.load_plugins()

        for name in result.loaded:
            if name not in self._generators_registered:
                self._register_generators(self._plugins[name])

        return result

    def _validate_configs(self, names: list[str]) -> None:
        errors = []
        failed = []
        validated = {}

        for name in names:
            try:
                validated[name] = self.config_validator.validate(
                    name, self._configs.get(name, {})
                )
            except SchemaValidationFailure as e:
                failed.append(name)
                errors.extend(f"{name}: {error}" for error in e.errors)

        if errors:
            failure = SchemaValidationFailure(", ".join(failed), errors)
            self._logger.error(str(failure))
            raise failure

        for name, config in validated.items():
            self._configs[name] = dict(config)

    def _register_generators(self, plugin: Plugin) -> None:
        generators = plugin.get_generators()
        config = self.get_plugin_config(plugin.name)
        for generator in generators:
            if isinstance(generator, PluginGenerator) and config:
                generator.set_config(config)

        self.generator_registry.register_plugin_generators(plugin, generators)
        self._generators_registered.add(plugin.name)
        for generator in generators:
            self._logger.info(
                f"Registered generator '{generator.name}' from plugin '{plugin.name}'."
            )

    # Generation

    def generate(self, tree: Mapping[str, Any]) -> GeneratorOutput:
        return self.generator_registry.generate(tree)

    def run(self, tree: Mapping[str, Any]) -> GenerationResult:
        return self.generator_registry.run(tree)

    # Introspection

    def get_plugin_load_order(self) -> list[str]:
        return self.scheduler.get_load_order_names()

    def get_plugin_dependency_tree(self, name: str) -> dict[str, DependencyNode]:
        return self.scheduler.resolver.get_dependency_tree(name)

    def are_plugin_dependencies_satisfied(self, name: str) -> bool:
        return self.scheduler.resolver.are_dependencies_satisfied(name)

    def get_plugin_missing_dependencies(self, name: str) -> list[MissingDependency]:
        return self.scheduler.resolver.get_missing_dependencies(name)

    def get_stats(self) -> dict:
        """Get plugin statistics."""
        return {
            "total_plugins": len(self._plugins),
            "loaded_plugins": len(self.scheduler.get_loaded_plugins()),
            "plugin_names": list(self._plugins),
            "load_order": self.get_plugin_load_order(),
            "generator_stats": self.generator_registry.get_stats(),
        }
