"""
Plugin Load Order Scheduling.

This module turns the resolver's dependency order into the order plugins
are activated in, and drives activation.

Key features:
- Dependency levels (longest path from a plugin with no plugin dependencies)
- Priority ordering within a level, stable for equal priorities
- Per-plugin failure isolation during loading
- Loaded-state tracking with dependent-aware unloading
"""

import logging
from dataclasses import dataclass, field

from blueprint.plugin.base import Plugin
from blueprint.plugin.errors import (
    DependencyNotLoaded,
    DependencyResolutionError,
    DependentsStillLoaded,
    HookExecutionFailure,
)
from blueprint.plugin.resolver import DependencyGraphResolver


@dataclass
class LoadFailure:
    """A plugin that failed to load, with the error message."""

    plugin: str
    error: str


@dataclass
class LoadResult:
    """
    Outcome of a load pass.

    Attributes:
        loaded: Names of plugins loaded (including ones loaded earlier)
        failed: Plugins whose load failed
        total: Number of plugins in the load order
    """

    loaded: list[str] = field(default_factory=list)
    failed: list[LoadFailure] = field(default_factory=list)
    total: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class BlockedPlugin:
    """A plugin waiting on plugin dependencies that are not loaded yet."""

    plugin: Plugin
    missing_dependencies: list[str]


class LoadOrderScheduler:
    """
    Computes load order and tracks which plugins are loaded.

    Priority only breaks ties between plugins on the same dependency level;
    a dependency always precedes its dependents.
    """

    def __init__(
        self,
        resolver: DependencyGraphResolver | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize LoadOrderScheduler.

        Args:
            resolver: Dependency resolver that owns plugin registration
            logger: Logger for load events (defaults to the module logger)
        """
        self._resolver = resolver or DependencyGraphResolver()
        self._logger = logger or logging.getLogger(__name__)
        self._priorities: dict[str, int] = {}
        self._load_order: list[Plugin] | None = None
        self._loaded: list[Plugin] = []
        self._skip_dependency_check = False

    @property
    def resolver(self) -> DependencyGraphResolver:
        return self._resolver

    def add_plugin(self, plugin: Plugin, priority: int = 0) -> None:
        """
        Add a plugin to the scheduler.

        Args:
            plugin: Plugin to register
            priority: Tie-break weight among independent plugins (higher first)

        A plugin replacing a loaded one of the same name starts out unloaded.
        """
        self._resolver.add_plugin(plugin)
        self._priorities[plugin.name] = priority
        self._loaded = [p for p in self._loaded if p.name != plugin.name]
        self._load_order = None

    def remove_plugin(self, name: str) -> None:
        self._resolver.remove_plugin(name)
        self._priorities.pop(name, None)
        self._loaded = [p for p in self._loaded if p.name != name]
        self._load_order = None

    def get_priority(self, name: str) -> int:
        return self._priorities.get(name, 0)

    # Ordering

    def calculate_load_order(self) -> list[Plugin]:
        """
        Calculate and return the load order.

        Returns:
            Plugins grouped by ascending dependency level, each level sorted by
            descending priority

        Raises:
            DependencyResolutionError: If dependencies are unmet or cyclic
        """
        if self._load_order is not None:
            return list(self._load_order)

        try:
            dependency_order = self._resolver.resolve()
        except DependencyResolutionError as e:
            self._logger.error(f"Failed to calculate plugin load order: {e}")
            raise

        self._load_order = self._apply_priority_sorting(dependency_order)
        self._logger.info(
            f"Plugin load order calculated: {self.get_load_order_names()}"
        )
        return list(self._load_order)

    def get_load_order(self) -> list[Plugin]:
        return list(self._load_order or [])

    def get_load_order_names(self) -> list[str]:
        return [plugin.name for plugin in self._load_order or []]

    def _apply_priority_sorting(self, dependency_order: list[Plugin]) -> list[Plugin]:
        levels: dict[int, list[Plugin]] = {}
        plugin_levels: dict[str, int] = {}

        for plugin in dependency_order:
            level = max(
                (
                    plugin_levels[dep] + 1
                    for dep in plugin.plugin_dependencies
                    if dep in plugin_levels
                ),
                default=0,
            )
            plugin_levels[plugin.name] = level
            levels.setdefault(level, []).append(plugin)

        ordered = []
        for level in sorted(levels):
            # sorted() is stable: equal priorities keep resolver order
            ordered.extend(
                sorted(levels[level], key=lambda p: -self.get_priority(p.name))
            )
        return ordered

    # Loading

    def load_plugins(self) -> LoadResult:
        """
        Load plugins in order.

        A plugin whose hook fails, or whose dependency failed, is reported in
        `failed` and processing continues with the next plugin.

        Returns:
            LoadResult

        Raises:
            DependencyResolutionError: If no valid order exists
        """
        load_order = self.calculate_load_order()
        result = LoadResult(total=len(load_order))

        for plugin in load_order:
            try:
                self._load_plugin(plugin)
            except (DependencyNotLoaded, HookExecutionFailure) as e:
                result.failed.append(LoadFailure(plugin.name, str(e)))
                self._logger.error(f"Failed to load plugin '{plugin.name}': {e}")
                continue

            result.loaded.append(plugin.name)
            self._logger.info(f"Plugin '{plugin.name}' loaded successfully")

        return result

    def _load_plugin(self, plugin: Plugin) -> None:
        if self.is_plugin_loaded(plugin.name):
            return

        if not self._skip_dependency_check:
            missing = self._unloaded_dependencies(plugin)
            if missing:
                raise DependencyNotLoaded(
                    f"Plugin '{plugin.name}' cannot be loaded: "
                    f"dependency '{missing[0]}' is not loaded"
                )

        for hook in ("register", "boot"):
            try:
                getattr(plugin, hook)()
            except Exception as e:
                raise HookExecutionFailure(plugin.name, hook, e) from e

        self._loaded.append(plugin)

    def _unloaded_dependencies(self, plugin: Plugin) -> list[str]:
        return [
            dep for dep in plugin.plugin_dependencies if not self.is_plugin_loaded(dep)
        ]

    def force_load_plugin(self, plugin: Plugin) -> None:
        """
        Load a plugin without checking that its dependencies are loaded.

        Unsafe; intended for recovery tooling.

        Raises:
            HookExecutionFailure: If a hook fails
        """
        original = self._skip_dependency_check
        self._skip_dependency_check = True
        try:
            self._load_plugin(plugin)
        except HookExecutionFailure as e:
            self._logger.error(f"Failed to force-load plugin '{plugin.name}': {e}")
            raise
        finally:
            self._skip_dependency_check = original

        self._logger.warning(
            f"Plugin '{plugin.name}' was force-loaded, skipping dependency validation"
        )

    def unload_plugin(self, name: str) -> bool:
        """
        Remove a plugin from the loaded set.

        Args:
            name: Plugin name

        Returns:
            True if unloaded, False if it was not loaded

        Raises:
            DependentsStillLoaded: If a loaded plugin depends on it
        """
        if not self.is_plugin_loaded(name):
            return False

        dependents = [
            dependent
            for dependent in self._resolver.get_reverse_dependencies(name)
            if self.is_plugin_loaded(dependent)
        ]
        if dependents:
            raise DependentsStillLoaded(name, dependents)

        self._loaded = [p for p in self._loaded if p.name != name]
        self._logger.info(f"Plugin '{name}' unloaded successfully")
        return True

    def reset(self) -> None:
        """Clear loaded state and the cached order; registrations are kept."""
        self._load_order = None
        self._loaded = []

    # Loaded state

    def is_plugin_loaded(self, name: str) -> bool:
        return any(plugin.name == name for plugin in self._loaded)

    def get_loaded_plugins(self) -> list[Plugin]:
        return list(self._loaded)

    def get_loaded_plugin_names(self) -> list[str]:
        return [plugin.name for plugin in self._loaded]

    def are_all_plugins_loaded(self) -> bool:
        load_order = self.calculate_load_order()
        return all(self.is_plugin_loaded(plugin.name) for plugin in load_order)

    def get_loadable_plugins(self) -> list[Plugin]:
        """Plugins not yet loaded whose plugin dependencies are all loaded."""
        return [
            plugin
            for plugin in self.calculate_load_order()
            if not self.is_plugin_loaded(plugin.name)
            and not self._unloaded_dependencies(plugin)
        ]

    def get_blocked_plugins(self) -> list[BlockedPlugin]:
        """Plugins not yet loaded, with the plugin dependencies they wait on."""
        blocked = []
        for plugin in self.calculate_load_order():
            if self.is_plugin_loaded(plugin.name):
                continue
            missing = self._unloaded_dependencies(plugin)
            if missing:
                blocked.append(BlockedPlugin(plugin, missing))
        return blocked

    def get_next_plugin_to_load(self) -> Plugin | None:
        loadable = self.get_loadable_plugins()
        return loadable[0] if loadable else None

    def get_stats(self) -> dict:
        """Get load order statistics."""
        load_order = self.calculate_load_order()
        return {
            "total_plugins": len(load_order),
            "loaded_plugins": len(self._loaded),
            "pending_plugins": len(load_order) - len(self._loaded),
            "loadable_plugins": len(self.get_loadable_plugins()),
            "blocked_plugins": len(self.get_blocked_plugins()),
            "dependency_stats": self._resolver.get_stats(),
            "load_order": self.get_load_order_names(),
            "loaded_plugin_names": self.get_loaded_plugin_names(),
        }
