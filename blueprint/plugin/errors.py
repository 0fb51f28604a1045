"""
Plugin Error Taxonomy.

Resolution-time errors (unsatisfied dependencies, cycles) are raised before
any plugin is activated. Activation-time errors (hooks) are recorded per
plugin by the scheduler instead of aborting the batch.
"""

from dataclasses import dataclass


class PluginError(Exception):
    """Base exception for plugin-related errors."""

    pass


class PluginRegistrationError(PluginError):
    """Raised when a plugin cannot be constructed or registered."""

    pass


@dataclass(frozen=True)
class MissingDependency:
    """
    An unmet dependency of one plugin.

    Attributes:
        plugin: Name of the declaring plugin
        dependency: Dependency identifier as declared
        constraint: Declared version constraint
        reason: Human-readable explanation
    """

    plugin: str
    dependency: str
    constraint: str
    reason: str

    def __str__(self) -> str:
        return (
            f"Plugin '{self.plugin}' has unmet dependency "
            f"'{self.dependency}' {self.constraint}: {self.reason}"
        )


class DependencyResolutionError(PluginError):
    """
    Raised when the registered plugin set cannot be ordered.

    Carries every violation found, not just the first.
    """

    def __init__(
        self,
        unsatisfied: list[MissingDependency] | None = None,
        cycles: list[list[str]] | None = None,
    ):
        self.unsatisfied = list(unsatisfied or [])
        self.cycles = [list(chain) for chain in cycles or []]

        lines = [str(missing) for missing in self.unsatisfied]
        lines.extend(
            "Circular dependency detected: " + " -> ".join(chain)
            for chain in self.cycles
        )
        super().__init__("Dependency validation failed:\n" + "\n".join(lines))


class UnsatisfiedDependency(DependencyResolutionError):
    """Raised when a dependency is missing or its version does not match."""

    pass


class CircularDependency(DependencyResolutionError):
    """Raised when plugins form a dependency cycle."""

    pass


class DependencyNotLoaded(PluginError):
    """Raised when a plugin is loaded before one of its plugin dependencies."""

    pass


class DependentsStillLoaded(PluginError):
    """Raised when unloading a plugin that loaded plugins still depend on."""

    def __init__(self, plugin: str, dependents: list[str]):
        self.plugin = plugin
        self.dependents = list(dependents)
        super().__init__(
            f"Cannot unload plugin '{plugin}': it is required by loaded plugins: "
            + ", ".join(self.dependents)
        )


class HookExecutionFailure(PluginError):
    """Raised when a plugin's register or boot hook fails."""

    def __init__(self, plugin: str, hook: str, cause: Exception):
        self.plugin = plugin
        self.hook = hook
        self.cause = cause
        super().__init__(f"Plugin '{plugin}' failed during {hook}(): {cause}")
