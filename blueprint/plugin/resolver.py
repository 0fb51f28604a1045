"""
Dependency Graph Resolver.

This module decides whether the registered plugins' dependencies are
satisfiable and produces an order in which every plugin follows its
dependencies.

Key features:
- Implicit graph: edges derived on demand from each plugin's requirements
- Validation pass that collects every violation before failing
- Cycle detection with full chains
- Depth-first topological resolution (declaration order among siblings)
- Non-raising introspection for schedulers and UIs
"""

from dataclasses import dataclass, field

from blueprint.plugin.base import Plugin
from blueprint.plugin.dependency import Dependency, DependencyKind, Environment
from blueprint.plugin.errors import (
    CircularDependency,
    MissingDependency,
    UnsatisfiedDependency,
)
from blueprint.plugin.manifest import ValidationError
from blueprint.plugin.version import parse_version_constraint, satisfies


@dataclass
class Resolution:
    """
    Outcome of a resolution attempt.

    Attributes:
        order: Plugins in dependency order (empty unless ok)
        unsatisfied: Every unmet dependency found
        cycles: Every dependency cycle found, as closed name chains
    """

    order: list[Plugin] = field(default_factory=list)
    unsatisfied: list[MissingDependency] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.unsatisfied and not self.cycles

    def unwrap(self) -> list[Plugin]:
        """
        Return the order or raise the aggregated failure.

        Raises:
            UnsatisfiedDependency: If any dependency is unmet
            CircularDependency: If the only failures are cycles
        """
        if self.unsatisfied:
            raise UnsatisfiedDependency(self.unsatisfied, self.cycles)
        if self.cycles:
            raise CircularDependency(cycles=self.cycles)
        return list(self.order)


@dataclass
class DependencyNode:
    """One declared dependency in a dependency tree."""

    dependency: str
    constraint: str
    satisfied: bool
    reason: str | None = None
    children: dict[str, "DependencyNode"] = field(default_factory=dict)


class DependencyGraphResolver:
    """
    Resolves plugin dependencies into a load order.

    Plugins are kept in registration order; that order seeds the depth-first
    traversal, so it decides the relative position of unrelated plugins.
    """

    def __init__(self, environment: Environment | None = None):
        """
        Initialize DependencyGraphResolver.

        Args:
            environment: Probe for runtime/extension/package dependencies
        """
        self._environment = environment or Environment()
        self._plugins: dict[str, Plugin] = {}
        self._load_order: list[str] = []

    @property
    def plugins(self) -> dict[str, Plugin]:
        return dict(self._plugins)

    def add_plugin(self, plugin: Plugin) -> None:
        self._plugins[plugin.name] = plugin
        self._load_order = []

    def remove_plugin(self, name: str) -> None:
        self._plugins.pop(name, None)
        self._load_order = []

    def get_plugin(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    def has_plugin(self, name: str) -> bool:
        return name in self._plugins

    def get_load_order(self) -> list[str]:
        """Names from the last successful resolve()."""
        return list(self._load_order)

    # Resolution

    def check(self) -> Resolution:
        """
        Validate the registered set and compute a load order.

        Returns:
            Resolution holding either an order or every failure found
        """
        self._load_order = []

        unsatisfied = []
        for plugin in self._plugins.values():
            unsatisfied.extend(self._missing_for(plugin))

        cycles = self.get_circular_dependencies()

        if unsatisfied or cycles:
            return Resolution(unsatisfied=unsatisfied, cycles=cycles)

        order: list[str] = []
        resolved: set[str] = set()
        for name in self._plugins:
            self._resolve_into(name, order, resolved, [])

        self._load_order = order
        return Resolution(order=[self._plugins[name] for name in order])

    def resolve(self) -> list[Plugin]:
        """
        Resolve dependencies and return plugins in load order.

        Returns:
            Plugins, each after all of its plugin dependencies

        Raises:
            UnsatisfiedDependency: If any declared dependency is unmet
            CircularDependency: If plugins form a cycle
        """
        return self.check().unwrap()

    def _resolve_into(
        self, name: str, order: list[str], resolved: set[str], resolving: list[str]
    ) -> None:
        if name in resolved:
            return

        # Revisit while resolving means a cycle slipped past detection
        if name in resolving:
            start = resolving.index(name)
            raise CircularDependency(cycles=[resolving[start:] + [name]])

        resolving.append(name)
        for dep_name in self._plugin_edges(self._plugins[name]):
            self._resolve_into(dep_name, order, resolved, resolving)
        resolving.pop()

        order.append(name)
        resolved.add(name)

    def _plugin_edges(self, plugin: Plugin) -> list[str]:
        """Registered plugin dependencies of a plugin, in declaration order."""
        return [
            dep.target
            for dep in plugin.requirements
            if dep.is_plugin and dep.target in self._plugins
        ]

    # Satisfaction

    def are_dependencies_satisfied(self, name: str) -> bool:
        """
        Check if all dependencies of a plugin are satisfied.

        Args:
            name: Plugin name

        Returns:
            True if satisfied; False if any is unmet or the plugin is unknown
        """
        if name not in self._plugins:
            return False
        return not self._missing_for(self._plugins[name])

    def get_missing_dependencies(self, name: str) -> list[MissingDependency]:
        """
        Get unmet dependencies for a plugin.

        Args:
            name: Plugin name

        Returns:
            Unmet dependencies with reasons (empty for unknown plugins)
        """
        if name not in self._plugins:
            return []
        return self._missing_for(self._plugins[name])

    def _missing_for(self, plugin: Plugin) -> list[MissingDependency]:
        missing = []
        for dep in plugin.requirements:
            reason = self._failure_reason(dep)
            if reason is not None:
                missing.append(
                    MissingDependency(plugin.name, dep.raw, dep.constraint, reason)
                )
        return missing

    def _failure_reason(self, dep: Dependency) -> str | None:
        """
        Explain why a dependency is unmet.

        Returns:
            Reason string, or None if the dependency is satisfied
        """
        try:
            parse_version_constraint(dep.constraint)
        except ValidationError:
            return f"invalid version constraint '{dep.constraint}'"

        if dep.kind is DependencyKind.PLUGIN:
            target = self._plugins.get(dep.target)
            if target is None:
                return f"plugin '{dep.target}' not found"
            return self._version_reason("version", target.version, dep.constraint)

        if dep.kind is DependencyKind.RUNTIME:
            return self._version_reason(
                "python version", self._environment.runtime_version(), dep.constraint
            )

        if dep.kind is DependencyKind.EXTENSION:
            if not self._environment.has_extension(dep.target):
                return f"native extension '{dep.target}' not available"
            return None

        installed = self._environment.package_version(dep.target)
        if installed is None:
            return f"package '{dep.target}' not installed"
        return self._version_reason("version", installed, dep.constraint)

    @staticmethod
    def _version_reason(label: str, found: str, constraint: str) -> str | None:
        if satisfies(found, constraint):
            return None
        return f"{label} mismatch: found {found}, required {constraint}"

    # Cycles

    def has_circular_dependencies(self) -> bool:
        return bool(self.get_circular_dependencies())

    def get_circular_dependencies(self) -> list[list[str]]:
        """
        Get circular dependency chains.

        Each chain is closed (first name repeated at the end) and rotated to
        start at its smallest name, so a cycle is reported once.

        Returns:
            List of chains, e.g. [["a", "b", "a"]]
        """
        chains: list[list[str]] = []
        seen: set[tuple[str, ...]] = set()
        done: set[str] = set()

        def visit(name: str, path: list[str]) -> None:
            path.append(name)
            for dep_name in self._plugin_edges(self._plugins[name]):
                if dep_name in path:
                    cycle = path[path.index(dep_name):]
                    pivot = cycle.index(min(cycle))
                    canonical = tuple(cycle[pivot:] + cycle[:pivot])
                    if canonical not in seen:
                        seen.add(canonical)
                        chains.append(list(canonical) + [canonical[0]])
                elif dep_name not in done:
                    visit(dep_name, path)
            path.pop()
            done.add(name)

        for name in self._plugins:
            if name not in done:
                visit(name, [])

        return chains

    # Traversal

    def get_dependency_tree(self, name: str) -> dict[str, DependencyNode]:
        """
        Get the forward dependency tree of a plugin.

        Args:
            name: Plugin name

        Returns:
            Dependency identifier -> node, with satisfied plugin dependencies
            expanded recursively
        """
        return self._tree(name, [])

    def _tree(self, name: str, path: list[str]) -> dict[str, DependencyNode]:
        plugin = self._plugins.get(name)
        if plugin is None or name in path:
            return {}

        tree = {}
        for dep in plugin.requirements:
            reason = self._failure_reason(dep)
            node = DependencyNode(
                dependency=dep.raw,
                constraint=dep.constraint,
                satisfied=reason is None,
                reason=reason,
            )
            if reason is None and dep.is_plugin:
                node.children = self._tree(dep.target, path + [name])
            tree[dep.raw] = node
        return tree

    def get_reverse_dependencies(self, name: str) -> list[str]:
        """
        Get plugins that declare a dependency on a plugin.

        Args:
            name: Plugin name

        Returns:
            Names of dependent plugins, in registration order
        """
        return [
            plugin.name
            for plugin in self._plugins.values()
            if any(dep.is_plugin and dep.target == name for dep in plugin.requirements)
        ]

    def get_stats(self) -> dict:
        """Get dependency resolution statistics."""
        requirements = {name: p.requirements for name, p in self._plugins.items()}
        return {
            "total_plugins": len(self._plugins),
            "total_dependencies": sum(len(deps) for deps in requirements.values()),
            "plugins_with_dependencies": sum(1 for deps in requirements.values() if deps),
            "load_order_resolved": bool(self._load_order),
            "circular_dependencies": self.has_circular_dependencies(),
            "load_order": list(self._load_order),
        }
