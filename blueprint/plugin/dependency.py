"""
Plugin Dependency Declarations.

This module turns the string identifiers found in manifests into typed
dependency records and probes the host environment for the non-plugin kinds.

Identifier scheme:
- "blueprint/<name>"  -> another plugin
- "python"            -> host runtime version
- "ext-<module>"      -> native extension module
- anything else       -> installed distribution (external package)
"""

import importlib.metadata
import importlib.util
import platform
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

PLUGIN_PREFIX = "blueprint/"
EXTENSION_PREFIX = "ext-"
RUNTIME_ID = "python"


class DependencyKind(Enum):
    """Dependency kind enumeration."""

    PLUGIN = "plugin"
    RUNTIME = "runtime"
    EXTENSION = "extension"
    PACKAGE = "package"


@dataclass(frozen=True)
class Dependency:
    """
    A single declared dependency.

    Attributes:
        kind: What the identifier refers to
        target: Plugin name, module name or distribution name (empty for runtime)
        constraint: Version constraint expression
        raw: Identifier exactly as declared
    """

    kind: DependencyKind
    target: str
    constraint: str
    raw: str

    @property
    def is_plugin(self) -> bool:
        return self.kind is DependencyKind.PLUGIN

    def __str__(self) -> str:
        return f"{self.raw} {self.constraint}"


def parse_dependency(identifier: str, constraint: str) -> Dependency:
    """
    Classify a dependency identifier.

    Args:
        identifier: Dependency identifier from a manifest
        constraint: Version constraint expression

    Returns:
        Dependency record
    """
    ident = identifier.strip()

    if ident.startswith(PLUGIN_PREFIX):
        return Dependency(
            DependencyKind.PLUGIN, ident[len(PLUGIN_PREFIX):], constraint, identifier
        )
    if ident == RUNTIME_ID:
        return Dependency(DependencyKind.RUNTIME, "", constraint, identifier)
    if ident.startswith(EXTENSION_PREFIX):
        return Dependency(
            DependencyKind.EXTENSION,
            ident[len(EXTENSION_PREFIX):],
            constraint,
            identifier,
        )
    return Dependency(DependencyKind.PACKAGE, ident, constraint, identifier)


def parse_dependencies(dependencies: Mapping[str, str]) -> list[Dependency]:
    """Parse an identifier -> constraint mapping, keeping declaration order."""
    return [parse_dependency(ident, constraint) for ident, constraint in dependencies.items()]


class Environment:
    """
    Probe for host state consulted by non-plugin dependencies.

    Subclass (or pass a stand-in with the same methods) to pin the answers.
    """

    def runtime_version(self) -> str:
        return platform.python_version()

    def has_extension(self, name: str) -> bool:
        try:
            return importlib.util.find_spec(name) is not None
        except (ImportError, ValueError):
            return False

    def package_version(self, name: str) -> str | None:
        try:
            return importlib.metadata.version(name)
        except importlib.metadata.PackageNotFoundError:
            return None
