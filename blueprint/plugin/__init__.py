"""
Blueprint Plugin System - dependency resolution and load ordering.

This module handles:
- Plugin manifest parsing and discovery
- Version constraint evaluation
- Dependency validation and cycle detection
- Priority-aware load ordering
- Plugin activation
"""

from blueprint.plugin.base import Plugin
from blueprint.plugin.dependency import Dependency, DependencyKind, Environment
from blueprint.plugin.discovery import PluginDiscovery, PluginFactories
from blueprint.plugin.errors import (
    CircularDependency,
    DependencyNotLoaded,
    DependencyResolutionError,
    DependentsStillLoaded,
    HookExecutionFailure,
    MissingDependency,
    PluginError,
    PluginRegistrationError,
    UnsatisfiedDependency,
)
from blueprint.plugin.load_order import LoadOrderScheduler, LoadResult
from blueprint.plugin.manager import PluginManager
from blueprint.plugin.manifest import Manifest, ManifestError, ValidationError
from blueprint.plugin.resolver import DependencyGraphResolver, Resolution
from blueprint.plugin.version import VersionConstraint, satisfies

__all__ = [
    "Plugin",
    "Dependency",
    "DependencyKind",
    "Environment",
    "PluginDiscovery",
    "PluginFactories",
    "CircularDependency",
    "DependencyNotLoaded",
    "DependencyResolutionError",
    "DependentsStillLoaded",
    "HookExecutionFailure",
    "MissingDependency",
    "PluginError",
    "PluginRegistrationError",
    "UnsatisfiedDependency",
    "LoadOrderScheduler",
    "LoadResult",
    "PluginManager",
    "Manifest",
    "ManifestError",
    "ValidationError",
    "DependencyGraphResolver",
    "Resolution",
    "VersionConstraint",
    "satisfies",
]
