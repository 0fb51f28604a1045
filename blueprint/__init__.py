"""
Blueprint - plugin core of a code-scaffolding tool.

Decides whether plugin dependencies are satisfiable, the order plugins are
activated in, and how plugin generators compose into one build result.
"""

__version__ = "1.0.0"

from blueprint.config.schema import ConfigSchemaValidator
from blueprint.generator.registry import GeneratorRegistry
from blueprint.plugin.base import Plugin
from blueprint.plugin.load_order import LoadOrderScheduler
from blueprint.plugin.manager import PluginManager
from blueprint.plugin.resolver import DependencyGraphResolver
from blueprint.plugin.version import satisfies

__all__ = [
    "__version__",
    "ConfigSchemaValidator",
    "GeneratorRegistry",
    "Plugin",
    "LoadOrderScheduler",
    "PluginManager",
    "DependencyGraphResolver",
    "satisfies",
]
