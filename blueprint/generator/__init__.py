"""
Blueprint Generators - composition of core and plugin generators.

This module handles:
- Output type declarations
- Plugin generator priorities and run conditions
- Extension of core generators by plugins
- Merging generator outputs into one build result
"""

from blueprint.generator.base import (
    Generator,
    GeneratorError,
    GeneratorExecutionFailure,
    PluginGenerator,
)
from blueprint.generator.composite import CompositeGenerator, GenerationResult
from blueprint.generator.extendable import ExtendableGenerator
from blueprint.generator.registry import GeneratorRegistry
from blueprint.generator.types import GeneratorOutput, OutputType, merge_outputs

__all__ = [
    "Generator",
    "GeneratorError",
    "GeneratorExecutionFailure",
    "PluginGenerator",
    "CompositeGenerator",
    "GenerationResult",
    "ExtendableGenerator",
    "GeneratorRegistry",
    "GeneratorOutput",
    "OutputType",
    "merge_outputs",
]
