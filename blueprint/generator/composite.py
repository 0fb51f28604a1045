"""
Composite Generator.

Runs a set of generators against one tree and merges their outputs.

Key features:
- Core generators run first, in registration order
- Plugin generators follow, higher priority first, registration order on ties
- Plugin generators are skipped when should_run() declines the tree
- A generator that raises or returns a non-mapping is logged and left out
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from blueprint.generator.base import (
    Generator,
    GeneratorExecutionFailure,
    PluginGenerator,
)
from blueprint.generator.types import GeneratorOutput, OutputType, merge_outputs


@dataclass
class GenerationResult:
    """Merged output of a run plus the generators that failed."""

    output: GeneratorOutput = field(default_factory=dict)
    failures: list[GeneratorExecutionFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class _Entry:
    generator: Generator
    registration_order: int


class CompositeGenerator(Generator):
    """A generator made of generators."""

    def __init__(self, logger: logging.Logger | None = None):
        super().__init__(types=())
        self._logger = logger or logging.getLogger(__name__)
        self._entries: list[_Entry] = []
        self._counter = 0

    def has_generator(self, generator: Generator) -> bool:
        return any(e.generator is generator for e in self._entries)

    def add_generator(self, generator: Generator) -> "CompositeGenerator":
        if self.has_generator(generator):
            return self
        self._entries.append(_Entry(generator, self._counter))
        self._counter += 1
        self.types = self.types | generator.types
        return self

    def remove_generator(self, generator: Generator) -> "CompositeGenerator":
        self._entries = [e for e in self._entries if e.generator is not generator]
        self._recalculate_types()
        return self

    def _recalculate_types(self) -> None:
        self.types = frozenset().union(*(e.generator.types for e in self._entries))

    @property
    def generators(self) -> list[Generator]:
        """Generators in execution order."""
        core = [e for e in self._entries if not isinstance(e.generator, PluginGenerator)]
        plugin = sorted(
            (e for e in self._entries if isinstance(e.generator, PluginGenerator)),
            key=lambda e: (-e.generator.priority, e.registration_order),
        )
        return [e.generator for e in core + plugin]

    def get_generators_by_type(self, output_type: OutputType | str) -> list[Generator]:
        return [g for g in self.generators if g.can_handle(output_type)]

    def get_plugin_generators(self) -> list[PluginGenerator]:
        return [g for g in self.generators if isinstance(g, PluginGenerator)]

    def run(self, tree: Mapping[str, Any]) -> GenerationResult:
        """
        Run every applicable generator and merge their outputs.

        Args:
            tree: Parsed definition tree

        Returns:
            GenerationResult with the merged output and any failures
        """
        result = GenerationResult()

        for generator in self.generators:
            if isinstance(generator, PluginGenerator) and not generator.should_run(tree):
                continue

            try:
                output = generator.output(tree)
                if not isinstance(output, Mapping):
                    raise TypeError(
                        f"output() returned {type(output).__name__}, expected a mapping"
                    )
            except Exception as e:
                failure = GeneratorExecutionFailure(generator.name, e)
                result.failures.append(failure)
                self._logger.error(str(failure))
                continue

            merge_outputs(result.output, output)

        return result

    def output(self, tree: Mapping[str, Any]) -> GeneratorOutput:
        return self.run(tree).output

    def get_stats(self) -> dict:
        """Get generator statistics."""
        plugin_count = len(self.get_plugin_generators())
        types = sorted(t.value for t in self.types)
        return {
            "total_generators": len(self._entries),
            "plugin_generators": plugin_count,
            "core_generators": len(self._entries) - plugin_count,
            "types_handled": len(types),
            "types": types,
            "generators_by_type": {
                t: len(self.get_generators_by_type(t)) for t in types
            },
        }
