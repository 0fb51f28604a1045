"""
Generator Registry.

Tracks core generators (one per output type) and plugin generators (grouped
by plugin, keyed by generator name), and keeps a composite generator over
all of them in sync.

Key features:
- Type map: output type -> every generator handling it
- Per-plugin registration and removal
- Core generator extension through ExtendableGenerator
- Active-generator selection for a tree
"""

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from blueprint.generator.base import Generator, PluginGenerator
from blueprint.generator.composite import CompositeGenerator, GenerationResult
from blueprint.generator.extendable import Extension, ExtendableGenerator
from blueprint.generator.types import GeneratorOutput, OutputType

if TYPE_CHECKING:
    from blueprint.plugin.base import Plugin


class GeneratorRegistry:
    """Registry of core and plugin generators."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(__name__)
        self._generators: dict[OutputType, Generator] = {}
        self._plugin_generators: dict[str, dict[str, PluginGenerator]] = {}
        self._type_map: dict[OutputType, list[Generator]] = {}
        self._composite = CompositeGenerator(logger=self._logger)

    @property
    def composite(self) -> CompositeGenerator:
        return self._composite

    # Registration

    def register_generator(
        self, output_type: OutputType | str, generator: Generator
    ) -> "GeneratorRegistry":
        """
        Register the core generator for an output type.

        A generator already registered for the type is replaced. One
        generator may serve several types; it joins the composite once and
        leaves it only when no type maps to it any more.
        """
        output_type = OutputType.coerce(output_type)
        previous = self._generators.get(output_type)
        self._generators[output_type] = generator

        if previous is not None and not self._is_core_generator(previous):
            self._composite.remove_generator(previous)
        if not self._composite.has_generator(generator):
            self._composite.add_generator(generator)
        self._rebuild_type_map()
        self._logger.debug(
            f"Registered core generator {generator.name} for type '{output_type.value}'"
        )
        return self

    def register_plugin_generator(self, generator: PluginGenerator) -> "GeneratorRegistry":
        """
        Register a plugin generator.

        Raises:
            GeneratorError: If the generator has no plugin set
        """
        plugin_name = generator.plugin.name
        generators = self._plugin_generators.setdefault(plugin_name, {})

        previous = generators.get(generator.name)
        if previous is not None:
            self._composite.remove_generator(previous)

        generators[generator.name] = generator
        self._composite.add_generator(generator)
        self._rebuild_type_map()
        self._logger.debug(
            f"Registered generator {generator.name} from plugin '{plugin_name}'"
        )
        return self

    def register_plugin_generators(
        self, plugin: "Plugin", generators: Iterable[Generator]
    ) -> "GeneratorRegistry":
        """
        Register the plugin generators a plugin provides.

        Generators without a plugin are attached to `plugin`; objects that are
        not plugin generators are ignored.
        """
        for generator in generators:
            if not isinstance(generator, PluginGenerator):
                continue
            if not generator.has_plugin:
                generator.plugin = plugin
            self.register_plugin_generator(generator)
        return self

    def unregister_plugin_generator(
        self, plugin_name: str, generator_name: str
    ) -> "GeneratorRegistry":
        generators = self._plugin_generators.get(plugin_name, {})
        generator = generators.pop(generator_name, None)
        if generator is None:
            return self

        self._composite.remove_generator(generator)
        if not generators:
            del self._plugin_generators[plugin_name]
        self._rebuild_type_map()
        return self

    def unregister_plugin(self, plugin_name: str) -> "GeneratorRegistry":
        generators = self._plugin_generators.pop(plugin_name, None)
        if generators is None:
            return self

        for generator in generators.values():
            self._composite.remove_generator(generator)
        self._rebuild_type_map()
        self._logger.info(f"Unregistered generators of plugin '{plugin_name}'")
        return self

    def _is_core_generator(self, generator: Generator) -> bool:
        return any(g is generator for g in self._generators.values())

    def _rebuild_type_map(self) -> None:
        self._type_map = {}
        for output_type, generator in self._generators.items():
            self._type_map.setdefault(output_type, []).append(generator)
        for generator in self.get_plugin_generators():
            for output_type in sorted(generator.types, key=lambda t: t.value):
                self._type_map.setdefault(output_type, []).append(generator)

    # Lookup

    def get_generators_for_type(self, output_type: OutputType | str) -> list[Generator]:
        return list(self._type_map.get(OutputType.coerce(output_type), []))

    def get_core_generator(self, output_type: OutputType | str) -> Generator | None:
        return self._generators.get(OutputType.coerce(output_type))

    def get_plugin_generators_for_type(
        self, output_type: OutputType | str
    ) -> list[PluginGenerator]:
        """Plugin generators handling a type, higher priority first."""
        generators = [g for g in self.get_plugin_generators() if g.can_handle(output_type)]
        return sorted(generators, key=lambda g: -g.priority)

    def get_plugin_generators(self) -> list[PluginGenerator]:
        return [
            generator
            for generators in self._plugin_generators.values()
            for generator in generators.values()
        ]

    def get_generators_by_plugin(self, plugin_name: str) -> dict[str, PluginGenerator]:
        return dict(self._plugin_generators.get(plugin_name, {}))

    def get_types(self) -> list[OutputType]:
        return list(self._type_map)

    def supports_type(self, output_type: OutputType | str) -> bool:
        try:
            return OutputType.coerce(output_type) in self._type_map
        except ValueError:
            return False

    def get_active_generators(self, tree: Mapping[str, Any]) -> list[Generator]:
        """Core generators plus the plugin generators that run for this tree."""
        active: list[Generator] = list(self._generators.values())
        active.extend(g for g in self.get_plugin_generators() if g.should_run(tree))
        return active

    # Generation

    def generate(self, tree: Mapping[str, Any]) -> GeneratorOutput:
        return self._composite.output(tree)

    def run(self, tree: Mapping[str, Any]) -> GenerationResult:
        return self._composite.run(tree)

    # Extension

    def create_extendable_generator(
        self,
        output_type: OutputType | str,
        plugin: "Plugin",
        extensions: Iterable[Extension] = (),
    ) -> ExtendableGenerator | None:
        """
        Wrap the core generator for a type.

        Returns:
            ExtendableGenerator, or None if the type has no core generator
        """
        core = self.get_core_generator(output_type)
        if core is None:
            return None
        return ExtendableGenerator.wrap(core, plugin, extensions)

    def extend_core_generator(
        self,
        output_type: OutputType | str,
        plugin: "Plugin",
        extensions: Iterable[Extension],
    ) -> bool:
        """
        Replace the core generator for a type with an extended version.

        Returns:
            True if replaced, False if the type has no core generator
        """
        extendable = self.create_extendable_generator(output_type, plugin, extensions)
        if extendable is None:
            return False

        self.register_generator(output_type, extendable)
        self._logger.info(
            f"Plugin '{plugin.name}' extended core generator "
            f"{extendable.base_generator.name}"
        )
        return True

    def create_composite_for_type(self, output_type: OutputType | str) -> CompositeGenerator:
        composite = CompositeGenerator(logger=self._logger)
        for generator in self.get_generators_for_type(output_type):
            composite.add_generator(generator)
        return composite

    def get_generator_inheritance_chain(self, generator: Generator) -> list[Generator]:
        """
        Get the wrapping chain of a generator, innermost first.

        Example: extending an extended ModelGenerator yields
        [ModelGenerator, ExtendedModelGenerator, ExtendedExtendedModelGenerator].
        """
        chain = [generator]
        while isinstance(generator, ExtendableGenerator):
            generator = generator.base_generator
            chain.insert(0, generator)
        return chain

    def get_stats(self) -> dict:
        """Get registry statistics."""
        plugin_generators = self.get_plugin_generators()
        return {
            "core_generators": len(self._generators),
            "plugin_generators": len(plugin_generators),
            "total_generators": len(self._generators) + len(plugin_generators),
            "plugins_with_generators": len(self._plugin_generators),
            "supported_types": len(self._type_map),
            "types": [t.value for t in self._type_map],
            "generators_by_plugin": {
                name: len(generators)
                for name, generators in self._plugin_generators.items()
            },
            "generators_by_type": {
                t.value: len(generators) for t, generators in self._type_map.items()
            },
        }
