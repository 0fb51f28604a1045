"""
Extendable Generator.

Wraps an existing generator so a plugin can post-process its output. Each
extension receives (output, tree, generator) and returns the new output.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from blueprint.generator.base import Generator, GeneratorError, PluginGenerator
from blueprint.generator.types import GeneratorOutput

if TYPE_CHECKING:
    from blueprint.plugin.base import Plugin

Extension = Callable[[GeneratorOutput, Mapping[str, Any], "ExtendableGenerator"], GeneratorOutput]


class ExtendableGenerator(PluginGenerator):
    """A plugin generator that decorates a base generator's output."""

    def __init__(self, plugin: "Plugin | None" = None, **kwargs: Any):
        super().__init__(plugin, **kwargs)
        self._base: Generator | None = None
        self._extensions: list[Extension] = []

    @classmethod
    def wrap(
        cls,
        base: Generator,
        plugin: "Plugin",
        extensions: Iterable[Extension] = (),
    ) -> "ExtendableGenerator":
        """
        Create an extendable generator around a base generator.

        Args:
            base: Generator whose output is extended
            plugin: Plugin providing the extensions
            extensions: Initial extensions, applied in order

        Returns:
            ExtendableGenerator handling the base generator's types
        """
        instance = cls(plugin, types=base.types)
        instance._base = base
        instance.add_extensions(extensions)
        return instance

    @property
    def base_generator(self) -> Generator:
        if self._base is None:
            raise GeneratorError(
                "Base generator not set. Use ExtendableGenerator.wrap() to create instance."
            )
        return self._base

    @property
    def extensions(self) -> list[Extension]:
        return list(self._extensions)

    def add_extension(self, extension: Extension) -> "ExtendableGenerator":
        self._extensions.append(extension)
        return self

    def add_extensions(self, extensions: Iterable[Extension]) -> "ExtendableGenerator":
        for extension in extensions:
            self.add_extension(extension)
        return self

    @property
    def name(self) -> str:
        return "Extended" + self.base_generator.name

    @property
    def description(self) -> str:
        return (
            f"Extended version of {self.base_generator.name} "
            f"with {len(self._extensions)} extensions"
        )

    def output(self, tree: Mapping[str, Any]) -> GeneratorOutput:
        result = self.base_generator.output(tree)
        for extension in self._extensions:
            result = extension(result, tree, self)
        return result

    def should_run(self, tree: Mapping[str, Any]) -> bool:
        return bool(self._extensions) and super().should_run(tree)

    def get_extension_stats(self) -> dict:
        return {
            "base_generator": self.base_generator.name,
            "extensions_count": len(self._extensions),
            "types_handled": sorted(t.value for t in self.types),
        }
