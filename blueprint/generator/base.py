"""
Generator Base Classes.

A Generator turns the parsed definition tree into a GeneratorOutput. A
PluginGenerator is a generator contributed by a plugin; it has a priority
and decides per tree whether it runs.
"""

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from blueprint.generator.types import GeneratorOutput, OutputType, coerce_types

if TYPE_CHECKING:
    from blueprint.plugin.base import Plugin

DEFAULT_PRIORITY = 100


class GeneratorError(Exception):
    """Base exception for generator-related errors."""

    pass


class GeneratorExecutionFailure(GeneratorError):
    """Raised (and recorded) when a generator's output() fails."""

    def __init__(self, generator: str, cause: Exception):
        self.generator = generator
        self.cause = cause
        super().__init__(f"Generator '{generator}' failed: {cause}")


class Generator:
    """
    Base class for generators.

    Subclasses set `types` and implement output().
    """

    types: frozenset[OutputType] = frozenset()

    def __init__(self, types: Iterable[OutputType | str] | None = None):
        if types is not None:
            self.types = coerce_types(types)
        else:
            self.types = coerce_types(self.types)

    @property
    def name(self) -> str:
        return type(self).__name__

    def output(self, tree: Mapping[str, Any]) -> GeneratorOutput:
        raise NotImplementedError

    def can_handle(self, output_type: OutputType | str) -> bool:
        try:
            return OutputType.coerce(output_type) in self.types
        except ValueError:
            return False

    def __repr__(self) -> str:
        types = ", ".join(sorted(t.value for t in self.types))
        return f"{self.name}([{types}])"


class PluginGenerator(Generator):
    """
    Base class for generators contributed by plugins.

    Higher priority runs earlier. Configuration set on the generator is
    merged into what is already there.
    """

    def __init__(
        self,
        plugin: "Plugin | None" = None,
        priority: int = DEFAULT_PRIORITY,
        config: dict[str, Any] | None = None,
        types: Iterable[OutputType | str] | None = None,
    ):
        super().__init__(types)
        self._plugin = plugin
        self.priority = priority
        self._config: dict[str, Any] = dict(config or {})

    @property
    def plugin(self) -> "Plugin":
        """
        The plugin providing this generator.

        Raises:
            GeneratorError: If no plugin has been set
        """
        if self._plugin is None:
            raise GeneratorError(f"Plugin not set for generator '{self.name}'")
        return self._plugin

    @plugin.setter
    def plugin(self, plugin: "Plugin") -> None:
        self._plugin = plugin

    @property
    def has_plugin(self) -> bool:
        return self._plugin is not None

    @property
    def config(self) -> dict[str, Any]:
        return dict(self._config)

    def set_config(self, config: dict[str, Any]) -> None:
        self._config.update(config)

    def get_config_value(self, key: str, default: Any = None) -> Any:
        """Look up a config value; dotted keys descend into nested dicts."""
        value: Any = self._config
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    @property
    def description(self) -> str:
        owner = self._plugin.name if self._plugin is not None else "unknown plugin"
        return f"Plugin generator provided by {owner}"

    def should_run(self, tree: Mapping[str, Any]) -> bool:
        """
        Decide whether this generator runs for a tree.

        Default: the tree has a non-empty entry for a handled type.
        """
        return any(tree.get(output_type.value) for output_type in self.types)
