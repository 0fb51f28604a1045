"""
Generator Output Types.

Output types name the artifact kinds a generator produces (models,
migrations, ...). A generator output maps a category ("created", "updated",
"skipped", "deleted") to a list of file paths.
"""

from collections.abc import Iterable, Mapping
from enum import Enum

CREATED = "created"
UPDATED = "updated"
SKIPPED = "skipped"
DELETED = "deleted"

CATEGORIES = (CREATED, UPDATED, SKIPPED, DELETED)

GeneratorOutput = dict[str, list[str]]


class OutputType(str, Enum):
    """Artifact kinds generators can handle."""

    MODELS = "models"
    CONTROLLERS = "controllers"
    MIGRATIONS = "migrations"
    SEEDERS = "seeders"
    FACTORIES = "factories"
    TESTS = "tests"
    VIEWS = "views"
    REQUESTS = "requests"
    RESOURCES = "resources"
    EVENTS = "events"
    COMMANDS = "commands"
    CONFIG = "config"
    MIDDLEWARE = "middleware"
    SERVICES = "services"
    PROVIDERS = "providers"
    FRONTEND = "frontend"
    TYPESCRIPT = "typescript"
    DASHBOARD = "dashboard"
    MONITORING = "monitoring"
    PLUGINS = "plugins"

    # Bundled plugins
    AUDITING = "auditing"
    CONSTRAINTS = "constraints"
    STATE_MACHINE = "state_machine"

    @classmethod
    def coerce(cls, value: "OutputType | str") -> "OutputType":
        """
        Convert a type name to an OutputType.

        Raises:
            ValueError: If the name is not a known output type
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as e:
            raise ValueError(f"Unknown output type: {value!r}") from e


def coerce_types(values: Iterable[OutputType | str]) -> frozenset[OutputType]:
    return frozenset(OutputType.coerce(v) for v in values)


def merge_outputs(target: GeneratorOutput, output: Mapping[str, object]) -> GeneratorOutput:
    """
    Merge one generator output into another, in place.

    Lists are concatenated per category; a scalar entry is appended.

    Args:
        target: Accumulated output
        output: Output to merge in

    Returns:
        target
    """
    for category, files in output.items():
        bucket = target.setdefault(category, [])
        if isinstance(files, (list, tuple)):
            bucket.extend(files)
        else:
            bucket.append(files)
    return target
