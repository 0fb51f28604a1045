"""Shared fixtures for plugin core tests."""

import pytest

from blueprint.plugin.base import Plugin
from blueprint.plugin.dependency import Environment


class RecordingPlugin(Plugin):
    """Plugin that records hook calls into a shared list."""

    def __init__(self, calls=None, fail_on=None, generators=None, **kwargs):
        super().__init__(**kwargs)
        self.calls = calls if calls is not None else []
        self.fail_on = fail_on
        self._generators = generators or []

    def register(self):
        self.calls.append((self.name, "register"))
        if self.fail_on == "register":
            raise RuntimeError("register exploded")

    def boot(self):
        self.calls.append((self.name, "boot"))
        if self.fail_on == "boot":
            raise RuntimeError("boot exploded")

    def get_generators(self):
        return list(self._generators)


class FakeEnvironment(Environment):
    """Environment with fixed runtime, extension and package answers."""

    def __init__(self, runtime="3.12.1", extensions=(), packages=None):
        self.runtime = runtime
        self.extensions = set(extensions)
        self.packages = dict(packages or {})

    def runtime_version(self):
        return self.runtime

    def has_extension(self, name):
        return name in self.extensions

    def package_version(self, name):
        return self.packages.get(name)


def build_plugin(name, version="1.0.0", dependencies=None, calls=None, **kwargs):
    """Create a plugin class on the fly and instantiate it."""
    attrs = {
        "name": name,
        "version": version,
        "dependencies": dict(dependencies or {}),
    }
    for key in ("config_schema", "description"):
        if key in kwargs:
            attrs[key] = kwargs.pop(key)
    cls = type(f"{name.title().replace('-', '')}Plugin", (RecordingPlugin,), attrs)
    return cls(calls=calls, **kwargs)


@pytest.fixture
def make_plugin():
    """Factory fixture: make_plugin(name, version, dependencies, ...)."""
    return build_plugin


@pytest.fixture
def calls():
    """Hook call log shared between plugins of one test."""
    return []


@pytest.fixture
def environment():
    return FakeEnvironment(
        runtime="3.12.1",
        extensions={"json"},
        packages={"tomlkit": "0.12.4"},
    )
