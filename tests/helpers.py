"""Test doubles shared across the wirekit test suite."""

from typing import Any

from wirekit.context import NOT_FOUND, Found, Lookup


class StubContext:
    """Dictionary-backed context that records every requested dependency."""

    def __init__(self, instances: dict[Any, Any] | None = None) -> None:
        self.instances: dict[Any, Any] = dict(instances or {})
        self.requests: list[Any] = []

    def get(self, dependency: Any) -> Lookup:
        self.requests.append(dependency)
        if dependency in self.instances:
            return Found(self.instances[dependency])
        return NOT_FOUND


class Dependency:
    pass


class OtherDependency:
    pass
