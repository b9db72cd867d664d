"""Reference dependency-resolution context built from explicit bindings.

``ContextConfiguration`` is the smallest context that makes providers usable
on their own: instances are bound as-is, components are produced on every
lookup. It applies no singleton/prototype policy of its own; bind an instance
when a single shared object is wanted.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, TypeVar

from wirekit.context import NOT_FOUND, Context, Found, Lookup
from wirekit.exceptions import CyclicDependenciesError, DependencyNotFoundError
from wirekit.integrations.pydantic_settings import is_pydantic_settings_subclass
from wirekit.providers import ComponentProvider

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _InstanceBinding:
    instance: Any


@dataclass(frozen=True, slots=True)
class _ComponentBinding:
    provider: ComponentProvider[Any]


_Binding = _InstanceBinding | _ComponentBinding


class ContextConfiguration:
    """Collect bindings and turn them into a validated :class:`Context`.

    Examples:
        .. code-block:: python

            configuration = ContextConfiguration()
            configuration.bind_instance(Clock, SystemClock())
            configuration.bind_component(Repository, SqlRepository)
            context = configuration.get_context()
            repository = context.get(Repository).value

    """

    def __init__(self) -> None:
        self._bindings: dict[Any, _Binding] = {}

    def bind_instance(self, dependency: Any, instance: Any) -> None:
        """Bind ``dependency`` to an existing object.

        Args:
            dependency: Key that components request.
            instance: Object returned for every lookup of ``dependency``.

        """
        self._bindings[dependency] = _InstanceBinding(instance)

    def bind_component(self, dependency: type[T], implementation: type[T] | None = None) -> None:
        """Bind ``dependency`` to a component built by :class:`ComponentProvider`.

        The provider is created immediately, so plan errors surface here.

        Args:
            dependency: Key that components request.
            implementation: Class to build; defaults to ``dependency`` itself.

        """
        provider = ComponentProvider(implementation or dependency)
        self._bindings[dependency] = _ComponentBinding(provider)

    def get_context(self) -> Context:
        """Validate every binding and return a context over a snapshot of them.

        Raises:
            DependencyNotFoundError: A bound component needs a type with no binding.
            CyclicDependenciesError: Bound components depend on each other in a cycle.

        """
        bindings = dict(self._bindings)
        for binding in bindings.values():
            if isinstance(binding, _ComponentBinding):
                _check_dependencies(binding.provider, bindings)
        checked: set[Any] = set()
        for dependency in bindings:
            _check_cycles(dependency, bindings, [], checked)
        logger.info("Validated context configuration with %d bindings", len(bindings))
        return _ConfiguredContext(bindings)


class _ConfiguredContext:
    def __init__(self, bindings: dict[Any, _Binding]) -> None:
        self._bindings = bindings
        self._settings: dict[type[Any], Any] = {}
        self._settings_lock = threading.Lock()

    def get(self, dependency: Any) -> Lookup:
        binding = self._bindings.get(dependency)
        if isinstance(binding, _InstanceBinding):
            return Found(binding.instance)
        if isinstance(binding, _ComponentBinding):
            return Found(binding.provider.produce(self))
        if is_pydantic_settings_subclass(dependency):
            return Found(self._settings_instance(dependency))
        return NOT_FOUND

    def _settings_instance(self, settings_type: type[Any]) -> Any:
        with self._settings_lock:
            if settings_type not in self._settings:
                self._settings[settings_type] = settings_type()
            return self._settings[settings_type]


def _check_dependencies(provider: ComponentProvider[Any], bindings: dict[Any, _Binding]) -> None:
    for dependency in provider.get_dependencies():
        if dependency in bindings or is_pydantic_settings_subclass(dependency):
            continue
        raise DependencyNotFoundError(provider.component_type, dependency)


def _check_cycles(
    dependency: Any,
    bindings: dict[Any, _Binding],
    visiting: list[Any],
    checked: set[Any],
) -> None:
    if dependency in visiting:
        raise CyclicDependenciesError([*visiting[visiting.index(dependency) :], dependency])
    if dependency in checked:
        return
    binding = bindings.get(dependency)
    if not isinstance(binding, _ComponentBinding):
        return
    visiting.append(dependency)
    for nested in binding.provider.get_dependencies():
        _check_cycles(nested, bindings, visiting, checked)
    visiting.pop()
    checked.add(dependency)


__all__ = ["ContextConfiguration"]
