"""Component providers execute an assembly plan against a context."""

from __future__ import annotations

import logging
import threading
from typing import Any, Generic, TypeVar

from wirekit.context import Context, Found
from wirekit.descriptors import ClassDescriptor, ParameterDescriptor
from wirekit.exceptions import ComponentConstructionError, DependencyNotFoundError, WirekitError
from wirekit.lock_mode import LockMode
from wirekit.plan import AssemblyPlan, InjectionPlanResolver

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ComponentProvider(Generic[T]):
    """Build fully-wired instances of one component type.

    The assembly plan is resolved when the provider is created, so a malformed
    component fails here rather than on the first ``produce`` call. The
    provider keeps no per-instance state: ``produce`` can be called repeatedly
    and from several threads.

    Examples:
        .. code-block:: python

            provider = ComponentProvider(ReportService)
            service = provider.produce(context)

    """

    def __init__(
        self,
        component_type: type[T],
        *,
        resolver: InjectionPlanResolver | None = None,
    ) -> None:
        self._component_type = component_type
        plan_resolver = resolver or InjectionPlanResolver()
        self._plan = plan_resolver.resolve(ClassDescriptor.of(component_type))

    @property
    def component_type(self) -> type[T]:
        return self._component_type

    @property
    def plan(self) -> AssemblyPlan:
        return self._plan

    def produce(self, context: Context) -> T:
        """Construct an instance, inject its fields, then call its injection methods.

        Args:
            context: Lookup used for every constructor, field and method dependency.

        Raises:
            DependencyNotFoundError: The context answered ``NOT_FOUND`` for a dependency.
            ComponentConstructionError: The constructor, a field assignment, or an
                injection method raised.

        """
        plan = self._plan

        args, kwargs = self._arguments(context, plan.constructor.injectable_parameters)
        try:
            instance = plan.constructor.factory(*args, **kwargs)
        except WirekitError:
            raise
        except Exception as error:
            raise ComponentConstructionError(self._component_type, "construction") from error

        for injection in plan.inject_fields:
            field = injection.field
            value = self._lookup(context, field.declared_type)
            try:
                object.__setattr__(instance, field.name, value)
            except Exception as error:
                step = f"injection of field '{field.name}'"
                raise ComponentConstructionError(self._component_type, step) from error

        for method in plan.inject_methods:
            args, kwargs = self._arguments(context, method.injectable_parameters)
            try:
                method.function(instance, *args, **kwargs)
            except WirekitError:
                raise
            except Exception as error:
                step = f"injection method '{method.qualified_name}'"
                raise ComponentConstructionError(self._component_type, step) from error

        logger.debug("Produced component %s", self._component_type.__qualname__)
        return instance

    def get_dependencies(self) -> frozenset[Any]:
        """Return every type this provider resolves from a context.

        The set is the union of constructor parameter types, injectable field
        types, and injection method parameter types across the whole
        inheritance chain. Contexts use it to validate a graph up front.
        """
        return self._plan.dependencies()

    def _arguments(
        self,
        context: Context,
        parameters: tuple[ParameterDescriptor, ...],
    ) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in parameters:
            value = self._lookup(context, parameter.annotation)
            if parameter.is_positional_only:
                args.append(value)
            else:
                kwargs[parameter.name] = value
        return args, kwargs

    def _lookup(self, context: Context, dependency: Any) -> Any:
        lookup = context.get(dependency)
        if isinstance(lookup, Found):
            return lookup.value
        raise DependencyNotFoundError(self._component_type, dependency)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._component_type.__qualname__})"


class ComponentProviderCache:
    """Create and keep one :class:`ComponentProvider` per component type.

    Providers are built lazily on first request. With ``LockMode.THREAD`` the
    first build of each type is serialized so concurrent callers share one
    provider; with ``LockMode.NONE`` concurrent first requests may each build a
    provider and the last one stored wins. Failed builds are not cached.
    """

    def __init__(
        self,
        *,
        lock_mode: LockMode = LockMode.THREAD,
        resolver: InjectionPlanResolver | None = None,
    ) -> None:
        self._lock_mode = lock_mode
        self._resolver = resolver or InjectionPlanResolver()
        self._providers: dict[type[Any], ComponentProvider[Any]] = {}
        self._lock = threading.Lock()

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    def get(self, component_type: type[T]) -> ComponentProvider[T]:
        """Return the cached provider for ``component_type``, building it if needed.

        Args:
            component_type: The component class to provide.

        """
        provider = self._providers.get(component_type)
        if provider is not None:
            return provider

        if self._lock_mode is LockMode.NONE:
            return self._build(component_type)

        with self._lock:
            provider = self._providers.get(component_type)
            if provider is not None:
                return provider
            return self._build(component_type)

    def clear(self) -> None:
        """Drop every cached provider."""
        self._providers.clear()

    def _build(self, component_type: type[T]) -> ComponentProvider[T]:
        provider = ComponentProvider(component_type, resolver=self._resolver)
        self._providers[component_type] = provider
        logger.debug("Cached component provider for %s", component_type.__qualname__)
        return provider

    def __contains__(self, component_type: object) -> bool:
        return component_type in self._providers

    def __len__(self) -> int:
        return len(self._providers)


_DEFAULT_CACHE = ComponentProviderCache()


def provider_for(component_type: type[T]) -> ComponentProvider[T]:
    """Return the process-wide cached provider for ``component_type``.

    Args:
        component_type: The component class to provide.

    """
    return _DEFAULT_CACHE.get(component_type)


__all__ = ["ComponentProvider", "ComponentProviderCache", "provider_for"]
