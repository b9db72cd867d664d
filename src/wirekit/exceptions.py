from __future__ import annotations

from typing import Any


class WirekitError(Exception):
    """Represent a base class for all wirekit-specific failures.

    Catch this type when you want to handle any wirekit error path without
    matching each concrete exception class individually.
    """


class InjectionPlanError(WirekitError):
    """Signal that a component type cannot be turned into an assembly plan.

    Raised eagerly by ``ComponentProvider`` (and ``resolve_plan``) while the
    injection points of a type are inspected, never while an instance is built.
    """

    def __init__(self, component_type: Any, msg: str) -> None:
        super().__init__(msg)
        self.component_type = component_type


class AmbiguousConstructorError(InjectionPlanError):
    """Signal that more than one constructor is marked with ``@inject``.

    Typical fix is keeping ``@inject`` on exactly one of ``__init__`` and the
    classmethod alternate constructors.
    """

    def __init__(self, component_type: Any, constructors: list[str]) -> None:
        names = ", ".join(constructors)
        msg = (
            f"Component '{_type_name(component_type)}' declares multiple injectable "
            f"constructors: {names}."
        )
        super().__init__(component_type, msg)
        self.constructors = constructors


class NoUsableConstructorError(InjectionPlanError):
    """Signal that no constructor can be used to build a component.

    Raised when no constructor is marked with ``@inject`` and ``__init__``
    requires arguments. Typical fixes are marking ``__init__`` with ``@inject``
    or giving every ``__init__`` parameter a default value.
    """

    def __init__(self, component_type: Any) -> None:
        msg = (
            f"Component '{_type_name(component_type)}' has no injectable constructor "
            "and no zero-argument constructor."
        )
        super().__init__(component_type, msg)


class IllegalInjectionTargetError(InjectionPlanError):
    """Signal that a marked field or method cannot receive a dependency.

    Immutable fields (``Final[...]`` or fields of a frozen dataclass) cannot be
    reassigned after construction, and methods declaring their own type
    parameters have no concrete parameter types to resolve.
    """

    def __init__(self, component_type: Any, target: str, reason: str) -> None:
        msg = (
            f"Illegal injection target '{target}' on component "
            f"'{_type_name(component_type)}': {reason}."
        )
        super().__init__(component_type, msg)
        self.target = target
        self.reason = reason


class DependencyInferenceError(InjectionPlanError):
    """Signal that a required injection parameter has no usable annotation.

    Typical fix is adding a concrete type annotation to the parameter, or
    giving it a default value so it is left out of injection.
    """


class InvalidComponentError(InjectionPlanError):
    """Signal that the requested component is not a runtime class.

    Generic aliases and plain values cannot be described
    by ``ClassDescriptor``.
    """


class DependencyNotFoundError(WirekitError):
    """Signal that the resolution context cannot supply a dependency.

    Raised by ``ComponentProvider.produce`` when the context answers
    ``NOT_FOUND``, and by ``ContextConfiguration.get_context`` when a bound
    component depends on a type that has no binding.
    """

    def __init__(self, component_type: Any, dependency_type: Any) -> None:
        msg = (
            f"Dependency '{_type_name(dependency_type)}' required by component "
            f"'{_type_name(component_type)}' was not found."
        )
        super().__init__(msg)
        self.component_type = component_type
        self.dependency_type = dependency_type


class ComponentConstructionError(WirekitError):
    """Signal that building a component failed inside user code.

    Wraps exceptions raised by the constructor body, a field assignment, or an
    injection method. The original exception is available as ``__cause__``.
    """

    def __init__(self, component_type: Any, step: str) -> None:
        msg = f"Failed to construct component '{_type_name(component_type)}' during {step}."
        super().__init__(msg)
        self.component_type = component_type
        self.step = step


class CyclicDependenciesError(WirekitError):
    """Signal that bound components depend on each other in a cycle.

    Raised by ``ContextConfiguration.get_context`` before any instance is
    produced. ``path`` lists the types along the cycle, starting and ending
    with the same type.
    """

    def __init__(self, path: list[Any]) -> None:
        cycle = " -> ".join(_type_name(item) for item in path)
        msg = f"Cyclic dependencies detected: {cycle}."
        super().__init__(msg)
        self.path = path


def _type_name(value: Any) -> str:
    return getattr(value, "__qualname__", repr(value))
