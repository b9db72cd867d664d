"""Resolve the injection points of a component type into an assembly plan.

The plan is computed once per component type and never mutated afterwards.
Every structural problem (ambiguous or missing constructors, immutable
injectable fields, generic injection methods, untyped parameters) is reported
here, before any instance is requested.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from wirekit.descriptors import (
    MISSING_ANNOTATION,
    ClassDescriptor,
    ConstructorDescriptor,
    FieldDescriptor,
    MethodDescriptor,
    MethodSignature,
    ParameterDescriptor,
    TypeDescriptor,
)
from wirekit.exceptions import (
    AmbiguousConstructorError,
    DependencyInferenceError,
    IllegalInjectionTargetError,
    NoUsableConstructorError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FieldInjection:
    """An injectable field paired with the depth of its declaring class.

    Depth ``0`` is the concrete component type; each ancestor adds one.
    """

    field: FieldDescriptor
    depth: int


@dataclass(frozen=True, slots=True)
class AssemblyPlan:
    """Describe how to build one fully-wired instance of a component type."""

    component_type: type[Any]
    """The concrete type the plan builds."""

    constructor: ConstructorDescriptor
    """The single selected constructor."""

    inject_fields: tuple[FieldInjection, ...]
    """Fields assigned after construction. Their order carries no meaning."""

    inject_methods: tuple[MethodDescriptor, ...]
    """Methods invoked after field injection, superclass before subclass."""

    @property
    def constructor_dependencies(self) -> tuple[Any, ...]:
        return tuple(parameter.annotation for parameter in self.constructor.injectable_parameters)

    def dependencies(self) -> frozenset[Any]:
        """Return every type the plan needs resolved from a context."""
        return frozenset(
            (
                *self.constructor_dependencies,
                *(injection.field.declared_type for injection in self.inject_fields),
                *(
                    parameter.annotation
                    for method in self.inject_methods
                    for parameter in method.injectable_parameters
                ),
            ),
        )


class InjectionPlanResolver:
    """Turn a :class:`TypeDescriptor` into an :class:`AssemblyPlan`.

    The resolver is stateless; one instance can serve any number of types.
    """

    def resolve(self, descriptor: TypeDescriptor) -> AssemblyPlan:
        """Build the assembly plan for the type described by ``descriptor``.

        Args:
            descriptor: Descriptor of the most-derived level of the component.

        Raises:
            AmbiguousConstructorError: More than one constructor is marked.
            NoUsableConstructorError: Nothing is marked and ``__init__`` needs arguments.
            IllegalInjectionTargetError: A marked field is immutable or a marked
                method declares its own type parameters.
            DependencyInferenceError: A parameter that must be injected has no
                usable annotation.

        """
        component_type = descriptor.component_type
        constructor = self._select_constructor(descriptor)
        inject_fields = self._select_fields(descriptor)
        inject_methods = self._select_methods(descriptor)

        plan = AssemblyPlan(
            component_type=component_type,
            constructor=constructor,
            inject_fields=inject_fields,
            inject_methods=inject_methods,
        )
        logger.debug(
            "Resolved assembly plan for %s: constructor=%s constructor_dependencies=%d "
            "fields=%d methods=%d",
            component_type.__qualname__,
            constructor.name,
            len(constructor.injectable_parameters),
            len(inject_fields),
            len(inject_methods),
        )
        return plan

    def _select_constructor(self, descriptor: TypeDescriptor) -> ConstructorDescriptor:
        component_type = descriptor.component_type
        constructors = descriptor.constructors()
        marked = [constructor for constructor in constructors if constructor.is_marked]

        if len(marked) > 1:
            raise AmbiguousConstructorError(
                component_type,
                [constructor.name for constructor in marked],
            )
        if marked:
            constructor = marked[0]
            self._check_parameters(
                component_type,
                owner=constructor.name,
                parameters=constructor.parameters,
                annotation_error=constructor.annotation_error,
            )
            return constructor

        fallback = next(
            (constructor for constructor in constructors if constructor.is_zero_argument),
            None,
        )
        if fallback is None:
            raise NoUsableConstructorError(component_type)
        # The zero-argument fallback is always called without arguments.
        return ConstructorDescriptor(
            name=fallback.name,
            parameters=(),
            is_marked=False,
            factory=fallback.factory,
            is_zero_argument=True,
        )

    def _select_fields(self, descriptor: TypeDescriptor) -> tuple[FieldInjection, ...]:
        component_type = descriptor.component_type
        selected: dict[str, FieldInjection] = {}

        for depth, level in enumerate(_walk(descriptor)):
            for field in level.fields():
                if not field.is_marked:
                    continue
                if field.is_immutable:
                    raise IllegalInjectionTargetError(
                        component_type,
                        target=f"{field.declaring_type.__qualname__}.{field.name}",
                        reason="injectable fields must be reassignable",
                    )
                # A redeclared attribute is one attribute; the most-derived type wins.
                selected.setdefault(field.name, FieldInjection(field=field, depth=depth))

        return tuple(selected.values())

    def _select_methods(self, descriptor: TypeDescriptor) -> tuple[MethodDescriptor, ...]:
        component_type = descriptor.component_type
        opted_out = [method.signature for method in descriptor.methods() if not method.is_marked]
        collected: list[MethodDescriptor] = []
        collected_signatures: set[MethodSignature] = set()

        for level in _walk(descriptor):
            for method in level.methods():
                if not method.is_marked:
                    continue
                signature = method.signature
                if signature in collected_signatures:
                    continue
                if any(_overrides(override, signature) for override in opted_out):
                    continue
                if method.has_type_parameters:
                    raise IllegalInjectionTargetError(
                        component_type,
                        target=method.qualified_name,
                        reason="injectable methods cannot declare type parameters",
                    )
                self._check_parameters(
                    component_type,
                    owner=method.qualified_name,
                    parameters=method.parameters,
                    annotation_error=method.annotation_error,
                )
                collected_signatures.add(signature)
                collected.append(method)

        collected.reverse()
        return tuple(collected)

    def _check_parameters(
        self,
        component_type: type[Any],
        *,
        owner: str,
        parameters: tuple[ParameterDescriptor, ...],
        annotation_error: Exception | None,
    ) -> None:
        skipped_positional: ParameterDescriptor | None = None
        for parameter in parameters:
            positional = parameter.is_positional_only and parameter.is_resolvable
            if positional and skipped_positional is not None:
                msg = (
                    f"Positional-only parameter '{parameter.name}' of '{owner}' follows "
                    f"'{skipped_positional.name}', which has no type annotation and cannot "
                    "be skipped. Annotate it or make the parameters keyword-capable."
                )
                raise DependencyInferenceError(component_type, msg)
            if parameter.is_resolvable:
                continue
            if parameter.has_default:
                if parameter.is_positional_only:
                    skipped_positional = parameter
                continue
            error_message = (
                f"Unable to infer dependency for required parameter '{parameter.name}' "
                f"of '{owner}'. Add a type annotation."
            )
            if annotation_error is None:
                raise DependencyInferenceError(component_type, error_message)
            msg = f"{error_message} Original annotation error: {annotation_error}"
            raise DependencyInferenceError(component_type, msg) from annotation_error


def resolve_plan(component_type: Any) -> AssemblyPlan:
    """Resolve the assembly plan of a class with the default resolver.

    Args:
        component_type: The component class to inspect.

    """
    return InjectionPlanResolver().resolve(ClassDescriptor.of(component_type))


def _overrides(override: MethodSignature, signature: MethodSignature) -> bool:
    override_name, override_types = override
    name, parameter_types = signature
    if override_name != name or len(override_types) != len(parameter_types):
        return False
    # An unannotated parameter on the override matches any declared type.
    return all(
        override_type is MISSING_ANNOTATION or override_type == parameter_type
        for override_type, parameter_type in zip(override_types, parameter_types)
    )


def _walk(descriptor: TypeDescriptor) -> Iterator[TypeDescriptor]:
    level: TypeDescriptor | None = descriptor
    while level is not None:
        yield level
        level = level.superclass()


__all__ = ["AssemblyPlan", "FieldInjection", "InjectionPlanResolver", "resolve_plan"]
