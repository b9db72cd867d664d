"""Type descriptors expose the injection points declared on a component class.

The resolver in :mod:`wirekit.plan` never inspects classes directly. It asks a
:class:`TypeDescriptor` for the constructors, fields and methods declared at
one level of the hierarchy and for the next ancestor. :class:`ClassDescriptor`
answers those questions through Python introspection; other implementations
can serve them from explicit registration tables.
"""

from __future__ import annotations

import dataclasses
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from inspect import Parameter
from typing import (
    Annotated,
    Any,
    ClassVar,
    Final,
    Protocol,
    TypeAlias,
    get_args,
    get_origin,
    get_type_hints,
    runtime_checkable,
)

from wirekit._internal.type_checks import is_runtime_class, is_type_variable
from wirekit.exceptions import DependencyInferenceError, InvalidComponentError
from wirekit.markers import is_inject_marked, is_injected_annotation, strip_injected_annotation

MISSING_ANNOTATION: Any = object()
"""Sentinel used when a parameter or field annotation is absent or unresolvable."""

_CONSTRUCTOR_NAME = "__init__"
_ANNOTATION_ERRORS = (AttributeError, NameError, TypeError, SyntaxError)

MethodSignature: TypeAlias = tuple[str, tuple[Any, ...]]
"""Override identity of a method: its name and ordered parameter types."""


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """Describe one injectable parameter of a constructor or method."""

    name: str
    annotation: Any
    """Resolved dependency type, or ``MISSING_ANNOTATION``."""
    kind: Any
    """The ``inspect.Parameter`` kind, used to bind the argument."""
    has_default: bool

    @property
    def is_keyword_only(self) -> bool:
        return self.kind is Parameter.KEYWORD_ONLY

    @property
    def is_positional_only(self) -> bool:
        return self.kind is Parameter.POSITIONAL_ONLY

    @property
    def is_resolvable(self) -> bool:
        return self.annotation is not MISSING_ANNOTATION


@dataclass(frozen=True, slots=True)
class ConstructorDescriptor:
    """Describe a way of creating a component instance.

    ``factory`` is the component class itself for ``__init__`` and the bound
    classmethod for alternate constructors.
    """

    name: str
    parameters: tuple[ParameterDescriptor, ...]
    is_marked: bool
    factory: Callable[..., Any]
    is_zero_argument: bool
    annotation_error: Exception | None = None

    @property
    def injectable_parameters(self) -> tuple[ParameterDescriptor, ...]:
        return tuple(parameter for parameter in self.parameters if parameter.is_resolvable)


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Describe a class attribute declared by annotation in one class body."""

    name: str
    declared_type: Any
    is_marked: bool
    is_immutable: bool
    declaring_type: type[Any]


@dataclass(frozen=True, slots=True)
class MethodDescriptor:
    """Describe an instance method declared in one class body."""

    name: str
    parameters: tuple[ParameterDescriptor, ...]
    is_marked: bool
    has_type_parameters: bool
    function: Callable[..., Any]
    declaring_type: type[Any]
    annotation_error: Exception | None = None

    @property
    def parameter_types(self) -> tuple[Any, ...]:
        return tuple(parameter.annotation for parameter in self.parameters)

    @property
    def injectable_parameters(self) -> tuple[ParameterDescriptor, ...]:
        return tuple(parameter for parameter in self.parameters if parameter.is_resolvable)

    @property
    def signature(self) -> MethodSignature:
        return self.name, self.parameter_types

    @property
    def qualified_name(self) -> str:
        return f"{self.declaring_type.__qualname__}.{self.name}"


@runtime_checkable
class TypeDescriptor(Protocol):
    """Query surface the injection-plan resolver relies on.

    A descriptor represents one level of a component's inheritance chain.
    ``superclass`` returns the descriptor of the next ancestor, or ``None``
    once the universal root (``object``) would be next.
    """

    @property
    def component_type(self) -> type[Any]: ...

    def constructors(self) -> tuple[ConstructorDescriptor, ...]: ...

    def fields(self) -> tuple[FieldDescriptor, ...]: ...

    def methods(self) -> tuple[MethodDescriptor, ...]: ...

    def superclass(self) -> TypeDescriptor | None: ...


@dataclass(frozen=True, slots=True)
class ClassDescriptor:
    """Describe a Python class by introspecting its body.

    The chain walked by :meth:`superclass` is the method resolution order of
    the class the walk started from, with ``object`` left out. Members are
    read from each class's own ``__dict__`` and ``__annotations__``, so every
    level reports only what it declares itself.
    """

    lineage: tuple[type[Any], ...]
    index: int = 0
    _PARAMETER_SKIP: ClassVar[frozenset[Any]] = frozenset(
        {Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD},
    )

    @classmethod
    def of(cls, component_type: Any) -> ClassDescriptor:
        """Return the descriptor for the most-derived level of ``component_type``.

        Args:
            component_type: The class to describe.

        """
        if not is_runtime_class(component_type):
            msg = f"Component '{component_type!r}' is not a class and cannot be described."
            raise InvalidComponentError(component_type, msg)
        lineage = tuple(klass for klass in component_type.__mro__ if klass is not object)
        return cls(lineage=lineage)

    @property
    def component_type(self) -> type[Any]:
        return self.lineage[self.index]

    def superclass(self) -> ClassDescriptor | None:
        next_index = self.index + 1
        if next_index >= len(self.lineage):
            return None
        return ClassDescriptor(lineage=self.lineage, index=next_index)

    def constructors(self) -> tuple[ConstructorDescriptor, ...]:
        klass = self.component_type
        constructors = [self._init_constructor(klass)]
        seen_names: set[str] = set()
        for owner in klass.__mro__:
            for name, member in vars(owner).items():
                if name in seen_names or not isinstance(member, classmethod):
                    continue
                seen_names.add(name)
                if is_inject_marked(member):
                    constructors.append(self._classmethod_constructor(klass, name, member))
        return tuple(constructors)

    def fields(self) -> tuple[FieldDescriptor, ...]:
        klass = self.component_type
        annotations = self._own_annotations(klass)
        frozen_dataclass_fields = _frozen_dataclass_field_names(klass)

        descriptors: list[FieldDescriptor] = []
        for name, annotation in annotations.items():
            is_final = _is_final(annotation)
            unwrapped = _strip_final(annotation)
            is_marked = is_injected_annotation(unwrapped)
            declared_type = strip_injected_annotation(unwrapped)
            # Injected[Final[T]] keeps Final inside the Annotated wrapper.
            if is_marked and _is_final(declared_type):
                is_final = True
                declared_type = _strip_final(declared_type)
            descriptors.append(
                FieldDescriptor(
                    name=name,
                    declared_type=declared_type,
                    is_marked=is_marked,
                    is_immutable=is_final or name in frozen_dataclass_fields,
                    declaring_type=klass,
                ),
            )
        return tuple(descriptors)

    def methods(self) -> tuple[MethodDescriptor, ...]:
        klass = self.component_type
        descriptors: list[MethodDescriptor] = []
        for name, member in vars(klass).items():
            if name == _CONSTRUCTOR_NAME or not inspect.isfunction(member):
                continue
            parameters, annotation_error = self._parameters(member, skip_first_parameter=True)
            descriptors.append(
                MethodDescriptor(
                    name=name,
                    parameters=parameters,
                    is_marked=is_inject_marked(member),
                    has_type_parameters=_declares_type_parameters(member, parameters),
                    function=member,
                    declaring_type=klass,
                    annotation_error=annotation_error,
                ),
            )
        return tuple(descriptors)

    def _init_constructor(self, klass: type[Any]) -> ConstructorDescriptor:
        init = klass.__init__
        parameters, annotation_error = self._parameters(init, skip_first_parameter=True)
        return ConstructorDescriptor(
            name=f"{klass.__qualname__}.{_CONSTRUCTOR_NAME}",
            parameters=parameters,
            is_marked=is_inject_marked(init),
            factory=klass,
            is_zero_argument=all(parameter.has_default for parameter in parameters),
            annotation_error=annotation_error,
        )

    def _classmethod_constructor(
        self,
        klass: type[Any],
        name: str,
        member: Any,
    ) -> ConstructorDescriptor:
        parameters, annotation_error = self._parameters(member.__func__, skip_first_parameter=True)
        return ConstructorDescriptor(
            name=f"{klass.__qualname__}.{name}",
            parameters=parameters,
            is_marked=True,
            factory=getattr(klass, name),
            is_zero_argument=all(parameter.has_default for parameter in parameters),
            annotation_error=annotation_error,
        )

    def _parameters(
        self,
        function: Callable[..., Any],
        *,
        skip_first_parameter: bool,
    ) -> tuple[tuple[ParameterDescriptor, ...], Exception | None]:
        try:
            signature_parameters = tuple(inspect.signature(function).parameters.values())
        except (TypeError, ValueError):
            # C-level slots such as object.__init__ on some interpreters.
            return (), None
        if skip_first_parameter and signature_parameters:
            signature_parameters = signature_parameters[1:]

        annotations: dict[str, Any] = {}
        annotation_error: Exception | None = None
        try:
            annotations = get_type_hints(function, include_extras=True)
        except _ANNOTATION_ERRORS as error:
            annotation_error = error

        descriptors: list[ParameterDescriptor] = []
        for parameter in signature_parameters:
            if parameter.kind in self._PARAMETER_SKIP:
                continue
            annotation = annotations.get(parameter.name, MISSING_ANNOTATION)
            if annotation is MISSING_ANNOTATION:
                raw_annotation = parameter.annotation
                if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
                    annotation = raw_annotation
            descriptors.append(
                ParameterDescriptor(
                    name=parameter.name,
                    annotation=_strip_parameter_marker(annotation),
                    kind=parameter.kind,
                    has_default=parameter.default is not Parameter.empty,
                ),
            )
        return tuple(descriptors), annotation_error

    def _own_annotations(self, klass: type[Any]) -> dict[str, Any]:
        try:
            raw_annotations = inspect.get_annotations(klass)
        except _ANNOTATION_ERRORS as error:
            msg = (
                f"Unable to read annotations declared on '{klass.__qualname__}'. "
                f"Original annotation error: {error}"
            )
            raise DependencyInferenceError(klass, msg) from error

        try:
            resolved_hints = get_type_hints(klass, include_extras=True)
        except _ANNOTATION_ERRORS:
            pass
        else:
            return {
                name: resolved_hints.get(name, annotation)
                for name, annotation in raw_annotations.items()
            }

        # An ancestor may hold the broken annotation; retry with this class only.
        try:
            return inspect.get_annotations(klass, eval_str=True)
        except _ANNOTATION_ERRORS as error:
            annotation_error = error

        marked = [
            name
            for name, annotation in raw_annotations.items()
            if isinstance(annotation, str) and "Injected" in annotation
        ]
        if marked:
            fields = ", ".join(f"'{klass.__qualname__}.{name}'" for name in marked)
            msg = (
                f"Unable to resolve annotations of injectable fields {fields}. "
                f"Original annotation error: {annotation_error}"
            )
            raise DependencyInferenceError(klass, msg) from annotation_error
        return {
            name: MISSING_ANNOTATION if isinstance(annotation, str) else annotation
            for name, annotation in raw_annotations.items()
        }


def _is_final(annotation: Any) -> bool:
    return annotation is Final or get_origin(annotation) is Final


def _strip_final(annotation: Any) -> Any:
    if get_origin(annotation) is Final:
        return get_args(annotation)[0]
    return annotation


def _strip_parameter_marker(annotation: Any) -> Any:
    # Injected[...] on a parameter is accepted and means the plain type.
    if is_injected_annotation(annotation):
        return strip_injected_annotation(annotation)
    return annotation


def _frozen_dataclass_field_names(klass: type[Any]) -> frozenset[str]:
    if not dataclasses.is_dataclass(klass):
        return frozenset()
    params = getattr(klass, "__dataclass_params__", None)
    if params is None or not params.frozen:
        return frozenset()
    return frozenset(item.name for item in dataclasses.fields(klass))


def _declares_type_parameters(
    function: Callable[..., Any],
    parameters: tuple[ParameterDescriptor, ...],
) -> bool:
    if getattr(function, "__type_params__", ()):
        return True
    for parameter in parameters:
        annotation = parameter.annotation
        if get_origin(annotation) is Annotated:
            annotation = get_args(annotation)[0]
        if is_type_variable(annotation):
            return True
        if get_origin(annotation) is not None and getattr(annotation, "__parameters__", ()):
            return True
    return False


__all__ = [
    "MISSING_ANNOTATION",
    "ClassDescriptor",
    "ConstructorDescriptor",
    "FieldDescriptor",
    "MethodDescriptor",
    "MethodSignature",
    "ParameterDescriptor",
    "TypeDescriptor",
]
