"""Tests for field injection through ``Injected[...]`` annotations."""

from dataclasses import dataclass
from typing import Any, Final

import pytest

from tests.helpers import Dependency, OtherDependency, StubContext
from wirekit.exceptions import (
    ComponentConstructionError,
    DependencyInferenceError,
    IllegalInjectionTargetError,
)
from wirekit.markers import Injected, inject
from wirekit.providers import ComponentProvider


class ComponentWithFieldDependency:
    dependency: Injected[Dependency]
    retries: int = 3


class ComponentWithSuperFieldDependency(ComponentWithFieldDependency):
    pass


class ComponentWithFinalField:
    dependency: Final[Injected[Dependency]]


@dataclass(frozen=True)
class FrozenComponent:
    dependency: Injected[Dependency] = None  # type: ignore[assignment]


@dataclass
class MutableDataclassComponent:
    dependency: Injected[Dependency] = None  # type: ignore[assignment]


class GuardedComponent:
    dependency: Injected[Dependency]

    def __setattr__(self, name: str, value: Any) -> None:
        msg = f"{name} is read-only"
        raise AttributeError(msg)


class SlottedComponent:
    __slots__ = ()
    dependency: Injected[Dependency]


class ConstructorThenField:
    dependency: Injected[Dependency]

    def __init__(self) -> None:
        self.dependency = None  # type: ignore[assignment]


class RedeclaredField(ComponentWithFieldDependency):
    dependency: Injected[OtherDependency]  # type: ignore[assignment]


class UnresolvableUnmarkedAnnotation:
    label: "UndefinedLabel"  # noqa: F821
    dependency: Injected[Dependency]


class UnresolvableInjectedAnnotation:
    dependency: "Injected[UndefinedDependency]"  # noqa: F821


class FieldVisibleToMethod:
    dependency: Injected[Dependency]

    @inject
    def capture(self) -> None:
        self.seen = self.dependency


class TestFieldInjection:
    def test_injects_declared_field(self, context: StubContext, dependency: Dependency) -> None:
        component = ComponentProvider(ComponentWithFieldDependency).produce(context)

        assert component.dependency is dependency
        assert component.retries == 3

    def test_injects_superclass_field(self, context: StubContext, dependency: Dependency) -> None:
        provider = ComponentProvider(ComponentWithSuperFieldDependency)

        component = provider.produce(context)

        assert component.dependency is dependency
        assert [injection.depth for injection in provider.plan.inject_fields] == [1]

    def test_unmarked_annotations_are_not_injected(self, context: StubContext) -> None:
        ComponentProvider(ComponentWithFieldDependency).produce(context)

        assert int not in context.requests

    def test_field_injection_bypasses_setattr_override(
        self,
        context: StubContext,
        dependency: Dependency,
    ) -> None:
        component = ComponentProvider(GuardedComponent).produce(context)

        assert component.dependency is dependency

    def test_field_injection_runs_after_constructor(
        self,
        context: StubContext,
        dependency: Dependency,
    ) -> None:
        component = ComponentProvider(ConstructorThenField).produce(context)

        assert component.dependency is dependency

    def test_redeclared_field_uses_most_derived_type(
        self,
        context: StubContext,
        other_dependency: OtherDependency,
    ) -> None:
        provider = ComponentProvider(RedeclaredField)

        component = provider.produce(context)

        assert component.dependency is other_dependency
        assert len(provider.plan.inject_fields) == 1

    def test_fields_are_injected_before_methods(
        self,
        context: StubContext,
        dependency: Dependency,
    ) -> None:
        component = ComponentProvider(FieldVisibleToMethod).produce(context)

        assert component.seen is dependency

    def test_unresolvable_unmarked_annotation_is_ignored(
        self,
        context: StubContext,
        dependency: Dependency,
    ) -> None:
        component = ComponentProvider(UnresolvableUnmarkedAnnotation).produce(context)

        assert component.dependency is dependency
        assert context.requests == [Dependency]

    def test_mutable_dataclass_field_is_injected(
        self,
        context: StubContext,
        dependency: Dependency,
    ) -> None:
        component = ComponentProvider(MutableDataclassComponent).produce(context)

        assert component.dependency is dependency


class TestIllegalFields:
    def test_final_field_fails_eagerly(self) -> None:
        with pytest.raises(IllegalInjectionTargetError) as exc_info:
            ComponentProvider(ComponentWithFinalField)

        assert exc_info.value.target == "ComponentWithFinalField.dependency"
        assert exc_info.value.component_type is ComponentWithFinalField

    def test_unresolvable_injected_annotation_fails_eagerly(self) -> None:
        with pytest.raises(DependencyInferenceError) as exc_info:
            ComponentProvider(UnresolvableInjectedAnnotation)

        assert "UnresolvableInjectedAnnotation.dependency" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, NameError)

    def test_frozen_dataclass_field_fails_eagerly(self) -> None:
        with pytest.raises(IllegalInjectionTargetError):
            ComponentProvider(FrozenComponent)

    def test_unassignable_field_is_wrapped_at_produce_time(self, context: StubContext) -> None:
        provider = ComponentProvider(SlottedComponent)

        with pytest.raises(ComponentConstructionError) as exc_info:
            provider.produce(context)

        assert "dependency" in exc_info.value.step
        assert isinstance(exc_info.value.__cause__, AttributeError)
