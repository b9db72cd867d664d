"""Shared pytest fixtures for wirekit tests."""

import pytest

from tests.helpers import Dependency, OtherDependency, StubContext
from wirekit.plan import InjectionPlanResolver
from wirekit.providers import ComponentProviderCache


@pytest.fixture()
def dependency() -> Dependency:
    return Dependency()


@pytest.fixture()
def other_dependency() -> OtherDependency:
    return OtherDependency()


@pytest.fixture()
def context(dependency: Dependency, other_dependency: OtherDependency) -> StubContext:
    """Context that can supply both test dependencies."""
    return StubContext({Dependency: dependency, OtherDependency: other_dependency})


@pytest.fixture()
def empty_context() -> StubContext:
    """Context that cannot supply anything."""
    return StubContext()


@pytest.fixture()
def resolver() -> InjectionPlanResolver:
    return InjectionPlanResolver()


@pytest.fixture()
def provider_cache() -> ComponentProviderCache:
    """Fresh provider cache with thread locking."""
    return ComponentProviderCache()
