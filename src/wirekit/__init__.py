from wirekit.configuration import ContextConfiguration
from wirekit.context import NOT_FOUND, Context, Found, NotFound
from wirekit.descriptors import ClassDescriptor, TypeDescriptor
from wirekit.exceptions import (
    AmbiguousConstructorError,
    ComponentConstructionError,
    CyclicDependenciesError,
    DependencyInferenceError,
    DependencyNotFoundError,
    IllegalInjectionTargetError,
    InjectionPlanError,
    InvalidComponentError,
    NoUsableConstructorError,
    WirekitError,
)
from wirekit.lock_mode import LockMode
from wirekit.markers import Injected, inject
from wirekit.plan import AssemblyPlan, InjectionPlanResolver, resolve_plan
from wirekit.providers import ComponentProvider, ComponentProviderCache, provider_for

__all__ = [
    "NOT_FOUND",
    "AmbiguousConstructorError",
    "AssemblyPlan",
    "ClassDescriptor",
    "ComponentConstructionError",
    "ComponentProvider",
    "ComponentProviderCache",
    "Context",
    "ContextConfiguration",
    "CyclicDependenciesError",
    "DependencyInferenceError",
    "DependencyNotFoundError",
    "Found",
    "IllegalInjectionTargetError",
    "Injected",
    "InjectionPlanError",
    "InjectionPlanResolver",
    "InvalidComponentError",
    "LockMode",
    "NoUsableConstructorError",
    "NotFound",
    "TypeDescriptor",
    "WirekitError",
    "inject",
    "provider_for",
    "resolve_plan",
]
