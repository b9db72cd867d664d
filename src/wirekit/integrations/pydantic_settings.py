from __future__ import annotations

import importlib
from typing import Any

from wirekit._internal.type_checks import is_runtime_class


def _load_base_settings(module_name: str) -> type[Any] | None:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    base_settings = getattr(module, "BaseSettings", None)
    if isinstance(base_settings, type):
        return base_settings
    return None


def _build_settings_bases() -> tuple[type[Any], ...]:
    base_settings = _load_base_settings("pydantic_settings")
    if base_settings is None:
        return ()
    return (base_settings,)


SETTINGS_BASES: tuple[type[Any], ...] = _build_settings_bases()


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether a dependency is a Pydantic settings model.

    ``ContextConfiguration`` treats such classes as implicitly bound: they are
    built through their zero-argument constructor (reading the environment)
    the first time they are requested and reused for the context's lifetime.
    ``BaseSettings`` itself is never resolved. Without ``pydantic-settings``
    installed every candidate is rejected.

    Args:
        candidate: Dependency key to test.

    """
    if not is_runtime_class(candidate) or candidate in SETTINGS_BASES:
        return False
    try:
        return any(issubclass(candidate, base) for base in SETTINGS_BASES)
    except TypeError:
        return False


__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_subclass",
]
