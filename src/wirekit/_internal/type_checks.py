from __future__ import annotations

import types
from typing import Any, TypeGuard, TypeVar


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_type_variable(annotation: object) -> bool:
    """Return true when annotation is a bare ``TypeVar`` rather than a concrete type.

    Args:
        annotation: Parameter annotation to inspect.

    """
    return isinstance(annotation, TypeVar)


__all__ = ["is_runtime_class", "is_type_variable"]
