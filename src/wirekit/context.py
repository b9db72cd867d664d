from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeAlias, TypeVar, final, runtime_checkable

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Found(Generic[T]):
    """A successful context lookup carrying the resolved instance."""

    value: T


@final
class NotFound:
    """A context lookup that could not supply the requested dependency.

    Use the shared :data:`NOT_FOUND` instance rather than creating new ones.
    """

    _instance: NotFound | None = None

    def __new__(cls) -> NotFound:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = NotFound()

Lookup: TypeAlias = "Found[Any] | NotFound"
"""Result of asking a context for a dependency."""


@runtime_checkable
class Context(Protocol):
    """Map a requested dependency type to an instance, or report it missing.

    Implementations return :data:`NOT_FOUND` instead of raising when a type
    cannot be resolved; ``ComponentProvider.produce`` turns that answer into
    ``DependencyNotFoundError``. A lookup may itself produce other components,
    so ``get`` is free to recurse into other providers.
    """

    def get(self, dependency: Any) -> Lookup: ...


__all__ = ["NOT_FOUND", "Context", "Found", "Lookup", "NotFound"]
