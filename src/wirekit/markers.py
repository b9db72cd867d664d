from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, Any, TypeVar, Union, get_args, get_origin

T = TypeVar("T")
CallableT = TypeVar("CallableT", bound=Callable[..., Any])

INJECT_MARKER_ATTR = "__wirekit_inject__"
_ANNOTATED_MARKER_MIN_ARGS = 2


class InjectedMarker:
    """A marker used to indicate a field should be populated from the context.

    Instances are compared by type only, so every ``Injected[T]`` carries an
    equivalent marker.
    """

    def __eq__(self, other: object) -> bool:
        return isinstance(other, InjectedMarker)

    def __hash__(self) -> int:
        return hash(InjectedMarker)

    def __repr__(self) -> str:
        return "InjectedMarker()"


if TYPE_CHECKING:
    Injected = Union[T, T]  # noqa: UP007,PYI016
    """Mark a class attribute for field injection.

    At runtime ``Injected[T]`` becomes ``Annotated[T, InjectedMarker()]``.

    Examples:
        .. code-block:: python

            class ReportService:
                repository: Injected[Repository]
    """

else:

    class Injected:
        """Mark a class attribute for field injection.

        At runtime ``Injected[T]`` resolves to ``Annotated[T, InjectedMarker()]``.
        Wrap it in ``Final[...]`` and the field is rejected, since injection
        needs to reassign the attribute after construction.

        Examples:
            .. code-block:: python

                class ReportService:
                    repository: Injected[Repository]

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, InjectedMarker]:
            if get_origin(item) is Annotated:
                args = get_args(item)
                inner = args[0]
                metadata = args[1:]
                return build_annotated_key((inner, *metadata, InjectedMarker()))
            return build_annotated_key((item, InjectedMarker()))


def inject(member: CallableT) -> CallableT:
    """Mark a constructor or method as an injection point.

    Apply it to ``__init__`` to select the injectable constructor, to a
    classmethod to select it as an alternate constructor, or to an instance
    method to have it invoked with resolved arguments after construction.
    Works above or below ``@classmethod``.

    Args:
        member: Function or classmethod object to mark.

    Examples:
        .. code-block:: python

            class Service:
                @inject
                def __init__(self, repository: Repository) -> None:
                    self.repository = repository

                @inject
                def use_clock(self, clock: Clock) -> None:
                    self.clock = clock

    """
    setattr(unwrap_member(member), INJECT_MARKER_ATTR, True)
    return member


def is_inject_marked(member: Any) -> bool:
    """Return True when a function, classmethod or staticmethod carries ``@inject``."""
    return getattr(unwrap_member(member), INJECT_MARKER_ATTR, False) is True


def unwrap_member(member: Any) -> Any:
    """Return the underlying function of classmethod and staticmethod objects."""
    if isinstance(member, (classmethod, staticmethod)):
        return member.__func__
    return member


def is_injected_annotation(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., InjectedMarker()]."""
    if get_origin(annotation) is not Annotated:
        return False
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return False
    metadata = annotation_args[1:]
    return any(isinstance(item, InjectedMarker) for item in metadata)


def strip_injected_annotation(annotation: Any) -> Any:
    """Strip the Injected marker while preserving other Annotated metadata."""
    if not is_injected_annotation(annotation):
        return annotation

    annotation_args = get_args(annotation)
    parameter_type = annotation_args[0]
    metadata = annotation_args[1:]
    filtered_metadata = tuple(item for item in metadata if not isinstance(item, InjectedMarker))
    if not filtered_metadata:
        return parameter_type
    return build_annotated_key((parameter_type, *filtered_metadata))


def build_annotated_key(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]
