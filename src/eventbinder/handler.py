# SPDX-License-Identifier: Apache-2.0
"""The ``@event_handler`` marker.

Marks a method as a handler for events sent through an event bus. The marker
is inert metadata: it does nothing until the owning class is processed by an
``EventBinder``, which validates the declaration and wires the method to a
bus.

Only the parameter of the method is relevant, the name is ignored. The given
method is invoked whenever a ``ProfileLoaded`` event is fired on the bus the
binder was bound to::

    class ProfilePresenter:
        @event_handler
        def on_profile_loaded(self, event: ProfileLoaded) -> None:
            self.view.set_email(event.email)

``handles`` lists the event types explicitly. When it is empty (the default)
the method handles only the type of its single parameter, so the parameter is
required. When it is not empty the parameter may be omitted, and if present
it must accept every listed type::

    @event_handler(handles=(EventOne, EventTwo))
    def on_event2(self) -> None: ...

    @event_handler(handles=(EventOne, EventTwo))
    def on_event3(self, event: ParentOfEventOneAndTwo) -> None: ...
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, TypeVar, Union, overload

F = TypeVar("F", bound=Callable[..., Any])

# Attribute under which the declaration is stored on the decorated function
MARKER_ATTRIBUTE = "__event_handler__"


@dataclass(frozen=True)
class HandlerDeclaration:
    """Metadata attached to a method by ``@event_handler``.

    Attributes:
        handles: Explicit event types, in declaration order and without
            duplicates. Empty means "the type of the method's parameter".
    """

    handles: tuple[Any, ...] = ()

    @property
    def is_implicit(self) -> bool:
        """True when the handled type comes from the method parameter."""
        return not self.handles


def unique_in_order(items: Iterable[Any]) -> tuple[Any, ...]:
    seen: list[Any] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return tuple(seen)


@overload
def event_handler(func: F) -> F: ...


@overload
def event_handler(
    func: None = None, *, handles: Iterable[Any] = ()
) -> Callable[[F], F]: ...


def event_handler(
    func: Optional[F] = None, *, handles: Iterable[Any] = ()
) -> Union[F, Callable[[F], F]]:
    """Mark a method as an event handler.

    Usage:
        @event_handler
        def on_event1(self, event: EventOne) -> None: ...

        @event_handler(handles=(EventOne, EventTwo))
        def on_event2(self) -> None: ...

    Args:
        func: Method being decorated when used without arguments
        handles: Event types handled by the method

    Returns:
        The method itself, carrying a ``HandlerDeclaration``

    Raises:
        TypeError: If applied to anything other than a plain function
    """
    if isinstance(handles, (str, bytes)) or not isinstance(handles, Iterable):
        raise TypeError(f"handles must be a collection of event types, got {handles!r}")

    declaration = HandlerDeclaration(handles=unique_in_order(handles))

    def decorator(method: F) -> F:
        if not inspect.isfunction(method):
            raise TypeError(
                f"@event_handler can only be applied to methods, got {method!r}"
            )
        setattr(method, MARKER_ATTRIBUTE, declaration)
        return method

    if func is not None:
        return decorator(func)
    return decorator


def get_declaration(obj: Any) -> Optional[HandlerDeclaration]:
    """Return the declaration carried by ``obj``, if any.

    ``staticmethod`` and ``classmethod`` wrappers are looked through so that
    the binder can report them instead of silently skipping them.
    """
    if isinstance(obj, (staticmethod, classmethod)):
        obj = obj.__func__
    declaration = getattr(obj, MARKER_ATTRIBUTE, None)
    if isinstance(declaration, HandlerDeclaration):
        return declaration
    return None


def is_event_handler(obj: Any) -> bool:
    """Check whether ``obj`` carries an ``@event_handler`` declaration."""
    return get_declaration(obj) is not None


__all__ = [
    "HandlerDeclaration",
    "MARKER_ATTRIBUTE",
    "event_handler",
    "get_declaration",
    "is_event_handler",
]
