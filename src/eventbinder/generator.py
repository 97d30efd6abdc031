# SPDX-License-Identifier: Apache-2.0
"""Binding table generation.

Turns ``@event_handler`` declarations into a static, validated table that
maps event types to handler methods. The table is built once, when a binder
is created or a table file is loaded, so every declaration error surfaces at
import time and dispatch never needs to introspect the target class.

Two ways of producing a table are supported:

- ``generate_binding_table(cls)`` scans the class hierarchy for markers.
- ``BindingTableBuilder(cls)`` registers handler methods explicitly.

Both apply the same rules:

1. Empty ``handles``: the method takes exactly one parameter besides
   ``self``, annotated with a ``GenericEvent`` subclass. That class is the
   only handled type.
2. Non-empty ``handles``: the method takes at most one parameter. When
   present, every listed type must be assignable to its annotation.
"""

from __future__ import annotations

import inspect
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Union

from .domain.events import GenericEvent, is_event_type
from .errors import HandlerDeclarationError
from .handler import HandlerDeclaration, get_declaration, unique_in_order
from .metrics import DECLARATION_ERRORS, TABLES_BUILT

logger = logging.getLogger(__name__)

_UNANNOTATED = inspect.Parameter.empty

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def qualified_name(obj: Any) -> str:
    """Return the ``module:QualifiedName`` reference of a class or function."""
    return f"{obj.__module__}:{obj.__qualname__}"


@dataclass(frozen=True)
class BindingEntry:
    """A single handler method and the event types it is bound to.

    Attributes:
        method_name: Name of the handler method on the target class
        event_types: Handled event classes, in declaration order
        passes_event: Whether the method receives the event as an argument
    """

    method_name: str
    event_types: tuple[type[GenericEvent], ...]
    passes_event: bool


@dataclass(frozen=True)
class BindingTable:
    """Validated mapping of event types to handler methods for one class."""

    target: type
    entries: tuple[BindingEntry, ...]

    def __iter__(self) -> Iterator[BindingEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def event_types(self) -> tuple[type[GenericEvent], ...]:
        """All handled event types, in first-declared order."""
        return unique_in_order(
            event_type for entry in self.entries for event_type in entry.event_types
        )

    def handlers_for(self, event_type: type[GenericEvent]) -> tuple[BindingEntry, ...]:
        """Entries handling exactly ``event_type``."""
        return tuple(entry for entry in self.entries if event_type in entry.event_types)

    def pairs(self) -> Iterator[tuple[type[GenericEvent], BindingEntry]]:
        """Yield ``(event_type, entry)`` for every registration to perform."""
        for entry in self.entries:
            for event_type in entry.event_types:
                yield event_type, entry

    def to_dict(self) -> dict[str, Any]:
        """Plain representation used for binding table files.

        Implicit declarations are written with their resolved event type so
        the file is self-contained.
        """
        return {
            "target": qualified_name(self.target),
            "bindings": [
                {
                    "method": entry.method_name,
                    "handles": [qualified_name(t) for t in entry.event_types],
                }
                for entry in self.entries
            ],
        }


def _accepts(annotation: Any, event_type: type) -> bool:
    """Check whether a parameter annotated with ``annotation`` accepts ``event_type``."""
    if annotation is _UNANNOTATED or annotation is Any or annotation is object:
        return True

    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return any(_accepts(arg, event_type) for arg in typing.get_args(annotation))

    if isinstance(annotation, type):
        return issubclass(event_type, annotation)

    return False


def _event_parameters(
    owner: type, name: str, func: Callable[..., Any]
) -> list[inspect.Parameter]:
    """Return the parameters of ``func`` after ``self``."""
    params = list(inspect.signature(func).parameters.values())
    if not params or params[0].kind not in _POSITIONAL:
        raise HandlerDeclarationError(owner, name, "handler must be an instance method taking 'self'")

    rest = params[1:]
    for param in rest:
        if param.kind not in _POSITIONAL:
            raise HandlerDeclarationError(
                owner, name, f"parameter '{param.name}' must be a plain positional parameter"
            )
    return rest


def _parameter_annotation(
    owner: type, name: str, func: Callable[..., Any], param: inspect.Parameter
) -> Any:
    """Resolve the annotation of the event parameter only.

    Other annotations of the handler, such as a return type imported under
    ``TYPE_CHECKING``, are never evaluated.
    """
    annotation = param.annotation
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, func.__globals__)
    except Exception as e:
        raise HandlerDeclarationError(
            owner, name, f"cannot resolve annotation of parameter '{param.name}': {e}"
        ) from e


def validate_handler(
    owner: type, name: str, func: Callable[..., Any], declaration: HandlerDeclaration
) -> BindingEntry:
    """Validate one declaration against its method and build its entry.

    Args:
        owner: Class the binding table is built for
        name: Attribute name of the handler method
        func: The plain function behind the method
        declaration: Declaration attached to the method

    Returns:
        BindingEntry for the method

    Raises:
        HandlerDeclarationError: If the declaration violates the binding rules
    """
    params = _event_parameters(owner, name, func)

    if declaration.is_implicit:
        if len(params) != 1:
            raise HandlerDeclarationError(
                owner,
                name,
                f"handler without 'handles' must take exactly one event parameter, "
                f"got {len(params)}",
            )
        annotation = _parameter_annotation(owner, name, func, params[0])
        if annotation is _UNANNOTATED:
            raise HandlerDeclarationError(
                owner,
                name,
                f"parameter '{params[0].name}' must be annotated with the event type it handles",
            )
        if not is_event_type(annotation):
            raise HandlerDeclarationError(
                owner,
                name,
                f"parameter '{params[0].name}' must be annotated with a single "
                f"GenericEvent subclass, got {annotation!r}",
            )
        return BindingEntry(method_name=name, event_types=(annotation,), passes_event=True)

    for event_type in declaration.handles:
        if not is_event_type(event_type):
            raise HandlerDeclarationError(
                owner, name, f"{event_type!r} in 'handles' is not a GenericEvent subclass"
            )

    if len(params) > 1:
        raise HandlerDeclarationError(
            owner, name, f"handler must take at most one event parameter, got {len(params)}"
        )

    if params:
        annotation = _parameter_annotation(owner, name, func, params[0])
        for event_type in declaration.handles:
            if not _accepts(annotation, event_type):
                raise HandlerDeclarationError(
                    owner,
                    name,
                    f"{event_type.__name__} is not assignable to parameter "
                    f"'{params[0].name}' of type {annotation!r}",
                )

    return BindingEntry(
        method_name=name,
        event_types=tuple(declaration.handles),
        passes_event=bool(params),
    )


def _attribute_names(cls: type) -> list[str]:
    """Attribute names of ``cls`` and its bases, base classes first."""
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        for name in vars(klass):
            if name not in names:
                names.append(name)
    return names


def _plain_function(owner: type, name: str, attr: Any) -> Callable[..., Any]:
    if isinstance(attr, (staticmethod, classmethod)):
        raise HandlerDeclarationError(
            owner, name, f"handler must be an instance method, not a {type(attr).__name__}"
        )
    if not inspect.isfunction(attr):
        raise HandlerDeclarationError(owner, name, f"{attr!r} is not a method")
    return attr


def _build(target: type, source: str, entries: Iterator[BindingEntry]) -> BindingTable:
    label = qualified_name(target)
    try:
        table = BindingTable(target=target, entries=tuple(entries))
    except HandlerDeclarationError as e:
        DECLARATION_ERRORS.labels(target=label).inc()
        logger.debug(f"Rejected declaration on {label}: {e.reason}")
        raise

    TABLES_BUILT.labels(target=label, source=source).inc()
    logger.debug(f"Built binding table for {label} from {source}: {len(table)} handler(s)")
    return table


def generate_binding_table(cls: type) -> BindingTable:
    """Scan ``cls`` for ``@event_handler`` methods and build its table.

    The hierarchy is walked base classes first. Each attribute name is
    resolved to its most-derived definition, so a subclass overriding a
    marked method without the marker removes that handler.

    Args:
        cls: Class whose handler methods should be collected

    Returns:
        Validated BindingTable

    Raises:
        TypeError: If ``cls`` is not a class
        HandlerDeclarationError: If any declaration violates the binding rules
    """
    if not isinstance(cls, type):
        raise TypeError(f"Expected a class, got {cls!r}")

    def entries() -> Iterator[BindingEntry]:
        for name in _attribute_names(cls):
            attr = inspect.getattr_static(cls, name)
            declaration = get_declaration(attr)
            if declaration is None:
                continue
            yield validate_handler(cls, name, _plain_function(cls, name, attr), declaration)

    return _build(cls, "scan", entries())


class BindingTableBuilder:
    """Explicit registration of handler methods, without scanning.

    Example:
        >>> table = (
        ...     BindingTableBuilder(ProfilePresenter)
        ...     .add("on_profile_loaded", ProfileLoaded)
        ...     .add("on_refresh", EventOne, EventTwo)
        ...     .build()
        ... )

    Methods registered without event types follow the implicit rule and
    handle the type of their single parameter.
    """

    def __init__(self, target: type, source: str = "builder"):
        if not isinstance(target, type):
            raise TypeError(f"Expected a class, got {target!r}")
        self._target = target
        self._source = source
        self._declared: list[tuple[str, HandlerDeclaration]] = []

    @property
    def target(self) -> type:
        return self._target

    def add(self, method_name: str, *event_types: type[GenericEvent]) -> BindingTableBuilder:
        """Register ``method_name`` as a handler for ``event_types``."""
        self._declared.append(
            (method_name, HandlerDeclaration(handles=unique_in_order(event_types)))
        )
        return self

    def build(self) -> BindingTable:
        """Validate every registration and build the table.

        Raises:
            HandlerDeclarationError: If a method is missing, registered twice,
                or violates the binding rules
        """
        target = self._target

        def entries() -> Iterator[BindingEntry]:
            seen: set[str] = set()
            for name, declaration in self._declared:
                if name in seen:
                    raise HandlerDeclarationError(target, name, "method registered more than once")
                seen.add(name)
                try:
                    attr = inspect.getattr_static(target, name)
                except AttributeError as e:
                    raise HandlerDeclarationError(target, name, "no such method") from e
                yield validate_handler(
                    target, name, _plain_function(target, name, attr), declaration
                )

        return _build(target, self._source, entries())


__all__ = [
    "BindingEntry",
    "BindingTable",
    "BindingTableBuilder",
    "generate_binding_table",
    "qualified_name",
    "validate_handler",
]
