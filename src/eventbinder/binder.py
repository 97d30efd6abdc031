# SPDX-License-Identifier: Apache-2.0
"""Event binder: connects ``@event_handler`` methods to an event bus.

An ``EventBinder`` is created once per handler class, typically at module
level next to the class. Creating it builds and validates the binding table,
so a misdeclared handler fails at import time rather than when an event is
fired::

    class ProfilePresenter:
        @event_handler
        def on_profile_loaded(self, event: ProfileLoaded) -> None: ...

    PROFILE_BINDER = EventBinder(ProfilePresenter)

    presenter = ProfilePresenter()
    registration = PROFILE_BINDER.bind_event_handlers(presenter, bus)
    ...
    registration.remove_handler()

The handlers have no effect until ``bind_event_handlers`` is called.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, List, Tuple, TypeVar

from .domain.events import GenericEvent, HandlerRegistration, IEventBus
from .generator import BindingEntry, BindingTable, generate_binding_table, qualified_name
from .metrics import EVENTS_DISPATCHED, HANDLER_ERRORS, SUBSCRIPTIONS, UNSUBSCRIPTIONS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BinderRegistration:
    """Registration covering every subscription made by one bind call.

    ``remove_handler`` removes all of them and may be called more than once.
    """

    def __init__(self, target_label: str, registrations: List[HandlerRegistration]):
        self._target_label = target_label
        self._count = len(registrations)
        self._pending = list(registrations)
        self._removed = False

    @property
    def is_removed(self) -> bool:
        return self._removed

    def __len__(self) -> int:
        return self._count

    def remove_handler(self) -> None:
        """Remove every subscription made for the bound target.

        Every subscription is attempted even if some removals fail. The
        failed ones are kept for the next call and the first error is
        re-raised.
        """
        if self._removed:
            return

        pending = self._pending
        failed = _remove_registrations(pending, self._target_label)
        self._pending = [registration for registration, _ in failed]
        UNSUBSCRIPTIONS.labels(target=self._target_label).inc(len(pending) - len(failed))

        if failed:
            raise failed[0][1]

        self._removed = True
        logger.debug(f"Removed {len(pending)} subscription(s) for {self._target_label}")


class EventBinder(Generic[T]):
    """Binds the handler methods of instances of one class to event buses."""

    def __init__(self, target_cls: type[T]):
        self._table = generate_binding_table(target_cls)

    @classmethod
    def from_table(cls, table: BindingTable) -> EventBinder[Any]:
        """Create a binder from a table built elsewhere (builder or file)."""
        binder = cls.__new__(cls)
        binder._table = table
        return binder

    @property
    def table(self) -> BindingTable:
        return self._table

    @property
    def target_cls(self) -> type:
        return self._table.target

    def bind_event_handlers(self, target: T, event_bus: IEventBus) -> BinderRegistration:
        """Subscribe every handler method of ``target`` to ``event_bus``.

        Subscriptions are made in table order, one per handled event type.

        Args:
            target: Instance of the class this binder was built for
            event_bus: Bus to subscribe the handlers to

        Returns:
            BinderRegistration removing all subscriptions at once

        Raises:
            TypeError: If ``target`` is not an instance of the binder's class
        """
        if not isinstance(target, self._table.target):
            raise TypeError(
                f"{type(target).__qualname__} is not an instance of "
                f"{self._table.target.__qualname__}"
            )

        label = qualified_name(self._table.target)
        registrations: List[HandlerRegistration] = []
        try:
            for event_type, entry in self._table.pairs():
                callback = _make_dispatcher(target, entry, event_type, label)
                registrations.append(event_bus.subscribe(event_type, callback))
        except Exception:
            # Leave the bus as it was if a subscription fails midway
            _remove_registrations(registrations, label)
            raise

        SUBSCRIPTIONS.labels(target=label).inc(len(registrations))
        logger.debug(f"Bound {len(registrations)} handler subscription(s) for {label}")
        return BinderRegistration(label, registrations)


def _remove_registrations(
    registrations: List[HandlerRegistration], label: str
) -> List[Tuple[HandlerRegistration, Exception]]:
    """Remove each registration, returning the ones that failed with their errors."""
    failed: List[Tuple[HandlerRegistration, Exception]] = []
    for registration in registrations:
        try:
            registration.remove_handler()
        except Exception as e:
            logger.warning(f"Failed to remove a subscription for {label}: {e}")
            failed.append((registration, e))
    return failed


def _make_dispatcher(
    target: Any, entry: BindingEntry, event_type: type[GenericEvent], label: str
) -> Callable[[GenericEvent], None]:
    method = getattr(target, entry.method_name)
    event_label = event_type.__name__

    def dispatch(event: GenericEvent) -> None:
        EVENTS_DISPATCHED.labels(target=label, event_type=event_label).inc()
        try:
            if entry.passes_event:
                method(event)
            else:
                method()
        except Exception:
            HANDLER_ERRORS.labels(target=label, event_type=event_label).inc()
            raise

    dispatch.__name__ = entry.method_name
    dispatch.__qualname__ = f"{type(target).__qualname__}.{entry.method_name}"
    return dispatch


__all__ = [
    "BinderRegistration",
    "EventBinder",
]
