# SPDX-License-Identifier: Apache-2.0
"""Domain events for EventBinder.

Events are typed messages broadcast through an event bus. The bus itself is
an external collaborator: this module only describes the contract that any
bus must follow so that an ``EventBinder`` can register handlers with it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Protocol
from uuid import UUID, uuid4


class HandlerRegistration(Protocol):
    """Handle returned by a bus subscription."""

    def remove_handler(self) -> None:
        """Stop delivering events to the subscribed handler."""
        ...


class IEventBus(Protocol):
    """Protocol for event bus implementations.

    This interface defines the contract that any event bus must follow for
    handlers to be bound to it. Delivery is keyed by the exact event class.
    """

    def subscribe(
        self, etype: type[GenericEvent], fn: Callable[[GenericEvent], None]
    ) -> HandlerRegistration:
        """Subscribe a function to handle events of a specific type.

        Args:
            etype: The event class to subscribe to
            fn: Function that will handle events of this type

        Returns:
            Registration that removes the subscription
        """
        ...


@dataclass(frozen=True)
class GenericEvent:
    """Base class for all events handled through an ``EventBinder``.

    Subclasses are usually frozen dataclasses adding their own payload
    fields. The base fields are keyword-only, so payload fields may be
    declared without defaults. Dataclass subclasses must be frozen as well.

    Example:
        >>> @dataclass(frozen=True)
        ... class ProfileLoaded(GenericEvent):
        ...     email: str
        >>> ProfileLoaded("a@example.com").event_type
        'ProfileLoaded'
    """

    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), kw_only=True
    )

    @property
    def event_type(self) -> str:
        """Identifier for the event type, the class name by default."""
        return type(self).__name__

    def __str__(self) -> str:
        return f"{self.event_type}(id={self.event_id})"


def is_event_type(candidate: object) -> bool:
    """Return True if ``candidate`` is a ``GenericEvent`` subclass."""
    return isinstance(candidate, type) and issubclass(candidate, GenericEvent)


__all__ = [
    "GenericEvent",
    "HandlerRegistration",
    "IEventBus",
    "is_event_type",
]
