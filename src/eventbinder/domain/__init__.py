# SPDX-License-Identifier: Apache-2.0
"""Domain layer: event base class and the event bus contract."""

from __future__ import annotations

from .events import GenericEvent, HandlerRegistration, IEventBus, is_event_type

__all__ = [
    "GenericEvent",
    "HandlerRegistration",
    "IEventBus",
    "is_event_type",
]
