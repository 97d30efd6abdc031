# SPDX-License-Identifier: Apache-2.0
"""EventBinder: declarative event handler methods bound to an event bus."""

from __future__ import annotations

import logging

from .binder import BinderRegistration, EventBinder
from .domain.events import GenericEvent, HandlerRegistration, IEventBus
from .errors import EventBinderError, HandlerDeclarationError, SymbolResolutionError
from .generator import (
    BindingEntry,
    BindingTable,
    BindingTableBuilder,
    generate_binding_table,
)
from .handler import HandlerDeclaration, event_handler, get_declaration, is_event_handler

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BinderRegistration",
    "BindingEntry",
    "BindingTable",
    "BindingTableBuilder",
    "EventBinder",
    "EventBinderError",
    "GenericEvent",
    "HandlerDeclaration",
    "HandlerDeclarationError",
    "HandlerRegistration",
    "IEventBus",
    "SymbolResolutionError",
    "event_handler",
    "generate_binding_table",
    "get_declaration",
    "is_event_handler",
    "__version__",
]
