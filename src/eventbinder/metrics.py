# SPDX-License-Identifier: Apache-2.0
"""Prometheus metrics for binding table generation and handler dispatch."""

from __future__ import annotations

from prometheus_client import Counter

# Binding table generation
TABLES_BUILT = Counter("eb_binding_tables_total", "Binding tables built", ["target", "source"])
DECLARATION_ERRORS = Counter(
    "eb_declaration_errors_total", "Rejected @event_handler declarations", ["target"]
)

# Bus wiring
SUBSCRIPTIONS = Counter(
    "eb_subscriptions_total", "Handler subscriptions made on event buses", ["target"]
)
UNSUBSCRIPTIONS = Counter(
    "eb_unsubscriptions_total", "Handler subscriptions removed from event buses", ["target"]
)

# Dispatch
EVENTS_DISPATCHED = Counter(
    "eb_events_dispatched_total",
    "Events delivered to bound handler methods",
    ["target", "event_type"],
)
HANDLER_ERRORS = Counter(
    "eb_handler_errors_total",
    "Exceptions raised by bound handler methods",
    ["target", "event_type"],
)

__all__ = [
    "DECLARATION_ERRORS",
    "EVENTS_DISPATCHED",
    "HANDLER_ERRORS",
    "SUBSCRIPTIONS",
    "TABLES_BUILT",
    "UNSUBSCRIPTIONS",
]
