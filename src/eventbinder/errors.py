# SPDX-License-Identifier: Apache-2.0
"""Exceptions raised by EventBinder."""

from __future__ import annotations

from typing import Optional


class EventBinderError(Exception):
    """Base class for all EventBinder errors."""


class HandlerDeclarationError(EventBinderError, ValueError):
    """An ``@event_handler`` declaration violates the binding rules.

    Raised while a binding table is built, never while events are dispatched.
    """

    def __init__(self, owner: type, method_name: str, reason: str):
        self.owner = owner
        self.method_name = method_name
        self.reason = reason
        super().__init__(f"{owner.__qualname__}.{method_name}: {reason}")


class SymbolResolutionError(EventBinderError, LookupError):
    """A ``module:QualifiedName`` reference could not be imported."""

    def __init__(self, reference: str, cause: Optional[BaseException] = None):
        self.reference = reference
        message = f"Cannot resolve '{reference}'"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


__all__ = [
    "EventBinderError",
    "HandlerDeclarationError",
    "SymbolResolutionError",
]
