# SPDX-License-Identifier: Apache-2.0
"""Shared test fixtures for the EventBinder test suite.

FIXTURES PROVIDED:
- event_bus: FakeEventBus capturing subscriptions and delivering events
- presenter: SamplePresenter instance recording handler calls
- metric_value: Reader for the current value of a Prometheus sample
"""

from __future__ import annotations

from typing import Callable, Optional

import pytest
from prometheus_client import REGISTRY

from tests.fakes.events import FakeEventBus
from tests.fakes.handlers import SamplePresenter


@pytest.fixture
def event_bus() -> FakeEventBus:
    """Fresh fake event bus for each test."""
    return FakeEventBus()


@pytest.fixture
def presenter() -> SamplePresenter:
    """Handler object with one handler of each declaration form."""
    return SamplePresenter()


@pytest.fixture
def metric_value() -> Callable[..., float]:
    """Return a reader for Prometheus sample values, 0.0 when unset.

    Example:
        def test_counts(metric_value):
            before = metric_value("eb_subscriptions_total", target="pkg:Cls")
    """

    def read(name: str, **labels: str) -> float:
        value: Optional[float] = REGISTRY.get_sample_value(name, labels)
        return value or 0.0

    return read
