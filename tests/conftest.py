"""Shared pytest fixtures."""

import pytest

from shared.logging import Logger
from tests.fakes import RecordingConsole, RecordingMetrics, RecordingSink


@pytest.fixture
def events():
    """Ordered log of console and sink calls."""
    return []


@pytest.fixture
def console(events):
    return RecordingConsole(events)


@pytest.fixture
def sink(events):
    return RecordingSink(events)


@pytest.fixture
def metrics():
    return RecordingMetrics()


@pytest.fixture
def api_logger(sink, console, metrics):
    """Production-mode logger for the API context."""
    return Logger("API", sink=sink, console=console, metrics=metrics)
