"""
Pytest configuration for vstest-bridge tests.
"""

import asyncio

import pytest
from unittest.mock import MagicMock

from vstest_bridge.interfaces import (
    ProcessManager,
    RequestSender,
    TestDiscoveryEventsHandler,
    TestHostLauncher,
    TestRunEventsHandler,
)
from vstest_bridge.types import TestCase

# Note: With pytest-asyncio in auto mode, no event_loop fixture needed


class FakeProcessManager(ProcessManager):
    """In-memory process manager recording every launch."""

    def __init__(self, running: bool = False):
        super().__init__()
        self.running = running
        self.started_with = []
        self.shutdown_count = 0

    def is_process_initialized(self) -> bool:
        return self.running

    async def start_process(self, parameters) -> None:
        # Yield so racing callers get a chance to interleave
        await asyncio.sleep(0)
        self.started_with.append(parameters)
        self.running = True

    async def shutdown_process(self) -> None:
        self.shutdown_count += 1
        self.running = False

    def crash(self) -> None:
        self.running = False
        self.notify_process_exited()


@pytest.fixture
def process_manager():
    """Process manager with no console running."""
    return FakeProcessManager()


@pytest.fixture
def mock_request_sender():
    """RequestSender mock whose handshake yields port 100."""
    sender = MagicMock(spec=RequestSender)
    sender.initialize_communication.return_value = 100
    return sender


@pytest.fixture
def discovery_handler():
    return MagicMock(spec=TestDiscoveryEventsHandler)


@pytest.fixture
def run_handler():
    return MagicMock(spec=TestRunEventsHandler)


@pytest.fixture
def host_launcher():
    return MagicMock(spec=TestHostLauncher)


@pytest.fixture
def test_sources():
    return ["Hello", "World"]


@pytest.fixture
def test_cases():
    return [
        TestCase("a.b.c", "d://uri", "a.dll"),
        TestCase("d.e.f", "g://uri", "d.dll"),
    ]
