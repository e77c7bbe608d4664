"""
vstest-bridge: Drive a test console session from Python.

This package provides:
- VsTestConsoleWrapper, an async session orchestrator that launches the test
  console on demand, performs the handshake and forwards discovery and
  run requests
- Abstract contracts for the request sender, the process manager and the
  caller-supplied event handlers
- A default process manager that runs the console as a child process

Installation:
    pip install vstest-bridge

Quickstart:
    from vstest_bridge import VsTestConsoleWrapper

    async with VsTestConsoleWrapper.create(request_sender) as wrapper:
        await wrapper.initialize_extensions(["/adapters/xunit.runner.dll"])
        await wrapper.run_tests(["MyTests.dll"], None, run_handler)
"""

from vstest_bridge.types import (
    SessionState,
    TestCase,
    TestMessageLevel,
    TestPlatformOptions,
    TraceLevel,
)
from vstest_bridge.errors import (
    VsTestBridgeError,
    CommunicationError,
    ConsoleNotFoundError,
    ProcessTerminatedError,
    SessionEndedError,
)
from vstest_bridge.interfaces import (
    ProcessManager,
    RequestSender,
    TestDiscoveryEventsHandler,
    TestRunEventsHandler,
    TestHostLauncher,
)
from vstest_bridge._core.version import BRIDGE_VERSION
from vstest_bridge._core.parameters import ConsoleParameters
from vstest_bridge._core.lifecycle import ConsoleProcessManager
from vstest_bridge.wrapper import VsTestConsoleWrapper

__version__ = BRIDGE_VERSION

__all__ = [
    # Version
    "__version__",
    "BRIDGE_VERSION",
    # Types
    "SessionState",
    "TestCase",
    "TestMessageLevel",
    "TestPlatformOptions",
    "TraceLevel",
    # Errors
    "VsTestBridgeError",
    "CommunicationError",
    "ConsoleNotFoundError",
    "ProcessTerminatedError",
    "SessionEndedError",
    # Contracts
    "ProcessManager",
    "RequestSender",
    "TestDiscoveryEventsHandler",
    "TestRunEventsHandler",
    "TestHostLauncher",
    # Process management
    "ConsoleParameters",
    "ConsoleProcessManager",
    # Wrapper
    "VsTestConsoleWrapper",
]
