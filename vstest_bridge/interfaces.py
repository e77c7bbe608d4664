"""
Collaborator contracts for the test console wrapper.

The wrapper never touches a socket or a pipe itself. It drives two
collaborators through these abstract base classes:

- ProcessManager: starts the console process and reports its liveness
- RequestSender: owns the wire connection, one coroutine per remote call

Event handlers and the test host launcher are capabilities supplied by the
caller. The wrapper only routes references to them to the RequestSender.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence

if TYPE_CHECKING:
    from vstest_bridge._core.parameters import ConsoleParameters
    from vstest_bridge.types import TestCase, TestMessageLevel, TestPlatformOptions

logger = logging.getLogger(__name__)

ProcessExitedHandler = Callable[[], None]


class ProcessManager(ABC):
    """
    Starts the test console process and reports on it.

    Subclasses implement is_process_initialized() and start_process().
    Exit notification is provided here: subclasses call
    notify_process_exited() when the console terminates.
    """

    def __init__(self) -> None:
        self._exited_handlers: List[ProcessExitedHandler] = []

    @abstractmethod
    def is_process_initialized(self) -> bool:
        """Return True if the console process is currently running."""

    @abstractmethod
    async def start_process(self, parameters: "ConsoleParameters") -> None:
        """Launch the console process with the given launch parameters."""

    async def shutdown_process(self) -> None:
        """Stop the console process. The default does nothing."""

    def add_process_exited_handler(self, handler: ProcessExitedHandler) -> None:
        self._exited_handlers.append(handler)

    def remove_process_exited_handler(self, handler: ProcessExitedHandler) -> None:
        self._exited_handlers.remove(handler)

    def notify_process_exited(self) -> None:
        """Invoke every registered exit handler in registration order."""
        logger.debug(f"Notifying {len(self._exited_handlers)} process exit handler(s)")
        for handler in list(self._exited_handlers):
            handler()


class RequestSender(ABC):
    """
    Sends requests to the test console over an established connection.

    initialize_communication() is the handshake: it prepares the connection
    and returns the port the console must connect to. A value <= 0 means the
    connection could not be set up.
    """

    @abstractmethod
    async def initialize_communication(self, timeout: float) -> int:
        """
        Perform the handshake and return the negotiated port.

        Args:
            timeout: Maximum time to wait for the console, in seconds
        """

    @abstractmethod
    async def initialize_extensions(self, paths: Sequence[str]) -> None:
        """Ask the console to load the given test adapters."""

    @abstractmethod
    async def discover_tests(
        self,
        sources: Sequence[str],
        run_settings: Optional[str],
        events_handler: "TestDiscoveryEventsHandler",
        options: Optional["TestPlatformOptions"] = None,
    ) -> None:
        """Start discovery. Results arrive on events_handler."""

    @abstractmethod
    async def start_test_run(
        self,
        sources: Sequence[str],
        run_settings: Optional[str],
        events_handler: "TestRunEventsHandler",
        options: Optional["TestPlatformOptions"] = None,
        custom_host_launcher: Optional["TestHostLauncher"] = None,
    ) -> None:
        """Run every test found in the given sources."""

    @abstractmethod
    async def start_test_run_with_selected_tests(
        self,
        test_cases: Sequence["TestCase"],
        run_settings: Optional[str],
        events_handler: "TestRunEventsHandler",
        options: Optional["TestPlatformOptions"] = None,
        custom_host_launcher: Optional["TestHostLauncher"] = None,
    ) -> None:
        """Run exactly the given test cases."""

    @abstractmethod
    def end_session(self) -> None:
        """Ask the console to end the session and exit."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the local end of the connection."""

    @abstractmethod
    def on_process_exited(self) -> None:
        """Release any request still waiting on the exited console."""


# =============================================================================
# Caller-supplied capabilities
# =============================================================================


class TestDiscoveryEventsHandler(ABC):
    """Receives discovery progress and completion."""
    __test__ = False

    @abstractmethod
    def handle_discovered_tests(self, test_cases: Sequence["TestCase"]) -> None:
        ...

    @abstractmethod
    def handle_discovery_complete(
        self,
        total_tests: int,
        last_chunk: Optional[Sequence["TestCase"]],
        is_aborted: bool,
    ) -> None:
        ...

    @abstractmethod
    def handle_log_message(self, level: "TestMessageLevel", message: str) -> None:
        ...

    @abstractmethod
    def handle_raw_message(self, raw_message: str) -> None:
        ...


class TestRunEventsHandler(ABC):
    """Receives run progress and completion."""
    __test__ = False

    @abstractmethod
    def handle_test_run_stats_change(self, stats: Any) -> None:
        ...

    @abstractmethod
    def handle_test_run_complete(
        self,
        complete_args: Any,
        last_chunk_args: Any,
        attachments: Optional[Sequence[Any]],
        executor_uris: Optional[Sequence[str]],
    ) -> None:
        ...

    @abstractmethod
    def handle_log_message(self, level: "TestMessageLevel", message: str) -> None:
        ...

    @abstractmethod
    def handle_raw_message(self, raw_message: str) -> None:
        ...

    @abstractmethod
    def launch_process_with_debugger_attached(self, start_info: Any) -> int:
        """Launch a process under the debugger and return its pid."""


class TestHostLauncher(ABC):
    """Launches the test host under caller control, e.g. for debugging."""
    __test__ = False

    @property
    @abstractmethod
    def is_debug(self) -> bool:
        ...

    @abstractmethod
    def launch_test_host(self, start_info: Any) -> int:
        """Launch the test host and return its pid."""
