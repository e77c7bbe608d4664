"""
Async wrapper around a test console session.

The wrapper launches the test console on demand, performs the handshake,
remembers the test adapters it was given so a relaunched console is
configured the same way, and forwards discovery and run requests.

Usage:
    wrapper = VsTestConsoleWrapper.create(request_sender)
    await wrapper.initialize_extensions(["/adapters/MSTest.TestAdapter.dll"])
    await wrapper.discover_tests(["tests.dll"], None, discovery_handler)
    wrapper.end_session()

    # Or as a context manager
    async with VsTestConsoleWrapper.create(request_sender) as wrapper:
        await wrapper.run_tests(["tests.dll"], run_settings, run_handler)
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from vstest_bridge._core.handshake import get_connection_timeout, initialize_communication
from vstest_bridge._core.lifecycle import ConsoleProcessManager
from vstest_bridge._core.parameters import ConsoleParameters
from vstest_bridge.errors import SessionEndedError
from vstest_bridge.interfaces import (
    ProcessManager,
    RequestSender,
    TestDiscoveryEventsHandler,
    TestHostLauncher,
    TestRunEventsHandler,
)
from vstest_bridge.types import SessionState, TestCase, TestPlatformOptions

logger = logging.getLogger(__name__)

Source = Union[str, "os.PathLike[str]"]


class VsTestConsoleWrapper:
    """
    Orchestrates a single test console session.

    Every public operation first passes the readiness gate, which launches
    the console and completes the handshake if no console is running. Only
    one launch happens at a time even when operations race.

    Attributes:
        console_parameters: Launch parameters, updated before each launch
    """

    def __init__(
        self,
        request_sender: RequestSender,
        process_manager: ProcessManager,
        console_parameters: Optional[ConsoleParameters] = None,
        connection_timeout: Optional[float] = None,
    ) -> None:
        self._request_sender = request_sender
        self._process_manager = process_manager
        self.console_parameters = console_parameters or ConsoleParameters()
        self._connection_timeout = connection_timeout

        self._extension_paths: List[str] = []
        self._state = SessionState.NOT_STARTED
        self._init_lock: Optional[asyncio.Lock] = None

        self._process_manager.add_process_exited_handler(self._on_process_exited)

    @classmethod
    def create(
        cls,
        request_sender: RequestSender,
        console_path: Optional[Union[str, Path]] = None,
        console_parameters: Optional[ConsoleParameters] = None,
        connection_timeout: Optional[float] = None,
    ) -> "VsTestConsoleWrapper":
        """
        Create a wrapper that runs the console as a local child process.

        Args:
            request_sender: Sender owning the connection to the console
            console_path: Console executable (default: VSTEST_CONSOLE_PATH or PATH)
            console_parameters: Launch parameters (default: from environment)
            connection_timeout: Handshake timeout in seconds

        Returns:
            A wrapper in the NOT_STARTED state
        """
        return cls(
            request_sender,
            ConsoleProcessManager(console_path),
            console_parameters or ConsoleParameters.from_environment(),
            connection_timeout,
        )

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def extension_paths(self) -> List[str]:
        """Every extension path received so far, in order."""
        return list(self._extension_paths)

    @property
    def connection_timeout(self) -> float:
        if self._connection_timeout is not None:
            return self._connection_timeout
        return get_connection_timeout()

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    async def start_session(self) -> None:
        """
        Launch the console and complete the handshake.

        Raises:
            CommunicationError: If the handshake fails
            SessionEndedError: If the session was ended
        """
        await self._ensure_initialized()

    def end_session(self) -> None:
        """
        End the session and close the connection.

        Only the first call talks to the console; later calls do nothing.
        The connection is closed even if ending the session fails.
        """
        if self._state == SessionState.ENDED:
            return
        self._state = SessionState.ENDED

        logger.info("Ending test console session")
        try:
            self._request_sender.end_session()
        finally:
            self._request_sender.close()

    # -------------------------------------------------------------------------
    # Extensions
    # -------------------------------------------------------------------------

    async def initialize_extensions(self, paths: Iterable[str]) -> None:
        """
        Load test adapters into the console.

        Paths accumulate across calls and the whole set is sent every time,
        so a relaunched console ends up with every adapter.

        Raises:
            CommunicationError: If the handshake fails
            SessionEndedError: If the session was ended
        """
        self._check_not_ended()

        # A relaunch inside the gate resends only what earlier calls cached
        await self._ensure_initialized()
        self._extension_paths.extend(paths)

        logger.debug(f"Sending {len(self._extension_paths)} extension path(s)")
        await self._request_sender.initialize_extensions(list(self._extension_paths))

    # -------------------------------------------------------------------------
    # Discovery and runs
    # -------------------------------------------------------------------------

    async def discover_tests(
        self,
        sources: Sequence[Source],
        run_settings: Optional[str],
        events_handler: TestDiscoveryEventsHandler,
        options: Optional[TestPlatformOptions] = None,
    ) -> None:
        """
        Start test discovery.

        Returns once the request is dispatched. Discovered tests and
        completion are delivered to events_handler.

        Raises:
            CommunicationError: If the handshake fails
            SessionEndedError: If the session was ended
        """
        await self._ensure_initialized()

        logger.debug(f"Dispatching discovery for {len(sources)} source(s)")
        await self._request_sender.discover_tests(
            sources, run_settings, events_handler, options=options
        )

    async def run_tests(
        self,
        sources_or_test_cases: Union[Sequence[Source], Sequence[TestCase]],
        run_settings: Optional[str],
        events_handler: TestRunEventsHandler,
        options: Optional[TestPlatformOptions] = None,
    ) -> None:
        """
        Start a test run.

        Pass source paths to run everything they contain, or TestCase
        objects to run exactly those tests.

        Raises:
            TypeError: If sources and test cases are mixed
            CommunicationError: If the handshake fails
            SessionEndedError: If the session was ended
        """
        await self._start_run(sources_or_test_cases, run_settings, events_handler, options)

    async def run_tests_with_custom_test_host(
        self,
        sources_or_test_cases: Union[Sequence[Source], Sequence[TestCase]],
        run_settings: Optional[str],
        events_handler: TestRunEventsHandler,
        test_host_launcher: TestHostLauncher,
        options: Optional[TestPlatformOptions] = None,
    ) -> None:
        """Start a test run whose test host is launched by test_host_launcher."""
        await self._start_run(
            sources_or_test_cases, run_settings, events_handler, options, test_host_launcher
        )

    async def _start_run(
        self,
        payload: Union[Sequence[Source], Sequence[TestCase]],
        run_settings: Optional[str],
        events_handler: TestRunEventsHandler,
        options: Optional[TestPlatformOptions],
        launcher: Optional[TestHostLauncher] = None,
    ) -> None:
        selected = _is_test_case_payload(payload)

        await self._ensure_initialized()

        if selected:
            logger.debug(f"Dispatching run for {len(payload)} selected test(s)")
            await self._request_sender.start_test_run_with_selected_tests(
                payload, run_settings, events_handler,
                options=options, custom_host_launcher=launcher,
            )
        else:
            logger.debug(f"Dispatching run for {len(payload)} source(s)")
            await self._request_sender.start_test_run(
                payload, run_settings, events_handler,
                options=options, custom_host_launcher=launcher,
            )

    # -------------------------------------------------------------------------
    # Readiness gate
    # -------------------------------------------------------------------------

    def _get_lock(self) -> asyncio.Lock:
        # Created lazily so the lock belongs to the loop that first uses it
        if self._init_lock is None:
            self._init_lock = asyncio.Lock()
        return self._init_lock

    def _check_not_ended(self) -> None:
        if self._state == SessionState.ENDED:
            raise SessionEndedError("Test console session has been ended")

    async def _ensure_initialized(self) -> None:
        self._check_not_ended()

        if self._process_manager.is_process_initialized():
            return

        async with self._get_lock():
            # Another caller may have launched the console while we waited
            self._check_not_ended()
            if self._process_manager.is_process_initialized():
                return

            port = await initialize_communication(
                self._request_sender, self.connection_timeout
            )

            self.console_parameters.parent_process_id = os.getpid()
            self.console_parameters.port_number = port

            logger.info(f"Starting test console session on port {port}")
            await self._process_manager.start_process(self.console_parameters)
            self._state = SessionState.COMMUNICATION_ESTABLISHED

            # A fresh console knows nothing about previously loaded adapters
            if self._extension_paths:
                await self._request_sender.initialize_extensions(list(self._extension_paths))

    def _on_process_exited(self) -> None:
        logger.warning("Test console process exited")
        if self._state == SessionState.COMMUNICATION_ESTABLISHED:
            self._state = SessionState.NOT_STARTED
        self._request_sender.on_process_exited()

    # -------------------------------------------------------------------------
    # Context manager
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "VsTestConsoleWrapper":
        await self.start_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            self.end_session()
        finally:
            await self._process_manager.shutdown_process()


def _is_test_case_payload(payload: Sequence[object]) -> bool:
    """True for TestCase payloads, False for source paths."""
    test_cases = sum(1 for item in payload if isinstance(item, TestCase))
    if test_cases == 0:
        return False
    if test_cases == len(payload):
        return True
    raise TypeError("Cannot mix sources and TestCase objects in one run")
