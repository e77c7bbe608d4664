"""
Test console process lifecycle management.

Handles:
- Locating the console executable
- Launching the console with its launch parameters
- Watching the process and reporting unexpected exits
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Union

from vstest_bridge._core.parameters import ConsoleParameters
from vstest_bridge.errors import ConsoleNotFoundError
from vstest_bridge.interfaces import ProcessManager

logger = logging.getLogger(__name__)

CONSOLE_PATH_ENV = "VSTEST_CONSOLE_PATH"
CONSOLE_NAMES = ("vstest.console", "vstest.console.exe")


def locate_console(path: Optional[Union[str, Path]] = None) -> Path:
    """
    Find the test console executable.

    Lookup order: explicit path, VSTEST_CONSOLE_PATH, then PATH.

    Environment Variables:
        VSTEST_CONSOLE_PATH: Path to a local console executable

    Args:
        path: Explicit console path

    Returns:
        Path to the console

    Raises:
        ConsoleNotFoundError: If no console can be found
    """
    if path is not None:
        console = Path(path)
        if not console.exists():
            raise ConsoleNotFoundError(f"Test console not found at {console}")
        return console

    env_path = os.environ.get(CONSOLE_PATH_ENV)
    if env_path:
        console = Path(env_path)
        if console.exists():
            logger.info(f"Using test console from {CONSOLE_PATH_ENV}: {console}")
            return console
        else:
            logger.warning(f"{CONSOLE_PATH_ENV} set but file not found: {console}")

    for name in CONSOLE_NAMES:
        found = shutil.which(name)
        if found:
            return Path(found)

    raise ConsoleNotFoundError(
        f"Could not locate {CONSOLE_NAMES[0]}. Set {CONSOLE_PATH_ENV} "
        "or add the console to PATH."
    )


async def start_console_process(
    console_path: Path,
    parameters: ConsoleParameters,
) -> asyncio.subprocess.Process:
    """
    Start the test console process.

    Args:
        console_path: Path to the console executable
        parameters: Launch parameters (port and parent pid already set)

    Returns:
        The asyncio subprocess

    Raises:
        ConsoleNotFoundError: If the process fails to start
    """
    cmd = [str(console_path), *parameters.to_arguments()]

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
            env=parameters.build_environment(),
        )
    except OSError as e:
        raise ConsoleNotFoundError(f"Failed to start test console: {e}") from e

    logger.info(
        f"Started test console (PID: {process.pid}) on port {parameters.port_number}"
    )
    return process


class ConsoleProcessManager(ProcessManager):
    """
    Runs the test console as a child process.

    A watcher task waits on the process and notifies exit handlers when it
    terminates without shutdown_process() having been called. The process is
    not restarted here; the wrapper relaunches it on its next operation.
    """

    def __init__(self, console_path: Optional[Union[str, Path]] = None):
        super().__init__()
        self.console_path = Path(console_path) if console_path is not None else None

        self._process: Optional[asyncio.subprocess.Process] = None
        self._watcher_task: Optional[asyncio.Task] = None
        self._stopping = False

    def is_process_initialized(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start_process(self, parameters: ConsoleParameters) -> None:
        console = locate_console(self.console_path)
        self._stopping = False
        self._process = await start_console_process(console, parameters)
        self._watcher_task = asyncio.create_task(self._watch(self._process))

    async def shutdown_process(self) -> None:
        """Terminate the console gracefully, killing it after 5 seconds."""
        self._stopping = True

        process = self._process
        if process is not None and process.returncode is None:
            process.terminate()
            try:
                await asyncio.wait_for(process.wait(), timeout=5.0)
            except asyncio.TimeoutError:
                logger.warning(f"Test console (PID: {process.pid}) did not exit, killing")
                process.kill()
                await process.wait()

        if self._watcher_task:
            self._watcher_task.cancel()
            try:
                await self._watcher_task
            except asyncio.CancelledError:
                pass
            self._watcher_task = None

        self._process = None

    async def _watch(self, process: asyncio.subprocess.Process) -> None:
        return_code = await process.wait()

        if self._stopping:
            return  # Intentional shutdown

        logger.warning(f"Test console (PID: {process.pid}) exited with code {return_code}")
        self.notify_process_exited()

    @property
    def pid(self) -> Optional[int]:
        """Pid of the current console process, if any."""
        return self._process.pid if self._process is not None else None
