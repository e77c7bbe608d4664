"""
Exception types for vstest-bridge.

Provides typed exceptions for:
- Communication (handshake) failures with the test console
- Unexpected console process termination
- Use of a session after it has been ended
"""

from __future__ import annotations

from typing import Optional


class VsTestBridgeError(Exception):
    """Base exception for all vstest-bridge errors."""
    pass


# =============================================================================
# Communication Errors
# =============================================================================


class CommunicationError(VsTestBridgeError):
    """
    Raised when communication with the test console cannot be established.

    This includes:
    - Handshake returning a non-positive port
    - Handshake timing out
    - Console process failing to start

    The wrapper never retries on its own; callers may retry the operation.

    Example:
        try:
            await wrapper.start_session()
        except CommunicationError as e:
            logger.error(f"Could not reach test console: {e}")
    """

    def __init__(self, message: str, port: Optional[int] = None):
        self.port = port
        super().__init__(message)

    def __repr__(self) -> str:
        return f"CommunicationError({str(self)!r}, port={self.port!r})"


class ConsoleNotFoundError(CommunicationError):
    """Raised when the test console executable cannot be located or launched."""
    pass


# =============================================================================
# Session Errors
# =============================================================================


class ProcessTerminatedError(VsTestBridgeError):
    """
    Raised when the test console exits while a request is outstanding.

    The wrapper only forwards the exit notification; RequestSender
    implementations raise this to release callers awaiting a response.

    Example:
        def on_process_exited(self) -> None:
            self._pending.set_exception(ProcessTerminatedError("Test console exited"))
    """

    def __init__(self, message: str, exit_code: Optional[int] = None):
        self.exit_code = exit_code
        super().__init__(message)


class SessionEndedError(VsTestBridgeError):
    """Raised when an operation is attempted after end_session()."""
    pass
