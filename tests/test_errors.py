"""
Tests for vstest_bridge.errors module.
"""

import pytest
from vstest_bridge.errors import (
    VsTestBridgeError,
    CommunicationError,
    ConsoleNotFoundError,
    ProcessTerminatedError,
    SessionEndedError,
)


class TestVsTestBridgeError:
    """Tests for base VsTestBridgeError."""

    def test_is_exception(self):
        assert issubclass(VsTestBridgeError, Exception)

    def test_message(self):
        error = VsTestBridgeError("Test error message")
        assert str(error) == "Test error message"


class TestCommunicationError:
    """Tests for CommunicationError."""

    def test_inheritance(self):
        assert issubclass(CommunicationError, VsTestBridgeError)

    def test_message(self):
        error = CommunicationError("Error connecting to test console")
        assert "connecting" in str(error)
        assert error.port is None

    def test_with_port(self):
        error = CommunicationError("bad port", port=-1)
        assert error.port == -1
        assert "port=-1" in repr(error)

    def test_can_be_caught_as_base(self):
        with pytest.raises(VsTestBridgeError):
            raise CommunicationError("handshake failed")


class TestConsoleNotFoundError:
    """Tests for ConsoleNotFoundError."""

    def test_inherits_communication_error(self):
        assert issubclass(ConsoleNotFoundError, CommunicationError)

    def test_message(self):
        error = ConsoleNotFoundError("vstest.console not found")
        assert "vstest.console" in str(error)


class TestProcessTerminatedError:
    """Tests for ProcessTerminatedError."""

    def test_inheritance(self):
        assert issubclass(ProcessTerminatedError, VsTestBridgeError)
        assert not issubclass(ProcessTerminatedError, CommunicationError)

    def test_exit_code(self):
        error = ProcessTerminatedError("console exited", exit_code=3)
        assert error.exit_code == 3
        assert str(error) == "console exited"

    def test_exit_code_optional(self):
        assert ProcessTerminatedError("gone").exit_code is None


class TestSessionEndedError:
    """Tests for SessionEndedError."""

    def test_inheritance(self):
        assert issubclass(SessionEndedError, VsTestBridgeError)
