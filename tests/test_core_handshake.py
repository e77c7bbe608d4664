"""Tests for vstest_bridge._core.handshake module."""

import asyncio
import os
from unittest.mock import AsyncMock, patch

import pytest

from vstest_bridge._core.handshake import (
    DEFAULT_CONNECTION_TIMEOUT,
    get_connection_timeout,
    initialize_communication,
)
from vstest_bridge.errors import CommunicationError


class TestGetConnectionTimeout:
    """Tests for get_connection_timeout function."""

    def test_default_when_unset(self):
        """Should fall back to the default."""
        env = {k: v for k, v in os.environ.items() if k != "VSTEST_CONNECTION_TIMEOUT"}
        with patch.dict(os.environ, env, clear=True):
            assert get_connection_timeout() == DEFAULT_CONNECTION_TIMEOUT

    def test_reads_environment(self):
        """Should parse the timeout in seconds."""
        with patch.dict(os.environ, {"VSTEST_CONNECTION_TIMEOUT": "30"}):
            assert get_connection_timeout() == 30.0

    def test_invalid_value_uses_default(self):
        """Unparseable values should be ignored."""
        with patch.dict(os.environ, {"VSTEST_CONNECTION_TIMEOUT": "soon"}):
            assert get_connection_timeout() == DEFAULT_CONNECTION_TIMEOUT

    def test_non_positive_value_uses_default(self):
        """Zero or negative values should be ignored."""
        with patch.dict(os.environ, {"VSTEST_CONNECTION_TIMEOUT": "-5"}):
            assert get_connection_timeout() == DEFAULT_CONNECTION_TIMEOUT


class TestInitializeCommunication:
    """Tests for initialize_communication function."""

    @pytest.mark.asyncio
    async def test_returns_port(self, mock_request_sender):
        """Should return the port from the sender."""
        mock_request_sender.initialize_communication.return_value = 4242

        port = await initialize_communication(mock_request_sender, timeout=1.0)

        assert port == 4242
        mock_request_sender.initialize_communication.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_negative_port_raises(self, mock_request_sender):
        """A negative port is the failure sentinel."""
        mock_request_sender.initialize_communication.return_value = -1

        with pytest.raises(CommunicationError) as exc_info:
            await initialize_communication(mock_request_sender, timeout=1.0)

        assert exc_info.value.port == -1
        assert "-1" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_zero_port_raises(self, mock_request_sender):
        """Zero is not a valid port."""
        mock_request_sender.initialize_communication.return_value = 0

        with pytest.raises(CommunicationError):
            await initialize_communication(mock_request_sender, timeout=1.0)

    @pytest.mark.asyncio
    async def test_unreachable_channel_raises(self, mock_request_sender):
        """Connection errors from the sender should become CommunicationError."""
        mock_request_sender.initialize_communication.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(CommunicationError) as exc_info:
            await initialize_communication(mock_request_sender, timeout=1.0)

        assert "refused" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)

    @pytest.mark.asyncio
    async def test_timeout_raises(self, mock_request_sender):
        """A handshake that never completes should time out."""
        async def hang(timeout):
            await asyncio.sleep(10)

        mock_request_sender.initialize_communication = AsyncMock(side_effect=hang)

        with pytest.raises(CommunicationError) as exc_info:
            await initialize_communication(mock_request_sender, timeout=0.01)

        assert "0.01" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)
