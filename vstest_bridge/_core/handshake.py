"""
Handshake with the test console and connection timeout configuration.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import TYPE_CHECKING

from vstest_bridge.errors import CommunicationError

if TYPE_CHECKING:
    from vstest_bridge.interfaces import RequestSender

logger = logging.getLogger(__name__)

# Seconds; matches the console's own default
DEFAULT_CONNECTION_TIMEOUT = 90.0

CONNECTION_TIMEOUT_ENV = "VSTEST_CONNECTION_TIMEOUT"


def get_connection_timeout() -> float:
    """
    Get the handshake timeout in seconds.

    Environment Variables:
        VSTEST_CONNECTION_TIMEOUT: Timeout in seconds (default 90)

    Returns:
        The configured timeout, or the default if unset or invalid
    """
    raw = os.environ.get(CONNECTION_TIMEOUT_ENV)
    if not raw:
        return DEFAULT_CONNECTION_TIMEOUT

    try:
        timeout = float(raw)
    except ValueError:
        logger.warning(f"Invalid {CONNECTION_TIMEOUT_ENV}={raw!r}, using default")
        return DEFAULT_CONNECTION_TIMEOUT

    if timeout <= 0:
        logger.warning(f"Non-positive {CONNECTION_TIMEOUT_ENV}={raw!r}, using default")
        return DEFAULT_CONNECTION_TIMEOUT

    return timeout


async def initialize_communication(
    request_sender: "RequestSender",
    timeout: float,
) -> int:
    """
    Run the handshake and validate the port it produces.

    Args:
        request_sender: Sender owning the connection
        timeout: Maximum time to wait in seconds

    Returns:
        The negotiated port (always positive)

    Raises:
        CommunicationError: If the handshake times out or yields a port <= 0
    """
    try:
        port = await asyncio.wait_for(
            request_sender.initialize_communication(timeout),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise CommunicationError(
            f"Test console handshake did not complete within {timeout}s"
        ) from e
    except Exception as e:
        raise CommunicationError(f"Error connecting to test console: {e}") from e

    if port <= 0:
        raise CommunicationError(
            f"Error connecting to test console: handshake returned port {port}",
            port=port,
        )

    logger.debug(f"Handshake completed on port {port}")
    return port
