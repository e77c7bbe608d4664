"""
Core process management for vstest-bridge.

This module handles:
- Console launch parameters and their environment configuration
- Console process lifecycle (locate, start, watch, stop)
- The handshake and its timeout
"""

from vstest_bridge._core.version import BRIDGE_VERSION
from vstest_bridge._core.parameters import (
    ConsoleParameters,
    default_log_file_path,
    get_log_dir,
)
from vstest_bridge._core.lifecycle import (
    ConsoleProcessManager,
    locate_console,
    start_console_process,
)
from vstest_bridge._core.handshake import (
    DEFAULT_CONNECTION_TIMEOUT,
    get_connection_timeout,
    initialize_communication,
)

__all__ = [
    # Version
    "BRIDGE_VERSION",
    # Parameters
    "ConsoleParameters",
    "default_log_file_path",
    "get_log_dir",
    # Lifecycle
    "ConsoleProcessManager",
    "locate_console",
    "start_console_process",
    # Handshake
    "DEFAULT_CONNECTION_TIMEOUT",
    "get_connection_timeout",
    "initialize_communication",
]
