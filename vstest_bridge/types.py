"""
Type definitions for vstest-bridge.

Defines enums and dataclasses used across the package for:
- Session lifecycle state
- Test identities and run options forwarded to the test console
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SessionState(str, Enum):
    """
    Lifecycle state of a test console session.

    - NOT_STARTED: No console process, or the previous one exited.
      The next operation launches a new console.
    - COMMUNICATION_ESTABLISHED: Console started and handshake completed.
    - ENDED: end_session() was called. Terminal.
    """
    NOT_STARTED = "not_started"
    COMMUNICATION_ESTABLISHED = "communication_established"
    ENDED = "ended"


class TraceLevel(str, Enum):
    """Diagnostic trace verbosity passed to the console with /tracelevel."""
    OFF = "off"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    VERBOSE = "verbose"


class TestMessageLevel(str, Enum):
    """Severity of log messages delivered to event handlers."""
    __test__ = False

    INFORMATIONAL = "informational"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class TestCase:
    """
    A fully resolved test case.

    The wrapper forwards test cases to the console untouched; only the
    console and the adapter identified by executor_uri interpret them.

    Attributes:
        fully_qualified_name: Name that uniquely identifies the test
        executor_uri: URI of the adapter that executes the test
        source: Path to the test container holding the test
        display_name: Human readable name (defaults to fully_qualified_name)
        id: Optional stable identifier assigned by the adapter
    """
    __test__ = False

    fully_qualified_name: str
    executor_uri: str
    source: str
    display_name: Optional[str] = None
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.display_name is None:
            self.display_name = self.fully_qualified_name


@dataclass
class TestPlatformOptions:
    """
    Options forwarded with discovery and run requests.

    Attributes:
        test_case_filter: Filter expression applied by the console
        filter_options: Extra filter options understood by the console
        collect_metrics: Ask the console to collect telemetry metrics
        skip_default_adapters: Only load explicitly initialized extensions
    """
    __test__ = False

    test_case_filter: Optional[str] = None
    filter_options: dict = field(default_factory=dict)
    collect_metrics: bool = False
    skip_default_adapters: bool = False
