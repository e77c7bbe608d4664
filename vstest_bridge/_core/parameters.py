"""
Launch parameters for the test console process.

ConsoleParameters is mutable: the wrapper fills in the port and the parent
process id right before each launch.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from platformdirs import user_log_dir

from vstest_bridge.types import TraceLevel

logger = logging.getLogger(__name__)

APP_NAME = "vstest-bridge"

_TRUTHY = ("1", "true", "yes", "on")


def get_log_dir() -> Path:
    """Get the directory where console diagnostic logs are written."""
    log_dir = Path(user_log_dir(APP_NAME, "vstest-bridge"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def default_log_file_path() -> str:
    """Diagnostic log file for a console launched by this process."""
    return str(get_log_dir() / f"vstest.console.{os.getpid()}.log")


@dataclass
class ConsoleParameters:
    """
    Parameters used to launch the test console.

    Attributes:
        port_number: Port the console connects back to (set by the wrapper)
        parent_process_id: Pid the console watches and exits with
        log_file_path: Enables console diagnostics when set
        trace_level: Verbosity of console diagnostics
        environment_variables: Extra variables for the console process
        inherit_environment_variables: Start from a copy of os.environ
        additional_arguments: Extra command-line flags, passed verbatim
    """
    port_number: int = 0
    parent_process_id: int = 0
    log_file_path: Optional[str] = None
    trace_level: TraceLevel = TraceLevel.VERBOSE
    environment_variables: Dict[str, str] = field(default_factory=dict)
    inherit_environment_variables: bool = True
    additional_arguments: List[str] = field(default_factory=list)

    @classmethod
    def from_environment(cls) -> "ConsoleParameters":
        """
        Build parameters from environment variables.

        Environment Variables:
            VSTEST_BRIDGE_DIAG: 1/true/yes enables a diagnostic log file
            VSTEST_BRIDGE_TRACE_LEVEL: off, error, warning, info or verbose
        """
        parameters = cls()

        if os.environ.get("VSTEST_BRIDGE_DIAG", "").strip().lower() in _TRUTHY:
            parameters.log_file_path = default_log_file_path()

        level = os.environ.get("VSTEST_BRIDGE_TRACE_LEVEL")
        if level:
            try:
                parameters.trace_level = TraceLevel(level.strip().lower())
            except ValueError:
                logger.warning(f"Ignoring unknown VSTEST_BRIDGE_TRACE_LEVEL: {level}")

        return parameters

    def to_arguments(self) -> List[str]:
        """Render the console command-line flags."""
        args = [
            f"/parentprocessid:{self.parent_process_id}",
            f"/port:{self.port_number}",
        ]
        if self.log_file_path:
            args.append(f"/diag:{self.log_file_path}")
            args.append(f"/tracelevel:{self.trace_level.value}")
        args.extend(self.additional_arguments)
        return args

    def build_environment(self) -> Dict[str, str]:
        """Environment for the console process."""
        env = dict(os.environ) if self.inherit_environment_variables else {}
        env.update(self.environment_variables)
        return env
