"""
Version constants for vstest-bridge.
"""

from __future__ import annotations

# vstest-bridge version (user-facing semver)
BRIDGE_VERSION = "0.1.0"
