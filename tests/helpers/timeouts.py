"""Centralized test timeout configuration.

Process-lifecycle tests wait on real processes; these values keep them
reliable on slow CI machines.

Environment variables:
- TEST_TIMEOUT_MULTIPLIER: Multiply all timeouts by this factor (default: 1.0)
- TEST_POLL_INTERVAL: Poll interval for state checks (default: 0.05)
- TEST_STARTUP_TIMEOUT: Startup timeout handed to scratchmongo (default: 15.0)
- TEST_PROCESS_WAIT_TIMEOUT: Timeout for process exit checks (default: 10.0)
"""
from __future__ import annotations

import os
import time
from typing import Callable


def _get_float_env(name: str, default: float) -> float:
    """Get float from environment variable with fallback."""
    try:
        return float(os.environ.get(name, str(default)))
    except (ValueError, TypeError):
        return default


# Global timeout multiplier for CI environments
TIMEOUT_MULTIPLIER = _get_float_env("TEST_TIMEOUT_MULTIPLIER", 1.0)

POLL_INTERVAL = _get_float_env("TEST_POLL_INTERVAL", 0.05)
STARTUP_TIMEOUT = _get_float_env("TEST_STARTUP_TIMEOUT", 15.0) * TIMEOUT_MULTIPLIER
PROCESS_WAIT_TIMEOUT = _get_float_env("TEST_PROCESS_WAIT_TIMEOUT", 10.0) * TIMEOUT_MULTIPLIER

# Deliberately short deadline for timeout-path tests
SHORT_STARTUP_TIMEOUT = 0.5 * TIMEOUT_MULTIPLIER


def wait_for_condition(
    condition: Callable[[], bool],
    timeout: float | None = None,
    poll_interval: float | None = None,
) -> bool:
    """Wait for a condition to be true with configurable timeout.

    Returns:
        True if condition met within timeout, False otherwise
    """
    timeout = timeout if timeout is not None else PROCESS_WAIT_TIMEOUT
    poll_interval = poll_interval if poll_interval is not None else POLL_INTERVAL

    deadline = time.time() + timeout
    while time.time() < deadline:
        if condition():
            return True
        time.sleep(poll_interval)
    return condition()
