"""
Runtime configuration, read once from the environment.
"""

import os


def _env_float(name, default):
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None


# Which bus `open_bus()` connects to: "session" or "system"
MPRIS_BUS = os.getenv('MPRIS_BUS', 'session').strip().lower()

# Seconds to wait for a reply; -1 keeps the libdbus default
MPRIS_CALL_TIMEOUT = _env_float('MPRIS_CALL_TIMEOUT', '-1')

# Used by the example scripts; the library itself never installs handlers
MPRIS_LOG_LEVEL = os.getenv('MPRIS_LOG_LEVEL', 'WARNING').upper()
