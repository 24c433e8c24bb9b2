"""Runtime settings loaded from the environment.

Command-line flags override these values in ``fleetsync.cli``.
"""

import os
from dataclasses import dataclass

# Default wait timeouts in seconds, per operation.
PEERING_CREATE_TIMEOUT = 45.0
PEERING_DELETE_TIMEOUT = 15.0
FLEET_ACTIVE_TIMEOUT = 70 * 60.0
FLEET_DELETE_TIMEOUT = 20 * 60.0
BUILD_READY_TIMEOUT = 60.0


def _env_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class Settings:
    """Process-wide defaults for talking to GameLift and polling it."""

    region: str | None = None
    poll_interval: float = 2.0
    max_concurrent: int = 5

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        settings = cls(
            region=os.getenv("FLEETSYNC_REGION") or None,
            poll_interval=_env_number("FLEETSYNC_POLL_INTERVAL", "2.0", float),
            max_concurrent=_env_number("FLEETSYNC_MAX_CONCURRENT", "5", int),
        )
        if settings.poll_interval <= 0:
            raise ValueError("FLEETSYNC_POLL_INTERVAL must be positive")
        if settings.max_concurrent < 1:
            raise ValueError("FLEETSYNC_MAX_CONCURRENT must be at least 1")
        return settings
