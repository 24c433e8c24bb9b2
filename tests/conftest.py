"""Shared test fixtures."""

import pytest

from fleetsync.models import IpPermission, Protocol
from fleetsync.waiter import StateWaiter


class FakeClock:
    """Monotonic clock that only moves when something sleeps on it."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host FLEETSYNC_* settings out of tests."""
    for name in ("FLEETSYNC_REGION", "FLEETSYNC_POLL_INTERVAL", "FLEETSYNC_MAX_CONCURRENT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def aws_credentials(monkeypatch):
    """Set dummy AWS credentials so boto3 never looks for real ones."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def waiter(clock):
    """A waiter polling every second on the fake clock."""
    return StateWaiter(poll_interval=1.0, sleep=clock.sleep, clock=clock)


@pytest.fixture
def tcp_8443():
    return IpPermission(8443, 8443, "192.168.0.0/24", Protocol.TCP)


@pytest.fixture
def tcp_8888():
    return IpPermission(8888, 8888, "192.168.0.0/24", Protocol.TCP)


@pytest.fixture
def udp_8443():
    return IpPermission(8443, 8443, "192.168.0.0/24", Protocol.UDP)
