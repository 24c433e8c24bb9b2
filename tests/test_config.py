"""Tests for environment-based settings."""

import pytest

from fleetsync.config import Settings


def test_defaults():
    settings = Settings.from_env()

    assert settings.region is None
    assert settings.poll_interval == 2.0
    assert settings.max_concurrent == 5


def test_from_env_overrides(monkeypatch):
    monkeypatch.setenv("FLEETSYNC_REGION", "eu-west-1")
    monkeypatch.setenv("FLEETSYNC_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("FLEETSYNC_MAX_CONCURRENT", "10")

    settings = Settings.from_env()

    assert settings.region == "eu-west-1"
    assert settings.poll_interval == 0.5
    assert settings.max_concurrent == 10


def test_invalid_number_names_variable(monkeypatch):
    monkeypatch.setenv("FLEETSYNC_POLL_INTERVAL", "soon")

    with pytest.raises(ValueError, match="FLEETSYNC_POLL_INTERVAL"):
        Settings.from_env()


@pytest.mark.parametrize("value", ["0", "-1"])
def test_non_positive_poll_interval_rejected(monkeypatch, value):
    monkeypatch.setenv("FLEETSYNC_POLL_INTERVAL", value)

    with pytest.raises(ValueError, match="FLEETSYNC_POLL_INTERVAL must be positive"):
        Settings.from_env()


def test_zero_concurrency_rejected(monkeypatch):
    monkeypatch.setenv("FLEETSYNC_MAX_CONCURRENT", "0")

    with pytest.raises(ValueError, match="FLEETSYNC_MAX_CONCURRENT"):
        Settings.from_env()
