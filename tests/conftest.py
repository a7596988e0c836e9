"""Shared fixtures."""
import pytest

from fakes import ScriptedExecutor


@pytest.fixture
def executor():
    return ScriptedExecutor()


@pytest.fixture
def no_sleep(monkeypatch):
    """Skip settle delays and record them."""
    sleeps = []
    monkeypatch.setattr("adbwifi.wifi.commands.time.sleep", lambda s: sleeps.append(s))
    return sleeps
