import pytest

from helpers import FakeWeb


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    sleeps = []
    monkeypatch.setattr("SteamInventoryApi.transport.time.sleep", lambda seconds: sleeps.append(seconds))
    return sleeps


@pytest.fixture
def fake_web():
    return FakeWeb()
