import json
import os

import pytest

import Steaminv
from helpers import STEAM_ID, FakeWeb, app_entry, inventory_url, page, profile_html, profile_url, raw_item
from utils import static


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Steaminv, "config", {})
    monkeypatch.setattr(Steaminv, "pause", lambda: None)
    monkeypatch.setattr(static, "no_pause", True)
    return tmp_path


@pytest.fixture
def notifications(monkeypatch):
    sent = []
    monkeypatch.setattr(Steaminv, "send_notification", lambda message, title="": sent.append((title, message)))
    return sent


def write_config(workdir, **fetcher):
    os.makedirs(workdir / "config", exist_ok=True)
    fetcher.setdefault("retry_delay_ms", 0)
    config = {"no_pause": True, "inventory_fetcher": fetcher}
    (workdir / "config" / "config.json5").write_text(json.dumps(config), encoding="utf-8")


def test_first_run_generates_config(workdir):
    assert Steaminv.main([]) == 0
    assert (workdir / "config" / "config.json5").exists()
    assert (workdir / "config" / "steam_account_info.json5").exists()


def test_invalid_config_fails(workdir):
    os.makedirs(workdir / "config")
    (workdir / "config" / "config.json5").write_text("{not json5", encoding="utf-8")

    assert Steaminv.main([]) == 1


def test_missing_steamid_fails(workdir):
    write_config(workdir)

    assert Steaminv.main([]) == 1


def test_fetches_and_notifies(workdir, notifications, monkeypatch):
    write_config(workdir, steamid=STEAM_ID)
    web = FakeWeb(
        {
            profile_url(): profile_html({"440": app_entry(440, "Team Fortress 2", [2]), "730": app_entry(730, "Counter-Strike 2", [2])}),
            inventory_url(440, 2): page(items=[raw_item(1, 10)]),
            inventory_url(730, 2): page(items=[raw_item(2, 20), raw_item(3, 30)]),
        }
    )
    monkeypatch.setattr(Steaminv, "create_steam_web", lambda config: web)

    assert Steaminv.main([]) == 0
    title, message = notifications[-1]
    assert title == "Inventory fetch finished"
    assert "Inventories: 2" in message
    assert "Items: 3" in message


def test_command_line_overrides_config(workdir, notifications, monkeypatch):
    write_config(workdir, steamid="76561198000000099")
    web = FakeWeb(
        {
            profile_url(): profile_html({"440": app_entry(440, "Team Fortress 2", [2]), "730": app_entry(730, "Counter-Strike 2", [2])}),
            inventory_url(440, 2): page(items=[raw_item(1, 10)]),
        }
    )
    monkeypatch.setattr(Steaminv, "create_steam_web", lambda config: web)

    assert Steaminv.main([STEAM_ID, "--app", "440"]) == 0
    assert web.count(inventory_url(730, 2)) == 0
    assert "Inventories: 1" in notifications[-1][1]


def test_private_profile(workdir, notifications, monkeypatch):
    write_config(workdir, steamid=STEAM_ID)
    web = FakeWeb({profile_url(): "<html>private</html>"})
    monkeypatch.setattr(Steaminv, "create_steam_web", lambda config: web)

    assert Steaminv.main([]) == 1
    assert notifications[-1][0] == "Inventory fetch failed"


def test_partial_failure_exit_code(workdir, notifications, monkeypatch):
    write_config(workdir, steamid=STEAM_ID)
    web = FakeWeb(
        {
            profile_url(): profile_html({"440": app_entry(440, "Team Fortress 2", [2]), "730": app_entry(730, "Counter-Strike 2", [2])}),
            inventory_url(440, 2): page(items=[raw_item(1, 10)]),
        }
    )
    monkeypatch.setattr(Steaminv, "create_steam_web", lambda config: web)

    assert Steaminv.main([]) == 2
    assert "Failed: 1" in notifications[-1][1]
