from __future__ import annotations

import json

from models.settings import Settings
from networks import Network
from utils import APP_HOME_ENV, get_app_dir, get_logs_dir, get_settings_path


def test_defaults_when_missing(tmp_path):
    settings = Settings.load(tmp_path / "settings.json")
    assert settings == Settings()
    assert settings.session_timeout_minutes == 30
    assert settings.network is Network.DEVNET


def test_save_and_load(tmp_path):
    path = tmp_path / "settings.json"
    settings = Settings(
        network=Network.TESTNET,
        custom_rpcs={Network.MAINNET: "https://rpc.example.com"},
        session_timeout_minutes=5,
        enforce_password_strength=True,
        log_retention_days=7,
        log_lines_on_startup=100,
    )
    settings.save(path)

    on_disk = json.loads(path.read_text())
    assert on_disk["network"] == "testnet"
    assert on_disk["custom_rpcs"] == {"mainnet": "https://rpc.example.com"}
    assert Settings.load(path) == settings


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{ not json")
    assert Settings.load(path) == Settings()

    path.write_text("[1, 2, 3]")
    assert Settings.load(path) == Settings()


def test_invalid_values_are_ignored():
    settings = Settings.from_dict({
        "network": "moon",
        "custom_rpcs": {"devnet": "  ", "nowhere": "http://x", "testnet": "http://t"},
        "session_timeout_minutes": -1,
        "log_retention_days": True,
        "enforce_password_strength": "yes",
    })
    assert settings.network is Network.DEVNET
    assert settings.custom_rpcs == {Network.TESTNET: "http://t"}
    assert settings.session_timeout_minutes == 30
    assert settings.log_retention_days == 0
    assert settings.enforce_password_strength is False


def test_app_dir_override(tmp_path, monkeypatch):
    home = tmp_path / "wallet-home"
    monkeypatch.setenv(APP_HOME_ENV, str(home))

    assert get_app_dir() == home
    assert home.is_dir()
    assert get_settings_path() == home / "settings.json"
    assert get_logs_dir() == home / "logs"
