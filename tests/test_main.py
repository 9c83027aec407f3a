"""Tests for the entrypoint wiring (slackirc/__main__.py)."""

from __future__ import annotations

import sys
from unittest.mock import patch

import pytest
import yaml

from slackirc.__main__ import build, main, reload_config

CONFIG = {
    "server": "irc.example",
    "nickname": "bridge",
    "slack_user": "alice",
    "token": "xoxb-test",
    "app_token": "xapp-test",
    "channel_mapping": {"#general": "#general", "ops": "#ops key"},
    "irc_options": {"port": 6697, "tls": True},
}


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(CONFIG))
    return path


class TestBuild:
    @pytest.mark.asyncio
    async def test_wires_adapters_and_relay(self, config_file):
        # Arrange
        config = reload_config(config_file)

        # Act
        irc, slack, relay = build(config)

        # Assert
        assert irc.client._autojoin == ["#general", "#ops key"]
        assert relay.channel_mapping.to_irc("ops") == "#ops"
        assert irc.events.handlers("message")
        assert slack.events.handlers("message")


class TestMain:
    def test_missing_config_exits(self, tmp_path):
        with patch.object(sys, "argv", ["slackirc", "--config", str(tmp_path / "missing.yaml")]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1

    def test_missing_app_token_exits(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SLACK_APP_TOKEN", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({k: v for k, v in CONFIG.items() if k != "app_token"}))
        with patch.object(sys, "argv", ["slackirc", "-c", str(path)]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 2

    def test_invalid_config_exits(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SLACK_BOT_TOKEN", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"server": "irc.example"}))
        with patch.object(sys, "argv", ["slackirc", "-c", str(path)]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 2
