"""Config schema and accessor."""

from __future__ import annotations

import os
from typing import Any

from loguru import logger

from slackirc.core.errors import ConfigurationError

REQUIRED_FIELDS = ("server", "nickname", "slack_user", "channel_mapping", "token", "app_token")

# Env keys that override config (loaded once per reload)
_ENV_OVERRIDE_KEYS = (
    "SLACK_BOT_TOKEN",
    "SLACK_APP_TOKEN",
)

DEFAULT_REMEMBER_RECIPIENTS_MS = 1000 * 60 * 10
DEFAULT_AVATAR_URL_TEMPLATE = "https://robohash.org/{nick}.png?size=48x48"


def _load_env_overrides() -> dict[str, str]:
    return {k: os.environ.get(k, "") for k in _ENV_OVERRIDE_KEYS}


class Config:
    """Config accessor with attribute-style access for known keys."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}
        self._env: dict[str, str] = _load_env_overrides()

    def reload(self, data: dict[str, Any], *, validate: bool = True) -> None:
        """Replace config data; raise ConfigurationError when ``validate`` and invalid."""
        self._data = data or {}
        self._env = _load_env_overrides()
        if validate:
            self._validate()
        logger.debug("Config reloaded: {} channel mappings", len(self.channel_mapping))

    def _validate(self) -> None:
        for name in REQUIRED_FIELDS:
            if name == "token":
                value = self.token
            elif name == "app_token":
                value = self.app_token
            else:
                value = self._data.get(name)
            if not value:
                raise ConfigurationError(
                    f"Missing configuration field {name}",
                    code="missing_field",
                    details={"field": name},
                )
        mapping = self._data.get("channel_mapping")
        if not isinstance(mapping, dict):
            raise ConfigurationError(
                "channel_mapping must be a mapping of Slack channel to IRC channel",
                code="invalid_channel_mapping",
                details={"type": type(mapping).__name__},
            )
        commands = self._data.get("auto_send_commands")
        if commands is not None and not (
            isinstance(commands, list) and all(isinstance(c, list) and c for c in commands)
        ):
            raise ConfigurationError(
                "auto_send_commands must be a list of non-empty argument lists",
                code="invalid_auto_send_commands",
            )

    @property
    def server(self) -> str:
        return str(self._data.get("server", ""))

    @property
    def nickname(self) -> str:
        return str(self._data.get("nickname", ""))

    @property
    def slack_user(self) -> str:
        """Slack handle of the human the bridge speaks for."""
        return str(self._data.get("slack_user", ""))

    @property
    def token(self) -> str:
        """Slack bot token (xoxb-). SLACK_BOT_TOKEN wins over the file."""
        return self._env.get("SLACK_BOT_TOKEN") or str(self._data.get("token") or "")

    @property
    def app_token(self) -> str:
        """Slack app-level token (xapp-) for Socket Mode."""
        return self._env.get("SLACK_APP_TOKEN") or str(self._data.get("app_token") or "")

    @property
    def channel_mapping(self) -> dict[str, str]:
        m = self._data.get("channel_mapping")
        if not isinstance(m, dict):
            return {}
        return {str(k): str(v) for k, v in m.items()}

    @property
    def irc_options(self) -> dict[str, Any]:
        val = self._data.get("irc_options")
        return dict(val) if isinstance(val, dict) else {}

    @property
    def irc_port(self) -> int:
        return int(self.irc_options.get("port", 6667))

    @property
    def irc_tls(self) -> bool:
        return bool(self.irc_options.get("tls", False))

    @property
    def irc_tls_verify(self) -> bool:
        return bool(self.irc_options.get("tls_verify", True))

    @property
    def irc_status_notices(self) -> dict[str, bool]:
        val = self._data.get("irc_status_notices")
        if not isinstance(val, dict):
            return {}
        return {str(k): bool(v) for k, v in val.items()}

    @property
    def remember_recipients_for(self) -> float:
        """DM recipient memory TTL in seconds (configured in milliseconds)."""
        ms = self._data.get("remember_recipients_for")
        if ms is None:
            ms = DEFAULT_REMEMBER_RECIPIENTS_MS
        return float(ms) / 1000

    @property
    def auto_send_commands(self) -> list[list[str]]:
        val = self._data.get("auto_send_commands")
        if not isinstance(val, list):
            return []
        return [[str(arg) for arg in cmd] for cmd in val if isinstance(cmd, list) and cmd]

    @property
    def raw_command_allowlist(self) -> frozenset[str] | None:
        """Upper-case IRC verbs the human may send raw. None = unrestricted."""
        val = self._data.get("raw_command_allowlist")
        if not isinstance(val, list):
            return None
        return frozenset(str(c).upper() for c in val)

    @property
    def avatar_url_template(self) -> str:
        return str(self._data.get("avatar_url_template") or DEFAULT_AVATAR_URL_TEMPLATE)

    @property
    def slack_presence_poll_seconds(self) -> float:
        return float(self._data.get("slack_presence_poll_seconds", 60))


cfg: Config = Config({})
