"""Mock connections for testing the relay without real IRC or Slack."""

from __future__ import annotations

from typing import Any

from slackirc.events import Dispatcher, SlackChannel, SlackUser


class MockIRCConnection:
    """Captures everything the relay asks IRC to do."""

    def __init__(self) -> None:
        self.events = Dispatcher("irc")
        self.sent: list[tuple[str, ...]] = []
        self.said: list[tuple[str, str]] = []
        self.joined: list[str] = []

    def send(self, command: str, *args: str) -> None:
        self.sent.append((command, *args))

    def say(self, target: str, text: str) -> None:
        self.said.append((target, text))

    def join(self, channel: str) -> None:
        self.joined.append(channel)

    def clear(self) -> None:
        """Clear captured calls."""
        self.sent.clear()
        self.said.clear()
        self.joined.clear()


class MockSlackConnection:
    """In-memory Slack workspace; captures posts and bot messages."""

    def __init__(self) -> None:
        self.events = Dispatcher("slack")
        self.users: dict[str, SlackUser] = {}
        self.channels: dict[str, SlackChannel] = {}
        self.posted: list[dict[str, Any]] = []
        self.sent: list[tuple[str, str]] = []

    def add_user(self, user_id: str, name: str) -> SlackUser:
        user = SlackUser(user_id, name)
        self.users[user_id] = user
        return user

    def add_channel(self, channel: SlackChannel) -> SlackChannel:
        self.channels[channel.id] = channel
        return channel

    def get_user_by_id(self, user_id: str) -> SlackUser | None:
        return self.users.get(user_id)

    def get_channel_by_id(self, channel_id: str) -> SlackChannel | None:
        return self.channels.get(channel_id)

    def get_channel_group_or_dm_by_id(self, channel_id: str) -> SlackChannel | None:
        return self.channels.get(channel_id)

    def get_channel_group_or_dm_by_name(self, name: str) -> SlackChannel | None:
        name = name.lstrip("#")
        for kind in ("is_channel", "is_group"):
            for channel in self.channels.values():
                if getattr(channel, kind) and channel.name == name:
                    return channel
        for channel in self.channels.values():
            if channel.is_im and channel.user and self.users.get(channel.user, SlackUser("", "")).name == name:
                return channel
        return None

    def post_message(
        self,
        channel: SlackChannel,
        text: str,
        *,
        username: str,
        parse: str = "full",
        icon_url: str | None = None,
    ) -> None:
        self.posted.append(
            {"channel": channel.id, "text": text, "username": username, "parse": parse, "icon_url": icon_url}
        )

    def send(self, channel: SlackChannel, text: str) -> None:
        self.sent.append((channel.id, text))

    def clear(self) -> None:
        """Clear captured calls."""
        self.posted.clear()
        self.sent.clear()
