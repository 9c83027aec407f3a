"""Adapter base and the collaborator interfaces the relay depends on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from slackirc.events import Dispatcher, SlackChannel, SlackUser


class AdapterBase(ABC):
    """Thin base for protocol adapters: a name, an event table, start/stop."""

    events: Dispatcher

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter identifier ('irc' or 'slack')."""
        ...

    @abstractmethod
    async def start(self) -> None:
        """Start the adapter (connect, register handlers)."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop the adapter (disconnect, cleanup)."""
        ...


class IRCConnection(Protocol):
    """What the relay needs from the IRC side. Calls are fire-and-forget."""

    events: Dispatcher

    def send(self, command: str, *args: str) -> None: ...

    def say(self, target: str, text: str) -> None: ...

    def join(self, channel: str) -> None: ...


class SlackConnection(Protocol):
    """What the relay needs from the Slack side. Lookups hit a local cache and never block."""

    events: Dispatcher

    def get_user_by_id(self, user_id: str) -> SlackUser | None: ...

    def get_channel_by_id(self, channel_id: str) -> SlackChannel | None: ...

    def get_channel_group_or_dm_by_id(self, channel_id: str) -> SlackChannel | None: ...

    def get_channel_group_or_dm_by_name(self, name: str) -> SlackChannel | None: ...

    def post_message(
        self,
        channel: SlackChannel,
        text: str,
        *,
        username: str,
        parse: str = "full",
        icon_url: str | None = None,
    ) -> None: ...

    def send(self, channel: SlackChannel, text: str) -> None: ...
