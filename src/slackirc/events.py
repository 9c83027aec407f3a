"""Event payloads and per-collaborator subscription tables."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

# IRC events the relay subscribes to
IRC_EVENTS = (
    "registered",
    "error",
    "message",
    "notice",
    "action",
    "topic",
    "kick",
    "kill",
    "invite",
    "whois",
    "join",
    "part",
    "quit",
    "nick",
    "+mode",
    "-mode",
)

# Slack events the relay subscribes to
SLACK_EVENTS = ("open", "error", "presence_change", "message")

Handler = Callable[..., Any]


@dataclass
class SlackUser:
    """Cached Slack user."""

    id: str
    name: str


@dataclass
class SlackChannel:
    """Cached Slack conversation: public channel, private group or DM."""

    id: str
    name: str
    is_channel: bool = False
    is_group: bool = False
    is_im: bool = False
    is_member: bool = False
    members: list[str] = field(default_factory=list)
    user: str | None = None  # DM counterpart user id


@dataclass
class SlackMessage:
    """Inbound Slack message event."""

    channel: str
    user: str | None
    text: str
    type: str = "message"
    subtype: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    def get_body(self) -> str:
        """Message text, with attachment fallbacks appended (bot/app shares)."""
        parts = [self.text] if self.text else []
        for attachment in self.raw.get("attachments") or []:
            if isinstance(attachment, dict) and attachment.get("fallback"):
                parts.append(str(attachment["fallback"]))
        return "\n".join(parts)


@dataclass
class IrcError:
    """IRC numeric error reply (400-599)."""

    command: str
    args: list[str] = field(default_factory=list)


@dataclass
class Whois:
    """Completed WHOIS reply. Optional fields are None when the server omitted them."""

    nick: str
    user: str = ""
    host: str = ""
    realname: str = ""
    server: str = ""
    serverinfo: str = ""
    account: str | None = None
    accountinfo: str = "is logged in as"
    away: str | None = None
    idle: int | None = None


class Dispatcher:
    """Subscription table: event kind -> ordered handlers.

    One table per collaborator connection; the relay wires it once at start.
    A failing handler is logged and does not stop the remaining handlers.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    @property
    def name(self) -> str:
        return self._name

    def on(self, kind: str, handler: Handler) -> None:
        """Subscribe ``handler`` to ``kind``."""
        self._handlers[kind].append(handler)

    def off(self, kind: str, handler: Handler) -> None:
        """Unsubscribe ``handler`` from ``kind``."""
        handlers = self._handlers.get(kind)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def handlers(self, kind: str) -> list[Handler]:
        return list(self._handlers.get(kind, ()))

    def kinds(self) -> list[str]:
        return [k for k, v in self._handlers.items() if v]

    def emit(self, kind: str, *args: Any) -> None:
        """Call every handler of ``kind`` in subscription order."""
        for handler in self.handlers(kind):
            try:
                handler(*args)
            except Exception as exc:
                logger.exception("Failed to handle {} event {}: {}", self._name, kind, exc)
