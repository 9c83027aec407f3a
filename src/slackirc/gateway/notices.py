"""Turn IRC protocol events (join, kick, mode, whois, ...) into Slack lines."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from slackirc.events import IrcError, Whois


@dataclass(frozen=True)
class NoticeFlags:
    """Which optional status notices are relayed. Fixed at start-up."""

    join: bool = False
    leave: bool = False
    change_nick: bool = False
    modes: bool = False

    @classmethod
    def from_config(cls, data: Mapping[str, Any] | None) -> NoticeFlags:
        data = data or {}
        return cls(
            join=bool(data.get("join", False)),
            leave=bool(data.get("leave", False)),
            change_nick=bool(data.get("change_nick", data.get("changeNick", False))),
            modes=bool(data.get("modes", False)),
        )


@dataclass(frozen=True)
class Notice:
    """One line for Slack. ``channel`` is an IRC channel or the bridge's own nick (-> the human's DM)."""

    channel: str
    text: str


Formatter = Callable[..., list[Notice]]


class NoticeTranslator:
    """Formatters keyed by IRC event kind.

    topic, kick, kill, error and whois are always on; join, part/quit, nick
    and +mode/-mode only when the matching flag is set.
    """

    def __init__(
        self,
        nickname: str,
        flags: NoticeFlags,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._nickname = nickname
        self._clock = clock
        self.flags = flags
        self._formatters: dict[str, Formatter] = {
            "topic": self._topic,
            "kick": self._kick,
            "kill": self._kill,
            "error": self._error,
            "whois": self._whois,
        }
        if flags.join:
            self._formatters["join"] = self._join
        if flags.leave:
            self._formatters["part"] = self._part
            self._formatters["quit"] = self._quit
        if flags.change_nick:
            self._formatters["nick"] = self._nick
        if flags.modes:
            self._formatters["+mode"] = self._mode_added
            self._formatters["-mode"] = self._mode_removed

    def kinds(self) -> list[str]:
        """Event kinds with an active formatter."""
        return list(self._formatters)

    def handles(self, kind: str) -> bool:
        return kind in self._formatters

    def translate(self, kind: str, *args: Any) -> list[Notice]:
        """Notices for one event; empty when the kind is disabled or suppressed."""
        formatter = self._formatters.get(kind)
        if formatter is None:
            return []
        return formatter(*args)

    @staticmethod
    def _fan_out(channels: Iterable[str], text: str) -> list[Notice]:
        return [Notice(channel, text) for channel in channels]

    def _topic(self, channel: str, topic: str, nick: str) -> list[Notice]:
        return [Notice(channel, f"*{nick}* has changed the topic to: *{topic}*")]

    def _kick(self, channel: str, nick: str, by: str, reason: str | None = None) -> list[Notice]:
        return [Notice(channel, f"*{by}* has kicked *{nick}* (_{reason or ''}_)")]

    def _kill(self, nick: str, reason: str | None, channels: Iterable[str]) -> list[Notice]:
        return self._fan_out(channels, f"*{nick}* has been killed (_{reason or ''}_)")

    def _join(self, channel: str, nick: str) -> list[Notice]:
        if nick == self._nickname:
            return []
        return [Notice(channel, f"*{nick}* has joined")]

    def _part(self, channel: str, nick: str, reason: str | None = None) -> list[Notice]:
        return [Notice(channel, f"*{nick}* has left (_{reason or ''}_)")]

    def _quit(self, nick: str, reason: str | None, channels: Iterable[str]) -> list[Notice]:
        return self._fan_out(channels, f"*{nick}* has quit (_{reason or ''}_)")

    def _nick(self, old_nick: str, new_nick: str, channels: Iterable[str]) -> list[Notice]:
        return self._fan_out(channels, f"*{old_nick}* is now known as *{new_nick}*")

    def _mode(self, sign: str, channel: str, by: str, mode: str, arg: str | None) -> list[Notice]:
        return [Notice(channel, f"*{by}* sets mode *{sign}{mode}* on _{arg or channel}_")]

    def _mode_added(self, channel: str, by: str, mode: str, arg: str | None = None) -> list[Notice]:
        return self._mode("+", channel, by, mode, arg)

    def _mode_removed(self, channel: str, by: str, mode: str, arg: str | None = None) -> list[Notice]:
        return self._mode("-", channel, by, mode, arg)

    def _error(self, error: IrcError) -> list[Notice]:
        return [Notice(self._nickname, f"_{error.command}_ : _{' '.join(error.args)}_")]

    def _whois(self, info: Whois) -> list[Notice]:
        lines = [
            f"WHOIS for *{info.nick}*",
            f"(_{info.user}@{info.host}_): _{info.realname}_",
            f"_{info.server}_ :_{info.serverinfo}_",
        ]
        if info.account:
            lines.append(f"{info.accountinfo} _{info.account}_")
        if info.away:
            lines.append(f"is away (_{info.away}_)")
        if info.idle is not None:
            since = datetime.fromtimestamp(self._clock() - info.idle)
            lines.append(f"idle since _{since:%a %b %d %Y}, {since:%H:%M:%S}_")
        return [Notice(self._nickname, "\r\n".join(lines))]
