"""Pydle IRC client that reports protocol events into a Dispatcher."""

from __future__ import annotations

import asyncio
import contextlib
import random
import time
from typing import Any

import pydle
from loguru import logger

from slackirc.events import Dispatcher, IrcError, Whois

# Backoff: min 2s, max 60s, jitter
_BACKOFF_MIN = 2
_BACKOFF_MAX = 60
_MAX_ATTEMPTS = 10

# pydle resolves whois() only on 318/401/402; give up after this many seconds
_WHOIS_TIMEOUT = 15.0

# Channel modes that always take an argument, and those that take one only when set
_PARAM_MODES = frozenset("ovhaqbeIk")
_SET_PARAM_MODES = frozenset("lfjL")


def split_mode_changes(modes: list[str]) -> list[tuple[str, str, str | None]]:
    """Split pydle's ``["+o-v", "alice", "bob"]`` into ``[("+", "o", "alice"), ("-", "v", "bob")]``."""
    if not modes:
        return []
    args = list(modes[1:])
    sign = "+"
    changes: list[tuple[str, str, str | None]] = []
    for char in modes[0]:
        if char in "+-":
            sign = char
            continue
        arg = None
        if char in _PARAM_MODES or (sign == "+" and char in _SET_PARAM_MODES):
            arg = args.pop(0) if args else None
        changes.append((sign, char, arg))
    return changes


async def _connect_with_backoff(
    client: pydle.Client,
    hostname: str,
    port: int,
    tls: bool,
    tls_verify: bool = True,
    password: str | None = None,
) -> None:
    """Connect with exponential backoff and jitter on failure; reconnect on disconnect."""
    attempt = 0
    while True:
        try:
            await client.connect(
                hostname=hostname,
                port=port,
                password=password,
                tls=tls,
                tls_verify=tls_verify,
            )
            # pydle.connect() returns once handle_forever is spawned
            while client.connected:
                await asyncio.sleep(0.5)
            attempt = 0
            wait = _BACKOFF_MIN * random.uniform(0.5, 1.5)
            logger.info("IRC disconnected, reconnecting in {:.1f}s", wait)
            await asyncio.sleep(wait)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            attempt += 1
            if attempt >= _MAX_ATTEMPTS:
                logger.exception("IRC connect failed after {} attempts", _MAX_ATTEMPTS)
                raise
            delay = min(_BACKOFF_MAX, _BACKOFF_MIN * (2 ** (attempt - 1)))
            wait = delay * random.uniform(0.5, 1.5)
            logger.warning(
                "IRC connect failed (attempt {}): {}, retrying in {:.1f}s",
                attempt,
                exc,
                wait,
            )
            await asyncio.sleep(wait)


class IRCClient(pydle.Client):
    """Pydle client: emits relay events and drains an ordered outbound queue."""

    def __init__(
        self,
        events: Dispatcher,
        nick: str,
        channels: list[str],
        *,
        flood_delay: float = 0.5,
        whois_timeout: float = _WHOIS_TIMEOUT,
        **kwargs: Any,
    ) -> None:
        super().__init__(nick, **kwargs)
        self._whois_timeout = whois_timeout
        self._events = events
        self._autojoin = channels
        self._flood_delay = flood_delay
        self._last_sent = 0.0
        self._outbound: asyncio.Queue[tuple[str, tuple[str, ...]]] = asyncio.Queue()
        self._consumer_task: asyncio.Task | None = None

    def queue(self, kind: str, *args: str) -> None:
        """Queue an outbound ``send``/``say``/``join``; sent in order once connected."""
        self._outbound.put_nowait((kind, args))

    async def on_connect(self) -> None:
        """Registered: let subscribers queue their commands, then join channels."""
        await super().on_connect()
        logger.info("IRC registered as {}", self.nickname)
        self._events.emit("registered", self.nickname)
        for channel in self._autojoin:
            self.queue("join", channel)
        if self._consumer_task is None or self._consumer_task.done():
            self._consumer_task = asyncio.create_task(self._consume_outbound())

    async def _consume_outbound(self) -> None:
        """Send queued commands one by one, spaced by the flood delay."""
        while True:
            try:
                kind, args = await self._outbound.get()
                wait = self._last_sent + self._flood_delay - time.monotonic()
                if wait > 0:
                    await asyncio.sleep(wait)
                await self._dispatch(kind, args)
                self._last_sent = time.monotonic()
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.exception("IRC send failed: {}", exc)

    async def _dispatch(self, kind: str, args: tuple[str, ...]) -> None:
        if kind == "say":
            target, text = args
            await self.message(target, text)
        elif kind == "join":
            name, _, key = args[0].partition(" ")
            await self.join(name, key.strip() or None)
        elif kind == "send":
            command, *params = args
            if command.upper() == "WHOIS" and params:
                await self._whois(params[-1])
            else:
                await self.rawmsg(command, *params)
        else:
            logger.warning("IRC: unknown outbound kind {}", kind)

    async def _whois(self, nick: str) -> None:
        try:
            info = await asyncio.wait_for(self.whois(nick), self._whois_timeout)
        except asyncio.TimeoutError:
            logger.warning("IRC: WHOIS for {} timed out after {:.0f}s", nick, self._whois_timeout)
            return
        if not info:
            logger.info("IRC: no WHOIS result for {}", nick)
            return
        self._events.emit(
            "whois",
            Whois(
                nick=nick,
                user=info.get("username") or "",
                host=info.get("hostname") or "",
                realname=info.get("realname") or "",
                server=info.get("server") or "",
                serverinfo=info.get("server_info") or "",
                account=info.get("account") or None,
                away=info.get("away_message") if info.get("away") else None,
                idle=info.get("idle") or None,
            ),
        )

    def _channels_with(self, nick: str) -> list[str]:
        """Joined channels where ``nick`` is currently present."""
        return [name for name, info in self.channels.items() if nick in info.get("users", ())]

    async def on_raw(self, message: Any) -> None:
        """Report numeric error replies (400-599), then let pydle handle the message."""
        command = str(getattr(message, "command", ""))
        if command.isdigit() and 400 <= int(command) < 600:
            params = [str(p) for p in getattr(message, "params", [])]
            logger.warning("IRC error reply {}: {}", command, params)
            self._events.emit("error", IrcError(command=command, args=params[1:]))
        await super().on_raw(message)

    async def on_message(self, target: str, by: str, message: str) -> None:
        self._events.emit("message", by, target, message)

    async def on_notice(self, target: str, by: str, message: str) -> None:
        self._events.emit("notice", by, target, message)

    async def on_ctcp_action(self, by: str, target: str, contents: str) -> None:
        self._events.emit("action", by, target, contents)

    async def on_topic_change(self, channel: str, message: str, by: str) -> None:
        self._events.emit("topic", channel, message, by)

    async def on_kick(self, channel: str, target: str, by: str, reason: str | None = None) -> None:
        await super().on_kick(channel, target, by, reason)
        self._events.emit("kick", channel, target, by, reason)

    async def on_invite(self, channel: str, by: str) -> None:
        self._events.emit("invite", channel, by)

    async def on_join(self, channel: str, user: str) -> None:
        await super().on_join(channel, user)
        self._events.emit("join", channel, user)

    async def on_part(self, channel: str, user: str, message: str | None = None) -> None:
        await super().on_part(channel, user, message)
        self._events.emit("part", channel, user, message)

    async def on_mode_change(self, channel: str, modes: list[str], by: str) -> None:
        await super().on_mode_change(channel, modes, by)
        for sign, mode, arg in split_mode_changes(list(modes)):
            self._events.emit(f"{sign}mode", channel, by, mode, arg)

    # QUIT, NICK and KILL carry no channel; capture membership before pydle forgets the user.

    async def on_raw_quit(self, message: Any) -> None:
        nick = str(message.source).split("!")[0]
        channels = self._channels_with(nick)
        await super().on_raw_quit(message)
        reason = message.params[0] if message.params else None
        self._events.emit("quit", nick, reason, channels)

    async def on_raw_nick(self, message: Any) -> None:
        old_nick = str(message.source).split("!")[0]
        new_nick = message.params[0]
        channels = self._channels_with(old_nick)
        await super().on_raw_nick(message)
        self._events.emit("nick", old_nick, new_nick, channels)

    async def on_raw_kill(self, message: Any) -> None:
        target = message.params[0]
        channels = self._channels_with(target)
        await super().on_raw_kill(message)
        reason = message.params[1] if len(message.params) > 1 else None
        self._events.emit("kill", target, reason, channels)

    async def disconnect(self, expected: bool = True) -> None:
        """Disconnect and stop the outbound consumer."""
        if self._consumer_task:
            self._consumer_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer_task
            self._consumer_task = None
        await super().disconnect(expected)
