"""IRC adapter: owns the pydle client and exposes fire-and-forget commands."""

from __future__ import annotations

import asyncio
import contextlib

from loguru import logger

from slackirc.adapters.base import AdapterBase
from slackirc.adapters.irc.client import IRCClient, _connect_with_backoff
from slackirc.events import Dispatcher


class IRCAdapter(AdapterBase):
    """IRC side of the relay. ``send``/``say``/``join`` enqueue and return immediately."""

    def __init__(
        self,
        server: str,
        nickname: str,
        channels: list[str],
        *,
        port: int = 6667,
        tls: bool = False,
        tls_verify: bool = True,
        username: str | None = None,
        realname: str | None = None,
        password: str | None = None,
        flood_delay: float = 0.5,
    ) -> None:
        self.events = Dispatcher("irc")
        self._server = server
        self._port = port
        self._tls = tls
        self._tls_verify = tls_verify
        self._password = password
        self._client = IRCClient(
            self.events,
            nickname,
            channels,
            flood_delay=flood_delay,
            username=username or nickname,
            realname=realname or nickname,
        )
        self._task: asyncio.Task | None = None

    @property
    def name(self) -> str:
        return "irc"

    @property
    def client(self) -> IRCClient:
        return self._client

    def send(self, command: str, *args: str) -> None:
        """Queue a raw IRC command (``send("AWAY")``, ``send("PRIVMSG", nick, text)``)."""
        logger.debug("IRC: queued {} {}", command, args)
        self._client.queue("send", command, *args)

    def say(self, target: str, text: str) -> None:
        """Queue a PRIVMSG to a channel or nick."""
        self._client.queue("say", target, text)

    def join(self, channel: str) -> None:
        self._client.queue("join", channel)

    async def start(self) -> None:
        """Connect in the background; reconnects with backoff."""
        logger.info("Connecting to IRC {}:{} (tls={})", self._server, self._port, self._tls)
        self._task = asyncio.create_task(
            _connect_with_backoff(
                self._client,
                self._server,
                self._port,
                self._tls,
                tls_verify=self._tls_verify,
                password=self._password,
            )
        )

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        if self._client.connected:
            await self._client.disconnect(expected=True)
