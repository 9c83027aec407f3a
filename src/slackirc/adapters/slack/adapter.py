"""Slack adapter: Socket Mode events in, Web API posts out."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any

import aiohttp
from loguru import logger
from slack_sdk.errors import SlackApiError
from slack_sdk.socket_mode.aiohttp import SocketModeClient
from slack_sdk.socket_mode.request import SocketModeRequest
from slack_sdk.socket_mode.response import SocketModeResponse
from slack_sdk.web.async_client import AsyncWebClient
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from slackirc.adapters.base import AdapterBase
from slackirc.adapters.slack.directory import SlackDirectory
from slackirc.events import Dispatcher, SlackChannel, SlackMessage, SlackUser

DEFAULT_RETRY = retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=2, max=30),
    retry=retry_if_exception_type((SlackApiError, aiohttp.ClientError, asyncio.TimeoutError)),
    reraise=True,
)

_CONVERSATION_TYPES = "public_channel,private_channel,im,mpim"
_PAGE_SIZE = 200


class SlackAdapter(AdapterBase):
    """Slack side of the relay.

    Users, conversations and member lists are cached at start so the relay's
    lookups are synchronous. Posts are queued and sent in order.
    """

    def __init__(
        self,
        token: str,
        app_token: str,
        *,
        watch_user: str | None = None,
        presence_poll_seconds: float = 60,
        web_client: AsyncWebClient | None = None,
    ) -> None:
        self.events = Dispatcher("slack")
        self.directory = SlackDirectory()
        self._web = web_client or AsyncWebClient(token=token)
        self._app_token = app_token
        self._watch_user = watch_user
        self._presence_poll_seconds = presence_poll_seconds
        self._presence: str | None = None
        self._socket: SocketModeClient | None = None
        self._outbound: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._tasks: list[asyncio.Task] = []

    @property
    def name(self) -> str:
        return "slack"

    # Lookups

    def get_user_by_id(self, user_id: str) -> SlackUser | None:
        return self.directory.get_user_by_id(user_id)

    def get_channel_by_id(self, channel_id: str) -> SlackChannel | None:
        return self.directory.get_channel_by_id(channel_id)

    def get_channel_group_or_dm_by_id(self, channel_id: str) -> SlackChannel | None:
        return self.directory.get_channel_by_id(channel_id)

    def get_channel_group_or_dm_by_name(self, name: str) -> SlackChannel | None:
        return self.directory.get_channel_group_or_dm_by_name(name)

    # Posting

    def post_message(
        self,
        channel: SlackChannel,
        text: str,
        *,
        username: str,
        parse: str = "full",
        icon_url: str | None = None,
    ) -> None:
        """Queue a post shown as ``username`` (needs chat:write.customize)."""
        payload: dict[str, Any] = {"channel": channel.id, "text": text, "username": username, "parse": parse}
        if icon_url:
            payload["icon_url"] = icon_url
        self._outbound.put_nowait(payload)

    def send(self, channel: SlackChannel, text: str) -> None:
        """Queue a post as the bot itself."""
        self._outbound.put_nowait({"channel": channel.id, "text": text})

    async def _consume_outbound(self) -> None:
        while True:
            try:
                payload = await self._outbound.get()
                await self._web.chat_postMessage(**payload)
            except asyncio.CancelledError:
                break
            except SlackApiError as exc:
                logger.error("Slack post to {} failed: {}", payload.get("channel"), exc.response.get("error"))
                self.events.emit("error", exc)
            except Exception as exc:
                logger.exception("Slack post failed: {}", exc)
                self.events.emit("error", exc)

    # Directory bootstrap

    @DEFAULT_RETRY
    async def _fetch_pages(self, method: str, key: str, **params: Any) -> list[dict[str, Any]]:
        """Collect every page of a cursor-paginated Web API method."""
        items: list[dict[str, Any]] = []
        cursor: str | None = None
        call = getattr(self._web, method)
        while True:
            resp = await call(limit=_PAGE_SIZE, cursor=cursor, **params)
            items.extend(resp.get(key) or [])
            cursor = (resp.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return items

    async def load_directory(self) -> None:
        """Cache users, conversations and members of the conversations the bot is in."""
        auth = await self._web.auth_test()
        self.directory.bot_user_id = auth.get("user_id")

        for user in await self._fetch_pages("users_list", "members"):
            self.directory.add_user(user)
        for conv in await self._fetch_pages("conversations_list", "channels", types=_CONVERSATION_TYPES):
            channel = self.directory.add_conversation(conv)
            if channel.is_member and not channel.is_im:
                channel.members = [
                    str(m) for m in await self._fetch_pages("conversations_members", "members", channel=channel.id)
                ]

        if self._watch_user:
            await self._open_dm(self._watch_user)
        logger.info(
            "Slack: cached {} users, {} conversations",
            len(self.directory.users),
            len(self.directory.conversations),
        )

    async def _open_dm(self, username: str) -> None:
        """Make sure the DM with ``username`` is cached (bridge notices go there)."""
        user = self.directory.user_by_name(username)
        if not user:
            logger.warning("Slack: user {} not found; DMs to them will be dropped", username)
            return
        resp = await self._web.conversations_open(users=[user.id])
        data = dict(resp.get("channel") or {})
        data.setdefault("is_im", True)
        data.setdefault("user", user.id)
        self.directory.add_conversation(data)

    # Socket Mode events

    async def _on_socket_request(self, client: SocketModeClient, req: SocketModeRequest) -> None:
        await client.send_socket_mode_response(SocketModeResponse(envelope_id=req.envelope_id))
        if req.type != "events_api":
            return
        event = (req.payload or {}).get("event") or {}
        self.handle_event(event)

    def handle_event(self, event: dict[str, Any]) -> None:
        """Update the cache from an Events API payload and emit relay events."""
        kind = event.get("type")
        if kind == "message":
            channel_id = str(event.get("channel", ""))
            if event.get("channel_type") == "im" and channel_id not in self.directory.conversations:
                self.directory.add_conversation({"id": channel_id, "is_im": True, "user": event.get("user")})
            self.events.emit(
                "message",
                SlackMessage(
                    channel=channel_id,
                    user=event.get("user"),
                    text=event.get("text") or "",
                    type="message",
                    subtype=event.get("subtype"),
                    raw=event,
                ),
            )
        elif kind in ("member_joined_channel", "member_left_channel"):
            self.directory.set_membership(
                str(event.get("channel", "")),
                str(event.get("user", "")),
                joined=kind == "member_joined_channel",
            )
        elif kind in ("channel_created", "group_joined"):
            channel = event.get("channel")
            if isinstance(channel, dict) and channel.get("id"):
                data = dict(channel)
                if kind == "channel_created":
                    data.setdefault("is_channel", True)
                self.directory.add_conversation(data)
        elif kind in ("channel_rename", "group_rename"):
            channel = event.get("channel")
            if isinstance(channel, dict) and channel.get("id") and channel.get("name"):
                renamed = self.directory.rename(
                    str(channel["id"]), str(channel["name"]), is_group=kind == "group_rename"
                )
                logger.info("Slack: conversation {} renamed to {}", renamed.id, renamed.name)
        elif kind in ("user_change", "team_join"):
            user = event.get("user")
            if isinstance(user, dict) and user.get("id"):
                self.directory.add_user(user)

    async def _poll_presence(self) -> None:
        """Socket Mode has no presence events; poll the watched user's presence."""
        while True:
            try:
                user = self.directory.user_by_name(self._watch_user or "")
                if user:
                    resp = await self._web.users_getPresence(user=user.id)
                    presence = resp.get("presence")
                    if presence and presence != self._presence:
                        self._presence = presence
                        self.events.emit("presence_change", user, presence)
                await asyncio.sleep(self._presence_poll_seconds)
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.warning("Slack presence poll failed: {}", exc)
                await asyncio.sleep(self._presence_poll_seconds)

    async def start(self) -> None:
        await self.load_directory()
        self._socket = SocketModeClient(app_token=self._app_token, web_client=self._web)
        self._socket.socket_mode_request_listeners.append(self._on_socket_request)
        await self._socket.connect()
        logger.info("Connected to Slack (Socket Mode)")
        self._tasks.append(asyncio.create_task(self._consume_outbound()))
        if self._watch_user:
            self._tasks.append(asyncio.create_task(self._poll_presence()))
        self.events.emit("open")

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()
        if self._socket:
            await self._socket.close()
            self._socket = None
