"""Relay: wires IRC and Slack events to the text, DM and notice components."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from loguru import logger

from slackirc.events import SlackChannel, SlackMessage, SlackUser
from slackirc.formatting.highlight import highlight_usernames
from slackirc.formatting.irc_to_slack import format_action, format_notice, irc_to_slack
from slackirc.formatting.slack_to_irc import SlackToIrc, is_raw_command, split_raw_command
from slackirc.gateway.dm import DMRouter
from slackirc.gateway.notices import NoticeFlags, NoticeTranslator
from slackirc.gateway.router import ChannelMapping

if TYPE_CHECKING:
    from slackirc.adapters.base import IRCConnection, SlackConnection
    from slackirc.config import Config

# Slack message subtypes relayed besides plain messages
ALLOWED_SUBTYPES = ("me_message",)

SENT_RAW_COMMAND = "_sent raw command_"


class Relay:
    """Middleman for one IRC identity and one Slack human.

    Only messages written by ``slack_user`` go to IRC; IRC traffic in mapped
    channels (and DMs to the bridge nick) goes to Slack.
    """

    def __init__(
        self,
        irc: IRCConnection,
        slack: SlackConnection,
        *,
        nickname: str,
        slack_user: str,
        channel_mapping: ChannelMapping,
        notice_flags: NoticeFlags | None = None,
        remember_recipients_for: float = 600,
        auto_send_commands: Iterable[list[str]] = (),
        raw_command_allowlist: frozenset[str] | None = None,
        avatar_url_template: str = "https://robohash.org/{nick}.png?size=48x48",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._irc = irc
        self._slack = slack
        self._nickname = nickname
        self._slack_user = slack_user
        self._mapping = channel_mapping
        self._auto_send_commands = [list(c) for c in auto_send_commands]
        self._raw_allowlist = raw_command_allowlist
        self._avatar_url_template = avatar_url_template
        self.dm_router = DMRouter(remember_recipients_for, clock=clock)
        self.notices = NoticeTranslator(nickname, notice_flags or NoticeFlags(), clock=clock)
        self.slack_to_irc = SlackToIrc(self._channel_name, self._user_name)

    @classmethod
    def from_config(
        cls,
        irc: IRCConnection,
        slack: SlackConnection,
        config: Config,
        channel_mapping: ChannelMapping | None = None,
    ) -> Relay:
        return cls(
            irc,
            slack,
            nickname=config.nickname,
            slack_user=config.slack_user,
            channel_mapping=channel_mapping if channel_mapping is not None else ChannelMapping(config.channel_mapping),
            notice_flags=NoticeFlags.from_config(config.irc_status_notices),
            remember_recipients_for=config.remember_recipients_for,
            auto_send_commands=config.auto_send_commands,
            raw_command_allowlist=config.raw_command_allowlist,
            avatar_url_template=config.avatar_url_template,
        )

    @property
    def channel_mapping(self) -> ChannelMapping:
        return self._mapping

    def attach_listeners(self) -> None:
        """Subscribe to both collaborators. Call once at start-up."""
        if self._raw_allowlist is None:
            logger.warning("raw_command_allowlist not set: any all-caps command from Slack is sent to IRC verbatim")

        slack = self._slack.events
        slack.on("open", lambda: logger.debug("Connected to Slack"))
        slack.on("error", lambda error: logger.error("Received error event from Slack: {}", error))
        slack.on("presence_change", self._on_presence_change)
        slack.on("message", self._on_slack_message)

        irc = self._irc.events
        irc.on("registered", self._on_registered)
        irc.on("error", lambda error: logger.error("Received error event from IRC: {}", error))
        irc.on("message", self._on_irc_message)
        irc.on("notice", self._on_irc_notice)
        irc.on("action", self._on_irc_action)
        irc.on("invite", self._on_invite)
        for kind in self.notices.kinds():
            irc.on(kind, self._notice_handler(kind))

    # Slack -> IRC

    def parse_text(self, text: str) -> str:
        return self.slack_to_irc.transform(text)

    def _channel_name(self, channel_id: str) -> str | None:
        channel = self._slack.get_channel_by_id(channel_id)
        if channel is None:
            logger.debug("Unknown Slack channel {}; keeping raw id", channel_id)
            return None
        return channel.name

    def _user_name(self, user_id: str) -> str | None:
        user = self._slack.get_user_by_id(user_id)
        if user is None:
            logger.debug("Unknown Slack user {}; keeping raw id", user_id)
            return None
        return user.name

    def _on_slack_message(self, message: SlackMessage) -> None:
        # Ignore everything except the configured Slack user
        user = self._slack.get_user_by_id(message.user) if message.user else None
        if not user or user.name != self._slack_user or message.type != "message":
            return
        if message.subtype and message.subtype not in ALLOWED_SUBTYPES:
            return
        self.send_to_irc(message)

    def _on_presence_change(self, user: SlackUser, presence: str) -> None:
        if user.name != self._slack_user:
            return
        if presence == "active":
            self._irc.send("AWAY")
        else:
            self._irc.send("AWAY", " ")

    def send_to_irc(self, message: SlackMessage) -> None:
        channel = self._slack.get_channel_group_or_dm_by_id(message.channel)
        if not channel:
            logger.info("Received message from a channel the bot isn't in: {}", message.channel)
            return

        text = self.parse_text(message.get_body())

        if is_raw_command(text):
            self._send_raw_command(text, channel)
            return

        if channel.is_im:
            self.send_dm_to_irc(text, channel)
            return

        channel_name = f"#{channel.name}" if channel.is_channel else channel.name
        irc_channel = self._mapping.to_irc(channel_name)
        logger.debug("Channel mapping {} -> {}", channel_name, irc_channel)
        if not irc_channel:
            return
        if message.subtype == "me_message":
            text = f"\x01ACTION {text}\x01"
        logger.debug("Sending message to IRC {} {}", channel_name, text)
        self._irc.say(irc_channel, text)

    def _send_raw_command(self, text: str, channel: SlackChannel) -> None:
        parts = split_raw_command(text)
        if self._raw_allowlist is not None and parts[0] not in self._raw_allowlist:
            logger.warning("Refusing raw IRC command {} (not in raw_command_allowlist)", parts[0])
            self._slack.send(channel, f"_raw command {parts[0]} is not allowed_")
            return
        logger.debug("Sending raw command to IRC {}", text)
        self._irc.send(*parts)
        self._slack.send(channel, SENT_RAW_COMMAND)

    def send_dm_to_irc(self, text: str, channel: SlackChannel) -> None:
        decision = self.dm_router.resolve(text)
        if decision.dispatch:
            logger.debug("Sending /msg to IRC user {}", decision.nick)
            self._irc.send("PRIVMSG", decision.nick, decision.text)
            return
        self._slack.send(channel, decision.notice)

    # IRC -> Slack

    def _on_registered(self, *_: object) -> None:
        logger.debug("IRC registered; sending {} auto commands", len(self._auto_send_commands))
        for command in self._auto_send_commands:
            self._irc.send(*command)

    def _on_irc_message(self, author: str, channel: str, text: str) -> None:
        self.send_to_slack(author, channel, irc_to_slack(text))

    def _on_irc_notice(self, author: str, channel: str, text: str) -> None:
        self.send_to_slack(author, channel, format_notice(text))

    def _on_irc_action(self, author: str, channel: str, text: str) -> None:
        self.send_to_slack(author, channel, format_action(text))

    def _on_invite(self, channel: str, by: str) -> None:
        logger.debug("Received invite to {} from {}", channel, by)
        if channel not in self._mapping:
            logger.debug("Channel not found in config, not joining: {}", channel)
            return
        logger.debug("Joining channel: {}", channel)
        self._irc.join(channel)

    def _notice_handler(self, kind: str) -> Callable[..., None]:
        def handle(*args: object) -> None:
            for notice in self.notices.translate(kind, *args):
                self.send_to_slack(None, notice.channel, notice.text)

        return handle

    def _destination_name(self, channel: str) -> str | None:
        if channel.lower() == self._nickname.lower():
            return self._slack_user
        return self._mapping.to_slack(channel)

    def send_to_slack(self, author: str | None, channel: str, text: str) -> None:
        """Post ``text`` to the Slack side of ``channel``; ``author`` None posts as the bot."""
        slack_name = self._destination_name(channel)
        if not slack_name:
            logger.debug("No Slack destination for IRC target {}", channel)
            return

        slack_channel = self._slack.get_channel_group_or_dm_by_name(slack_name)
        # Private groups we're not in are absent from the cache; public channels need is_member
        if not slack_channel or not (slack_channel.is_member or slack_channel.is_group or slack_channel.is_im):
            logger.info("Tried to send a message to a channel the bot isn't in: {}", slack_name)
            return

        usernames = []
        for member_id in slack_channel.members:
            member = self._slack.get_user_by_id(member_id)
            if member:
                usernames.append(member.name)
        mapped_text = highlight_usernames(usernames, text)

        logger.debug("Sending message to Slack {} -> {}", channel, slack_name)
        if author:
            self._slack.post_message(
                slack_channel,
                mapped_text,
                username=author,
                parse="full",
                icon_url=self._avatar_url_template.format(nick=author),
            )
        else:
            self._slack.send(slack_channel, mapped_text)
