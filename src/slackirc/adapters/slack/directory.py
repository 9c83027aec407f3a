"""In-memory cache of Slack users and conversations, so lookups never block."""

from __future__ import annotations

from typing import Any

from slackirc.events import SlackChannel, SlackUser


def channel_from_api(data: dict[str, Any], user_names: dict[str, str]) -> SlackChannel:
    """Build a SlackChannel from a conversations.* API object.

    Private channels are treated as groups (mapped by bare name); public
    channels by ``#name``. DMs take the counterpart's user name.
    """
    is_im = bool(data.get("is_im"))
    is_private = bool(data.get("is_private") or data.get("is_group") or data.get("is_mpim"))
    user = data.get("user")
    name = data.get("name") or ""
    if is_im and user:
        name = user_names.get(user, user)
    return SlackChannel(
        id=str(data["id"]),
        name=str(name),
        is_channel=bool(data.get("is_channel")) and not is_private,
        is_group=is_private and not is_im,
        is_im=is_im,
        is_member=bool(data.get("is_member")) or is_im,
        members=list(data.get("members") or []),
        user=user,
    )


class SlackDirectory:
    """Users and conversations keyed by id, with name lookups."""

    def __init__(self) -> None:
        self.users: dict[str, SlackUser] = {}
        self.conversations: dict[str, SlackChannel] = {}
        self.bot_user_id: str | None = None

    def add_user(self, data: dict[str, Any]) -> SlackUser:
        user = SlackUser(id=str(data["id"]), name=str(data.get("name") or data["id"]))
        self.users[user.id] = user
        return user

    def add_conversation(self, data: dict[str, Any]) -> SlackChannel:
        names = {uid: u.name for uid, u in self.users.items()}
        channel = channel_from_api(data, names)
        existing = self.conversations.get(channel.id)
        if existing and not channel.members:
            channel.members = existing.members
        self.conversations[channel.id] = channel
        return channel

    def rename(self, channel_id: str, name: str, *, is_group: bool = False) -> SlackChannel:
        """Rename a cached conversation in place; rename payloads carry only id and name."""
        channel = self.conversations.get(channel_id)
        if channel is None:
            channel = SlackChannel(id=channel_id, name=name, is_channel=not is_group, is_group=is_group)
            self.conversations[channel_id] = channel
        channel.name = name
        return channel

    def user_by_name(self, name: str) -> SlackUser | None:
        for user in self.users.values():
            if user.name == name:
                return user
        return None

    def get_user_by_id(self, user_id: str) -> SlackUser | None:
        return self.users.get(user_id)

    def get_channel_by_id(self, channel_id: str) -> SlackChannel | None:
        return self.conversations.get(channel_id)

    def get_channel_group_or_dm_by_name(self, name: str) -> SlackChannel | None:
        """Public channel ("#name" or "name"), then private group, then DM by user name."""
        bare = name[1:] if name.startswith("#") else name
        for channel in self.conversations.values():
            if channel.is_channel and channel.name == bare:
                return channel
        for channel in self.conversations.values():
            if channel.is_group and channel.name == bare:
                return channel
        user = self.user_by_name(bare)
        if user:
            for channel in self.conversations.values():
                if channel.is_im and channel.user == user.id:
                    return channel
        return None

    def set_membership(self, channel_id: str, user_id: str, joined: bool) -> None:
        channel = self.conversations.get(channel_id)
        if not channel:
            return
        if joined and user_id not in channel.members:
            channel.members.append(user_id)
        elif not joined and user_id in channel.members:
            channel.members.remove(user_id)
        if user_id == self.bot_user_id:
            channel.is_member = joined
