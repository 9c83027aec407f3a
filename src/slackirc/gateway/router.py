"""Channel mapping: Slack channel name <-> IRC channel name."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from loguru import logger

from slackirc.core.errors import ConfigurationError


def normalize_irc_channel(channel: str) -> str:
    """Drop a trailing channel key ("#chan key" -> "#chan") and lowercase."""
    parts = channel.split()
    return parts[0].lower() if parts else ""


class ChannelMapping:
    """Bijection between Slack channel names and IRC channel names.

    Built once from config and never mutated. Slack names are matched
    exactly ("#general" for public channels, bare names for private
    groups); IRC names case-insensitively.
    """

    def __init__(self, mapping: Mapping[str, str]) -> None:
        if not isinstance(mapping, Mapping) or not mapping:
            raise ConfigurationError(
                "channel_mapping must be a non-empty mapping",
                code="invalid_channel_mapping",
            )
        to_irc: dict[str, str] = {}
        to_slack: dict[str, str] = {}
        join_list: list[str] = []
        for slack_channel, irc_channel in mapping.items():
            normalized = normalize_irc_channel(str(irc_channel))
            if not slack_channel or not normalized:
                raise ConfigurationError(
                    f"Empty channel name in mapping {slack_channel!r} -> {irc_channel!r}",
                    code="invalid_channel_mapping",
                )
            if normalized in to_slack:
                raise ConfigurationError(
                    f"IRC channel {normalized} is mapped from both {to_slack[normalized]} and {slack_channel}",
                    code="duplicate_irc_channel",
                    details={"irc_channel": normalized},
                )
            to_irc[str(slack_channel)] = normalized
            to_slack[normalized] = str(slack_channel)
            join_list.append(str(irc_channel).strip())
        self._to_irc = to_irc
        self._to_slack = to_slack
        self._join_list = join_list
        logger.info("Router: loaded {} channel mappings", len(to_irc))

    def to_irc(self, slack_channel: str) -> str | None:
        """IRC channel for a Slack channel name, or None when unmapped."""
        return self._to_irc.get(slack_channel)

    def to_slack(self, irc_channel: str) -> str | None:
        """Slack channel name for an IRC channel, or None when unmapped."""
        return self._to_slack.get(irc_channel.lower())

    def irc_channels(self) -> list[str]:
        """Channels to JOIN at connect, keys included."""
        return list(self._join_list)

    def __contains__(self, irc_channel: object) -> bool:
        return isinstance(irc_channel, str) and irc_channel.lower() in self._to_slack

    def __iter__(self) -> Iterator[str]:
        return iter(self._to_irc)

    def __len__(self) -> int:
        return len(self._to_irc)
