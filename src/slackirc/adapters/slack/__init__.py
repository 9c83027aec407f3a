"""Slack adapter package."""

from slackirc.adapters.slack.adapter import DEFAULT_RETRY, SlackAdapter
from slackirc.adapters.slack.directory import SlackDirectory, channel_from_api

__all__ = ["DEFAULT_RETRY", "SlackAdapter", "SlackDirectory", "channel_from_api"]
