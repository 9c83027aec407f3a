"""Protocol adapters. Each is an AdapterBase with an event table, start and stop."""

from slackirc.adapters.base import AdapterBase, IRCConnection, SlackConnection
from slackirc.adapters.irc import IRCAdapter
from slackirc.adapters.slack import SlackAdapter

__all__ = ["AdapterBase", "IRCAdapter", "IRCConnection", "SlackAdapter", "SlackConnection"]
