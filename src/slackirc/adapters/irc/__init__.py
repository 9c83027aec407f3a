"""IRC adapter package."""

from slackirc.adapters.irc.adapter import IRCAdapter
from slackirc.adapters.irc.client import _MAX_ATTEMPTS, IRCClient, _connect_with_backoff, split_mode_changes

__all__ = [
    "_MAX_ATTEMPTS",
    "IRCAdapter",
    "IRCClient",
    "_connect_with_backoff",
    "split_mode_changes",
]
