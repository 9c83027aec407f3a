"""Text conversion between Slack markup and IRC."""

from slackirc.formatting.emoji import EMOJI
from slackirc.formatting.highlight import highlight_username, highlight_usernames
from slackirc.formatting.irc_to_slack import format_action, format_notice, irc_to_slack
from slackirc.formatting.slack_to_irc import RewriteRule, SlackToIrc, is_raw_command, split_raw_command

__all__ = [
    "EMOJI",
    "RewriteRule",
    "SlackToIrc",
    "format_action",
    "format_notice",
    "highlight_username",
    "highlight_usernames",
    "irc_to_slack",
    "is_raw_command",
    "split_raw_command",
]
