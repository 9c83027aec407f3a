"""Convert Slack message markup to plain IRC text.

Rules run in a fixed order; later rules see the output of earlier ones
(e.g. ``&lt;`` is unescaped before link delimiters are stripped).
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from slackirc.formatting.emoji import EMOJI

# Looks up a Slack id and returns its name, or None on a miss
NameResolver = Callable[[str], "str | None"]

# All-caps verb followed by an argument: "WHOIS nick", "MODE #chan +o x"
_RAW_COMMAND = re.compile(r"^[A-Z]+\s\S")


@dataclass(frozen=True)
class RewriteRule:
    """One rewrite step: every match of ``pattern`` is replaced by ``replace``."""

    name: str
    pattern: re.Pattern[str]
    replace: str | Callable[[re.Match[str]], str]

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replace, text)


def _literal(name: str, pattern: str, replacement: str) -> RewriteRule:
    return RewriteRule(name, re.compile(re.escape(pattern)), lambda _m: replacement)


def is_raw_command(text: str) -> bool:
    """True when ``text`` should go to IRC as a raw protocol command."""
    return bool(_RAW_COMMAND.match(text))


def split_raw_command(text: str) -> list[str]:
    return text.split()


class SlackToIrc:
    """Slack -> IRC text pipeline bound to the Slack name resolvers."""

    def __init__(
        self,
        channel_name: NameResolver,
        user_name: NameResolver,
        emoji: Mapping[str, str] = EMOJI,
    ) -> None:
        self._channel_name = channel_name
        self._user_name = user_name
        self._emoji = emoji
        self.rules: tuple[RewriteRule, ...] = (
            RewriteRule("newlines", re.compile(r"\r\n|\r|\n"), " "),
            _literal("amp", "&amp;", "&"),
            _literal("lt", "&lt;", "<"),
            _literal("gt", "&gt;", ">"),
            _literal("channel", "<!channel>", "@channel"),
            _literal("group", "<!group>", "@group"),
            _literal("everyone", "<!everyone>", "@everyone"),
            RewriteRule("channel_ref", re.compile(r"<#([CG]\w+)(?:\|([^>]*))?>"), self._channel_ref),
            RewriteRule("user_ref", re.compile(r"<@([UW]\w+)(?:\|([^>]*))?>"), self._user_ref),
            RewriteRule("link", re.compile(r"<(?!!)([^\s>|]+)(?:\|[^>]*)?>"), r"\1"),
            RewriteRule("command", re.compile(r"<!(\w+)(?:\|([^>]*))?>"), self._command),
            RewriteRule("emoji", re.compile(r":([\w+-]+):"), self._emoji_glyph),
        )

    def transform(self, text: str) -> str:
        for rule in self.rules:
            text = rule.apply(text)
        return text

    __call__ = transform

    def _channel_ref(self, match: re.Match[str]) -> str:
        channel_id, label = match.group(1), match.group(2)
        if label:
            return label
        return f"#{self._channel_name(channel_id) or channel_id}"

    def _user_ref(self, match: re.Match[str]) -> str:
        user_id, label = match.group(1), match.group(2)
        if label:
            return label
        return f"@{self._user_name(user_id) or user_id}"

    @staticmethod
    def _command(match: re.Match[str]) -> str:
        return f"<{match.group(2) or match.group(1)}>"

    def _emoji_glyph(self, match: re.Match[str]) -> str:
        return self._emoji.get(match.group(1), match.group(0))
