"""Turn bare Slack usernames in relayed IRC text into Slack mentions."""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import reduce


def highlight_username(username: str, text: str) -> str:
    """Rewrite whole-word ``username`` (optionally followed by ``,.:!?``) to ``<@username>``.

    Words already written as ``@username`` are left alone.
    """
    if not username:
        return text
    word_re = re.compile(rf"^{re.escape(username)}([,.:!?]?)$")
    words = text.split(" ")
    for i, word in enumerate(words):
        if word.startswith(f"@{username}"):
            continue
        match = word_re.match(word)
        if match:
            words[i] = f"<@{username}>{match.group(1)}"
    return " ".join(words)


def highlight_usernames(usernames: Iterable[str], text: str) -> str:
    """Left fold of :func:`highlight_username` over ``usernames`` in the given order."""
    return reduce(lambda current, username: highlight_username(username, current), usernames, text)
