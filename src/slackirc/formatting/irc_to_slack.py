"""Convert IRC text and control codes to Slack markup."""

from __future__ import annotations

import re

# IRC control codes
BOLD = "\x02"
COLOR = "\x03"
HEX_COLOR = "\x04"
ITALIC = "\x1D"
UNDERLINE = "\x1F"
REVERSE = "\x16"
RESET = "\x0F"

_COLOR_CODES = re.compile(r"\x03\d{0,2}(?:,\d{1,2})?|\x04[0-9a-fA-F]{6}(?:,[0-9a-fA-F]{6})?|\x04")


def irc_to_slack(content: str) -> str:
    """Map IRC bold/italic to Slack ``*``/``_``; strip colours, underline and reverse."""
    if not content:
        return content
    content = _COLOR_CODES.sub("", content)

    result: list[str] = []
    bold = False
    italic = False
    for c in content:
        if c == BOLD:
            result.append("*")
            bold = not bold
        elif c == ITALIC:
            result.append("_")
            italic = not italic
        elif c == RESET:
            if bold:
                result.append("*")
                bold = False
            if italic:
                result.append("_")
                italic = False
        elif c in (UNDERLINE, REVERSE):
            continue
        else:
            result.append(c)

    # Close any unclosed formatting
    if bold:
        result.append("*")
    if italic:
        result.append("_")
    return "".join(result)


def format_notice(text: str) -> str:
    """IRC NOTICE payloads are shown bold."""
    return f"*{irc_to_slack(text)}*"


def format_action(text: str) -> str:
    """CTCP ACTION (/me) payloads are shown italic."""
    return f"_{irc_to_slack(text)}_"
