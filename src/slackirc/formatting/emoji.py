"""Slack emoji short-codes -> literal glyphs. Read-only for the process lifetime."""

from __future__ import annotations

from types import MappingProxyType

import emoji

# Regional indicator symbols A..Z; a pair of them renders as a flag
_REGIONAL_A = 0x1F1E6
_REGIONAL_Z = 0x1F1FF


def _short_codes(data: dict) -> list[str]:
    """Aliases first (GitHub/Slack style), then the CLDR name."""
    names = list(data.get("alias") or [])
    if data.get("en"):
        names.append(data["en"])
    return [name.strip(":") for name in names]


def _flag_code(glyph: str) -> str | None:
    if len(glyph) != 2 or not all(_REGIONAL_A <= ord(c) <= _REGIONAL_Z for c in glyph):
        return None
    return "".join(chr(ord(c) - _REGIONAL_A + ord("a")) for c in glyph)


def _build_table() -> dict[str, str]:
    table: dict[str, str] = {}
    for glyph, data in emoji.EMOJI_DATA.items():
        for name in _short_codes(data):
            table.setdefault(name, glyph)
            # Slack codes are lowercase ("flag_United_States" -> "flag_united_states")
            table.setdefault(name.lower(), glyph)
        code = _flag_code(glyph)
        if code:
            table.setdefault(f"flag-{code}", glyph)
    return table


EMOJI = MappingProxyType(_build_table())
