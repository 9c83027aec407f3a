"""Gateway: channel mapping, DM routing, notices and the relay that wires them."""

from slackirc.gateway.dm import DMRouter, RecipientMemory
from slackirc.gateway.notices import Notice, NoticeFlags, NoticeTranslator
from slackirc.gateway.relay import Relay
from slackirc.gateway.router import ChannelMapping

__all__ = [
    "ChannelMapping",
    "DMRouter",
    "Notice",
    "NoticeFlags",
    "NoticeTranslator",
    "RecipientMemory",
    "Relay",
]
