"""Direct-message recipient memory: resolve "who is this DM for?" on IRC."""

from __future__ import annotations

import enum
import re
import time
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

# "nick: message" addresses the DM explicitly
_EXPLICIT_TARGET = re.compile(r"^(\S+):\s+(.+)")

STALE_NOTICE = "_it's been too long since your last message, please specify the user_"
NO_RECIPIENT_NOTICE = "_you haven't messaged anyone yet, please specify the user_"


class Resolution(enum.Enum):
    EXPLICIT = "explicit"
    CONTINUATION = "continuation"
    STALE = "stale"
    NO_RECIPIENT = "no_recipient"


@dataclass
class RecipientMemory:
    """Last IRC nick the human messaged, and when (epoch seconds). Empty user = never set."""

    last_user: str = ""
    last_timestamp: float = 0.0

    def remember(self, user: str, now: float) -> None:
        self.last_user = user
        self.last_timestamp = now


@dataclass
class DMDecision:
    """Outcome of resolving one DM. ``nick``/``text`` are set when it should be sent."""

    resolution: Resolution
    nick: str | None = None
    text: str | None = None
    notice: str | None = None

    @property
    def dispatch(self) -> bool:
        return self.nick is not None


class DMRouter:
    """Owns the single RecipientMemory cell.

    Only ever touched from the event loop thread, so no locking.
    """

    def __init__(self, ttl: float, *, clock: Callable[[], float] = time.time) -> None:
        self.ttl = ttl
        self.memory = RecipientMemory()
        self._clock = clock

    def resolve(self, text: str) -> DMDecision:
        """Pick the recipient for ``text`` and update memory when it will be sent."""
        now = self._clock()

        match = _EXPLICIT_TARGET.match(text)
        if match:
            nick, message = match.group(1), match.group(2)
            self.memory.remember(nick, now)
            logger.debug("DM: explicit recipient {}", nick)
            return DMDecision(Resolution.EXPLICIT, nick=nick, text=message)

        elapsed = now - self.memory.last_timestamp
        if self.memory.last_user and elapsed < self.ttl:
            nick = self.memory.last_user
            self.memory.remember(nick, now)
            logger.debug("DM: continuing with last recipient {}", nick)
            return DMDecision(Resolution.CONTINUATION, nick=nick, text=text)

        if self.memory.last_user:
            logger.debug(
                "DM: not sending since {} was messaged {:.0f}s ago, more than {:.0f}s",
                self.memory.last_user,
                elapsed,
                self.ttl,
            )
            return DMDecision(Resolution.STALE, notice=STALE_NOTICE)

        logger.debug("DM: not sending since no users have been messaged")
        return DMDecision(Resolution.NO_RECIPIENT, notice=NO_RECIPIENT_NOTICE)
