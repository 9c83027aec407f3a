"""Test DM recipient resolution."""

from slackirc.gateway.dm import (
    NO_RECIPIENT_NOTICE,
    STALE_NOTICE,
    DMRouter,
    RecipientMemory,
    Resolution,
)

NOW = 1_700_000_000.0
TTL = 600


def _router(now: float = NOW) -> tuple[DMRouter, list[float]]:
    current = [now]
    return DMRouter(TTL, clock=lambda: current[0]), current


class TestRecipientMemory:
    def test_starts_empty(self):
        memory = RecipientMemory()
        assert memory.last_user == ""
        assert memory.last_timestamp == 0.0

    def test_remember(self):
        memory = RecipientMemory()
        memory.remember("bob", 12.5)
        assert (memory.last_user, memory.last_timestamp) == ("bob", 12.5)


class TestDMRouter:
    """Test explicit targets, continuation, and the TTL boundary."""

    def test_explicit_target(self):
        # Arrange
        router, _ = _router()

        # Act
        decision = router.resolve("bob: hello there")

        # Assert
        assert decision.resolution is Resolution.EXPLICIT
        assert decision.dispatch
        assert (decision.nick, decision.text) == ("bob", "hello there")
        assert router.memory == RecipientMemory("bob", NOW)

    def test_explicit_target_needs_whitespace_after_colon(self):
        router, _ = _router()
        decision = router.resolve("http://example.com")
        assert decision.resolution is Resolution.NO_RECIPIENT

    def test_explicit_target_wins_over_memory(self):
        router, _ = _router()
        router.memory.remember("bob", NOW - 10)
        decision = router.resolve("carol: hi")
        assert decision.nick == "carol"
        assert router.memory.last_user == "carol"

    def test_continuation_within_ttl(self):
        # Arrange
        router, _ = _router()
        router.memory.remember("bob", NOW - 5 * 60)

        # Act
        decision = router.resolve("still there?")

        # Assert
        assert decision.resolution is Resolution.CONTINUATION
        assert (decision.nick, decision.text) == ("bob", "still there?")
        assert router.memory.last_timestamp == NOW

    def test_continuation_slides_ttl(self):
        router, clock = _router()
        router.resolve("bob: one")
        for _ in range(3):
            clock[0] += TTL - 1
            assert router.resolve("again").nick == "bob"

    def test_stale_memory(self):
        # Arrange
        router, _ = _router()
        router.memory.remember("bob", NOW - 20 * 60)

        # Act
        decision = router.resolve("hello?")

        # Assert
        assert decision.resolution is Resolution.STALE
        assert not decision.dispatch
        assert decision.notice == STALE_NOTICE
        assert router.memory == RecipientMemory("bob", NOW - 20 * 60)

    def test_exactly_ttl_is_stale(self):
        router, _ = _router()
        router.memory.remember("bob", NOW - TTL)
        assert router.resolve("hello?").resolution is Resolution.STALE

    def test_no_recipient(self):
        router, _ = _router()
        decision = router.resolve("hello?")
        assert decision.resolution is Resolution.NO_RECIPIENT
        assert decision.notice == NO_RECIPIENT_NOTICE
        assert router.memory == RecipientMemory()
