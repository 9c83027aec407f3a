"""Shared fixtures: a small Slack workspace and a relay wired to mock connections."""

from __future__ import annotations

import pytest

from slackirc.events import SlackChannel
from slackirc.gateway import ChannelMapping, NoticeFlags, Relay
from tests.mocks import MockIRCConnection, MockSlackConnection

NOW = 1_700_000_000.0


class FakeClock:
    """Settable clock for TTL tests."""

    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def irc() -> MockIRCConnection:
    return MockIRCConnection()


@pytest.fixture
def slack() -> MockSlackConnection:
    conn = MockSlackConnection()
    conn.add_user("U1", "alice")
    conn.add_user("U2", "bob")
    conn.add_user("UBOT", "bridgebot")
    conn.add_channel(
        SlackChannel("C1", "general", is_channel=True, is_member=True, members=["U1", "U2", "UBOT"])
    )
    conn.add_channel(SlackChannel("C2", "random", is_channel=True, is_member=False, members=["U1"]))
    conn.add_channel(SlackChannel("G1", "ops", is_group=True, members=["U1", "UBOT"]))
    conn.add_channel(SlackChannel("D1", "alice", is_im=True, is_member=True, user="U1", members=["U1", "UBOT"]))
    return conn


@pytest.fixture
def mapping() -> ChannelMapping:
    return ChannelMapping({"#general": "#Libera-General", "#random": "#random", "ops": "#ops secretkey"})


@pytest.fixture
def relay(irc, slack, mapping, clock) -> Relay:
    r = Relay(
        irc,
        slack,
        nickname="bridge",
        slack_user="alice",
        channel_mapping=mapping,
        notice_flags=NoticeFlags(join=True, leave=True, change_nick=True, modes=True),
        remember_recipients_for=600,
        auto_send_commands=[["PRIVMSG", "NickServ", "IDENTIFY", "pw"], ["MODE", "bridge", "+x"]],
        clock=clock,
    )
    r.attach_listeners()
    return r
