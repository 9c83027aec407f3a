"""Test Slack -> IRC and IRC -> Slack text conversion."""

import pytest
from hypothesis import given, strategies as st

from slackirc.formatting import (
    EMOJI,
    SlackToIrc,
    format_action,
    format_notice,
    irc_to_slack,
    is_raw_command,
    split_raw_command,
)

CHANNELS = {"C123": "general", "G9": "ops"}
USERS = {"U9": "bob", "W7": "carol"}


@pytest.fixture
def transform() -> SlackToIrc:
    return SlackToIrc(CHANNELS.get, USERS.get)


def _plain() -> SlackToIrc:
    return SlackToIrc(CHANNELS.get, USERS.get)


class TestSlackToIrc:
    """Test the ordered rewrite rules."""

    def test_plain_text_unchanged(self, transform):
        assert transform("hello world") == "hello world"

    def test_newlines_become_spaces(self, transform):
        assert transform("one\ntwo\r\nthree\rfour") == "one two three four"

    def test_html_entities_unescaped(self, transform):
        assert transform("1 &lt; 2 &amp;&amp; 3 &gt; 2") == "1 < 2 && 3 > 2"

    def test_amp_unescaped_before_lt(self, transform):
        assert transform("&amp;lt;") == "<"

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("<!channel> hi", "@channel hi"),
            ("<!group> hi", "@group hi"),
            ("<!everyone> hi", "@everyone hi"),
        ],
    )
    def test_broadcasts(self, transform, text, expected):
        assert transform(text) == expected

    def test_channel_ref_with_label(self, transform):
        result = transform("see <#C123|general>")
        assert result == "see general"
        assert "C123" not in result

    def test_channel_ref_resolved(self, transform):
        assert transform("see <#G9>") == "see #ops"

    def test_channel_ref_unknown_fails_open(self, transform):
        assert transform("see <#C404>") == "see #C404"

    def test_user_ref_with_label(self, transform):
        assert transform("hi <@U9|bob>") == "hi bob"

    def test_user_ref_resolved(self, transform):
        assert transform("hi <@U9> and <@W7>") == "hi @bob and @carol"

    def test_user_ref_unknown_fails_open(self, transform):
        assert transform("hi <@U404>") == "hi @U404"

    def test_links_unwrapped(self, transform):
        assert transform("<https://example.com>") == "https://example.com"

    def test_link_label_dropped(self, transform):
        assert transform("<https://example.com|example>") == "https://example.com"

    def test_mailto(self, transform):
        assert transform("<mailto:a@b.c|a@b.c>") == "mailto:a@b.c"

    def test_other_commands(self, transform):
        assert transform("<!here|here> <!subteam>") == "<here> <subteam>"

    def test_known_emoji(self, transform):
        assert transform("nice :+1: :tada:") == f"nice {EMOJI['+1']} {EMOJI['tada']}"

    @pytest.mark.parametrize(
        ("code", "glyph"),
        [
            ("tada", "\N{PARTY POPPER}"),
            ("face_with_rolling_eyes", "\N{FACE WITH ROLLING EYES}"),
            ("upside_down_face", "\N{UPSIDE-DOWN FACE}"),
            ("star-struck", "\N{GRINNING FACE WITH STAR EYES}"),
            ("flag-us", "\N{REGIONAL INDICATOR SYMBOL LETTER U}\N{REGIONAL INDICATOR SYMBOL LETTER S}"),
        ],
    )
    def test_slack_short_codes(self, transform, code, glyph):
        assert transform(f"hey :{code}:") == f"hey {glyph}"

    def test_unknown_emoji_left_alone(self, transform):
        assert transform(":not-a-real-emoji:") == ":not-a-real-emoji:"

    def test_custom_emoji_table(self):
        transform = SlackToIrc(CHANNELS.get, USERS.get, emoji={"party": "\\o/"})
        assert transform("yay :party:") == "yay \\o/"

    def test_rule_order(self, transform):
        names = [rule.name for rule in transform.rules]
        assert names.index("newlines") < names.index("amp") < names.index("channel_ref")
        assert names.index("user_ref") < names.index("link") < names.index("command") < names.index("emoji")

    @given(st.text(alphabet=st.characters(blacklist_characters="<>&:\r\n"), max_size=200))
    def test_unmarked_text_is_identity(self, text):
        """Property: text with no markup passes through unchanged."""
        assert _plain().transform(text) == text


class TestRawCommand:
    @pytest.mark.parametrize("text", ["WHOIS bob", "MODE #chan +o bob", "AWAY :gone"])
    def test_detected(self, text):
        assert is_raw_command(text)

    @pytest.mark.parametrize("text", ["whois bob", "WHOIS", "Hello there", "OK", " WHOIS bob", "LOL  "])
    def test_not_detected(self, text):
        assert not is_raw_command(text)

    def test_split(self):
        assert split_raw_command("MODE  #chan +o   bob") == ["MODE", "#chan", "+o", "bob"]


class TestIrcToSlack:
    def test_plain(self):
        assert irc_to_slack("hello") == "hello"

    def test_empty(self):
        assert irc_to_slack("") == ""

    def test_bold_and_italic(self):
        assert irc_to_slack("\x02bold\x02 \x1ditalic\x1d") == "*bold* _italic_"

    def test_unclosed_formatting_closed(self):
        assert irc_to_slack("\x02bold") == "*bold*"

    def test_reset_closes(self):
        assert irc_to_slack("\x02\x1dboth\x0f plain") == "*_both*_ plain"

    def test_colours_stripped(self):
        assert irc_to_slack("\x0304,12red\x03 \x04ff0000hex\x04") == "red hex"

    def test_underline_and_reverse_dropped(self):
        assert irc_to_slack("\x1fu\x1f\x16r\x16") == "ur"

    def test_notice(self):
        assert format_notice("server restart") == "*server restart*"

    def test_action(self):
        assert format_action("waves") == "_waves_"
