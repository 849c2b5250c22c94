"""Tests for the request tokenizer."""

import pytest

from guild_commander.core.commands.parser import ParsedRequest, is_escaped_prefix, parse_request
from guild_commander.core.errors import MalformedRequest
from guild_commander.core.models import Prefix


@pytest.fixture
def prefix():
    return Prefix.from_literal("!")


class TestParseRequest:
    """Tests for parse_request."""

    def test_parse_basic_command(self, prefix):
        """Parse simple command with no args."""
        print("\n INPUT: '!help'")
        result = parse_request("!help", prefix)
        print(f" OUTPUT: {result}")
        assert result == ParsedRequest(prefix="!", command="help", args=())

    def test_parse_command_with_args(self, prefix):
        """Parse command with arguments."""
        result = parse_request("!roll 2 d6", prefix)
        assert result == ParsedRequest(prefix="!", command="roll", args=("2", "d6"))

    def test_runs_of_whitespace_collapse(self, prefix):
        """Tabs, newlines and repeated spaces all separate tokens."""
        result = parse_request("  !roll \t 2\n\nd6  ", prefix)
        assert result.args == ("2", "d6")
        assert result.content == "2 d6"

    def test_parse_without_prefix(self, prefix):
        """The prefix is optional so no-prefix commands still tokenize."""
        result = parse_request("hello there", prefix)
        assert result == ParsedRequest(prefix="", command="hello", args=("there",))

    def test_args_preserve_case(self, prefix):
        result = parse_request("!Use Claude SONNET", prefix)
        assert result.command == "Use"
        assert result.args == ("Claude", "SONNET")

    def test_prefix_only_is_command_word(self, prefix):
        """A lone prefix cannot be both prefix and command, so it becomes the command."""
        result = parse_request("!", prefix)
        assert result == ParsedRequest(prefix="", command="!", args=())

    def test_multi_character_prefix_is_escaped(self):
        """Regex metacharacters in the prefix are matched literally."""
        prefix = Prefix.from_literal("y.")
        assert parse_request("y.ping", prefix).prefix == "y."
        assert parse_request("yxping", prefix).prefix == ""

    def test_empty_string_is_malformed(self, prefix):
        with pytest.raises(MalformedRequest):
            parse_request("", prefix)

    def test_whitespace_only_is_malformed(self, prefix):
        with pytest.raises(MalformedRequest):
            parse_request("   \n ", prefix)


class TestPrefix:
    def test_empty_prefix_rejected(self):
        with pytest.raises(ValueError):
            Prefix.from_literal("")

    def test_doubled_prefix_is_escape(self, prefix):
        assert is_escaped_prefix("!!nope", prefix)
        assert not is_escaped_prefix("!nope", prefix)
