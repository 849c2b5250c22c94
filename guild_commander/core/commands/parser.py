"""Tokenizer for inbound command messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..errors import MalformedRequest
from ..models import Prefix


@dataclass(frozen=True)
class ParsedRequest:
    prefix: str
    command: str
    args: Tuple[str, ...]

    @property
    def content(self) -> str:
        """Arguments rejoined with single spaces."""
        return " ".join(self.args)


def parse_request(text: str, prefix: Prefix) -> ParsedRequest:
    """Split message text into prefix, command word and arguments.

    `!roll 2 d6` becomes ParsedRequest(prefix="!", command="roll", args=("2", "d6")).
    The prefix is optional so that pattern and no-prefix commands still parse.
    """

    parts = text.split()
    if not parts:
        raise MalformedRequest("Message is malformed, not a correct command request.")

    first, args = parts[0], parts[1:]
    match = prefix.pattern.match(first)
    if not match:
        raise MalformedRequest("Message is malformed, not a correct command request.")

    chat_prefix, command = match.groups()
    return ParsedRequest(prefix=chat_prefix or "", command=command, args=tuple(args))


def is_escaped_prefix(text: str, prefix: Prefix) -> bool:
    """A doubled prefix (`!!`) marks text that should never be treated as a command."""
    return text.lstrip().startswith(prefix.literal * 2)
