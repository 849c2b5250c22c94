"""In-memory registry of alias and pattern commands."""

from __future__ import annotations

import itertools
import logging
from typing import Dict, Iterator, List, Optional, Pattern, Tuple

from ..errors import UnknownCommand
from ..models import CommandDefinition, RegisteredCommand
from .template import compile_template

LOGGER = logging.getLogger(__name__)


class CommandRegistry:
    """Resolves command words and raw messages to registered commands.

    Aliases are stored case-folded and the last registration of an alias wins.
    Patterns keep their registration order; every matching pattern yields a
    candidate.
    """

    def __init__(self) -> None:
        self._handles = itertools.count(1)
        self._commands: Dict[int, RegisteredCommand] = {}
        self._aliases: Dict[str, int] = {}
        self._patterns: List[Tuple[Pattern[str], int]] = []

    def register(self, definition: CommandDefinition) -> RegisteredCommand:
        # Malformed templates fail here rather than on the first message.
        if definition.parameters:
            compile_template(definition.parameters.strip())

        handle = next(self._handles)
        command = RegisteredCommand(
            handle=handle,
            definition=definition,
            aliases=definition.names,
            is_pattern=definition.is_pattern,
        )
        self._commands[handle] = command

        if definition.pattern is not None:
            self._patterns.append((definition.pattern, handle))
            LOGGER.debug("Registered pattern command %s as #%s", definition.pattern.pattern, handle)
            return command

        for alias in definition.names:
            key = alias.lower()
            previous = self._aliases.get(key)
            if previous is not None:
                LOGGER.debug("Alias %s rebound from #%s to #%s", key, previous, handle)
            self._aliases[key] = handle
        LOGGER.debug("Registered command %s as #%s", ", ".join(definition.names), handle)
        return command

    def get(self, alias: str) -> Optional[RegisteredCommand]:
        handle = self._aliases.get(alias.lower())
        if handle is None:
            return None
        return self._commands[handle]

    def has_command(self, alias: str) -> bool:
        return alias.lower() in self._aliases

    def resolve(self, command_word: str, raw_message: str) -> List[RegisteredCommand]:
        """Return the alias match (if any) followed by every matching pattern."""

        candidates: List[RegisteredCommand] = []
        command = self.get(command_word)
        if command:
            candidates.append(command)

        for pattern, handle in self._patterns:
            if pattern.search(raw_message):
                candidates.append(self._commands[handle])

        if not candidates:
            raise UnknownCommand(command_word)
        return candidates

    def iter_commands(self) -> Iterator[RegisteredCommand]:
        """Yield commands in registration order, skipping fully shadowed ones."""

        bound = set(self._aliases.values())
        for handle, command in self._commands.items():
            if command.is_pattern or handle in bound:
                yield command

    def __len__(self) -> int:
        return len(self._commands)
