"""Generated help command."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..errors import TransportError
from ..models import CommandDefinition, InboundMessage, ParameterResult, RegisteredCommand
from .template import render_template

if TYPE_CHECKING:
    from ...chat_adapters.i_chat_adapter import IChatAdapter
    from .dispatcher import Commander

LOGGER = logging.getLogger(__name__)

HELP_CHUNK_SIZE = 25


def alias_display(command: RegisteredCommand, prefix: str) -> str:
    """Render the invokable forms of a command, e.g. `!roll {{count}}, !r {{count}}`."""

    params = command.definition.parameters or ""
    lead = "" if not command.requires_prefix else prefix
    return ", ".join(f"{lead}{alias} {params}".strip() for alias in command.aliases)


def build_help_entries(commands: List[RegisteredCommand], prefix: str) -> List[Dict[str, str]]:
    entries = []
    for command in commands:
        info = command.definition.description
        if not info:
            continue
        example = render_template(info.example or "", {"prefix": prefix})
        value = info.message
        if example:
            value = f"{value}\n```# Example use of the command:\n{example}```"
        entries.append({"name": alias_display(command, prefix), "value": value})
    return entries


def build_help_lines(entries: List[Dict[str, str]]) -> List[str]:
    lines = []
    for entry in entries:
        lines.append(f"- `{entry['name']}` – {entry['value']}")
    return lines


def _entries_to_blocks(entries: List[Dict[str, str]]) -> List[Dict[str, Any]]:
    return [
        {"type": "section", "text": {"type": "mrkdwn", "text": f"*{entry['name']}*\n{entry['value']}"}}
        for entry in entries
    ]


def build_help_command(commander: "Commander", footer: Optional[str] = None) -> CommandDefinition:
    """Create the `help`/`h` command listing every described command."""

    async def _help(
        message: InboundMessage,
        definition: CommandDefinition,
        parameters: ParameterResult,
        client: "IChatAdapter",
        _commander: "Commander",
    ) -> bool:
        prefix = commander.prefix.literal
        entries = build_help_entries(commander.commands, prefix)
        try:
            await client.send_message(
                message.channel_id,
                "Here are the commands for the bot. Commands are called with a prefix unless specified otherwise.",
                thread_ts=message.thread_ts,
            )
            for start in range(0, len(entries), HELP_CHUNK_SIZE):
                chunk = entries[start : start + HELP_CHUNK_SIZE]
                await client.send_message(
                    message.channel_id,
                    "\n".join(build_help_lines(chunk)),
                    thread_ts=message.thread_ts,
                    blocks=_entries_to_blocks(chunk),
                )
            if footer:
                await client.send_message(message.channel_id, footer, thread_ts=message.thread_ts)
        except TransportError:
            LOGGER.warning("Failed to send help to %s", message.channel_id, exc_info=True)
            return False
        return True

    return CommandDefinition(names=("help", "h"), action=_help)
