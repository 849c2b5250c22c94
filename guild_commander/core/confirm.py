"""Reaction-based acknowledgement of command messages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .models import InboundMessage

if TYPE_CHECKING:
    from ..chat_adapters.i_chat_adapter import IChatAdapter


class ConfirmStatus(str, Enum):
    SUCCESS = "white_check_mark"
    FAILURE = "x"


@dataclass
class ConfirmOptions:
    delete: bool = True
    delay: int = 3000


async def confirm(
    client: "IChatAdapter",
    message: InboundMessage,
    status: ConfirmStatus,
    reason: Optional[str] = None,
    options: Optional[ConfirmOptions] = None,
) -> None:
    """React to `message` and optionally explain why, cleaning up afterwards."""

    options = options or ConfirmOptions()
    delay = options.delay or 3000
    await client.add_reaction(message, status.value)

    if reason:
        reply = await client.send_message(message.channel_id, f"*Alert:* {reason}", thread_ts=message.thread_ts)
        if options.delete and reply:
            await client.delete_message(reply, delay)

    if options.delete:
        await client.delete_message(message, delay)
