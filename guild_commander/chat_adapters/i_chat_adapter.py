"""Chat adapter abstraction."""

from __future__ import annotations

import abc
from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Optional

from ..core.models import InboundMessage

MessageHandler = Callable[[InboundMessage], Awaitable[None]]


class IChatAdapter(abc.ABC):
    """Abstraction for chat platform integrations (Slack, Discord, etc.)."""

    def __init__(self) -> None:
        self._message_handlers: List[MessageHandler] = []

    @property
    @abc.abstractmethod
    def user_id(self) -> Optional[str]:
        """Identity the bot itself posts as, once connected."""

    @abc.abstractmethod
    async def send_message(
        self,
        channel: str,
        text: str,
        thread_ts: Optional[str] = None,
        blocks: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[InboundMessage]:
        """Send a message to a channel/thread.

        Returns:
            The posted message if the platform reports it, None otherwise.
        """

    @abc.abstractmethod
    async def delete_message(self, message: InboundMessage, delay_ms: int = 0) -> None:
        """Delete a message after `delay_ms` milliseconds."""

    @abc.abstractmethod
    async def add_reaction(self, message: InboundMessage, name: str) -> None:
        """React to a message with the named emoji."""

    @abc.abstractmethod
    async def fetch_member_roles(self, guild_id: str, user_id: str) -> FrozenSet[str]:
        """Return the role identities the user holds in the guild."""

    @abc.abstractmethod
    async def start(self) -> None:
        """Begin listening for events."""

    @abc.abstractmethod
    async def stop(self) -> None:
        """Shutdown the adapter."""

    def on_message(self, handler: MessageHandler) -> None:
        self._message_handlers.append(handler)

    async def emit_message(self, message: InboundMessage) -> None:
        for handler in self._message_handlers:
            await handler(message)
