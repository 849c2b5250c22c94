"""Shared fixtures for Guild Commander tests."""

from __future__ import annotations

import itertools
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

import pytest

from guild_commander.chat_adapters.i_chat_adapter import IChatAdapter
from guild_commander.core.models import AuthLevel, GuildInfo, InboundMessage, RoleRecord
from guild_commander.storage.role_store import RoleStore

BOT_ID = "UBOT"
OWNER_ID = "UOWNER"
GUILD_ID = "T001"


class DummyChatAdapter(IChatAdapter):
    """Captures everything the commander sends through the transport."""

    def __init__(self, user_id: str = BOT_ID, member_roles: Optional[Dict[str, Iterable[str]]] = None) -> None:
        super().__init__()
        self._user_id = user_id
        self.member_roles = member_roles or {}
        self.messages: List[Dict[str, Any]] = []
        self.deleted: List[tuple[str, int]] = []
        self.reactions: List[tuple[str, str]] = []
        self.role_lookups = 0
        self._ids = itertools.count(1)

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    async def send_message(self, channel, text, thread_ts=None, blocks=None):
        self.messages.append({"channel": channel, "text": text, "thread_ts": thread_ts, "blocks": blocks})
        return InboundMessage(id=f"reply-{next(self._ids)}", channel_id=channel, author_id=self._user_id, content=text)

    async def delete_message(self, message, delay_ms=0):
        self.deleted.append((message.id, delay_ms))

    async def add_reaction(self, message, name):
        self.reactions.append((message.id, name))

    async def fetch_member_roles(self, guild_id: str, user_id: str) -> FrozenSet[str]:
        self.role_lookups += 1
        return frozenset(self.member_roles.get(user_id, ()))

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None

    @property
    def texts(self) -> List[str]:
        return [message["text"] for message in self.messages]


class MemoryRoleStore(RoleStore):
    """Dictionary-backed role store that counts lookups."""

    def __init__(self, records: Iterable[RoleRecord] = ()) -> None:
        self.records: Dict[tuple[str, str], RoleRecord] = {(r.guild_id, r.id): r for r in records}
        self.guilds: set[str] = {r.guild_id for r in self.records.values()}
        self.find_calls = 0

    async def find_roles(self, guild_id, max_level=None, min_level=None):
        self.find_calls += 1
        low = min_level if min_level is not None else AuthLevel.NONE
        high = max_level if max_level is not None else AuthLevel.SUPERUSER
        return [
            record
            for (record_guild, _), record in self.records.items()
            if record_guild == guild_id and low <= record.level <= high
        ]

    async def find_or_create_guild(self, guild_id):
        self.guilds.add(guild_id)
        return guild_id

    async def persist_role(self, role_id, guild_id, level):
        record = RoleRecord(id=role_id, guild_id=guild_id, level=level)
        self.records[(guild_id, role_id)] = record
        return record


@pytest.fixture
def adapter() -> DummyChatAdapter:
    return DummyChatAdapter()


@pytest.fixture
def make_message():
    """Factory for inbound guild messages."""

    ids = itertools.count(1)

    def _make(
        content: str,
        author_id: str = "UUSER",
        guild: Optional[GuildInfo] = GuildInfo(id=GUILD_ID, owner_id=OWNER_ID),
        role_mentions: tuple[str, ...] = (),
    ) -> InboundMessage:
        return InboundMessage(
            id=f"msg-{next(ids)}",
            channel_id="C123",
            author_id=author_id,
            content=content,
            guild=guild,
            role_mentions=role_mentions,
        )

    return _make
