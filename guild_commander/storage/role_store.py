"""Persistence of guild role levels."""

from __future__ import annotations

import abc
import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Union

import aiosqlite

from ..core.errors import RoleStoreError
from ..core.models import AuthLevel, RoleRecord

LOGGER = logging.getLogger(__name__)


class RoleStore(abc.ABC):
    """Storage for role levels persisted per (guild, role)."""

    @abc.abstractmethod
    async def find_roles(
        self,
        guild_id: str,
        max_level: Optional[AuthLevel] = None,
        min_level: Optional[AuthLevel] = None,
    ) -> List[RoleRecord]:
        """Return the guild's role records within the inclusive level bounds.

        Authorization passes only `min_level`. `max_level` caps the other end
        for listing queries and is part of the public store interface.
        """

    @abc.abstractmethod
    async def find_or_create_guild(self, guild_id: str) -> str:
        """Ensure the guild exists and return its id."""

    @abc.abstractmethod
    async def persist_role(self, role_id: str, guild_id: str, level: AuthLevel) -> RoleRecord:
        """Insert or replace the level stored for a role."""


class SqliteRoleStore(RoleStore):
    """Async SQLite-backed role store."""

    SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS guilds (
        id TEXT PRIMARY KEY,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );
    CREATE TABLE IF NOT EXISTS roles (
        id TEXT NOT NULL,
        guild_id TEXT NOT NULL REFERENCES guilds(id) ON DELETE CASCADE,
        level INTEGER NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        PRIMARY KEY (id, guild_id)
    );
    CREATE INDEX IF NOT EXISTS idx_roles_guild_level ON roles(guild_id, level);
    """

    SELECT_ROLES_SQL = """
    SELECT id, guild_id, level FROM roles
    WHERE guild_id = ? AND level >= ? AND level <= ?
    ORDER BY level DESC, id ASC
    """

    INSERT_GUILD_SQL = """
    INSERT OR IGNORE INTO guilds (id) VALUES (?)
    """

    UPSERT_ROLE_SQL = """
    INSERT INTO roles (id, guild_id, level, updated_at)
    VALUES (?, ?, ?, CURRENT_TIMESTAMP)
    ON CONFLICT(id, guild_id) DO UPDATE SET
    level = excluded.level, updated_at = CURRENT_TIMESTAMP
    """

    def __init__(self, db_path: Union[str, Path] = "commander_entities.db") -> None:
        self.db_path = str(db_path)
        self._connection: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        if self._connection is not None:
            return
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
            await self._connection.execute("PRAGMA foreign_keys = ON")
            await self._connection.executescript(self.SCHEMA_SQL)
            await self._connection.commit()
        except aiosqlite.Error as exc:
            raise RoleStoreError(f"Failed to open role database {self.db_path}: {exc}") from exc
        LOGGER.info("Role store ready at %s", self.db_path)

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def __aenter__(self) -> "SqliteRoleStore":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _get_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RoleStoreError("Role store is not connected")
        return self._connection

    async def find_roles(
        self,
        guild_id: str,
        max_level: Optional[AuthLevel] = None,
        min_level: Optional[AuthLevel] = None,
    ) -> List[RoleRecord]:
        conn = self._get_connection()
        low = int(min_level) if min_level is not None else int(AuthLevel.NONE)
        high = int(max_level) if max_level is not None else int(AuthLevel.SUPERUSER)
        try:
            async with conn.execute(self.SELECT_ROLES_SQL, (guild_id, low, high)) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise RoleStoreError(f"Failed to query roles for guild {guild_id}: {exc}") from exc
        return [
            RoleRecord(id=row["id"], guild_id=row["guild_id"], level=AuthLevel(row["level"]))
            for row in rows
        ]

    async def find_or_create_guild(self, guild_id: str) -> str:
        conn = self._get_connection()
        async with self._lock:
            try:
                cursor = await conn.execute(self.INSERT_GUILD_SQL, (guild_id,))
                await conn.commit()
            except aiosqlite.Error as exc:
                raise RoleStoreError(f"Failed to create guild {guild_id}: {exc}") from exc
        if cursor.rowcount:
            LOGGER.info("Guild %s added to the role database", guild_id)
        return guild_id

    async def persist_role(self, role_id: str, guild_id: str, level: AuthLevel) -> RoleRecord:
        conn = self._get_connection()
        async with self._lock:
            try:
                await conn.execute(self.UPSERT_ROLE_SQL, (role_id, guild_id, int(level)))
                await conn.commit()
            except aiosqlite.Error as exc:
                raise RoleStoreError(f"Failed to persist role {role_id}: {exc}") from exc
        LOGGER.debug("Persisted role %s in guild %s at %s", role_id, guild_id, level.name)
        return RoleRecord(id=role_id, guild_id=guild_id, level=level)
