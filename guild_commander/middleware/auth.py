"""Role-hierarchy authorization and the role assignment command."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Optional

from ..core.errors import RoleStoreError, TransportError, Unauthorized
from ..core.models import (
    AuthLevel,
    AuthOptions,
    CommandDefinition,
    CommandDescription,
    InboundMessage,
    ParameterResult,
)
from ..storage.role_store import RoleStore

if TYPE_CHECKING:
    from ..chat_adapters.i_chat_adapter import IChatAdapter

LOGGER = logging.getLogger(__name__)

DENIAL_NOTICE = "🚫 You're not allowed to use this command."

# Only these levels may be persisted; OWNER and SUPERUSER are always derived.
ASSIGNABLE_LEVELS: Dict[str, AuthLevel] = {
    "mod": AuthLevel.MODERATOR,
    "moderator": AuthLevel.MODERATOR,
    "admin": AuthLevel.ADMIN,
}


def parse_assignable_level(name: str) -> AuthLevel:
    try:
        return ASSIGNABLE_LEVELS[name.strip().lower()]
    except KeyError as exc:
        raise ValueError(f"{name} was not found as a role.") from exc


class Authorizer:
    """Checks an invoking identity against a command's minimum level.

    The superuser and the guild owner are resolved without touching the role
    store; everyone else needs a persisted role at or above the requirement.
    """

    def __init__(
        self,
        role_store: RoleStore,
        superuser: Optional[str] = None,
        options: Optional[AuthOptions] = None,
    ) -> None:
        self._role_store = role_store
        self.superuser = superuser
        self.options = options or AuthOptions()

    def fast_level(self, message: InboundMessage) -> AuthLevel:
        if self.superuser and message.author_id == self.superuser:
            return AuthLevel.SUPERUSER
        if message.guild and message.guild.owner_id and message.author_id == message.guild.owner_id:
            return AuthLevel.OWNER
        return AuthLevel.NONE

    async def authorize(
        self,
        message: InboundMessage,
        definition: CommandDefinition,
        client: "IChatAdapter",
    ) -> AuthLevel:
        """Return the level that satisfied the requirement or raise Unauthorized."""

        required = definition.authentication
        if not required:
            return AuthLevel.NONE

        level = self.fast_level(message)
        if level >= required:
            return level

        if message.guild and await self._has_persisted_role(message, required, client):
            return required

        LOGGER.info(
            "Denied %s for %s (requires %s)",
            message.author_id,
            definition.names[0] if definition.names else "pattern command",
            AuthLevel(required).name,
        )
        await self._deny(message, client)
        raise Unauthorized(f"{message.author_id} lacks {AuthLevel(required).name}")

    async def _has_persisted_role(
        self,
        message: InboundMessage,
        required: AuthLevel,
        client: "IChatAdapter",
    ) -> bool:
        guild_id = message.guild.id  # type: ignore[union-attr]
        try:
            records = await self._role_store.find_roles(guild_id, min_level=required)
        except RoleStoreError:
            LOGGER.warning("Role lookup failed for guild %s", guild_id, exc_info=True)
            return False
        if not records:
            return False

        member_roles = await client.fetch_member_roles(guild_id, message.author_id)
        return any(record.id in member_roles for record in records)

    async def _deny(self, message: InboundMessage, client: "IChatAdapter") -> None:
        try:
            notice = await client.send_message(message.channel_id, DENIAL_NOTICE, thread_ts=message.thread_ts)
            if self.options.delete_messages:
                delay = self.options.delete_message_delay
                if notice:
                    await client.delete_message(notice, delay)
                await client.delete_message(message, delay)
        except TransportError:
            LOGGER.warning("Failed to deliver denial notice in %s", message.channel_id, exc_info=True)

    def role_command(self) -> CommandDefinition:
        """Command definition for assigning moderator/admin levels to roles."""

        return CommandDefinition(
            names=("addrole", "role", "setrole"),
            action=self._add_role_command,
            parameters="{{level}} {{role}}",
            authentication=AuthLevel.OWNER,
            description=CommandDescription(
                message="Add a role to the auth types. You may use either `mod` or `admin`.",
                example="{{prefix}}addrole mod @mods",
            ),
        )

    async def _add_role_command(
        self,
        message: InboundMessage,
        definition: CommandDefinition,
        parameters: ParameterResult,
        client: "IChatAdapter",
        commander: object,
    ) -> bool:
        named = parameters.named or {}
        try:
            level = parse_assignable_level(named.get("level", ""))
        except ValueError as exc:
            await client.send_message(message.channel_id, str(exc), thread_ts=message.thread_ts)
            return False

        if message.guild is None:
            await client.send_message(
                message.channel_id, "Roles can only be added inside a workspace.", thread_ts=message.thread_ts
            )
            return False

        if not message.role_mentions:
            await client.send_message(
                message.channel_id, "You didn't specify any roles to add.", thread_ts=message.thread_ts
            )
            return False

        try:
            guild_id = await self._role_store.find_or_create_guild(message.guild.id)
            for role_id in message.role_mentions:
                await self._role_store.persist_role(role_id, guild_id, level)
        except RoleStoreError:
            LOGGER.exception("Failed to persist roles for guild %s", message.guild.id)
            await client.send_message(
                message.channel_id, "There was an issue adding the roles.", thread_ts=message.thread_ts
            )
            return False

        await client.send_message(
            message.channel_id,
            f"Roles have been added to the command permissions as `{level.name.lower()}`!",
            thread_ts=message.thread_ts,
        )
        return True
