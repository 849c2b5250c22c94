"""Slack adapter using the official Slack SDK."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, FrozenSet, List, Optional, Set

from slack_sdk.errors import SlackApiError
from slack_sdk.socket_mode.aiohttp import SocketModeClient
from slack_sdk.socket_mode.request import SocketModeRequest
from slack_sdk.socket_mode.response import SocketModeResponse
from slack_sdk.web.async_client import AsyncWebClient

from .i_chat_adapter import IChatAdapter
from ..core.errors import SlackError
from ..core.models import GuildInfo, InboundMessage

LOGGER = logging.getLogger(__name__)

# <!subteam^S0123ABC> or <!subteam^S0123ABC|@mods>
SUBTEAM_MENTION = re.compile(r"<!subteam\^([A-Z0-9]+)(?:\|[^>]*)?>")
ACCEPTED_SUBTYPES = {None, "bot_message", "thread_broadcast"}


def extract_role_mentions(text: str) -> tuple[str, ...]:
    seen: List[str] = []
    for role_id in SUBTEAM_MENTION.findall(text or ""):
        if role_id not in seen:
            seen.append(role_id)
    return tuple(seen)


class SlackAdapter(IChatAdapter):
    """Maps Slack workspaces to guilds and user groups to roles."""

    def __init__(self, bot_token: str, app_token: str) -> None:
        super().__init__()
        self._web_client = AsyncWebClient(token=bot_token)
        self._client = SocketModeClient(app_token=app_token, web_client=self._web_client)
        self._stop_event = asyncio.Event()
        self._bot_user_id: Optional[str] = None
        self._team_owners: Dict[str, str] = {}
        self._checked_users: Set[str] = set()
        self._pending: Set[asyncio.Task] = set()
        self._client.socket_mode_request_listeners.append(self._handle_socket_request)

    @property
    def user_id(self) -> Optional[str]:
        return self._bot_user_id

    async def send_message(
        self,
        channel: str,
        text: str,
        thread_ts: Optional[str] = None,
        blocks: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[InboundMessage]:
        try:
            response = await self._web_client.chat_postMessage(
                channel=channel, text=text, thread_ts=thread_ts, blocks=blocks
            )
        except SlackApiError as exc:
            raise SlackError(f"Failed to send Slack message: {exc}") from exc
        ts = response.get("ts")
        if not ts:
            return None
        return InboundMessage(
            id=ts,
            channel_id=response.get("channel") or channel,
            author_id=self._bot_user_id or "",
            content=text,
            thread_ts=thread_ts,
        )

    async def delete_message(self, message: InboundMessage, delay_ms: int = 0) -> None:
        if delay_ms > 0:
            task = asyncio.create_task(self._delete_later(message, delay_ms))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            return
        await self._delete_now(message)

    async def add_reaction(self, message: InboundMessage, name: str) -> None:
        try:
            await self._web_client.reactions_add(channel=message.channel_id, name=name, timestamp=message.id)
        except SlackApiError as exc:
            raise SlackError(f"Failed to add reaction {name}: {exc}") from exc

    async def fetch_member_roles(self, guild_id: str, user_id: str) -> FrozenSet[str]:
        try:
            response = await self._web_client.usergroups_list(team_id=guild_id, include_users=True)
        except SlackApiError as exc:
            raise SlackError(f"Failed to list user groups for {guild_id}: {exc}") from exc
        return frozenset(
            group["id"]
            for group in response.get("usergroups") or []
            if user_id in (group.get("users") or [])
        )

    async def start(self) -> None:
        try:
            identity = await self._web_client.auth_test()
        except SlackApiError as exc:
            raise SlackError(f"Slack authentication failed: {exc}") from exc
        self._bot_user_id = identity.get("user_id")
        LOGGER.info("Connecting to Slack via Socket Mode as %s", self._bot_user_id)
        await self._client.connect()
        await self._stop_event.wait()

    async def stop(self) -> None:
        if not self._stop_event.is_set():
            self._stop_event.set()
        for task in list(self._pending):
            task.cancel()
        await self._client.close()

    async def _delete_later(self, message: InboundMessage, delay_ms: int) -> None:
        await asyncio.sleep(delay_ms / 1000)
        try:
            await self._delete_now(message)
        except SlackError as exc:
            LOGGER.debug("Scheduled delete of %s failed: %s", message.id, exc)

    async def _delete_now(self, message: InboundMessage) -> None:
        try:
            await self._web_client.chat_delete(channel=message.channel_id, ts=message.id)
        except SlackApiError as exc:
            raise SlackError(f"Failed to delete message {message.id}: {exc}") from exc

    async def _handle_socket_request(
        self,
        client: SocketModeClient,
        req: SocketModeRequest,
    ) -> None:
        await client.send_socket_mode_response(SocketModeResponse(envelope_id=req.envelope_id))
        if req.type != "events_api":
            return

        payload = req.payload or {}
        event = payload.get("event", {})
        if event.get("type") != "message" or event.get("subtype") not in ACCEPTED_SUBTYPES:
            LOGGER.debug("Ignoring Slack event type %s with subtype %s", event.get("type"), event.get("subtype"))
            return

        message = await self.to_inbound_message(event, payload.get("team_id"))
        if message is None:
            return
        await self.emit_message(message)

    async def to_inbound_message(self, event: Dict[str, Any], team_id: Optional[str]) -> Optional[InboundMessage]:
        author_id = event.get("user") or event.get("bot_id")
        channel_id = event.get("channel")
        ts = event.get("ts")
        if not author_id or not channel_id or not ts:
            LOGGER.debug("Ignoring Slack event missing author, channel or ts")
            return None

        guild: Optional[GuildInfo] = None
        team = event.get("team") or team_id
        if team and event.get("channel_type") != "im":
            owner_id = await self._resolve_owner(team, author_id)
            guild = GuildInfo(id=team, owner_id=owner_id)

        text = event.get("text") or ""
        return InboundMessage(
            id=ts,
            channel_id=channel_id,
            author_id=author_id,
            content=text,
            guild=guild,
            thread_ts=event.get("thread_ts"),
            role_mentions=extract_role_mentions(text),
        )

    async def _resolve_owner(self, team_id: str, user_id: str) -> Optional[str]:
        # The primary owner is learned the first time they speak.
        if team_id in self._team_owners or user_id in self._checked_users:
            return self._team_owners.get(team_id)
        try:
            response = await self._web_client.users_info(user=user_id)
        except SlackApiError as exc:
            LOGGER.debug("Failed to resolve user %s: %s", user_id, exc)
            return self._team_owners.get(team_id)

        self._checked_users.add(user_id)
        user = response.get("user") or {}
        if user.get("is_primary_owner"):
            self._team_owners[team_id] = user_id
        return self._team_owners.get(team_id)
