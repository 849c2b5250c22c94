"""Message dispatch: tokenize, resolve, gate and invoke commands."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, List, Optional, Set, Union

from ..errors import (
    CommandError,
    MalformedRequest,
    ParameterMismatch,
    PrefixRequired,
    TransportError,
    Unauthorized,
    UnknownCommand,
)
from ..models import (
    BotType,
    CommandDefinition,
    CommandsOptions,
    InboundMessage,
    ParameterResult,
    Prefix,
    RegisteredCommand,
)
from ...middleware.base import Middleware, MiddlewareFunction, MiddlewarePipeline
from .help import build_help_command
from .parser import ParsedRequest, is_escaped_prefix, parse_request
from .registry import CommandRegistry
from .template import create_parameters

if TYPE_CHECKING:
    from ...chat_adapters.i_chat_adapter import IChatAdapter
    from ...middleware.auth import Authorizer

LOGGER = logging.getLogger(__name__)

PreMessageFunction = Callable[[InboundMessage], Awaitable[None]]


class Commander:
    """Fluent registration surface and per-message dispatcher.

    Example::

        commander = (
            Commander("!", client)
            .use(RateLimiter(5, 10))
            .define_command(authorizer.role_command())
            .define_command(CommandDefinition(names=("p", "ping"), action=ping))
        )
        await commander.handle_message(message)
    """

    def __init__(
        self,
        prefix: str,
        client: "IChatAdapter",
        options: Optional[CommandsOptions] = None,
        authorizer: Optional["Authorizer"] = None,
    ) -> None:
        self.prefix = Prefix.from_literal(prefix)
        self.client = client
        self.options = options or CommandsOptions()
        self.authorizer = authorizer
        self.registry = CommandRegistry()
        self.pipeline = MiddlewarePipeline()
        self._tasks: Set[asyncio.Task] = set()
        self._failure: Optional[BaseException] = None

    def use(self, middleware: Union[Middleware, MiddlewareFunction]) -> "Commander":
        self.pipeline.use(middleware)
        return self

    def define_command(self, definition: CommandDefinition) -> "Commander":
        self.registry.register(definition)
        return self

    def has_command(self, alias: str) -> bool:
        return self.registry.has_command(alias)

    def generate_help(self, footer: Optional[str] = None) -> "Commander":
        return self.define_command(build_help_command(self, footer))

    def listen(self, pre_message: Optional[PreMessageFunction] = None) -> "Commander":
        """Attach this commander to the client's inbound message stream."""

        async def _on_message(message: InboundMessage) -> None:
            if pre_message:
                await pre_message(message)
            await self.handle_message(message)

        self.client.on_message(_on_message)
        return self

    def is_eligible(self, message: InboundMessage) -> bool:
        bot_type = self.options.bot_type
        if bot_type == BotType.SELF:
            return message.author_id == self.client.user_id
        if bot_type == BotType.GUILD_ONLY:
            return message.guild is not None
        return message.author_id != self.client.user_id

    async def handle_message(self, message: InboundMessage) -> None:
        """Feed one inbound message through the dispatch pipeline."""

        if not self.is_eligible(message):
            return

        try:
            request = parse_request(message.content, self.prefix)
        except MalformedRequest as exc:
            LOGGER.debug("Dropping message %s: %s", message.id, exc)
            return

        try:
            candidates = self.registry.resolve(request.command, message.content)
        except UnknownCommand:
            if self._should_announce_unknown(request, message):
                await self._notify(
                    message, f"Command not found! Consider sending {self.prefix.literal}help."
                )
            return

        for command in candidates:
            try:
                await self._dispatch(command, request, message)
            except CommandError as exc:
                LOGGER.debug("Command #%s not run for message %s: %s", command.handle, message.id, exc)

    async def join(self) -> None:
        """Wait for scheduled handler tasks, re-raising the first failure.

        Failures of tasks that finished before this call are raised too.
        """

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        failure, self._failure = self._failure, None
        if failure is not None:
            raise failure

    async def _dispatch(self, command: RegisteredCommand, request: ParsedRequest, message: InboundMessage) -> None:
        definition = command.definition
        if command.requires_prefix and not request.prefix:
            raise PrefixRequired("Command requires a prefix.")

        parameters = await self._create_parameters(request, definition, message)
        await self.pipeline.run(message, definition, self.client)
        if definition.authentication:
            await self._authorize(message, definition)

        self._invoke(definition, message, parameters)

        if self.options.delete_command_message and command.requires_prefix:
            self._schedule(self._delete_quietly(message, self.options.delete_message_delay))

    async def _create_parameters(
        self,
        request: ParsedRequest,
        definition: CommandDefinition,
        message: InboundMessage,
    ) -> ParameterResult:
        try:
            return create_parameters(request.args, definition.parameters)
        except ParameterMismatch as exc:
            notice = await self._notify(
                message,
                f"Please format your {exc.content or 'empty message'} to match {exc.template}",
            )
            if self.options.delete_command_message:
                delay = self.options.delete_message_delay
                if notice:
                    self._schedule(self._delete_quietly(notice, delay))
                self._schedule(self._delete_quietly(message, delay))
            raise

    async def _authorize(self, message: InboundMessage, definition: CommandDefinition) -> None:
        if self.authorizer is None:
            LOGGER.warning(
                "Command %s requires %s but no authorizer is configured",
                definition.names or definition.pattern,
                definition.authentication,
            )
            raise Unauthorized("No authorizer configured")
        await self.authorizer.authorize(message, definition, self.client)

    def _invoke(self, definition: CommandDefinition, message: InboundMessage, parameters: ParameterResult) -> None:
        result = definition.action(message, definition, parameters, self.client, self)
        if inspect.isawaitable(result):
            self._schedule(result)

    def _schedule(self, awaitable: Awaitable[object]) -> asyncio.Task:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error("Command handler failed", exc_info=exc)
            if self._failure is None:
                self._failure = exc

    def _should_announce_unknown(self, request: ParsedRequest, message: InboundMessage) -> bool:
        return request.prefix == self.prefix.literal and not is_escaped_prefix(message.content, self.prefix)

    async def _notify(self, message: InboundMessage, text: str) -> Optional[InboundMessage]:
        try:
            return await self.client.send_message(message.channel_id, text, thread_ts=message.thread_ts)
        except TransportError:
            LOGGER.warning("Failed to send notice to %s", message.channel_id, exc_info=True)
            return None

    async def _delete_quietly(self, message: InboundMessage, delay_ms: int) -> None:
        try:
            await self.client.delete_message(message, delay_ms)
        except TransportError as exc:
            # Usually already deleted by someone else.
            LOGGER.debug("Could not delete message %s: %s", message.id, exc)

    @property
    def commands(self) -> List[RegisteredCommand]:
        return list(self.registry.iter_commands())
