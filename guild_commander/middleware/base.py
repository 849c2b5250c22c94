"""Middleware interface and the ordered pipeline that runs it."""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, List, Sequence, Union

from ..core.errors import MiddlewareRejected
from ..core.models import CommandDefinition, InboundMessage

if TYPE_CHECKING:
    from ..chat_adapters.i_chat_adapter import IChatAdapter

LOGGER = logging.getLogger(__name__)

MiddlewareFunction = Callable[[InboundMessage, CommandDefinition, "IChatAdapter"], Awaitable[bool]]


@dataclass(frozen=True)
class MiddlewareContext:
    message: InboundMessage
    definition: CommandDefinition
    client: "IChatAdapter"


class Middleware(abc.ABC):
    """A predicate consulted before every command invocation."""

    @abc.abstractmethod
    async def evaluate(self, context: MiddlewareContext) -> bool:
        """Return False to reject the invocation."""


class FunctionMiddleware(Middleware):
    """Adapts a plain `(message, definition, client)` coroutine function."""

    def __init__(self, func: MiddlewareFunction) -> None:
        self._func = func

    async def evaluate(self, context: MiddlewareContext) -> bool:
        return await self._func(context.message, context.definition, context.client)

    def __repr__(self) -> str:
        return f"FunctionMiddleware({getattr(self._func, '__qualname__', self._func)!r})"


class MiddlewarePipeline:
    def __init__(self, middlewares: Sequence[Middleware] = ()) -> None:
        self._middlewares: List[Middleware] = list(middlewares)

    def use(self, middleware: Union[Middleware, MiddlewareFunction]) -> None:
        if not isinstance(middleware, Middleware):
            middleware = FunctionMiddleware(middleware)
        self._middlewares.append(middleware)

    async def run(
        self,
        message: InboundMessage,
        definition: CommandDefinition,
        client: "IChatAdapter",
    ) -> None:
        """Evaluate every middleware in order, stopping at the first rejection.

        Exceptions raised by a middleware are not converted into rejections.
        """

        context = MiddlewareContext(message=message, definition=definition, client=client)
        for middleware in self._middlewares:
            if not await middleware.evaluate(context):
                LOGGER.debug("Middleware %r rejected message %s", middleware, message.id)
                raise MiddlewareRejected("Middleware rejection")

    def __len__(self) -> int:
        return len(self._middlewares)
