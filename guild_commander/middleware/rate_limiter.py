"""Fixed-window spam protection."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict

from .base import Middleware, MiddlewareContext

LOGGER = logging.getLogger(__name__)


class RateLimiter(Middleware):
    """Rejects an author after `limit` commands within one window.

    The window starts at the author's first command and is cleared once
    `window_seconds` have passed.
    """

    def __init__(self, limit: int, window_seconds: float) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.window_seconds = window_seconds
        self._counts: Dict[str, int] = {}

    async def evaluate(self, context: MiddlewareContext) -> bool:
        return self.check_user(context.message.author_id)

    def check_user(self, user_id: str) -> bool:
        if not self._counts.get(user_id):
            self._defer_clear(user_id)
        self._counts[user_id] = self._counts.get(user_id, 0) + 1

        if self._counts[user_id] > self.limit:
            LOGGER.info("Rate limit exceeded for %s (%s in window)", user_id, self._counts[user_id])
            return False
        return True

    def count(self, user_id: str) -> int:
        return self._counts.get(user_id, 0)

    def _defer_clear(self, user_id: str) -> None:
        loop = asyncio.get_running_loop()
        loop.call_later(self.window_seconds, self._clear, user_id)

    def _clear(self, user_id: str) -> None:
        self._counts.pop(user_id, None)
