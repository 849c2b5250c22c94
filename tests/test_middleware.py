"""Tests for the middleware pipeline and rate limiter."""

from __future__ import annotations

import asyncio

import pytest

from guild_commander.core.errors import MiddlewareRejected
from guild_commander.core.models import CommandDefinition
from guild_commander.middleware.base import Middleware, MiddlewareContext, MiddlewarePipeline
from guild_commander.middleware.rate_limiter import RateLimiter


async def noop(*args):
    return True


DEFINITION = CommandDefinition(names=("ping",), action=noop)


class CountingMiddleware(Middleware):
    def __init__(self, verdict: bool) -> None:
        self.verdict = verdict
        self.contexts: list[MiddlewareContext] = []

    async def evaluate(self, context: MiddlewareContext) -> bool:
        self.contexts.append(context)
        return self.verdict


class TestMiddlewarePipeline:
    @pytest.mark.asyncio
    async def test_runs_in_registration_order(self, adapter, make_message):
        order = []
        pipeline = MiddlewarePipeline()
        for name in ("first", "second", "third"):

            async def _record(message, definition, client, name=name):
                order.append(name)
                return True

            pipeline.use(_record)

        await pipeline.run(make_message("!ping"), DEFINITION, adapter)

        assert order == ["first", "second", "third"]
        assert len(pipeline) == 3

    @pytest.mark.asyncio
    async def test_first_rejection_stops(self, adapter, make_message):
        allow, deny, never = CountingMiddleware(True), CountingMiddleware(False), CountingMiddleware(True)
        pipeline = MiddlewarePipeline([allow, deny, never])

        with pytest.raises(MiddlewareRejected):
            await pipeline.run(make_message("!ping"), DEFINITION, adapter)

        assert len(allow.contexts) == 1
        assert len(deny.contexts) == 1
        assert never.contexts == []

    @pytest.mark.asyncio
    async def test_context_carries_message_definition_and_client(self, adapter, make_message):
        middleware = CountingMiddleware(True)
        message = make_message("!ping")

        await MiddlewarePipeline([middleware]).run(message, DEFINITION, adapter)

        context = middleware.contexts[0]
        assert context.message is message
        assert context.definition is DEFINITION
        assert context.client is adapter

    @pytest.mark.asyncio
    async def test_falsy_result_rejects(self, adapter, make_message):
        async def returns_none(message, definition, client):
            return None

        pipeline = MiddlewarePipeline()
        pipeline.use(returns_none)

        with pytest.raises(MiddlewareRejected):
            await pipeline.run(make_message("!ping"), DEFINITION, adapter)


class TestRateLimiter:
    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self, adapter, make_message):
        limiter = RateLimiter(limit=2, window_seconds=60)
        context = MiddlewareContext(make_message("!ping"), DEFINITION, adapter)

        results = [await limiter.evaluate(context) for _ in range(3)]

        assert results == [True, True, False]
        assert limiter.count("UUSER") == 3

    @pytest.mark.asyncio
    async def test_users_are_counted_separately(self):
        limiter = RateLimiter(limit=1, window_seconds=60)

        assert limiter.check_user("A")
        assert limiter.check_user("B")
        assert not limiter.check_user("A")

    @pytest.mark.asyncio
    async def test_window_resets(self):
        limiter = RateLimiter(limit=1, window_seconds=0.01)

        assert limiter.check_user("A")
        assert not limiter.check_user("A")
        await asyncio.sleep(0.05)

        assert limiter.count("A") == 0
        assert limiter.check_user("A")

    @pytest.mark.asyncio
    async def test_expired_authors_are_forgotten(self):
        limiter = RateLimiter(limit=1, window_seconds=0.01)
        for index in range(100):
            limiter.check_user(f"U{index}")

        await asyncio.sleep(0.05)

        assert limiter._counts == {}

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            RateLimiter(limit=0, window_seconds=1)
