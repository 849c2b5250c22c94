"""Tests for the confirm helper."""

import pytest

from guild_commander.core.confirm import ConfirmOptions, ConfirmStatus, confirm


class TestConfirm:
    @pytest.mark.asyncio
    async def test_success_with_reason(self, adapter, make_message):
        message = make_message("!save")

        await confirm(adapter, message, ConfirmStatus.SUCCESS, "Saved.")

        assert adapter.reactions == [("msg-1", "white_check_mark")]
        assert adapter.texts == ["*Alert:* Saved."]
        assert adapter.deleted == [("reply-1", 3000), ("msg-1", 3000)]

    @pytest.mark.asyncio
    async def test_failure_without_cleanup(self, adapter, make_message):
        message = make_message("!save")

        await confirm(adapter, message, ConfirmStatus.FAILURE, options=ConfirmOptions(delete=False))

        assert adapter.reactions == [("msg-1", "x")]
        assert adapter.messages == []
        assert adapter.deleted == []

    @pytest.mark.asyncio
    async def test_zero_delay_uses_default(self, adapter, make_message):
        await confirm(adapter, make_message("!save"), ConfirmStatus.SUCCESS, options=ConfirmOptions(delay=0))

        assert adapter.deleted == [("msg-1", 3000)]
