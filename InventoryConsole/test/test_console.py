"""
Unit tests for the ConsoleClient facade.
"""

import asyncio

import pytest

from InventoryConsole.core.client import console as console_module
from InventoryConsole.core.client.console import ConsoleClient
from InventoryConsole.core.client.utils import TransientNetworkError
from InventoryConsole.core.client.utils.constants import (
    CONVERSATION_DETAIL_CONSUMER,
    CONVERSATION_LIST_CONSUMER,
    INVENTORY_CONSUMER,
    UNREAD_BADGE_CONSUMER,
)
from InventoryConsole.test.factories import make_conversation, make_notification, make_record


class TestConsoleClient:
    """Tests for ConsoleClient wiring and lifecycle."""

    @pytest.fixture(autouse=True)
    def _console(self, gateway, session):
        self.gateway = gateway
        gateway.list_conversations.return_value = [make_conversation(10, unread=True)]
        gateway.get_conversation.return_value = make_conversation(10, unread=True)
        gateway.list_notifications.return_value = [make_notification(1)]
        self.console = ConsoleClient(session, gateway=gateway)

    @pytest.mark.asyncio
    async def test_start_begins_the_three_polls(self):
        self.console.start()
        await asyncio.sleep(0.01)

        for consumer in (CONVERSATION_LIST_CONSUMER, UNREAD_BADGE_CONSUMER, INVENTORY_CONSUMER):
            assert self.console.scheduler.is_running(consumer)
            assert self.console.poll_handle(consumer).runs == 1

        self.gateway.list_inventory.assert_awaited()
        self.gateway.list_notifications.assert_awaited()
        assert self.console.unread.badge_count == 2
        await self.console.stop()

    @pytest.mark.asyncio
    async def test_start_twice_does_not_duplicate_polls(self):
        self.console.start()
        self.console.start()

        assert len(self.console.scheduler.handles()) == 3
        await self.console.stop()

    @pytest.mark.asyncio
    async def test_open_and_close_conversation(self):
        await self.console.open_conversation(10)
        consumer = CONVERSATION_DETAIL_CONSUMER.format(cid=10)

        assert self.console.scheduler.is_running(consumer)
        assert self.console.conversations.unread_count == 0

        self.console.close_conversation()
        assert not self.console.scheduler.is_running(consumer)
        await self.console.stop()

    @pytest.mark.asyncio
    async def test_stop_tears_everything_down(self):
        self.console.start()
        await self.console.open_conversation(10)

        await self.console.stop()

        assert self.console.scheduler.handles() == []
        assert self.console.conversations.disposed
        assert self.console.notifications.disposed
        assert self.console.inventory.disposed
        assert not self.console.running

    @pytest.mark.asyncio
    async def test_cannot_restart_after_stop(self):
        await self.console.stop()
        await self.console.stop()

        with pytest.raises(RuntimeError):
            self.console.start()

    @pytest.mark.asyncio
    async def test_failures_surface_on_notice_board(self):
        self.gateway.list_inventory.return_value = [make_record(1)]
        await self.console.inventory.load()
        self.gateway.adjust_quantity.side_effect = ConnectionError("boom")

        await self.console.inventory.adjust_quantity(100, 1)

        assert self.console.notices.latest.is_error
        await self.console.stop()

    @pytest.mark.asyncio
    async def test_badge_refreshes_notifications_when_chat_is_down(self):
        self.gateway.list_conversations.side_effect = TransientNetworkError("chat offline")

        self.console.start()
        await asyncio.sleep(0.01)

        assert self.console.notifications.loaded
        assert self.console.unread.badge_count == 1
        await self.console.stop()

    @pytest.mark.asyncio
    async def test_start_applies_logging_preset(self, gateway, session, monkeypatch):
        applied = []
        monkeypatch.setattr(console_module, "auto_configure", applied.append)

        console = ConsoleClient(session, gateway=gateway, log_env="testing")
        console.start()
        console.start()
        self.console.start()

        assert applied == ["testing"]
        await console.stop()
        await self.console.stop()
