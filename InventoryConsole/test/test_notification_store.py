"""
Unit tests for the notification tray store.
"""

from dataclasses import replace

import pytest

from InventoryConsole.core.client.services import NotificationStore
from InventoryConsole.core.client.utils import TransientNetworkError
from InventoryConsole.core.client.utils.constants import NOTIFICATION_FAILED_MESSAGE
from InventoryConsole.test.factories import make_notification


class TestNotificationStore:
    """Tests for NotificationStore."""

    @pytest.fixture(autouse=True)
    def _store(self, gateway, notices):
        self.gateway = gateway
        self.notices = notices
        self.items = [make_notification(1), make_notification(2), make_notification(3, read=True)]
        gateway.list_notifications.return_value = list(self.items)
        self.store = NotificationStore(gateway, notices=notices.publish)

    def read_flags(self):
        return [item.read for item in self.store.items]

    @pytest.mark.asyncio
    async def test_load(self):
        await self.store.load()

        assert [item.id for item in self.store.items] == [1, 2, 3]
        assert self.store.unread_count == 2
        assert self.store.loaded

    @pytest.mark.asyncio
    async def test_mark_read_survives_stale_snapshot(self):
        await self.store.load()

        outcome = await self.store.mark_read(1)
        await self.store.load()

        assert outcome.ok
        assert self.read_flags() == [True, False, True]
        self.gateway.mark_notification_read.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_mark_read_failure_reverts(self):
        await self.store.load()
        self.gateway.mark_notification_read.side_effect = TransientNetworkError("offline")

        outcome = await self.store.mark_read(1)

        assert outcome.rolled_back
        assert self.read_flags() == [False, False, True]
        assert self.notices.latest.message == NOTIFICATION_FAILED_MESSAGE

        await self.store.load()
        assert self.read_flags() == [False, False, True]

    @pytest.mark.asyncio
    async def test_mark_all_read(self):
        await self.store.load()

        await self.store.mark_all_read()

        assert self.store.unread_count == 0
        await self.store.load()
        assert self.store.unread_count == 0

    @pytest.mark.asyncio
    async def test_mark_all_read_failure_reverts_only_flipped(self):
        await self.store.load()
        self.gateway.mark_all_notifications_read.side_effect = TransientNetworkError("offline")

        await self.store.mark_all_read()

        assert self.read_flags() == [False, False, True]

    @pytest.mark.asyncio
    async def test_delete_hides_item_until_server_drops_it(self):
        await self.store.load()

        await self.store.delete(2)
        assert [item.id for item in self.store.items] == [1, 3]

        # Snapshot taken before the delete landed
        await self.store.load()
        assert [item.id for item in self.store.items] == [1, 3]

        self.gateway.list_notifications.return_value = [self.items[0], self.items[2]]
        await self.store.load()
        assert [item.id for item in self.store.items] == [1, 3]

    @pytest.mark.asyncio
    async def test_delete_failure_restores_position(self):
        await self.store.load()
        self.gateway.delete_notification.side_effect = TransientNetworkError("offline")

        outcome = await self.store.delete(2)

        assert outcome.rolled_back
        assert [item.id for item in self.store.items] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_server_read_flag_wins_once_true(self):
        await self.store.load()
        self.gateway.list_notifications.return_value = [
            replace(self.items[0], read=True), self.items[1], self.items[2],
        ]

        await self.store.load()

        assert self.read_flags() == [True, False, True]
