"""
Unit tests for the navigation unread badge.
"""

import pytest

from InventoryConsole.core.client.services import (
    ActivityKind,
    ConversationStore,
    NotificationStore,
    UnreadAggregator,
)
from InventoryConsole.test.factories import NOW, make_conversation, make_notification


class TestUnreadAggregator:
    """Tests for UnreadAggregator."""

    @pytest.fixture(autouse=True)
    def _stores(self, gateway, session):
        self.gateway = gateway
        gateway.list_conversations.return_value = [
            make_conversation(10, unread=True, minutes_ago=1),
            make_conversation(11, unread=False, minutes_ago=120),
        ]
        gateway.list_notifications.return_value = [
            make_notification(1, minutes_ago=3),
            make_notification(2, read=True, minutes_ago=60),
        ]
        self.conversations = ConversationStore(gateway, session, clock=lambda: NOW)
        self.notifications = NotificationStore(gateway)
        self.aggregator = UnreadAggregator(self.conversations, self.notifications, recent_limit=3)

    @pytest.mark.asyncio
    async def test_total_counts_both_sources(self):
        await self.conversations.load_conversations()
        await self.notifications.load()

        summary = self.aggregator.summary
        assert summary.conversations == 1
        assert summary.notifications == 1
        assert self.aggregator.badge_count == 2

    @pytest.mark.asyncio
    async def test_recent_activity_newest_first(self):
        await self.conversations.load_conversations()
        await self.notifications.load()

        recent = self.aggregator.summary.recent
        assert [(a.kind, a.id) for a in recent] == [
            (ActivityKind.CONVERSATION, 10),
            (ActivityKind.NOTIFICATION, 1),
            (ActivityKind.NOTIFICATION, 2),
        ]

    @pytest.mark.asyncio
    async def test_reading_updates_badge_and_notifies(self):
        await self.conversations.load_conversations()
        await self.notifications.load()
        seen = []
        self.aggregator.subscribe(lambda summary: seen.append(summary.total))

        await self.conversations.mark_read(10)
        await self.notifications.mark_read(1)

        assert self.aggregator.badge_count == 0
        assert seen[-1] == 0

    @pytest.mark.asyncio
    async def test_unchanged_summary_is_not_republished(self):
        await self.conversations.load_conversations()
        seen = []
        self.aggregator.subscribe(seen.append)

        await self.conversations.load_conversations()

        assert seen == []

    @pytest.mark.asyncio
    async def test_close_detaches_from_stores(self):
        self.aggregator.close()

        await self.conversations.load_conversations()

        assert self.aggregator.badge_count == 0
