"""
Client stores and derived state.
"""
from .conversation_store import ConversationStore, sort_by_activity
from .inventory_store import InventoryStore
from .message_grouping import MessageGroup, bucket_label, group_messages_by_date
from .notification_store import NotificationStore
from .unread_aggregator import ActivityKind, RecentActivity, UnreadAggregator, UnreadSummary

__all__ = [
    'ConversationStore',
    'InventoryStore',
    'NotificationStore',
    'UnreadAggregator',
    'UnreadSummary',
    'RecentActivity',
    'ActivityKind',
    'MessageGroup',
    'bucket_label',
    'group_messages_by_date',
    'sort_by_activity',
]
