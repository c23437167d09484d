"""
View contracts: display state derived from the client stores.
"""
from .formatting import badge_text, format_message_time, format_relative_time
from .presenters import (
    BadgeState,
    ConversationDetail,
    ConversationRow,
    DateSection,
    InventoryRow,
    MessageRow,
    NotificationRow,
    NotificationTray,
    badge_state,
    conversation_detail,
    conversation_rows,
    filter_available_users,
    inventory_rows,
    notification_tray,
)

__all__ = [
    'BadgeState',
    'ConversationDetail',
    'ConversationRow',
    'DateSection',
    'InventoryRow',
    'MessageRow',
    'NotificationRow',
    'NotificationTray',
    'badge_state',
    'badge_text',
    'conversation_detail',
    'conversation_rows',
    'filter_available_users',
    'format_message_time',
    'format_relative_time',
    'inventory_rows',
    'notification_tray',
]
