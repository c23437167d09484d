"""
Models package.
"""
from .data import (
    AvailableUser,
    Conversation,
    Message,
    NotificationCategory,
    NotificationItem,
    Participant,
    QuantityRecord,
    parse_timestamp,
)

__all__ = [
    'AvailableUser',
    'Conversation',
    'Message',
    'NotificationCategory',
    'NotificationItem',
    'Participant',
    'QuantityRecord',
    'parse_timestamp',
]
