"""
Utility constants and exceptions shared by the console sync core.
"""

from .constants import (
    DEFAULT_API_BASE_URL,
    CONVERSATION_LIST_POLL_SECONDS,
    CONVERSATION_DETAIL_POLL_SECONDS,
    UNREAD_BADGE_POLL_SECONDS,
    INVENTORY_POLL_SECONDS,
    PENDING_ID_PREFIX,
)
from .exceptions import (
    ConsoleError,
    TransientNetworkError,
    ValidationError,
    AuthorizationError,
    ServerRejectionError,
)

__all__ = [
    'ConsoleError',
    'TransientNetworkError',
    'ValidationError',
    'AuthorizationError',
    'ServerRejectionError',
    'DEFAULT_API_BASE_URL',
    'CONVERSATION_LIST_POLL_SECONDS',
    'CONVERSATION_DETAIL_POLL_SECONDS',
    'UNREAD_BADGE_POLL_SECONDS',
    'INVENTORY_POLL_SECONDS',
    'PENDING_ID_PREFIX',
]
