"""
Constants and default values for the console sync core.
"""

# Default connection settings
DEFAULT_API_BASE_URL = "http://localhost:8080/api"
API_TIMEOUT_SECONDS = 60
API_CONNECT_TIMEOUT_SECONDS = 10

# Poll intervals (seconds)
CONVERSATION_LIST_POLL_SECONDS = 10.0
CONVERSATION_DETAIL_POLL_SECONDS = 5.0
UNREAD_BADGE_POLL_SECONDS = 30.0
INVENTORY_POLL_SECONDS = 30.0

# Poll consumer ids
CONVERSATION_LIST_CONSUMER = "conversation-list"
CONVERSATION_DETAIL_CONSUMER = "conversation:{cid}"
UNREAD_BADGE_CONSUMER = "unread-badge"
INVENTORY_CONSUMER = "inventory-table"

# Pending (optimistic) entries
PENDING_ID_PREFIX = "local-"
PENDING_EXPIRY_SECONDS = 120

# Message grouping
TODAY_LABEL = "Today"
YESTERDAY_LABEL = "Yesterday"
DATE_HEADER_FORMAT = "%Y-%m-%d"
TIME_LABEL_FORMAT = "%H:%M"

# Display
PREVIEW_MAX_LENGTH = 40
RECENT_ACTIVITY_LIMIT = 5

# User-facing failure texts
SEND_FAILED_MESSAGE = "Failed to send message. Please try again."
MARK_READ_FAILED_MESSAGE = "Failed to mark conversation as read."
NOTIFICATION_FAILED_MESSAGE = "Failed to update notifications. Please try again."
QUANTITY_FAILED_MESSAGE = "Failed to update quantity. Please try again."
EMPTY_MESSAGE_ERROR = "Message body must not be empty"
