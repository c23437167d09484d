"""
Data models for the console sync core.

Every model reads the server's camelCase JSON through ``from_dict``.
Timestamps are held as naive datetimes in the viewer's local zone.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..utils.constants import PENDING_ID_PREFIX, PREVIEW_MAX_LENGTH


# Epoch numbers past this are milliseconds (JavaScript Date.getTime)
_EPOCH_MILLIS_THRESHOLD = 1e11


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string, epoch seconds or epoch milliseconds into a
    naive local datetime. Unparseable values give None.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        seconds = float(value)
        if abs(seconds) >= _EPOCH_MILLIS_THRESHOLD:
            seconds /= 1000.0
        try:
            dt = datetime.fromtimestamp(seconds)
        except (ValueError, OverflowError, OSError):
            return None
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


@dataclass
class Participant:
    """The other side of a conversation."""
    id: Any
    name: str
    email: str = ""
    online: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Participant':
        data = data or {}
        return cls(
            id=data.get("id"),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            online=bool(data.get("online", False)),
        )


@dataclass
class AvailableUser:
    """A user the viewer may start a conversation with."""
    id: Any
    name: str
    email: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AvailableUser':
        return cls(
            id=data.get("id"),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
        )


@dataclass
class Conversation:
    """Represents a conversation with one other participant."""
    id: Any
    participant: Participant
    last_message: str = ""
    last_activity: Optional[datetime] = None
    has_unread: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Conversation':
        last = data.get("lastMessage") or {}
        if isinstance(last, str):
            last = {"content": last}
        return cls(
            id=data.get("id"),
            participant=Participant.from_dict(data.get("otherParticipant") or {}),
            last_message=str(last.get("content") or ""),
            last_activity=parse_timestamp(last.get("timestamp") or data.get("lastActivity")),
            has_unread=bool(data.get("hasUnread", False)),
        )

    def compute_last_preview(self, max_len: int = PREVIEW_MAX_LENGTH) -> str:
        """Compute a compact preview for the conversation list."""
        preview = (self.last_message or "").replace("\n", " ").strip()
        if len(preview) > max_len:
            preview = preview[:max_len] + "…"
        return preview


@dataclass
class Message:
    """
    A message in a conversation.

    ``confirmed`` is False for a locally pending message whose id still
    carries the ``local-`` prefix.
    """
    id: Any
    conversation_id: Any
    sender_id: Any
    body: str
    timestamp: Optional[datetime] = None
    confirmed: bool = True
    read: bool = False
    created_locally_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], conversation_id: Any = None) -> 'Message':
        return cls(
            id=data.get("id"),
            conversation_id=data.get("chatId", conversation_id),
            sender_id=data.get("senderId"),
            body=str(data.get("content") or ""),
            timestamp=parse_timestamp(data.get("timestamp")),
            confirmed=True,
            read=bool(data.get("read", False)),
        )

    @property
    def is_pending(self) -> bool:
        return not self.confirmed

    @staticmethod
    def is_temporary_id(message_id: Any) -> bool:
        return isinstance(message_id, str) and message_id.startswith(PENDING_ID_PREFIX)

    def sort_key(self) -> Tuple[int, datetime]:
        """Timestamp order with pending messages after confirmed ones."""
        return (0 if self.confirmed else 1, self.timestamp or datetime.min)


class NotificationCategory(Enum):
    """Kinds of notification shown in the tray."""
    STOCK_ALERT = "STOCK_ALERT"
    NEW_ENTITY = "NEW_ENTITY"
    SUPPLIER_UPDATE = "SUPPLIER_UPDATE"
    ORDER = "ORDER"
    SYSTEM = "SYSTEM"

    @classmethod
    def parse(cls, value: Any) -> 'NotificationCategory':
        try:
            return cls(str(value or "").upper())
        except ValueError:
            return cls.SYSTEM


@dataclass
class NotificationItem:
    """A notification in the tray."""
    id: Any
    category: NotificationCategory = NotificationCategory.SYSTEM
    title: str = ""
    message: str = ""
    read: bool = False
    created_at: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = ("id", "type", "category", "title", "message", "read", "createdAt", "timestamp")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NotificationItem':
        return cls(
            id=data.get("id"),
            category=NotificationCategory.parse(data.get("type") or data.get("category")),
            title=str(data.get("title") or ""),
            message=str(data.get("message") or ""),
            read=bool(data.get("read", False)),
            created_at=parse_timestamp(data.get("createdAt") or data.get("timestamp")),
            metadata={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )


@dataclass
class QuantityRecord:
    """
    Stock level of one product at one location.

    The displayed quantity never goes below zero, whatever the server says.
    """
    id: Any
    product_id: Any
    quantity: int = 0
    reorder_level: int = 0
    reorder_quantity: int = 0
    product_name: str = ""
    product_sku: str = ""
    location: str = ""

    def __post_init__(self):
        self.quantity = max(0, int(self.quantity or 0))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuantityRecord':
        return cls(
            id=data.get("id"),
            product_id=data.get("productId"),
            quantity=int(data.get("quantity") or 0),
            reorder_level=int(data.get("reorderLevel") or 0),
            reorder_quantity=int(data.get("reorderQuantity") or 0),
            product_name=str(data.get("productName") or ""),
            product_sku=str(data.get("productSku") or ""),
            location=str(data.get("location") or ""),
        )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.reorder_level
