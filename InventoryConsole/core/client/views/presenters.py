"""
Display state for the console's views.

Each presenter turns store state into plain records a widget layer can
render. None of them mutate a store; intents go back through the store's
own operations.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional

from ..models.data import AvailableUser, Conversation, NotificationCategory, QuantityRecord
from ..services.conversation_store import ConversationStore
from ..services.inventory_store import InventoryStore
from ..services.message_grouping import group_messages_by_date
from ..services.notification_store import NotificationStore
from ..services.unread_aggregator import RecentActivity, UnreadSummary
from .formatting import badge_text, format_message_time, format_relative_time, initial


def _matches(term: str, *fields: str) -> bool:
    return any(term in (f or "").lower() for f in fields)


# ==================== Conversation list ====================

@dataclass
class ConversationRow:
    id: Any
    title: str
    initial: str
    online: bool
    preview: str
    time_label: str
    unread: bool
    active: bool = False


def conversation_rows(store: ConversationStore, search_term: str = "",
                      now: Optional[datetime] = None) -> List[ConversationRow]:
    """Rows for the conversation list, filtered by participant name or last message."""
    now = now or datetime.now()
    term = (search_term or "").strip().lower()
    rows = []
    for conversation in store.conversations:
        if term and not _matches(term, conversation.participant.name, conversation.last_message):
            continue
        rows.append(ConversationRow(
            id=conversation.id,
            title=conversation.participant.name,
            initial=initial(conversation.participant.name),
            online=conversation.participant.online,
            preview=conversation.compute_last_preview(),
            time_label=format_relative_time(conversation.last_activity, now),
            unread=conversation.has_unread,
            active=conversation.id == store.active_id,
        ))
    return rows


def filter_available_users(users: Iterable[AvailableUser], search_term: str = "") -> List[AvailableUser]:
    """New-conversation dialog: users whose name or email contains the term."""
    term = (search_term or "").strip().lower()
    if not term:
        return list(users)
    return [u for u in users if _matches(term, u.name, u.email)]


# ==================== Conversation detail ====================

@dataclass
class MessageRow:
    id: Any
    body: str
    time_label: str
    own: bool
    pending: bool
    read: bool


@dataclass
class DateSection:
    label: str
    rows: List[MessageRow] = field(default_factory=list)


@dataclass
class ConversationDetail:
    conversation_id: Any
    title: str = ""
    initial: str = "?"
    status: str = ""
    sections: List[DateSection] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.sections


def conversation_detail(store: ConversationStore, viewer_id: Any,
                        now: Optional[datetime] = None) -> Optional[ConversationDetail]:
    """The open conversation's header and date-grouped messages, or None when closed."""
    if store.active_id is None:
        return None
    now = now or datetime.now()
    conversation: Optional[Conversation] = store.get_active_conversation()
    detail = ConversationDetail(conversation_id=store.active_id)
    if conversation is not None:
        participant = conversation.participant
        detail.title = participant.name
        detail.initial = initial(participant.name)
        detail.status = "Online" if participant.online else "Offline"

    for group in group_messages_by_date(store.messages, now):
        detail.sections.append(DateSection(
            label=group.label,
            rows=[
                MessageRow(
                    id=m.id,
                    body=m.body,
                    time_label=format_message_time(m.timestamp),
                    own=m.sender_id == viewer_id,
                    pending=m.is_pending,
                    read=m.read,
                )
                for m in group.messages
            ],
        ))
    return detail


# ==================== Navigation badge ====================

@dataclass
class BadgeState:
    count: int
    text: str
    conversations: int
    notifications: int
    recent: List[RecentActivity]


def badge_state(summary: UnreadSummary) -> BadgeState:
    return BadgeState(
        count=summary.total,
        text=badge_text(summary.total),
        conversations=summary.conversations,
        notifications=summary.notifications,
        recent=list(summary.recent),
    )


# ==================== Notification tray ====================

@dataclass
class NotificationRow:
    id: Any
    category: NotificationCategory
    title: str
    message: str
    time_label: str
    read: bool


@dataclass
class NotificationTray:
    rows: List[NotificationRow]
    unread_count: int

    @property
    def can_mark_all_read(self) -> bool:
        return self.unread_count > 0

    @property
    def empty(self) -> bool:
        return not self.rows


def notification_tray(store: NotificationStore, now: Optional[datetime] = None) -> NotificationTray:
    now = now or datetime.now()
    return NotificationTray(
        rows=[
            NotificationRow(
                id=item.id,
                category=item.category,
                title=item.title,
                message=item.message,
                time_label=format_relative_time(item.created_at, now),
                read=item.read,
            )
            for item in store.items
        ],
        unread_count=store.unread_count,
    )


# ==================== Inventory table ====================

@dataclass
class InventoryRow:
    record: QuantityRecord
    low_stock: bool
    can_decrement: bool
    pending: bool


def inventory_rows(store: InventoryStore, search_term: str = "") -> List[InventoryRow]:
    """Rows for the inventory table, filtered by product name, SKU or location."""
    term = (search_term or "").strip().lower()
    rows = []
    for record in store.records:
        if term and not _matches(term, record.product_name, record.product_sku, record.location):
            continue
        rows.append(InventoryRow(
            record=record,
            low_stock=record.is_low_stock,
            can_decrement=record.quantity > 0,
            pending=store.has_pending(record.product_id),
        ))
    return rows
