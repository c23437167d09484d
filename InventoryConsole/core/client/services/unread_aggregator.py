"""
Single unread badge for the navigation chrome.

The summary is recomputed from the current state of both stores on every
store change and is never adjusted on its own, so two stores that poll at
different cadences cannot leave the badge out of step with either of them.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional

from InventoryConsole.core.logging import get_logger
from ..utils.constants import RECENT_ACTIVITY_LIMIT
from .conversation_store import ConversationStore
from .notification_store import NotificationStore

logger = get_logger(__name__)


class ActivityKind(Enum):
    CONVERSATION = "conversation"
    NOTIFICATION = "notification"


@dataclass(frozen=True)
class RecentActivity:
    kind: ActivityKind
    id: Any
    title: str
    preview: str
    timestamp: Optional[datetime]
    unread: bool


@dataclass(frozen=True)
class UnreadSummary:
    conversations: int = 0
    notifications: int = 0
    recent: List[RecentActivity] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.conversations + self.notifications


class UnreadAggregator:
    """Derives the navigation badge from the conversation and notification stores."""

    def __init__(self, conversations: ConversationStore, notifications: NotificationStore,
                 recent_limit: int = RECENT_ACTIVITY_LIMIT):
        self._conversations = conversations
        self._notifications = notifications
        self._recent_limit = recent_limit
        self._listeners: List[Callable[[UnreadSummary], None]] = []
        self._summary = UnreadSummary()
        self._unsubscribers = [
            conversations.subscribe(self._recompute),
            notifications.subscribe(self._recompute),
        ]
        self._recompute()

    @property
    def summary(self) -> UnreadSummary:
        return self._summary

    @property
    def badge_count(self) -> int:
        return self._summary.total

    def subscribe(self, listener: Callable[[UnreadSummary], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _recompute(self) -> None:
        recent = [
            RecentActivity(
                kind=ActivityKind.CONVERSATION,
                id=c.id,
                title=c.participant.name,
                preview=c.compute_last_preview(),
                timestamp=c.last_activity,
                unread=c.has_unread,
            )
            for c in self._conversations.conversations
        ] + [
            RecentActivity(
                kind=ActivityKind.NOTIFICATION,
                id=n.id,
                title=n.title,
                preview=n.message,
                timestamp=n.created_at,
                unread=not n.read,
            )
            for n in self._notifications.items
        ]
        recent.sort(key=lambda a: a.timestamp or datetime.min, reverse=True)

        summary = UnreadSummary(
            conversations=self._conversations.unread_count,
            notifications=self._notifications.unread_count,
            recent=recent[:self._recent_limit],
        )
        changed = summary != self._summary
        self._summary = summary
        if not changed:
            return
        for listener in list(self._listeners):
            try:
                listener(summary)
            except Exception:
                logger.exception("Unread summary listener failed")

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._listeners.clear()
