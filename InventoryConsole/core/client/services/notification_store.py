"""
Notification tray state.
"""
import asyncio
from dataclasses import replace
from typing import Any, List, Optional, Set

from InventoryConsole.core.logging import get_logger
from InventoryConsole.core.logging.utils import timed
from InventoryConsole.core.sync import ObservableStore, OptimisticMutator, reconcile, replace_where
from InventoryConsole.core.sync.notices import NoticeSink
from ..models.data import NotificationItem
from ..utils.constants import NOTIFICATION_FAILED_MESSAGE

logger = get_logger(__name__)


def _key(item: NotificationItem) -> Any:
    return item.id


class NotificationStore(ObservableStore):
    """Owns the notification list and its read flags."""

    def __init__(self, gateway, notices: Optional[NoticeSink] = None):
        super().__init__()
        self._gateway = gateway
        self._items: List[NotificationItem] = []
        # Read locally; a stale snapshot must not flip these back to unread
        self._read_locally: Set[Any] = set()
        # Deleted locally and not yet confirmed gone by a snapshot
        self._deleted: Set[Any] = set()
        self._loaded = False
        self._mutator = OptimisticMutator("notifications", notices, self.is_alive)

    @property
    def items(self) -> List[NotificationItem]:
        return list(self._items)

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def unread_count(self) -> int:
        return sum(1 for item in self._items if not item.read)

    def get(self, notification_id: Any) -> Optional[NotificationItem]:
        for item in self._items:
            if item.id == notification_id:
                return item
        return None

    @timed("load notifications")
    async def load(self) -> None:
        """Fetch notifications and merge them into the tray."""
        snapshot = await self._gateway.list_notifications()
        if self._disposed:
            return
        snapshot_ids = {item.id for item in snapshot}
        self._deleted &= snapshot_ids
        self._read_locally &= snapshot_ids
        visible = [item for item in snapshot if item.id not in self._deleted]
        self._items = reconcile(self._items, visible, key=_key, resolve=self._resolve)
        self._loaded = True
        self._notify()

    def _resolve(self, local: NotificationItem, incoming: NotificationItem) -> NotificationItem:
        if incoming.read:
            self._read_locally.discard(incoming.id)
            return incoming
        if incoming.id in self._read_locally:
            return replace(incoming, read=True)
        return incoming

    def mark_read(self, notification_id: Any) -> "asyncio.Task":
        def local_change():
            previous = self.get(notification_id)
            was_marked = notification_id in self._read_locally
            self._read_locally.add(notification_id)
            if previous is not None and not previous.read:
                self._items = replace_where(self._items, _key, notification_id, replace(previous, read=True))
            self._notify()

            def undo():
                if not was_marked:
                    self._read_locally.discard(notification_id)
                current = self.get(notification_id)
                if previous is not None and not previous.read and current is not None:
                    self._items = replace_where(self._items, _key, notification_id, replace(current, read=False))
                self._notify()
            return undo

        return self._mutator.apply(
            local_change,
            lambda: self._gateway.mark_notification_read(notification_id),
            failure_message=NOTIFICATION_FAILED_MESSAGE,
        )

    def mark_all_read(self) -> "asyncio.Task":
        def local_change():
            flipped = [item.id for item in self._items if not item.read]
            newly_marked = [i for i in flipped if i not in self._read_locally]
            self._read_locally.update(flipped)
            self._items = [replace(item, read=True) if not item.read else item for item in self._items]
            self._notify()

            def undo():
                self._read_locally.difference_update(newly_marked)
                self._items = [replace(item, read=False) if item.id in flipped else item
                               for item in self._items]
                self._notify()
            return undo

        return self._mutator.apply(
            local_change,
            self._gateway.mark_all_notifications_read,
            failure_message=NOTIFICATION_FAILED_MESSAGE,
        )

    def delete(self, notification_id: Any) -> "asyncio.Task":
        def local_change():
            position = next((i for i, item in enumerate(self._items) if item.id == notification_id), None)
            removed = self._items[position] if position is not None else None
            self._deleted.add(notification_id)
            if position is not None:
                self._items = self._items[:position] + self._items[position + 1:]
            self._notify()

            def undo():
                self._deleted.discard(notification_id)
                if removed is not None and self.get(notification_id) is None:
                    index = min(position, len(self._items))
                    self._items = self._items[:index] + [removed] + self._items[index:]
                self._notify()
            return undo

        return self._mutator.apply(
            local_change,
            lambda: self._gateway.delete_notification(notification_id),
            failure_message=NOTIFICATION_FAILED_MESSAGE,
        )
