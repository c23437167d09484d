"""
User-facing outcome notices (the snackbar contract).
"""
import itertools
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from InventoryConsole.core.logging import get_logger

logger = get_logger(__name__)


class NoticeSeverity(Enum):
    SUCCESS = "success"
    ERROR = "error"


_notice_ids = itertools.count(1)


@dataclass
class Notice:
    """One message for the view layer to show and later dismiss."""
    message: str
    severity: NoticeSeverity = NoticeSeverity.ERROR
    source: str = ""
    id: int = field(default_factory=lambda: next(_notice_ids))
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_error(self) -> bool:
        return self.severity is NoticeSeverity.ERROR


def failure_notice(message: str, source: str = "") -> Notice:
    return Notice(message=message, severity=NoticeSeverity.ERROR, source=source)


def success_notice(message: str, source: str = "") -> Notice:
    return Notice(message=message, severity=NoticeSeverity.SUCCESS, source=source)


NoticeSink = Callable[[Notice], None]


class NoticeBoard:
    """Collects notices until the view dismisses them."""

    def __init__(self, limit: int = 20):
        self._notices: List[Notice] = []
        self._limit = limit
        self._listeners: List[Callable[[Notice], None]] = []

    @property
    def notices(self) -> List[Notice]:
        return list(self._notices)

    @property
    def latest(self) -> Optional[Notice]:
        return self._notices[-1] if self._notices else None

    def publish(self, notice: Notice) -> None:
        self._notices.append(notice)
        if len(self._notices) > self._limit:
            self._notices = self._notices[-self._limit:]
        for listener in list(self._listeners):
            try:
                listener(notice)
            except Exception:
                logger.exception("Notice listener failed")

    def subscribe(self, listener: Callable[[Notice], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def dismiss(self, notice_id: int) -> bool:
        before = len(self._notices)
        self._notices = [n for n in self._notices if n.id != notice_id]
        return len(self._notices) != before

    def clear(self) -> None:
        self._notices.clear()
