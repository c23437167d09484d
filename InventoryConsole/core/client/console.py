"""
Console client: one object that owns every store and poll of a signed-in session.
"""
import asyncio
from typing import Any, Optional

from InventoryConsole.api import InventoryAPIClient, close_session
from InventoryConsole.config import config
from InventoryConsole.core.logging import auto_configure, get_logger
from InventoryConsole.core.sync import NoticeBoard, PollHandle, PollingScheduler
from .auth import SessionContext
from .services import ConversationStore, InventoryStore, NotificationStore, UnreadAggregator
from .utils.constants import (
    CONVERSATION_LIST_CONSUMER,
    INVENTORY_CONSUMER,
    UNREAD_BADGE_CONSUMER,
)

logger = get_logger(__name__)


class ConsoleClient:
    """
    Wires the gateway, the stores, the poll scheduler and the notice board.

    Args:
        session: Session context of the signed-in viewer
        gateway: REST gateway; defaults to an ``InventoryAPIClient`` for ``session``
        scheduler: Poll scheduler; a new one by default
        notices: Notice board receiving mutation outcomes
        log_env: Logging preset applied by ``start()`` (development, production
                 or testing); None leaves logging to the host application
    """

    def __init__(
        self,
        session: SessionContext,
        gateway=None,
        scheduler: Optional[PollingScheduler] = None,
        notices: Optional[NoticeBoard] = None,
        log_env: Optional[str] = None,
    ):
        self.session = session
        self.gateway = gateway if gateway is not None else InventoryAPIClient(session)
        self.scheduler = scheduler or PollingScheduler()
        self.notices = notices or NoticeBoard()

        self.conversations = ConversationStore(
            self.gateway, session,
            scheduler=self.scheduler,
            notices=self.notices.publish,
            detail_interval=config.CONVERSATION_DETAIL_POLL_SECONDS,
        )
        self.notifications = NotificationStore(self.gateway, notices=self.notices.publish)
        self.inventory = InventoryStore(self.gateway, notices=self.notices.publish)
        self.unread = UnreadAggregator(self.conversations, self.notifications)

        self._running = False
        self._closed = False
        self._log_env = log_env

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Begin the conversation list, unread badge and inventory polls."""
        if self._closed:
            raise RuntimeError("ConsoleClient has been stopped")
        if self._running:
            return
        if self._log_env is not None:
            auto_configure(self._log_env)
        self._running = True
        self.scheduler.start(
            CONVERSATION_LIST_CONSUMER,
            config.CONVERSATION_LIST_POLL_SECONDS,
            self.conversations.load_conversations,
        )
        self.scheduler.start(
            UNREAD_BADGE_CONSUMER,
            config.UNREAD_BADGE_POLL_SECONDS,
            self._refresh_badge,
        )
        self.scheduler.start(
            INVENTORY_CONSUMER,
            config.INVENTORY_POLL_SECONDS,
            self.inventory.load,
        )
        logger.info("Console polls started for viewer %s", self.session.viewer_id)

    async def _refresh_badge(self) -> None:
        # The badge is derived from both stores; each refreshes even when the other fails
        sources = ("conversations", "notifications")
        results = await asyncio.gather(
            self.conversations.load_conversations(),
            self.notifications.load(),
            return_exceptions=True,
        )
        for source, result in zip(sources, results):
            if isinstance(result, Exception):
                logger.warning("Badge refresh of %s failed: %s", source, result)

    async def open_conversation(self, conversation_id: Any) -> bool:
        return await self.conversations.open_conversation(conversation_id)

    def close_conversation(self) -> None:
        self.conversations.close_conversation()

    def poll_handle(self, consumer_id: str) -> Optional[PollHandle]:
        handles = self.scheduler.handles(consumer_id)
        return handles[0] if handles else None

    async def stop(self) -> None:
        """Cancel every poll, tear down the stores and close the shared HTTP session."""
        if self._closed:
            return
        self._closed = True
        self._running = False
        self.scheduler.stop_all()
        self.unread.close()
        for store in (self.conversations, self.notifications, self.inventory):
            store.dispose()
        await close_session()
        logger.info("Console stopped")
