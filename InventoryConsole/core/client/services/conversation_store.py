"""
Conversation state for the chat views.

Holds the conversation list, the messages of the open conversation and the
per-conversation read state. Poll results are merged with ``reconcile``;
sends and read-marking go through the ``OptimisticMutator``.
"""
import asyncio
import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from InventoryConsole.config import config
from InventoryConsole.core.logging import get_logger
from InventoryConsole.core.logging.utils import timed
from InventoryConsole.core.sync import (
    ObservableStore,
    OptimisticMutator,
    PollHandle,
    PollingScheduler,
    failure_notice,
    reconcile,
    remove_where,
    replace_where,
)
from InventoryConsole.core.sync.notices import NoticeSink
from ..auth import SessionContext
from ..models.data import AvailableUser, Conversation, Message
from ..utils.constants import (
    CONVERSATION_DETAIL_CONSUMER,
    EMPTY_MESSAGE_ERROR,
    MARK_READ_FAILED_MESSAGE,
    PENDING_EXPIRY_SECONDS,
    PENDING_ID_PREFIX,
    SEND_FAILED_MESSAGE,
)
from ..utils.exceptions import ConsoleError, ValidationError
from .message_grouping import MessageGroup, group_messages_by_date

logger = get_logger(__name__)


def _conversation_key(conversation: Conversation) -> Any:
    return conversation.id


def _message_key(message: Message) -> Any:
    return message.id


def sort_by_activity(conversations: List[Conversation]) -> List[Conversation]:
    """Most recent activity first; conversations without activity last, in their current order."""
    return sorted(conversations, key=lambda c: c.last_activity or datetime.min, reverse=True)


class ConversationStore(ObservableStore):
    """
    Owns conversations and the open conversation's messages.

    Args:
        gateway: REST gateway
        session: Session context, for the viewer's identity
        scheduler: Scheduler used for the open conversation's poll
        notices: Sink for user-facing failure notices
        detail_interval: Seconds between polls of the open conversation
        clock: Source of "now" for pending messages
    """

    def __init__(
        self,
        gateway,
        session: SessionContext,
        scheduler: Optional[PollingScheduler] = None,
        notices: Optional[NoticeSink] = None,
        detail_interval: Optional[float] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__()
        self._gateway = gateway
        self._session = session
        self._scheduler = scheduler
        self._notices = notices
        self._detail_interval = detail_interval or config.CONVERSATION_DETAIL_POLL_SECONDS
        self._clock = clock

        self._conversations: List[Conversation] = []
        self._messages: List[Message] = []
        self._active_id: Any = None
        self._detail_handle: Optional[PollHandle] = None
        # Bumped on every open/close so late responses for a previous view are dropped
        self._detail_seq = 0
        # conversation id -> last activity the viewer has read through
        self._read_guards: Dict[Any, Optional[datetime]] = {}
        self._loaded = False
        self._mutator = OptimisticMutator("conversations", notices, self.is_alive)

    # ==================== State ====================

    @property
    def conversations(self) -> List[Conversation]:
        return list(self._conversations)

    @property
    def messages(self) -> List[Message]:
        """Messages of the open conversation, oldest first."""
        return list(self._messages)

    @property
    def active_id(self) -> Any:
        return self._active_id

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def unread_count(self) -> int:
        return sum(1 for c in self._conversations if c.has_unread)

    @property
    def detail_handle(self) -> Optional[PollHandle]:
        return self._detail_handle

    def get_conversation(self, conversation_id: Any) -> Optional[Conversation]:
        for conversation in self._conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    def get_active_conversation(self) -> Optional[Conversation]:
        if self._active_id is None:
            return None
        return self.get_conversation(self._active_id)

    def recent(self, limit: int = 5) -> List[Conversation]:
        return sort_by_activity(self._conversations)[:limit]

    def message_groups(self, now: Optional[datetime] = None) -> List[MessageGroup]:
        return group_messages_by_date(self._messages, now or self._clock())

    # ==================== Conversation list ====================

    @timed("load conversations")
    async def load_conversations(self) -> None:
        """Fetch the conversation list and merge it into local state."""
        snapshot = await self._gateway.list_conversations()
        if self._disposed:
            return
        merged = reconcile(
            self._conversations,
            snapshot,
            key=_conversation_key,
            resolve=self._resolve_conversation,
        )
        self._conversations = sort_by_activity(merged)
        self._loaded = True
        self._notify()

    def _resolve_conversation(self, local: Conversation, incoming: Conversation) -> Conversation:
        resolved = incoming
        if (local.last_activity is not None
                and (incoming.last_activity is None or local.last_activity > incoming.last_activity)):
            # A local send the server has not reflected yet
            resolved = replace(resolved, last_message=local.last_message, last_activity=local.last_activity)

        if incoming.id not in self._read_guards:
            return resolved
        if not incoming.has_unread:
            # Server has caught up with our read
            del self._read_guards[incoming.id]
            return resolved

        read_through = self._read_guards[incoming.id]
        newer = incoming.last_activity is not None and (
            read_through is None or incoming.last_activity > read_through
        )
        if newer:
            del self._read_guards[incoming.id]
            return resolved
        return replace(resolved, has_unread=False)

    async def create_conversation(self, other_user_id: Any) -> Optional[Conversation]:
        """Start a conversation with ``other_user_id``; returns it, or None on failure."""
        try:
            created = await self._gateway.create_conversation(other_user_id)
        except ConsoleError as exc:
            logger.warning("Creating conversation with %s failed: %s", other_user_id, exc)
            self._publish_failure("Failed to start conversation. Please try again.")
            return None
        if self._disposed:
            return created
        self._conversations = sort_by_activity(
            reconcile(self._conversations, [created], key=_conversation_key, partial=True)
        )
        self._notify()
        return created

    async def list_available_users(self) -> List[AvailableUser]:
        """Users the viewer can start a conversation with (never the viewer)."""
        users = await self._gateway.list_available_users()
        viewer_id = self._session.viewer_id
        return [u for u in users if u.id != viewer_id]

    # ==================== Open conversation ====================

    async def open_conversation(self, conversation_id: Any) -> bool:
        """
        Show ``conversation_id``: load its messages, mark it read and start
        its detail poll. Returns False when the initial load failed; the poll
        is started anyway and retries.
        """
        if self._active_id != conversation_id:
            self.close_conversation()
            self._active_id = conversation_id
            self._notify()
        self._detail_seq += 1
        seq = self._detail_seq

        loaded = True
        try:
            info, snapshot = await asyncio.gather(
                self._gateway.get_conversation(conversation_id),
                self._gateway.get_messages(conversation_id),
            )
        except ConsoleError as exc:
            logger.warning("Loading conversation %s failed: %s", conversation_id, exc)
            self._publish_failure("Failed to load conversation.")
            loaded = False
        else:
            if not self._is_current(conversation_id, seq):
                return False
            self._conversations = reconcile(
                self._conversations, [info], key=_conversation_key,
                resolve=self._resolve_conversation, partial=True,
            )
            self._apply_messages(snapshot)
            await asyncio.shield(self.mark_read(conversation_id))

        if self._is_current(conversation_id, seq) and self._scheduler is not None and self._detail_handle is None:
            self._detail_handle = self._scheduler.start(
                CONVERSATION_DETAIL_CONSUMER.format(cid=conversation_id),
                self._detail_interval,
                self.refresh_messages,
                immediate=False,
            )
        return loaded

    def close_conversation(self) -> None:
        """Stop the detail poll and forget the open conversation's messages."""
        if self._detail_handle is not None and self._scheduler is not None:
            self._scheduler.stop(self._detail_handle)
        self._detail_handle = None
        self._detail_seq += 1
        if self._active_id is None and not self._messages:
            return
        self._active_id = None
        self._messages = []
        self._notify()

    async def refresh_messages(self) -> None:
        """Detail poll: merge the open conversation's messages and mark new ones read."""
        conversation_id = self._active_id
        if conversation_id is None:
            return
        seq = self._detail_seq
        snapshot = await self._gateway.get_messages(conversation_id)
        if not self._is_current(conversation_id, seq):
            return
        self._apply_messages(snapshot)

        viewer_id = self._session.viewer_id
        conversation = self.get_conversation(conversation_id)
        unseen = any(not m.read and m.sender_id != viewer_id for m in snapshot)
        if unseen or (conversation is not None and conversation.has_unread):
            # Closing the view cancels the poll, never the read it started
            await asyncio.shield(self.mark_read(conversation_id))

    def _is_current(self, conversation_id: Any, seq: int) -> bool:
        return not self._disposed and self._active_id == conversation_id and self._detail_seq == seq

    def _is_live_pending(self, message: Message) -> bool:
        if not message.is_pending:
            return False
        if message.created_locally_at is None:
            return True
        age = self._clock() - message.created_locally_at
        return age < timedelta(seconds=PENDING_EXPIRY_SECONDS)

    def _apply_messages(self, snapshot: List[Message]) -> None:
        merged = reconcile(self._messages, snapshot, key=_message_key, is_pending=self._is_live_pending)
        merged.sort(key=Message.sort_key)
        self._messages = merged
        self._notify()

    # ==================== Mutations ====================

    def send_message(self, conversation_id: Any, body: str) -> "asyncio.Task":
        """
        Send ``body`` to ``conversation_id``.

        The pending message is visible as soon as this returns; the returned
        task resolves to the mutation outcome.

        Raises:
            ValidationError: ``body`` is empty or whitespace
        """
        text = (body or "").strip()
        if not text:
            raise ValidationError(EMPTY_MESSAGE_ERROR)

        now = self._clock()
        pending = Message(
            id=f"{PENDING_ID_PREFIX}{uuid.uuid4().hex}",
            conversation_id=conversation_id,
            sender_id=self._session.viewer_id,
            body=text,
            timestamp=now,
            confirmed=False,
            read=False,
            created_locally_at=now,
        )

        def local_change():
            previous = self.get_conversation(conversation_id)
            if self._active_id == conversation_id:
                self._messages = self._messages + [pending]
            if previous is not None:
                self._conversations = replace_where(
                    self._conversations, _conversation_key, conversation_id,
                    replace(previous, last_message=text, last_activity=now),
                )
            self._notify()

            def undo():
                self._messages = remove_where(self._messages, _message_key, pending.id)
                current = self.get_conversation(conversation_id)
                if previous is not None and current is not None and current.last_activity == now:
                    self._conversations = replace_where(
                        self._conversations, _conversation_key, conversation_id,
                        replace(current, last_message=previous.last_message,
                                last_activity=previous.last_activity),
                    )
                self._notify()
            return undo

        return self._mutator.apply(
            local_change,
            lambda: self._gateway.send_message(conversation_id, text),
            reconcile=lambda sent: self._confirm_message(pending.id, sent),
            failure_message=SEND_FAILED_MESSAGE,
        )

    def _confirm_message(self, temporary_id: str, sent: Message) -> None:
        if any(m.id == sent.id for m in self._messages):
            # A poll already delivered the server copy
            self._messages = remove_where(self._messages, _message_key, temporary_id)
        else:
            self._messages = replace_where(self._messages, _message_key, temporary_id, sent)
        self._messages.sort(key=Message.sort_key)

        current = self.get_conversation(sent.conversation_id)
        if current is not None and sent.timestamp is not None:
            self._conversations = replace_where(
                self._conversations, _conversation_key, current.id,
                replace(current, last_message=sent.body, last_activity=sent.timestamp),
            )
        self._notify()

    def mark_read(self, conversation_id: Any) -> "asyncio.Task":
        """
        Mark ``conversation_id`` read. Safe to call repeatedly.

        The local flag flips immediately and a read guard keeps stale
        snapshots from flipping it back until the server catches up.
        """
        def local_change():
            previous = self.get_conversation(conversation_id)
            had_guard = conversation_id in self._read_guards
            previous_guard = self._read_guards.get(conversation_id)

            read_through = previous.last_activity if previous is not None else None
            flipped_ids = []
            if self._active_id == conversation_id:
                viewer_id = self._session.viewer_id
                updated = []
                for m in self._messages:
                    if m.confirmed and m.timestamp is not None and (read_through is None or m.timestamp > read_through):
                        read_through = m.timestamp
                    if not m.read and m.sender_id != viewer_id:
                        flipped_ids.append(m.id)
                        m = replace(m, read=True)
                    updated.append(m)
                self._messages = updated

            self._read_guards[conversation_id] = read_through
            if previous is not None and previous.has_unread:
                self._conversations = replace_where(
                    self._conversations, _conversation_key, conversation_id,
                    replace(previous, has_unread=False),
                )
            self._notify()

            def undo():
                if had_guard:
                    self._read_guards[conversation_id] = previous_guard
                else:
                    self._read_guards.pop(conversation_id, None)
                current = self.get_conversation(conversation_id)
                if previous is not None and previous.has_unread and current is not None:
                    self._conversations = replace_where(
                        self._conversations, _conversation_key, conversation_id,
                        replace(current, has_unread=True),
                    )
                if flipped_ids:
                    self._messages = [replace(m, read=False) if m.id in flipped_ids else m
                                      for m in self._messages]
                self._notify()
            return undo

        return self._mutator.apply(
            local_change,
            lambda: self._gateway.mark_conversation_read(conversation_id),
            failure_message=MARK_READ_FAILED_MESSAGE,
        )

    # ==================== Lifecycle ====================

    def _publish_failure(self, message: str) -> None:
        if self._notices is not None:
            self._notices(failure_notice(message, "conversations"))

    def dispose(self) -> None:
        self.close_conversation()
        super().dispose()
