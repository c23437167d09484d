"""
REST gateway for the inventory console.

One coroutine per server operation used by the sync core. Requests carry
the bearer token of the current ``SessionContext`` and failures are mapped
onto the console's error taxonomy. Uses a shared aiohttp.ClientSession for
connection pooling across gateway instances.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional

import aiohttp

from InventoryConsole.config import config
from InventoryConsole.core.client.auth import SessionContext
from InventoryConsole.core.client.models import (
    AvailableUser,
    Conversation,
    Message,
    NotificationItem,
    QuantityRecord,
)
from InventoryConsole.core.client.utils import (
    AuthorizationError,
    ServerRejectionError,
    TransientNetworkError,
)
from InventoryConsole.core.client.utils.constants import API_CONNECT_TIMEOUT_SECONDS
from InventoryConsole.core.logging import get_logger
from InventoryConsole.core.logging.utils import RequestLogger

logger = get_logger(__name__)


class SessionManager:
    """
    Singleton manager for aiohttp.ClientSession.

    Provides a shared session across all gateway instances,
    enabling connection pooling and reducing overhead.
    """

    _instance: Optional['SessionManager'] = None
    _session: Optional[aiohttp.ClientSession] = None
    _lock = asyncio.Lock()

    def __new__(cls) -> 'SessionManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create the shared aiohttp session."""
        if self._session is None or self._session.closed:
            async with self._lock:
                if self._session is None or self._session.closed:
                    connector = aiohttp.TCPConnector(
                        limit_per_host=8,
                        ttl_dns_cache=300,
                    )
                    timeout = aiohttp.ClientTimeout(
                        total=config.API_TIMEOUT_SECONDS,
                        connect=API_CONNECT_TIMEOUT_SECONDS,
                    )
                    self._session = aiohttp.ClientSession(
                        connector=connector,
                        timeout=timeout,
                    )
        return self._session

    async def close(self) -> None:
        """Close the shared session."""
        async with self._lock:
            if self._session and not self._session.closed:
                await self._session.close()
            self._session = None

    @property
    def is_closed(self) -> bool:
        return self._session is None or self._session.closed


_session_manager = SessionManager()


def _extract_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


def _as_list(body: Any) -> List[Dict[str, Any]]:
    if isinstance(body, list):
        return [item for item in body if isinstance(item, dict)]
    return []


class InventoryAPIClient:
    """
    Gateway to the inventory REST service.

    Args:
        session: Session context providing the bearer token
        base_url: Service root, defaults to ``config.API_BASE_URL``
        http: Optional aiohttp session to use instead of the shared one
    """

    def __init__(
        self,
        session: SessionContext,
        base_url: Optional[str] = None,
        http: Optional[aiohttp.ClientSession] = None,
    ):
        self.session = session
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self._http = http
        self._request_logger = RequestLogger(logger)

    async def _get_http(self) -> aiohttp.ClientSession:
        if self._http is not None:
            return self._http
        return await _session_manager.get_session()

    async def _request(
        self,
        endpoint: str,
        method: str = "GET",
        data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an HTTP request to the service.

        Returns the decoded JSON body (None for an empty body).

        Raises:
            TransientNetworkError: connection failure or timeout
            AuthorizationError: 401 or 403
            ServerRejectionError: any other 4xx/5xx status
        """
        url = f"{self.base_url}{endpoint}"
        headers = {"Accept": "application/json"}
        headers.update(self.session.auth_headers())

        http = await self._get_http()
        started = time.perf_counter()
        try:
            async with http.request(method, url, json=data, headers=headers) as response:
                status = response.status
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = None
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            self._request_logger.log_failure(method, endpoint, exc, time.perf_counter() - started)
            raise TransientNetworkError(f"{method} {endpoint} failed: {str(exc) or type(exc).__name__}") from exc

        self._request_logger.log_request(
            method, endpoint, status, time.perf_counter() - started,
            user=str(self.session.viewer_id) if self.session.viewer_id is not None else None,
        )

        if status in (401, 403):
            self.session.report_unauthorized(status)
            raise AuthorizationError(f"{method} {endpoint} not authorized", status=status)
        if status >= 400:
            raise ServerRejectionError(
                f"{method} {endpoint} rejected with status {status}",
                status=status,
                server_message=_extract_message(body),
            )
        return body

    # ==================== Conversations ====================

    async def list_conversations(self) -> List[Conversation]:
        body = await self._request("/chat")
        return [Conversation.from_dict(c) for c in _as_list(body)]

    async def list_recent_conversations(self) -> List[Conversation]:
        """Short list for the navigation dropdown."""
        body = await self._request("/chat/recent")
        return [Conversation.from_dict(c) for c in _as_list(body)]

    async def get_conversation(self, conversation_id: Any) -> Conversation:
        body = await self._request(f"/chat/{conversation_id}")
        return Conversation.from_dict(body or {"id": conversation_id})

    async def get_messages(self, conversation_id: Any) -> List[Message]:
        """Messages of one conversation, in whatever order the server returns them."""
        body = await self._request(f"/chat/{conversation_id}/messages")
        return [Message.from_dict(m, conversation_id) for m in _as_list(body)]

    async def send_message(self, conversation_id: Any, body: str) -> Message:
        created = await self._request(
            f"/chat/{conversation_id}/messages",
            method="POST",
            data={"content": body},
        )
        if not isinstance(created, dict) or created.get("id") is None:
            raise ServerRejectionError("Send response carried no message", status=502)
        return Message.from_dict(created, conversation_id)

    async def mark_conversation_read(self, conversation_id: Any) -> None:
        await self._request(f"/chat/{conversation_id}/read", method="PUT", data={})

    async def create_conversation(self, other_user_id: Any) -> Conversation:
        created = await self._request(
            "/chat",
            method="POST",
            data={"participantId": other_user_id},
        )
        if not isinstance(created, dict) or created.get("id") is None:
            raise ServerRejectionError("Create response carried no conversation", status=502)
        return Conversation.from_dict(created)

    async def list_available_users(self) -> List[AvailableUser]:
        body = await self._request("/chat/users")
        return [AvailableUser.from_dict(u) for u in _as_list(body)]

    async def get_unread_count(self) -> int:
        body = await self._request("/chat/unread-count")
        if isinstance(body, dict):
            return int(body.get("count") or 0)
        return int(body or 0)

    # ==================== Notifications ====================

    async def list_notifications(self) -> List[NotificationItem]:
        body = await self._request("/notifications")
        return [NotificationItem.from_dict(n) for n in _as_list(body)]

    async def get_unread_notification_count(self) -> int:
        body = await self._request("/notifications/count-unread")
        if isinstance(body, dict):
            return int(body.get("count") or 0)
        return int(body or 0)

    async def mark_notification_read(self, notification_id: Any) -> None:
        await self._request(f"/notifications/{notification_id}/mark-read", method="PUT", data={})

    async def mark_all_notifications_read(self) -> None:
        await self._request("/notifications/mark-all-read", method="PUT", data={})

    async def delete_notification(self, notification_id: Any) -> None:
        await self._request(f"/notifications/{notification_id}", method="DELETE")

    # ==================== Inventory ====================

    async def list_inventory(self) -> List[QuantityRecord]:
        body = await self._request("/inventory")
        return [QuantityRecord.from_dict(r) for r in _as_list(body)]

    async def list_low_stock(self) -> List[QuantityRecord]:
        body = await self._request("/inventory/low-stock")
        return [QuantityRecord.from_dict(r) for r in _as_list(body)]

    async def adjust_quantity(self, product_id: Any, delta: int) -> Optional[QuantityRecord]:
        """
        Apply a signed quantity change.

        Returns the updated record, or None when the server answers without one.
        """
        body = await self._request(
            f"/inventory/update-quantity/{product_id}",
            method="PUT",
            data={"quantityChange": delta},
        )
        if isinstance(body, dict) and body.get("id") is not None:
            return QuantityRecord.from_dict(body)
        return None


async def close_session() -> None:
    """
    Close the shared aiohttp session.

    Should be called when the console shuts down
    to properly release resources.
    """
    await _session_manager.close()


__all__ = ["InventoryAPIClient", "SessionManager", "close_session"]
