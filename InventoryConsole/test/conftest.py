"""
Test configuration and fixtures for the InventoryConsole sync core.

Provides:
- Test logging configuration
- A signed-in session context
- An AsyncMock gateway and a notice board
"""

from unittest.mock import AsyncMock

import pytest

from InventoryConsole.api import InventoryAPIClient
from InventoryConsole.core.client.auth import SessionContext, Viewer
from InventoryConsole.core.logging import configure_logging, create_testing_config
from InventoryConsole.core.sync import NoticeBoard, PollingScheduler
from InventoryConsole.test.factories import VIEWER_ID


@pytest.fixture(scope="session", autouse=True)
def test_logging():
    """Console-only logging for the whole run."""
    configure_logging(create_testing_config())
    yield


@pytest.fixture
def session() -> SessionContext:
    """A signed-in viewer."""
    return SessionContext(
        token="test-token",
        viewer=Viewer(id=VIEWER_ID, name="Alice", email="alice@example.com", roles=("STAFF",)),
    )


@pytest.fixture
def gateway() -> AsyncMock:
    """Gateway fake; every call succeeds with an empty answer unless a test says otherwise."""
    fake = AsyncMock(spec=InventoryAPIClient)
    fake.list_conversations.return_value = []
    fake.list_recent_conversations.return_value = []
    fake.get_messages.return_value = []
    fake.list_available_users.return_value = []
    fake.list_notifications.return_value = []
    fake.list_inventory.return_value = []
    fake.mark_conversation_read.return_value = None
    fake.mark_notification_read.return_value = None
    fake.mark_all_notifications_read.return_value = None
    fake.delete_notification.return_value = None
    fake.adjust_quantity.return_value = None
    fake.get_unread_count.return_value = 0
    return fake


@pytest.fixture
def notices() -> NoticeBoard:
    return NoticeBoard()


@pytest.fixture
def scheduler() -> PollingScheduler:
    """Tests stop their polls themselves, inside the running loop."""
    return PollingScheduler()


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as talking to an in-process HTTP server"
    )
