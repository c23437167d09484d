"""
REST gateway for the inventory console.
"""
from .client import InventoryAPIClient, close_session

__all__ = ["InventoryAPIClient", "close_session"]
