"""
Configuration module for the InventoryConsole sync core.
Stores the REST endpoint and the poll cadence of each consumer.
"""

import os
from typing import Dict, Any

from InventoryConsole.core.client.utils import constants


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


class Config:
    """Application configuration class."""

    # REST endpoint
    API_BASE_URL = os.environ.get("INVENTORY_API_URL", constants.DEFAULT_API_BASE_URL).rstrip("/")
    API_TIMEOUT_SECONDS = _env_float("INVENTORY_API_TIMEOUT", constants.API_TIMEOUT_SECONDS)

    # Poll intervals (seconds)
    CONVERSATION_LIST_POLL_SECONDS = _env_float(
        "INVENTORY_POLL_CONVERSATIONS", constants.CONVERSATION_LIST_POLL_SECONDS)
    CONVERSATION_DETAIL_POLL_SECONDS = _env_float(
        "INVENTORY_POLL_MESSAGES", constants.CONVERSATION_DETAIL_POLL_SECONDS)
    UNREAD_BADGE_POLL_SECONDS = _env_float(
        "INVENTORY_POLL_BADGE", constants.UNREAD_BADGE_POLL_SECONDS)
    INVENTORY_POLL_SECONDS = _env_float(
        "INVENTORY_POLL_STOCK", constants.INVENTORY_POLL_SECONDS)

    @classmethod
    def get_config(cls) -> Dict[str, Any]:
        """Get all configuration values as a dictionary."""
        return {
            "API_BASE_URL": cls.API_BASE_URL,
            "API_TIMEOUT_SECONDS": cls.API_TIMEOUT_SECONDS,
            "CONVERSATION_LIST_POLL_SECONDS": cls.CONVERSATION_LIST_POLL_SECONDS,
            "CONVERSATION_DETAIL_POLL_SECONDS": cls.CONVERSATION_DETAIL_POLL_SECONDS,
            "UNREAD_BADGE_POLL_SECONDS": cls.UNREAD_BADGE_POLL_SECONDS,
            "INVENTORY_POLL_SECONDS": cls.INVENTORY_POLL_SECONDS,
        }


config = Config()
