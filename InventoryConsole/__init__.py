"""
InventoryConsole - client-side sync and messaging core of an inventory console.

Keeps the conversation list, the open conversation, the notification tray
and the stock table in step with the REST service by polling, and applies
the viewer's own changes optimistically.
"""

__version__ = "1.0.0"
