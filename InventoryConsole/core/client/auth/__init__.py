"""
Session handling for the console sync core.
"""

from .session import SessionContext, Viewer

__all__ = ['SessionContext', 'Viewer']
