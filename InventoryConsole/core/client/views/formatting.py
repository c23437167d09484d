"""
Text formatting shared by the view contracts.
"""
from datetime import datetime
from typing import Optional

from ..utils.constants import DATE_HEADER_FORMAT, TIME_LABEL_FORMAT


def format_relative_time(moment: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Format a timestamp like '5 min ago'; a week or older shows the date."""
    if moment is None:
        return ""
    now = now or datetime.now()
    seconds = (now - moment).total_seconds()
    minutes = int(seconds // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} min ago"
    if hours < 24:
        return f"{hours} hr ago"
    if days < 7:
        return f"{days} day ago"
    return moment.strftime(DATE_HEADER_FORMAT)


def format_message_time(moment: Optional[datetime]) -> str:
    if moment is None:
        return ""
    return moment.strftime(TIME_LABEL_FORMAT)


def badge_text(count: int, cap: int = 99) -> str:
    """Badge content: empty for zero, capped as '99+'."""
    if count <= 0:
        return ""
    if count > cap:
        return f"{cap}+"
    return str(count)


def initial(name: str) -> str:
    name = (name or "").strip()
    return name[0].upper() if name else "?"
