"""
Date buckets for the conversation detail view.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from ..models.data import Message
from ..utils.constants import DATE_HEADER_FORMAT, TODAY_LABEL, YESTERDAY_LABEL


@dataclass
class MessageGroup:
    """Messages sharing one local calendar day."""
    day: date
    label: str
    messages: List[Message] = field(default_factory=list)


def local_date(moment: datetime, now: Optional[datetime] = None) -> date:
    """
    Calendar date of ``moment`` on the viewer's clock.

    Naive datetimes are already local. Aware ones are shifted into ``now``'s
    zone when ``now`` is aware, else into the system zone.
    """
    if moment.tzinfo is None:
        return moment.date()
    target = now.tzinfo if now is not None and now.tzinfo is not None else None
    return moment.astimezone(target).date()


def bucket_label(moment: datetime, now: datetime) -> str:
    """'Today' or 'Yesterday' for the two most recent days, else the date."""
    day = local_date(moment, now)
    today = local_date(now, now)
    if day == today:
        return TODAY_LABEL
    if day == today - timedelta(days=1):
        return YESTERDAY_LABEL
    return day.strftime(DATE_HEADER_FORMAT)


def group_messages_by_date(messages: Iterable[Message], now: Optional[datetime] = None) -> List[MessageGroup]:
    """
    Group ``messages`` by local day, oldest day first.

    Messages keep their relative order inside a bucket. A message without a
    timestamp (not yet known) falls into today's bucket.
    """
    now = now or datetime.now()
    groups: List[MessageGroup] = []
    by_day = {}
    for message in messages:
        moment = message.timestamp or now
        day = local_date(moment, now)
        group = by_day.get(day)
        if group is None:
            group = MessageGroup(day=day, label=bucket_label(moment, now))
            by_day[day] = group
            groups.append(group)
        group.messages.append(message)
    groups.sort(key=lambda g: g.day)
    return groups
