"""
Blocked-time resolution: vacations, absences and closures for one day.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from .intervals import Interval, merge
from .models import MINUTES_PER_DAY, BlockedSlot, TimeWindow

logger = logging.getLogger(__name__)

FULL_DAY = Interval(start=0, end=MINUTES_PER_DAY)


def resolve_blocked_intervals(
    evaluation_date: date,
    member_id: Optional[str],
    location_id: Optional[str],
    blocked_slots: Iterable[BlockedSlot],
) -> List[Interval]:
    """
    Return the merged minute intervals blocked on ``evaluation_date``.

    A block applies when its date range contains the day and both its member
    and location scopes cover the request. All-day blocks cover the whole
    day; partial blocks with malformed times contribute nothing.
    """
    intervals: List[Interval] = []

    for blocked in blocked_slots:
        if not blocked.covers(evaluation_date):
            continue
        if not blocked.applies_to(member_id, location_id):
            continue

        if blocked.all_day:
            intervals.append(FULL_DAY)
            continue

        interval = TimeWindow(blocked.start_time, blocked.end_time).to_interval()
        if interval is None:
            logger.warning(
                "Ignoring blocked slot %s with malformed times %s-%s",
                blocked.id, blocked.start_time, blocked.end_time,
            )
            continue
        intervals.append(interval)

    return merge(intervals)
