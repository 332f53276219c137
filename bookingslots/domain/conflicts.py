"""
Conflict detection for scheduled availability changes.

Before a provider queues a new weekly rule, the bookings it would leave
outside the new opening hours are reported so they can be moved.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

import pendulum
from pendulum import DateTime

from .models import Booking, WeeklyAvailabilityRule, day_of_week


class ConflictType(str, Enum):
    DAY_CLOSED = "day_closed"
    REDUCED_HOURS = "reduced_hours"


@dataclass(frozen=True)
class ScheduleConflict:
    """A booking that no longer fits once a schedule change applies."""
    booking_id: Optional[str]
    booking_start: DateTime
    conflict_type: ConflictType


def detect_schedule_conflicts(
    rule: WeeklyAvailabilityRule,
    bookings: Iterable[Booking],
    timezone: str,
) -> List[ScheduleConflict]:
    """
    Report active bookings of the rule's member that fall on its weekday,
    on or after ``effective_from``, and that the new rule would strand.
    """
    conflicts: List[ScheduleConflict] = []
    windows = [w for w in (window.to_interval() for window in rule.windows) if w is not None]

    for booking in sorted(bookings, key=lambda b: b.start):
        if not booking.is_active or booking.member_id != rule.member_id:
            continue

        start = pendulum.instance(booking.start, tz=timezone).in_timezone(timezone)
        end = pendulum.instance(booking.end, tz=timezone).in_timezone(timezone)

        if rule.effective_from is not None and start.date() < rule.effective_from:
            continue
        if day_of_week(start.date()) != rule.day_of_week:
            continue

        if not rule.is_open:
            conflicts.append(ScheduleConflict(booking.id, start, ConflictType.DAY_CLOSED))
            continue

        start_minute = start.hour * 60 + start.minute
        end_minute = start_minute + int((end - start).total_seconds() // 60)

        fits = any(w.start <= start_minute and end_minute <= w.end for w in windows)
        if not fits:
            conflicts.append(ScheduleConflict(booking.id, start, ConflictType.REDUCED_HOURS))

    return conflicts
