"""
Booking-policy filtering: minimum notice and maximum advance.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

import pendulum
from pendulum import DateTime

from .models import BookingSettings, CandidateSlot


@dataclass(frozen=True)
class BookingPolicyFilter:
    """
    Drops slots that start too soon or too far ahead.

    - earliest start: ``now + min_notice_hours`` (never before ``now``)
    - latest start: end of the calendar day ``now + max_advance_days``

    Calendar days are taken in ``timezone`` when given, otherwise in the
    time zone of ``now``.
    """
    min_notice_hours: float = 0
    max_advance_days: int = 60
    timezone: Optional[str] = None

    @classmethod
    def from_settings(
        cls, settings: BookingSettings, timezone: Optional[str] = None
    ) -> "BookingPolicyFilter":
        return cls(
            min_notice_hours=settings.min_notice_hours,
            max_advance_days=settings.max_advance_days,
            timezone=timezone,
        )

    def earliest_start(self, now: datetime) -> DateTime:
        now = pendulum.instance(now)
        return now.add(minutes=int(max(self.min_notice_hours, 0) * 60))

    def latest_start(self, now: datetime) -> DateTime:
        now = pendulum.instance(now)
        if self.timezone:
            now = now.in_timezone(self.timezone)
        return now.add(days=self.max_advance_days).end_of("day")

    def apply(self, slots: Iterable[CandidateSlot], now: datetime) -> List[CandidateSlot]:
        """Return the slots that may still be booked at ``now``, order preserved."""
        earliest = self.earliest_start(now)
        latest = self.latest_start(now)

        return [slot for slot in slots if earliest <= slot.start_at <= latest]


def filter_slots(
    slots: Iterable[CandidateSlot],
    now: datetime,
    min_notice_hours: float,
    max_advance_days: int,
    timezone: Optional[str] = None,
) -> List[CandidateSlot]:
    """Functional form of ``BookingPolicyFilter.apply``."""
    policy = BookingPolicyFilter(
        min_notice_hours=min_notice_hours,
        max_advance_days=max_advance_days,
        timezone=timezone,
    )
    return policy.apply(slots, now)
