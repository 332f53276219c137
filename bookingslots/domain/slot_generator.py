"""
Core business logic for generating bookable slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from datetime import date, datetime
from typing import List, Optional

import pendulum
from pendulum import DateTime

from .blocked_resolver import resolve_blocked_intervals
from .intervals import Interval, merge, subtract
from .models import MINUTES_PER_DAY, CandidateSlot, ProviderRecords, Service, format_minutes
from .occupied_resolver import resolve_occupied_intervals
from .schedule_resolver import resolve_open_intervals

logger = logging.getLogger(__name__)


class SlotGenerator:
    """
    Generates discrete bookable slots for one (member, location) pair.

    Algorithm, per calendar day:
    1. Resolve the open intervals from the weekly schedule
    2. Merge blocked and occupied intervals into one unavailable set
    3. Subtract the unavailable set from the open intervals
    4. Walk each free interval in steps of duration + buffer
    5. Return slots in date-then-time order
    """

    def __init__(self, timezone: str = "Europe/Paris"):
        self.timezone = timezone

    def generate_slots(
        self,
        provider: ProviderRecords,
        service: Service,
        member_id: Optional[str],
        location_id: Optional[str],
        start_date: date,
        end_date: date,
        exclude_booking_id: Optional[str] = None,
    ) -> List[CandidateSlot]:
        """
        Generate every candidate slot between two dates (both inclusive).

        Args:
            provider: Already-fetched records of the provider
            service: The service being booked
            member_id: Member to book, or None for provider-wide schedules
            location_id: Location to book at
            start_date: First day of the search
            end_date: Last day of the search
            exclude_booking_id: Booking to ignore, e.g. the one being rescheduled

        Returns:
            List of CandidateSlot objects, ascending by start
        """
        if not service.eligible_for_member(member_id):
            logger.debug("Member %s cannot perform service %s", member_id, service.id)
            return []

        if not service.eligible_for_location(location_id):
            logger.debug("Service %s is not offered at location %s", service.id, location_id)
            return []

        if service.duration_minutes <= 0:
            logger.warning("Service %s has no positive duration", service.id)
            return []

        first_day = self._as_date(start_date)
        last_day = self._as_date(end_date)

        slots: List[CandidateSlot] = []
        current = first_day

        while current <= last_day:
            slots.extend(
                self.generate_day_slots(
                    provider=provider,
                    service=service,
                    member_id=member_id,
                    location_id=location_id,
                    day=current,
                    exclude_booking_id=exclude_booking_id,
                )
            )
            current = current.add(days=1)

        return slots

    def generate_day_slots(
        self,
        provider: ProviderRecords,
        service: Service,
        member_id: Optional[str],
        location_id: Optional[str],
        day: date,
        exclude_booking_id: Optional[str] = None,
    ) -> List[CandidateSlot]:
        """Generate the candidate slots of a single day."""
        open_intervals = resolve_open_intervals(day, member_id, location_id, provider.rules)
        if not open_intervals:
            return []

        buffer_minutes = service.effective_buffer(provider.settings)

        blocked = resolve_blocked_intervals(day, member_id, location_id, provider.blocked_slots)
        occupied = resolve_occupied_intervals(
            day,
            member_id,
            location_id,
            buffer_minutes,
            provider.bookings,
            self.timezone,
            exclude_booking_id=exclude_booking_id,
        )
        unavailable = merge(blocked + occupied)

        free = subtract(open_intervals, unavailable)

        slots: List[CandidateSlot] = []
        for interval in free:
            slots.extend(
                self._walk_interval(
                    interval, day, service.duration_minutes, buffer_minutes, member_id, location_id
                )
            )

        logger.debug(
            "%s member=%s location=%s: %d open, %d unavailable, %d slots",
            day, member_id, location_id, len(open_intervals), len(unavailable), len(slots),
        )

        return slots

    def _walk_interval(
        self,
        interval: Interval,
        day: date,
        duration: int,
        buffer_minutes: int,
        member_id: Optional[str],
        location_id: Optional[str],
    ) -> List[CandidateSlot]:
        """
        Emit equally spaced slots within one free interval.

        Example (60 min, no buffer):
        Free: 09:00 - 11:30
        Result: [09:00-10:00, 10:00-11:00]
        """
        step = duration + buffer_minutes
        slots: List[CandidateSlot] = []

        current = interval.start
        # The trailing buffer must fit before the interval ends too
        while current + step <= interval.end:
            end = current + duration
            start_at = self._at(day, current)
            end_at = self._at(day, end)

            # Wall times skipped by a clock change have no instant of their own
            if self._on_wall_clock(start_at, current) and self._on_wall_clock(end_at, end):
                slots.append(
                    CandidateSlot(
                        date=day,
                        start=format_minutes(current),
                        end=format_minutes(end % MINUTES_PER_DAY),
                        start_at=start_at,
                        end_at=end_at,
                        member_id=member_id,
                        location_id=location_id,
                    )
                )
            else:
                logger.debug("Skipping %s %s, not a local time that day", day, format_minutes(current))
            current += step

        return slots

    def _at(self, day: date, minute: int) -> DateTime:
        """Wall-clock time ``minute`` minutes after midnight of ``day``."""
        extra_days, minute = divmod(minute, MINUTES_PER_DAY)
        target = pendulum.date(day.year, day.month, day.day).add(days=extra_days)
        return pendulum.datetime(
            target.year, target.month, target.day, minute // 60, minute % 60, tz=self.timezone
        )

    @staticmethod
    def _on_wall_clock(moment: DateTime, minute: int) -> bool:
        return moment.hour * 60 + moment.minute == minute % MINUTES_PER_DAY

    def _as_date(self, value: date) -> pendulum.Date:
        """Normalize a date or datetime to a calendar day in the provider time zone."""
        if isinstance(value, datetime):
            value = pendulum.instance(value, tz=self.timezone).in_timezone(self.timezone).date()
        return pendulum.date(value.year, value.month, value.day)
