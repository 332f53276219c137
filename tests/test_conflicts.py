"""
Tests for scheduled-change conflict detection.
"""

from datetime import date

import pendulum

from bookingslots.domain.conflicts import ConflictType, detect_schedule_conflicts
from bookingslots.domain.models import Booking, BookingStatus, TimeWindow, WeeklyAvailabilityRule

TZ = "Europe/Paris"


def _booking(id, start, end, status=BookingStatus.CONFIRMED, member_id="alice"):
    return Booking(
        id=id,
        member_id=member_id,
        location_id="paris",
        start=pendulum.parse(start, tz=TZ),
        end=pendulum.parse(end, tz=TZ),
        status=status,
    )


class TestDetectScheduleConflicts:
    """Tests for detect_schedule_conflicts."""

    def test_closing_the_day_conflicts_with_every_booking(self):
        rule = WeeklyAvailabilityRule(
            member_id="alice", location_id="paris", day_of_week=1,
            is_open=False, effective_from=date(2024, 12, 2),
        )
        bookings = [
            _booking("early", "2024-11-25 10:00", "2024-11-25 11:00"),
            _booking("hit", "2024-12-02 10:00", "2024-12-02 11:00"),
            _booking("tuesday", "2024-12-03 10:00", "2024-12-03 11:00"),
        ]

        conflicts = detect_schedule_conflicts(rule, bookings, TZ)

        assert [(c.booking_id, c.conflict_type) for c in conflicts] == [("hit", ConflictType.DAY_CLOSED)]

    def test_reduced_hours(self):
        rule = WeeklyAvailabilityRule(
            member_id="alice", location_id="paris", day_of_week=1,
            windows=(TimeWindow("09:00", "12:00"),), effective_from=date(2024, 12, 2),
        )
        bookings = [
            _booking("inside", "2024-12-02 10:00", "2024-12-02 11:00"),
            _booking("edge", "2024-12-09 11:00", "2024-12-09 12:00"),
            _booking("outside", "2024-12-09 14:00", "2024-12-09 15:00"),
            _booking("straddles", "2024-12-16 11:30", "2024-12-16 12:30"),
        ]

        conflicts = detect_schedule_conflicts(rule, bookings, TZ)

        assert [c.booking_id for c in conflicts] == ["outside", "straddles"]
        assert all(c.conflict_type is ConflictType.REDUCED_HOURS for c in conflicts)

    def test_inactive_and_other_member_bookings_ignored(self):
        rule = WeeklyAvailabilityRule(
            member_id="alice", location_id="paris", day_of_week=1,
            is_open=False, effective_from=date(2024, 12, 2),
        )
        bookings = [
            _booking("cancelled", "2024-12-02 10:00", "2024-12-02 11:00", BookingStatus.CANCELLED),
            _booking("bruno", "2024-12-02 10:00", "2024-12-02 11:00", member_id="bruno"),
        ]

        assert detect_schedule_conflicts(rule, bookings, TZ) == []
