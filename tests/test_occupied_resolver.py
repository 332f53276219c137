"""
Tests for occupied-time resolution.
"""

from datetime import date

import pendulum

from bookingslots.domain.intervals import Interval
from bookingslots.domain.models import Booking, BookingStatus
from bookingslots.domain.occupied_resolver import resolve_occupied_intervals

TZ = "Europe/Paris"
DAY = date(2024, 11, 25)


def _booking(start, end, status=BookingStatus.CONFIRMED, member_id="alice", location_id="paris", id=None):
    return Booking(
        id=id,
        member_id=member_id,
        location_id=location_id,
        start=pendulum.parse(start, tz=TZ),
        end=pendulum.parse(end, tz=TZ),
        status=status,
    )


class TestResolveOccupiedIntervals:
    """Tests for resolve_occupied_intervals."""

    def test_booking_extended_by_buffer(self):
        booking = _booking("2024-11-25 10:00", "2024-11-25 10:30")

        result = resolve_occupied_intervals(DAY, "alice", "paris", 15, [booking], TZ)

        assert result == [Interval(600, 645)]

    def test_only_active_statuses_occupy_time(self):
        bookings = [
            _booking("2024-11-25 09:00", "2024-11-25 09:30", BookingStatus.PENDING),
            _booking("2024-11-25 10:00", "2024-11-25 10:30", BookingStatus.CANCELLED),
            _booking("2024-11-25 11:00", "2024-11-25 11:30", BookingStatus.COMPLETED),
            _booking("2024-11-25 12:00", "2024-11-25 12:30", BookingStatus.NOSHOW),
            _booking("2024-11-25 13:00", "2024-11-25 13:30", BookingStatus.CONFIRMED),
        ]

        result = resolve_occupied_intervals(DAY, "alice", "paris", 0, bookings, TZ)

        assert result == [Interval(540, 570), Interval(780, 810)]

    def test_other_days_members_and_locations_ignored(self):
        bookings = [
            _booking("2024-11-26 10:00", "2024-11-26 10:30"),
            _booking("2024-11-25 10:00", "2024-11-25 10:30", member_id="bruno"),
            _booking("2024-11-25 10:00", "2024-11-25 10:30", location_id="lyon"),
        ]

        assert resolve_occupied_intervals(DAY, "alice", "paris", 0, bookings, TZ) == []

    def test_start_date_evaluated_in_provider_timezone(self):
        """23:30 UTC on the 24th is 00:30 on the 25th in Paris."""
        booking = Booking(
            member_id="alice",
            location_id="paris",
            start=pendulum.parse("2024-11-24T23:30:00+00:00"),
            end=pendulum.parse("2024-11-25T00:00:00+00:00"),
        )

        assert resolve_occupied_intervals(DAY, "alice", "paris", 0, [booking], TZ) == [Interval(30, 60)]

    def test_excluded_booking_is_ignored(self):
        booking = _booking("2024-11-25 10:00", "2024-11-25 10:30", id="bk-1")

        assert resolve_occupied_intervals(
            DAY, "alice", "paris", 0, [booking], TZ, exclude_booking_id="bk-1"
        ) == []

    def test_back_to_back_bookings_merge(self):
        bookings = [
            _booking("2024-11-25 10:00", "2024-11-25 10:30"),
            _booking("2024-11-25 10:30", "2024-11-25 11:00"),
        ]

        assert resolve_occupied_intervals(DAY, "alice", "paris", 0, bookings, TZ) == [Interval(600, 660)]
