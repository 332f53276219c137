"""
Tests for domain models.
"""

from datetime import date

import pendulum

from bookingslots.domain.intervals import Interval
from bookingslots.domain.models import (
    BlockedSlot,
    BookingSettings,
    BookingStatus,
    CandidateSlot,
    Scope,
    Service,
    TimeWindow,
    day_of_week,
    format_minutes,
    parse_time_of_day,
)


class TestTimeOfDay:
    """Tests for "HH:MM" parsing and formatting."""

    def test_parse_valid(self):
        assert parse_time_of_day("00:00") == 0
        assert parse_time_of_day("09:30") == 570
        assert parse_time_of_day("23:59") == 1439

    def test_parse_invalid_returns_none(self):
        """Malformed values are not errors, they parse to nothing."""
        for value in ("24:00", "9:30", "12:60", "noon", "", None):
            assert parse_time_of_day(value) is None

    def test_format_minutes(self):
        assert format_minutes(0) == "00:00"
        assert format_minutes(645) == "10:45"

    def test_day_of_week_starts_on_sunday(self):
        assert day_of_week(date(2024, 11, 24)) == 0  # Sunday
        assert day_of_week(date(2024, 11, 25)) == 1  # Monday
        assert day_of_week(date(2024, 11, 30)) == 6  # Saturday


class TestTimeWindow:
    """Tests for TimeWindow."""

    def test_to_interval(self):
        assert TimeWindow("09:00", "17:30").to_interval() == Interval(540, 1050)

    def test_end_before_start_contributes_nothing(self):
        assert TimeWindow("17:00", "09:00").to_interval() is None
        assert TimeWindow("09:00", "09:00").to_interval() is None

    def test_malformed_contributes_nothing(self):
        assert TimeWindow("9h", "17:00").to_interval() is None


class TestScope:
    """Tests for the Scope variant."""

    def test_all_matches_everything(self):
        scope = Scope.all()

        assert scope.is_all
        assert scope.matches("alice")
        assert scope.matches(None)

    def test_specific_matches_only_its_id(self):
        scope = Scope.specific("alice")

        assert not scope.is_all
        assert scope.matches("alice")
        assert not scope.matches("bruno")

    def test_from_optional(self):
        assert Scope.from_optional(None) == Scope.all()
        assert Scope.from_optional("paris") == Scope.specific("paris")


class TestBlockedSlot:
    """Tests for BlockedSlot."""

    def test_covers_inclusive_range(self):
        blocked = BlockedSlot(start_date=date(2024, 12, 23), end_date=date(2024, 12, 27))

        assert blocked.covers(date(2024, 12, 23))
        assert blocked.covers(date(2024, 12, 27))
        assert not blocked.covers(date(2024, 12, 28))

    def test_applies_to(self):
        blocked = BlockedSlot(
            start_date=date(2024, 12, 23),
            end_date=date(2024, 12, 23),
            member=Scope.specific("alice"),
        )

        assert blocked.applies_to("alice", "paris")
        assert not blocked.applies_to("bruno", "paris")


class TestBookingStatus:
    def test_only_pending_and_confirmed_occupy_time(self):
        occupying = {status for status in BookingStatus if status.occupies_time}

        assert occupying == {BookingStatus.PENDING, BookingStatus.CONFIRMED}


class TestService:
    """Tests for Service eligibility and buffers."""

    def test_buffer_falls_back_to_provider_default(self):
        settings = BookingSettings(default_buffer_minutes=10)

        assert Service(id="s", duration_minutes=30).effective_buffer(settings) == 10
        assert Service(id="s", duration_minutes=30, buffer_minutes=0).effective_buffer(settings) == 0
        assert Service(id="s", duration_minutes=30, buffer_minutes=15).effective_buffer(settings) == 15

    def test_member_eligibility(self):
        service = Service(id="s", duration_minutes=30, member_ids=frozenset({"alice"}))

        assert service.eligible_for_member("alice")
        assert not service.eligible_for_member("bruno")
        assert Service(id="s", duration_minutes=30).eligible_for_member("bruno")

    def test_location_eligibility(self):
        service = Service(id="s", duration_minutes=30, location_ids=frozenset({"paris"}))

        assert service.eligible_for_location("paris")
        assert not service.eligible_for_location("lyon")


class TestCandidateSlot:
    def test_format_display(self):
        slot = CandidateSlot(
            date=date(2024, 11, 27),
            start="09:00",
            end="10:00",
            start_at=pendulum.parse("2024-11-27 09:00", tz="Europe/Paris"),
            end_at=pendulum.parse("2024-11-27 10:00", tz="Europe/Paris"),
        )

        assert slot.duration_minutes() == 60
        assert slot.format_display() == "Wednesday, 27.11.2024 | 09:00 – 10:00 (60 min)"
