"""
Domain models for availability records and computed slots.

Every record except ``CandidateSlot`` is an input owned by an external
collaborator. The core reads them and never mutates them.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from pendulum import DateTime

from .intervals import Interval

MINUTES_PER_DAY = 24 * 60

_TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_time_of_day(value: Optional[str]) -> Optional[int]:
    """
    Convert an "HH:MM" string to minutes after midnight.
    Returns None for anything that is not a valid 24-hour time.
    """
    if not isinstance(value, str):
        return None
    match = _TIME_OF_DAY.match(value.strip())
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def format_minutes(minutes: int) -> str:
    """Format minutes after midnight as "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_of_week(value: date) -> int:
    """Day of week as stored on availability rules: 0=Sunday, 6=Saturday."""
    return value.isoweekday() % 7


class ScopeKind(str, Enum):
    ALL = "all"
    SPECIFIC = "specific"


@dataclass(frozen=True)
class Scope:
    """
    Who or where a record applies to.

    ``Scope.all()`` applies broadly; ``Scope.specific(id)`` applies to one
    member or location only.
    """
    kind: ScopeKind
    id: Optional[str] = None

    @classmethod
    def all(cls) -> "Scope":
        return cls(kind=ScopeKind.ALL)

    @classmethod
    def specific(cls, identifier: str) -> "Scope":
        return cls(kind=ScopeKind.SPECIFIC, id=identifier)

    @classmethod
    def from_optional(cls, identifier: Optional[str]) -> "Scope":
        """Build a scope from a stored nullable reference."""
        if identifier is None:
            return cls.all()
        return cls.specific(identifier)

    @property
    def is_all(self) -> bool:
        return self.kind is ScopeKind.ALL

    def matches(self, identifier: Optional[str]) -> bool:
        """Check if this scope covers the given member or location."""
        return self.is_all or self.id == identifier

    def __str__(self) -> str:
        return "*" if self.is_all else str(self.id)


@dataclass(frozen=True)
class TimeWindow:
    """An "HH:MM"-"HH:MM" opening window as stored on a weekly rule."""
    start: str
    end: str

    def to_interval(self) -> Optional[Interval]:
        """
        Convert to a minute interval.
        Returns None when either end is malformed or the window is empty.
        """
        start = parse_time_of_day(self.start)
        end = parse_time_of_day(self.end)
        if start is None or end is None or end <= start:
            return None
        return Interval(start=start, end=end)


@dataclass(frozen=True)
class WeeklyAvailabilityRule:
    """
    Opening hours of one (member, location) for one day of the week.

    A rule with ``effective_from`` set is a scheduled change: it takes over
    from the baseline (and from earlier changes) once that date arrives.
    """
    location_id: str
    day_of_week: int  # 0=Sunday, 6=Saturday
    windows: Tuple[TimeWindow, ...] = ()
    is_open: bool = True
    member_id: Optional[str] = None  # None = provider as a whole
    effective_from: Optional[date] = None
    id: Optional[str] = None

    @property
    def is_scheduled_change(self) -> bool:
        return self.effective_from is not None


@dataclass(frozen=True)
class BlockedSlot:
    """Time off: vacations, personal absences, emergency closures."""
    start_date: date
    end_date: date
    member: Scope = field(default_factory=Scope.all)
    location: Scope = field(default_factory=Scope.all)
    all_day: bool = True
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None
    id: Optional[str] = None

    def covers(self, value: date) -> bool:
        """Check if the inclusive date range contains ``value``."""
        return self.start_date <= value <= self.end_date

    def applies_to(self, member_id: Optional[str], location_id: Optional[str]) -> bool:
        return self.member.matches(member_id) and self.location.matches(location_id)


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NOSHOW = "noshow"

    @property
    def occupies_time(self) -> bool:
        """Only pending and confirmed bookings hold their time."""
        return self in (BookingStatus.PENDING, BookingStatus.CONFIRMED)


@dataclass(frozen=True)
class Booking:
    """An existing booking, as read from the booking store."""
    member_id: Optional[str]
    location_id: Optional[str]
    start: DateTime
    end: DateTime
    status: BookingStatus = BookingStatus.CONFIRMED
    duration_minutes: Optional[int] = None
    id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status.occupies_time


@dataclass(frozen=True)
class BookingSettings:
    """Provider-configured booking policy."""
    min_notice_hours: float = 2
    max_advance_days: int = 60
    default_buffer_minutes: int = 0


@dataclass(frozen=True)
class Service:
    """
    A bookable service.

    ``buffer_minutes`` of None falls back to the provider's default buffer.
    ``member_ids`` of None means every member may perform it; an empty
    ``location_ids`` means it is offered at every location.
    """
    id: str
    duration_minutes: int
    buffer_minutes: Optional[int] = None
    location_ids: FrozenSet[str] = frozenset()
    member_ids: Optional[FrozenSet[str]] = None
    name: str = ""

    def effective_buffer(self, settings: Optional[BookingSettings] = None) -> int:
        if self.buffer_minutes is not None:
            return max(self.buffer_minutes, 0)
        if settings is not None:
            return max(settings.default_buffer_minutes, 0)
        return 0

    def eligible_for_member(self, member_id: Optional[str]) -> bool:
        if self.member_ids is None or member_id is None:
            return True
        return member_id in self.member_ids

    def eligible_for_location(self, location_id: Optional[str]) -> bool:
        if not self.location_ids or location_id is None:
            return True
        return location_id in self.location_ids


@dataclass(frozen=True)
class CandidateSlot:
    """
    A bookable start/end time, produced fresh by every query.
    """
    date: date
    start: str
    end: str
    start_at: DateTime
    end_at: DateTime
    member_id: Optional[str] = None
    location_id: Optional[str] = None

    @property
    def time_range(self) -> Interval:
        return Interval(start=self.start_at, end=self.end_at)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end_at - self.start_at).total_seconds() / 60)

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Weekday, DD.MM.YYYY | HH:MM – HH:MM
        """
        weekday_names = {
            0: "Sunday",
            1: "Monday",
            2: "Tuesday",
            3: "Wednesday",
            4: "Thursday",
            5: "Friday",
            6: "Saturday",
        }

        weekday = weekday_names[day_of_week(self.date)]
        date_str = self.date.strftime("%d.%m.%Y")

        return f"{weekday}, {date_str} | {self.start} – {self.end} ({self.duration_minutes()} min)"


@dataclass(frozen=True)
class ProviderRecords:
    """
    Everything the core needs to know about one provider, already fetched.
    """
    provider_id: str
    rules: Tuple[WeeklyAvailabilityRule, ...] = ()
    blocked_slots: Tuple[BlockedSlot, ...] = ()
    bookings: Tuple[Booking, ...] = ()
    settings: BookingSettings = field(default_factory=BookingSettings)

    def member_ids(self) -> Tuple[Optional[str], ...]:
        """Members mentioned by the weekly rules, in first-seen order."""
        return tuple(dict.fromkeys(rule.member_id for rule in self.rules))

    def location_ids(self, member_id: Optional[str] = None) -> Tuple[str, ...]:
        """Locations mentioned by the weekly rules of ``member_id``."""
        return tuple(dict.fromkeys(
            rule.location_id for rule in self.rules if rule.member_id == member_id
        ))
