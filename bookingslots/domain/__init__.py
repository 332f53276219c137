"""
Domain layer - Pure business logic without external dependencies.
"""

from .conflicts import ConflictType, ScheduleConflict, detect_schedule_conflicts
from .intervals import Interval, intersect, merge, overlaps, subtract
from .models import (
    BlockedSlot,
    Booking,
    BookingSettings,
    BookingStatus,
    CandidateSlot,
    ProviderRecords,
    Scope,
    Service,
    TimeWindow,
    WeeklyAvailabilityRule,
)
from .policy import BookingPolicyFilter, filter_slots
from .slot_generator import SlotGenerator

__all__ = [
    "BlockedSlot",
    "Booking",
    "BookingPolicyFilter",
    "BookingSettings",
    "BookingStatus",
    "CandidateSlot",
    "ConflictType",
    "Interval",
    "ProviderRecords",
    "ScheduleConflict",
    "Scope",
    "Service",
    "SlotGenerator",
    "TimeWindow",
    "WeeklyAvailabilityRule",
    "detect_schedule_conflicts",
    "filter_slots",
    "intersect",
    "merge",
    "overlaps",
    "subtract",
]
