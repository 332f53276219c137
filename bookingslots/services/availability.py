"""
Application services for answering "what is free" and "is this slot free".

The service coordinates fetching records via a record source adapter and
delegates the actual computation to the domain-level ``SlotGenerator`` and
``BookingPolicyFilter``. This keeps the CLI thin and improves testability by
allowing the storage dependency to be stubbed via a simple protocol.

Results are advisory: they say what was free when computed. Booking creation
must still re-check inside its own atomic write.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

import pendulum
from pendulum import DateTime

from ..domain.conflicts import ScheduleConflict, detect_schedule_conflicts
from ..domain.exceptions import SlotUnavailableError
from ..domain.models import Booking, CandidateSlot, ProviderRecords, Service, WeeklyAvailabilityRule
from ..domain.policy import BookingPolicyFilter
from ..domain.slot_generator import SlotGenerator

logger = logging.getLogger(__name__)

# Days fetched per round when looking for the first free slot
SEARCH_WINDOW_DAYS = 7

# How far ahead a scheduled change is checked against existing bookings
CONFLICT_LOOKAHEAD_DAYS = 365


class RecordSourceProtocol(Protocol):
    """Protocol describing the read-only record access needed by the service."""

    def get_provider(self, provider_id: str) -> ProviderRecords:
        """Return rules, blocked slots and settings of a provider."""

    def get_service(self, provider_id: str, service_id: str) -> Service:
        """Return a service definition."""

    def get_bookings(self, provider_id: str, start_date: date, end_date: date) -> List[Booking]:
        """Return the provider's bookings starting between two dates (inclusive)."""


class AvailabilityService:
    """
    Orchestrates record retrieval, slot generation and policy filtering.

    Dependency inversion toward a protocol makes it easy to plug in the JSON
    record store or a stub in tests.
    """

    def __init__(
        self,
        record_source: RecordSourceProtocol,
        timezone: str = "Europe/Paris",
        clock: Optional[Callable[[], DateTime]] = None,
        next_available_horizon_days: int = 60,
    ) -> None:
        self._record_source = record_source
        self.timezone = timezone
        self._clock = clock or (lambda: pendulum.now(self.timezone))
        self._generator = SlotGenerator(timezone=timezone)
        self.next_available_horizon_days = next_available_horizon_days

    def get_available_slots(
        self,
        *,
        provider_id: str,
        service_id: str,
        start_date: date,
        end_date: date,
        member_id: Optional[str] = None,
        location_id: Optional[str] = None,
        now: Optional[datetime] = None,
        exclude_booking_id: Optional[str] = None,
    ) -> List[CandidateSlot]:
        """
        Compute the bookable slots of a service between two dates.

        A missing member or location is expanded to every eligible pair and
        the results are merged into one chronological list.
        """
        now = self._now(now)
        provider, service = self._load(provider_id, service_id, start_date, end_date)

        slots = self.calculate_slots(
            provider=provider,
            service=service,
            start_date=start_date,
            end_date=end_date,
            member_id=member_id,
            location_id=location_id,
            now=now,
            exclude_booking_id=exclude_booking_id,
        )

        logger.info(
            "Computed %d slot(s) for provider=%s service=%s member=%s location=%s from %s to %s",
            len(slots), provider_id, service_id, member_id, location_id, start_date, end_date,
        )
        return slots

    def calculate_slots(
        self,
        *,
        provider: ProviderRecords,
        service: Service,
        start_date: date,
        end_date: date,
        member_id: Optional[str],
        location_id: Optional[str],
        now: DateTime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[CandidateSlot]:
        """Calculate slots from records that are already in memory."""
        policy = BookingPolicyFilter.from_settings(provider.settings, timezone=self.timezone)
        slots: List[CandidateSlot] = []

        for pair_member, pair_location in self._candidate_pairs(
            provider, service, member_id, location_id
        ):
            generated = self._generator.generate_slots(
                provider=provider,
                service=service,
                member_id=pair_member,
                location_id=pair_location,
                start_date=start_date,
                end_date=end_date,
                exclude_booking_id=exclude_booking_id,
            )
            slots.extend(policy.apply(generated, now))

        slots.sort(key=lambda s: (s.start_at, s.member_id or "", s.location_id or ""))
        return slots

    def is_slot_available(
        self,
        *,
        provider_id: str,
        service_id: str,
        member_id: Optional[str],
        location_id: str,
        start_at: datetime,
        now: Optional[datetime] = None,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """Check a single start time against that day's available slots."""
        target = pendulum.instance(start_at, tz=self.timezone)
        day = target.in_timezone(self.timezone).date()

        slots = self.get_available_slots(
            provider_id=provider_id,
            service_id=service_id,
            start_date=day,
            end_date=day,
            member_id=member_id,
            location_id=location_id,
            now=now,
            exclude_booking_id=exclude_booking_id,
        )
        return any(slot.start_at == target for slot in slots)

    def ensure_slot_available(
        self,
        *,
        provider_id: str,
        service_id: str,
        member_id: Optional[str],
        location_id: str,
        start_at: datetime,
        now: Optional[datetime] = None,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """
        Pre-flight check for the booking write path.

        Raises:
            SlotUnavailableError: If the start time is not bookable
        """
        available = self.is_slot_available(
            provider_id=provider_id,
            service_id=service_id,
            member_id=member_id,
            location_id=location_id,
            start_at=start_at,
            now=now,
            exclude_booking_id=exclude_booking_id,
        )
        if not available:
            raise SlotUnavailableError(
                f"The slot starting at {start_at} is no longer available.",
                start_at=start_at,
            )

    def find_next_available(
        self,
        *,
        provider_id: str,
        service_id: str,
        member_id: Optional[str] = None,
        location_id: Optional[str] = None,
        now: Optional[datetime] = None,
        horizon_days: Optional[int] = None,
    ) -> Optional[CandidateSlot]:
        """Return the first bookable slot within the horizon, or None."""
        now = self._now(now)
        horizon = self.next_available_horizon_days if horizon_days is None else horizon_days
        last_day = now.date().add(days=horizon)
        window_start = now.date()

        while window_start <= last_day:
            window_end = min(window_start.add(days=SEARCH_WINDOW_DAYS - 1), last_day)
            slots = self.get_available_slots(
                provider_id=provider_id,
                service_id=service_id,
                start_date=window_start,
                end_date=window_end,
                member_id=member_id,
                location_id=location_id,
                now=now,
            )
            if slots:
                return slots[0]
            window_start = window_end.add(days=1)

        return None

    def next_available_by_member(
        self,
        *,
        provider_id: str,
        service_id: str,
        location_id: Optional[str] = None,
        now: Optional[datetime] = None,
        horizon_days: Optional[int] = None,
    ) -> Dict[Optional[str], Optional[CandidateSlot]]:
        """Run one next-available query per member able to perform the service."""
        provider = self._record_source.get_provider(provider_id)
        service = self._record_source.get_service(provider_id, service_id)

        if service.member_ids is not None:
            members: Sequence[Optional[str]] = sorted(service.member_ids)
        else:
            members = provider.member_ids()

        return {
            member: self.find_next_available(
                provider_id=provider_id,
                service_id=service_id,
                member_id=member,
                location_id=location_id,
                now=now,
                horizon_days=horizon_days,
            )
            for member in members
        }

    def get_schedule_conflicts(
        self,
        *,
        provider_id: str,
        rule: WeeklyAvailabilityRule,
        now: Optional[datetime] = None,
    ) -> List[ScheduleConflict]:
        """Report the bookings a proposed weekly rule would leave uncovered."""
        first_day = rule.effective_from or self._now(now).date()
        first_day = pendulum.date(first_day.year, first_day.month, first_day.day)
        bookings = self._record_source.get_bookings(
            provider_id, first_day, first_day.add(days=CONFLICT_LOOKAHEAD_DAYS)
        )
        conflicts = detect_schedule_conflicts(rule, bookings, self.timezone)

        if conflicts:
            logger.info(
                "Schedule change for member=%s day=%s strands %d booking(s)",
                rule.member_id, rule.day_of_week, len(conflicts),
            )
        return conflicts

    def _load(
        self,
        provider_id: str,
        service_id: str,
        start_date: date,
        end_date: date,
    ) -> Tuple[ProviderRecords, Service]:
        """Fetch everything one computation needs."""
        provider = self._record_source.get_provider(provider_id)
        service = self._record_source.get_service(provider_id, service_id)
        bookings = self._record_source.get_bookings(provider_id, start_date, end_date)

        return dataclasses.replace(provider, bookings=tuple(bookings)), service

    def _now(self, now: Optional[datetime]) -> DateTime:
        if now is None:
            return self._clock().in_timezone(self.timezone)
        return pendulum.instance(now, tz=self.timezone).in_timezone(self.timezone)

    @staticmethod
    def _candidate_pairs(
        provider: ProviderRecords,
        service: Service,
        member_id: Optional[str],
        location_id: Optional[str],
    ) -> List[Tuple[Optional[str], Optional[str]]]:
        """
        Expand the requested member/location into concrete pairs.

        Explicit values are kept as-is so that ineligible requests produce an
        empty result rather than silently searching elsewhere.
        """
        if member_id is not None:
            members: Sequence[Optional[str]] = [member_id]
        elif service.member_ids is not None:
            members = sorted(service.member_ids)
        else:
            members = provider.member_ids()

        pairs: List[Tuple[Optional[str], Optional[str]]] = []
        for member in members:
            if location_id is not None:
                locations: Sequence[Optional[str]] = [location_id]
            elif service.location_ids:
                locations = sorted(service.location_ids)
            else:
                locations = provider.location_ids(member)

            pairs.extend((member, location) for location in locations)

        return pairs
