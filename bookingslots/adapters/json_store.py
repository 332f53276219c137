"""
Read-only record source backed by a JSON export of the document store.
"""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
from pydantic import ValidationError

from ..domain.exceptions import RecordNotFoundError, RecordValidationError
from ..domain.models import Booking, BookingSettings, ProviderRecords, Service
from .schemas import AvailabilityRecord, BlockedSlotRecord, BookingRecord, ProviderRecord

logger = logging.getLogger(__name__)


class JsonRecordStore:
    """
    Serves provider records loaded from a JSON document.

    Expected layout::

        {
          "providers": [{"id": ..., "settings": {...}, "availability": [...],
                         "blockedSlots": [...], "services": [...]}],
          "bookings": [{"providerId": ..., "datetime": ..., ...}]
        }

    Invalid availability or blocked-slot entries are skipped with a warning.
    Invalid bookings are not: ignoring one would offer its time twice.
    """

    def __init__(
        self,
        data: Dict[str, Any],
        timezone: str = "Europe/Paris",
        defaults: Optional[BookingSettings] = None,
    ):
        self.timezone = timezone
        self.defaults = defaults or BookingSettings()
        self._providers: Dict[str, ProviderRecord] = {}
        self._bookings: Dict[str, List[Booking]] = {}
        self._parse(data)

    @classmethod
    def from_file(
        cls,
        data_file: Path,
        timezone: str = "Europe/Paris",
        defaults: Optional[BookingSettings] = None,
    ) -> "JsonRecordStore":
        """
        Load records from a JSON file.

        Raises:
            FileNotFoundError: If the data file doesn't exist
            RecordValidationError: If the file is not valid JSON
        """
        if not data_file.exists():
            raise FileNotFoundError(f"Data file not found: {data_file}")

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise RecordValidationError(f"Invalid JSON in {data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise RecordValidationError("Data file must contain an object at the root level.")

        return cls(data, timezone=timezone, defaults=defaults)

    def _parse(self, data: Dict[str, Any]) -> None:
        for raw in data.get("providers", []):
            try:
                provider = ProviderRecord.model_validate(raw)
            except ValidationError as exc:
                raise RecordValidationError(f"Invalid provider record: {exc}") from exc
            self._providers[provider.id] = provider

        for raw in data.get("bookings", []):
            try:
                record = BookingRecord.model_validate(raw)
            except ValidationError as exc:
                raise RecordValidationError(f"Invalid booking record: {exc}") from exc
            self._bookings.setdefault(record.provider_id, []).append(
                record.to_domain(self.timezone)
            )

    def _get_provider_record(self, provider_id: str) -> ProviderRecord:
        provider = self._providers.get(provider_id)
        if provider is None:
            raise RecordNotFoundError(f"Unknown provider: '{provider_id}'")
        return provider

    def get_provider(self, provider_id: str) -> ProviderRecords:
        """Return rules, blocked slots and settings of a provider."""
        provider = self._get_provider_record(provider_id)

        rules = []
        for raw in provider.availability:
            try:
                rules.append(AvailabilityRecord.model_validate(raw).to_domain())
            except ValidationError as exc:
                logger.warning("Skipping invalid availability record of %s: %s", provider_id, exc)

        blocked_slots = []
        for raw in provider.blocked_slots:
            try:
                blocked_slots.append(BlockedSlotRecord.model_validate(raw).to_domain())
            except ValidationError as exc:
                logger.warning("Skipping invalid blocked slot of %s: %s", provider_id, exc)

        settings = provider.settings.to_domain(self.defaults) if provider.settings else self.defaults

        return ProviderRecords(
            provider_id=provider_id,
            rules=tuple(rules),
            blocked_slots=tuple(blocked_slots),
            settings=settings,
        )

    def get_service(self, provider_id: str, service_id: str) -> Service:
        """Return a service definition."""
        provider = self._get_provider_record(provider_id)
        for service in provider.services:
            if service.id == service_id:
                return service.to_domain()
        raise RecordNotFoundError(f"Unknown service '{service_id}' for provider '{provider_id}'")

    def list_services(self, provider_id: str) -> List[Service]:
        return [service.to_domain() for service in self._get_provider_record(provider_id).services]

    def get_bookings(self, provider_id: str, start_date: date, end_date: date) -> List[Booking]:
        """Return the provider's bookings starting between two dates (inclusive)."""
        self._get_provider_record(provider_id)
        first_day = self._as_date(start_date)
        last_day = self._as_date(end_date)

        return [
            booking for booking in self._bookings.get(provider_id, [])
            if first_day <= booking.start.in_timezone(self.timezone).date() <= last_day
        ]

    def _as_date(self, value: date) -> date:
        if isinstance(value, datetime):
            return pendulum.instance(value, tz=self.timezone).in_timezone(self.timezone).date()
        return value
