"""
Pydantic schemas for stored records.

Field aliases follow the camelCase names used by the document store, so a
raw export can be loaded as-is. Times of day stay plain strings: a malformed
"HH:MM" must degrade one day's availability, not reject the record.
"""

from datetime import date, datetime
from typing import List, Optional

import pendulum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..domain.models import (
    BlockedSlot,
    Booking,
    BookingSettings,
    BookingStatus,
    Scope,
    Service,
    TimeWindow,
    WeeklyAvailabilityRule,
)


class RecordModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _or_default(value, default):
    return default if value is None else value


class TimeWindowRecord(RecordModel):
    start: str
    end: str


class AvailabilityRecord(RecordModel):
    """One weekly availability document."""
    id: Optional[str] = None
    member_id: Optional[str] = Field(default=None, alias="memberId")
    location_id: str = Field(alias="locationId")
    day_of_week: int = Field(alias="dayOfWeek")
    slots: List[TimeWindowRecord] = Field(default_factory=list)
    is_open: bool = Field(default=True, alias="isOpen")
    effective_from: Optional[date] = Field(default=None, alias="effectiveFrom")

    @field_validator("day_of_week")
    @classmethod
    def validate_day_of_week(cls, value: int) -> int:
        """Validate day is between 0 (Sunday) and 6 (Saturday)."""
        if not 0 <= value <= 6:
            raise ValueError(f"dayOfWeek must be between 0 and 6, got {value}")
        return value

    def to_domain(self) -> WeeklyAvailabilityRule:
        return WeeklyAvailabilityRule(
            id=self.id,
            member_id=self.member_id,
            location_id=self.location_id,
            day_of_week=self.day_of_week,
            windows=tuple(TimeWindow(start=s.start, end=s.end) for s in self.slots),
            is_open=self.is_open,
            effective_from=self.effective_from,
        )


class BlockedSlotRecord(RecordModel):
    """One blocked period; null member/location means "all"."""
    id: Optional[str] = None
    member_id: Optional[str] = Field(default=None, alias="memberId")
    location_id: Optional[str] = Field(default=None, alias="locationId")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    all_day: bool = Field(default=False, alias="allDay")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    reason: Optional[str] = None

    @model_validator(mode="after")
    def validate_date_order(self) -> "BlockedSlotRecord":
        """Ensure the period ends on or after the day it starts."""
        if self.end_date < self.start_date:
            raise ValueError("endDate must be on or after startDate")
        return self

    def to_domain(self) -> BlockedSlot:
        return BlockedSlot(
            id=self.id,
            member=Scope.from_optional(self.member_id),
            location=Scope.from_optional(self.location_id),
            start_date=self.start_date,
            end_date=self.end_date,
            all_day=self.all_day,
            start_time=None if self.all_day else self.start_time,
            end_time=None if self.all_day else self.end_time,
            reason=self.reason,
        )


class ServiceRecord(RecordModel):
    id: str
    name: str = ""
    duration: int
    buffer_time: Optional[int] = Field(default=None, alias="bufferTime")
    location_ids: List[str] = Field(default_factory=list, alias="locationIds")
    member_ids: Optional[List[str]] = Field(default=None, alias="memberIds")

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure service duration is positive."""
        if value <= 0:
            raise ValueError("duration must be greater than zero")
        return value

    def to_domain(self) -> Service:
        return Service(
            id=self.id,
            name=self.name,
            duration_minutes=self.duration,
            buffer_minutes=self.buffer_time,
            location_ids=frozenset(self.location_ids),
            member_ids=None if self.member_ids is None else frozenset(self.member_ids),
        )


class SettingsRecord(RecordModel):
    """Stored booking settings; missing fields fall back to the configured defaults."""
    min_booking_notice: Optional[float] = Field(default=None, alias="minBookingNotice")
    max_booking_advance: Optional[int] = Field(default=None, alias="maxBookingAdvance")
    default_buffer_time: Optional[int] = Field(default=None, alias="defaultBufferTime")

    def to_domain(self, defaults: BookingSettings) -> BookingSettings:
        return BookingSettings(
            min_notice_hours=_or_default(self.min_booking_notice, defaults.min_notice_hours),
            max_advance_days=_or_default(self.max_booking_advance, defaults.max_advance_days),
            default_buffer_minutes=_or_default(
                self.default_buffer_time, defaults.default_buffer_minutes
            ),
        )


class BookingRecord(RecordModel):
    id: Optional[str] = None
    provider_id: str = Field(alias="providerId")
    member_id: Optional[str] = Field(default=None, alias="memberId")
    location_id: str = Field(alias="locationId")
    service_id: Optional[str] = Field(default=None, alias="serviceId")
    duration: Optional[int] = None
    start: datetime = Field(alias="datetime")
    end_datetime: datetime = Field(alias="endDatetime")
    status: BookingStatus = BookingStatus.PENDING

    def to_domain(self, timezone: str) -> Booking:
        return Booking(
            id=self.id,
            member_id=self.member_id,
            location_id=self.location_id,
            start=pendulum.instance(self.start, tz=timezone),
            end=pendulum.instance(self.end_datetime, tz=timezone),
            status=self.status,
            duration_minutes=self.duration,
        )


class ProviderRecord(RecordModel):
    """A provider document with its sub-collections."""
    id: str
    settings: Optional[SettingsRecord] = None
    availability: List[dict] = Field(default_factory=list)
    blocked_slots: List[dict] = Field(default_factory=list, alias="blockedSlots")
    services: List[ServiceRecord] = Field(default_factory=list)
