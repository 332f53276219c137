"""
Occupied-time resolution: existing bookings turned into busy intervals.
"""

import logging
import math
from datetime import date
from typing import Iterable, List, Optional

import pendulum

from .intervals import Interval, merge
from .models import Booking

logger = logging.getLogger(__name__)


def resolve_occupied_intervals(
    evaluation_date: date,
    member_id: Optional[str],
    location_id: Optional[str],
    buffer_minutes: int,
    bookings: Iterable[Booking],
    timezone: str,
    exclude_booking_id: Optional[str] = None,
) -> List[Interval]:
    """
    Return the merged minute intervals held by active bookings that start on
    ``evaluation_date`` (in ``timezone``).

    Each booking occupies ``[start, end + buffer)``, so the buffer keeps the
    next appointment from starting right after it.
    """
    buffer_minutes = max(buffer_minutes, 0)
    intervals: List[Interval] = []

    for booking in bookings:
        if not booking.is_active:
            continue
        if exclude_booking_id is not None and booking.id == exclude_booking_id:
            continue
        if booking.member_id != member_id or booking.location_id != location_id:
            continue

        start = pendulum.instance(booking.start, tz=timezone).in_timezone(timezone)
        if start.date() != evaluation_date:
            continue

        end = pendulum.instance(booking.end, tz=timezone)
        length = (end - start).total_seconds() / 60
        if length <= 0:
            logger.warning("Ignoring booking %s that ends before it starts", booking.id)
            continue

        start_minute = start.hour * 60 + start.minute
        end_minute = start_minute + math.ceil(length + start.second / 60)
        intervals.append(Interval(start=start_minute, end=end_minute + buffer_minutes))

    return merge(intervals)
