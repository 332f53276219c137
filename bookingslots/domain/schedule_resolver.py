"""
Weekly schedule resolution.

Picks the weekly rule in force for a date and turns its "HH:MM" windows
into minute intervals.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from .intervals import Interval, merge
from .models import WeeklyAvailabilityRule, day_of_week

logger = logging.getLogger(__name__)


def select_active_rule(
    evaluation_date: date,
    member_id: Optional[str],
    location_id: Optional[str],
    rules: Iterable[WeeklyAvailabilityRule],
) -> Optional[WeeklyAvailabilityRule]:
    """
    Select the rule in force on ``evaluation_date`` for (member, location).

    The scheduled change with the latest ``effective_from`` that has already
    arrived wins over the baseline and over changes still in the future.
    The baseline (no ``effective_from``) applies until the first change arrives.
    """
    weekday = day_of_week(evaluation_date)

    matching = [
        rule for rule in rules
        if rule.day_of_week == weekday
        and rule.member_id == member_id
        and rule.location_id == location_id
    ]
    if not matching:
        return None

    arrived = sorted(
        (
            rule for rule in matching
            if rule.effective_from is not None and rule.effective_from <= evaluation_date
        ),
        key=lambda rule: rule.effective_from,
    )
    if arrived:
        return arrived[-1]

    baseline = [rule for rule in matching if rule.effective_from is None]
    if not baseline:
        return None

    if len(baseline) > 1:
        logger.warning(
            "Several baseline rules for member=%s location=%s day=%s; using the last one",
            member_id, location_id, weekday,
        )
    return baseline[-1]


def resolve_open_intervals(
    evaluation_date: date,
    member_id: Optional[str],
    location_id: Optional[str],
    rules: Iterable[WeeklyAvailabilityRule],
) -> List[Interval]:
    """
    Return the sorted minute intervals during which (member, location) is open.

    A closed day, or a day without any rule, yields no intervals.
    """
    rule = select_active_rule(evaluation_date, member_id, location_id, rules)
    if rule is None or not rule.is_open:
        return []

    intervals: List[Interval] = []
    for window in rule.windows:
        interval = window.to_interval()
        if interval is None:
            logger.warning(
                "Ignoring malformed window %s-%s on rule %s",
                window.start, window.end, rule.id or f"day {rule.day_of_week}",
            )
            continue
        intervals.append(interval)

    return merge(intervals)
