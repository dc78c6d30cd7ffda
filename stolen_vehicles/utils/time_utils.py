import pytz

from datetime import datetime
from typing import Optional

from stolen_vehicles.constants import L10N
from stolen_vehicles.constants.time import (DAYS_PER_MONTH, HOURS_PER_DAY,
    MINUTES_PER_HOUR, SECONDS_PER_MINUTE)

JUST_NOW_THRESHOLD_IN_SECONDS = 5

UTC = pytz.timezone('UTC')


def utc_now() -> datetime:
    return datetime.now(UTC)


def relative_time_string(then: Optional[datetime],
                         now: Optional[datetime] = None) -> str:
    """Describe how long ago `then` was, in the largest whole unit that
    fits. Months are 30 days long.
    """
    if not then:
        return L10N.FRESHNESS_NEVER

    now = now or utc_now()

    diff_seconds = int((now - then).total_seconds())

    if diff_seconds < JUST_NOW_THRESHOLD_IN_SECONDS:
        return L10N.FRESHNESS_JUST_NOW

    if diff_seconds < SECONDS_PER_MINUTE:
        return L10N.FRESHNESS_SECONDS_STRING.format(diff_seconds)

    diff_minutes = diff_seconds // SECONDS_PER_MINUTE
    if diff_minutes < MINUTES_PER_HOUR:
        return _unit_string(diff_minutes, 'minute')

    diff_hours = diff_minutes // MINUTES_PER_HOUR
    if diff_hours < HOURS_PER_DAY:
        return _unit_string(diff_hours, 'hour')

    diff_days = diff_hours // HOURS_PER_DAY
    if diff_days < DAYS_PER_MONTH:
        return _unit_string(diff_days, 'day')

    return _unit_string(diff_days // DAYS_PER_MONTH, 'month')


def _unit_string(amount: int, unit: str) -> str:
    return L10N.FRESHNESS_UNIT_STRING.format(amount, unit, L10N.pluralize(amount))
