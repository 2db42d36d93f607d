"""Reporting window resolution.

A report covers a "current" window ending now and an equally long
"previous" window immediately before it, used for trend comparison.
"""
import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from app.config import get_settings


@dataclass(frozen=True)
class Period:
    """Current and previous reporting windows.

    The current window is closed on both ends. The previous window is
    half-open, ending where the current one starts, so no row is counted
    in both.
    """

    days: int
    current_start: datetime
    current_end: datetime
    previous_start: datetime
    previous_end: datetime


def coerce_days(
    value: Union[int, str, None],
    default: Optional[int] = None,
    maximum: Optional[int] = None,
) -> int:
    """Parse a day-count parameter, falling back to the default.

    Anything that is not a positive integer (None, "", "abc", "0", "-5",
    "2.5", True) yields the default. Values above the maximum are capped so
    both windows stay within datetime's range.
    """
    settings = get_settings()
    if default is None:
        default = settings.CONSUMPTION_DEFAULT_DAYS
    if maximum is None:
        maximum = settings.MAX_CONSUMPTION_DAYS

    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        days = value
    else:
        try:
            days = int(str(value).strip())
        except ValueError:
            return default

    if days <= 0:
        return default
    return min(days, maximum)


def resolve_period(
    days: Union[int, str, None] = None,
    now: Optional[datetime] = None,
) -> Period:
    """Compute the current and previous windows for a day count."""
    days = coerce_days(days)
    if now is None:
        now = datetime.utcnow()

    span = timedelta(days=days)
    current_start = now - span
    return Period(
        days=days,
        current_start=current_start,
        current_end=now,
        previous_start=current_start - span,
        previous_end=current_start,
    )


def months_before(moment: datetime, months: int) -> datetime:
    """The same moment a number of calendar months earlier.

    The day is clamped to the target month's length (Mar 31 -> Feb 28).
    """
    index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
