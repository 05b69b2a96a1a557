"""Calendar period boundaries and navigation.

Periods are computed from an anchor date and a view mode:

- weekly: Sunday 00:00 through Saturday 23:59:59.999
- biweekly: 14 days on a fixed cycle starting at BIWEEKLY_EPOCH
- monthly: first day 00:00 through last day 23:59:59.999
- historical: unbounded (start and end are None)

Entry dates are calendar dates, not instants. Strings are split into
year/month/day and built with date(); nothing here goes through a
timezone-aware parser, so "2026-01-26" is always the 26th.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional, Union


class ViewMode(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    HISTORICAL = "historical"


# Any Sunday works as long as it never changes; moving it shifts every biweek.
BIWEEKLY_EPOCH = date(2023, 12, 31)

ALL_TIME_LABEL = "All Time"

END_OF_DAY = time(23, 59, 59, 999000)

DateLike = Union[date, datetime, str]


@dataclass(frozen=True)
class PeriodRange:
    """A contiguous date window. None bounds mean all time."""

    start: Optional[datetime]
    end: Optional[datetime]
    label: str
    mode: ViewMode = ViewMode.HISTORICAL

    @property
    def is_all_time(self) -> bool:
        return self.start is None or self.end is None

    def contains(self, value: Optional[DateLike]) -> bool:
        """True if value falls in the window. All-time contains everything."""
        if self.is_all_time:
            return True
        return is_in_range(value, self.start, self.end)


def parse_date(value: Optional[DateLike]) -> Optional[date]:
    """Parse a calendar date without any timezone handling.

    Accepts date/datetime objects, "YYYY-MM-DD" (a trailing "T..." or
    " hh:mm" time part is ignored) and "M/D/YYYY".

    Returns:
        date, or None if the value is empty or cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        if "/" in text:
            month, day, year = (int(p) for p in text.split(" ")[0].split("/"))
        elif "-" in text:
            head = text.split("T")[0].split(" ")[0]
            year, month, day = (int(p) for p in head.split("-"))
        else:
            return None
        return date(year, month, day)
    except (ValueError, OverflowError):
        return None


def _as_date(value: DateLike) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed


def start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min)


def end_of_day(d: date) -> datetime:
    return datetime.combine(d, END_OF_DAY)


def today() -> date:
    return date.today()


def format_date_iso(value: DateLike) -> str:
    """Format as YYYY-MM-DD."""
    return _as_date(value).strftime("%Y-%m-%d")


def format_date_display(value: DateLike) -> str:
    """Format as MM/DD/YYYY."""
    return _as_date(value).strftime("%m/%d/%Y")


def day_of_month(value: DateLike) -> int:
    return _as_date(value).day


def _sunday_index(d: date) -> int:
    # date.weekday() is Monday=0; shift so Sunday=0
    return (d.weekday() + 1) % 7


def week_start(value: DateLike) -> datetime:
    """Most recent Sunday at/before the date, at midnight."""
    d = _as_date(value)
    return start_of_day(d - timedelta(days=_sunday_index(d)))


def week_end(value: DateLike) -> datetime:
    """Saturday following week_start, at 23:59:59.999."""
    d = _as_date(value)
    return end_of_day(d + timedelta(days=6 - _sunday_index(d)))


def biweek_start(value: DateLike) -> datetime:
    d = _as_date(value)
    offset = (d - BIWEEKLY_EPOCH).days % 14
    return start_of_day(d - timedelta(days=offset))


def biweek_end(value: DateLike) -> datetime:
    return end_of_day(biweek_start(value).date() + timedelta(days=13))


def month_start(value: DateLike) -> datetime:
    d = _as_date(value)
    return start_of_day(d.replace(day=1))


def month_end(value: DateLike) -> datetime:
    d = _as_date(value)
    last_day = calendar.monthrange(d.year, d.month)[1]
    return end_of_day(d.replace(day=last_day))


def is_in_range(value: Optional[DateLike], start: datetime, end: datetime) -> bool:
    """Inclusive range check. Unparseable values are never in range."""
    if isinstance(value, datetime):
        moment = value
    else:
        d = parse_date(value)
        if d is None:
            return False
        moment = start_of_day(d)
    return start <= moment <= end


def week_range_label(value: DateLike) -> str:
    return f"{format_date_display(week_start(value))} - {format_date_display(week_end(value))}"


def biweek_range_label(value: DateLike) -> str:
    return f"{format_date_display(biweek_start(value))} - {format_date_display(biweek_end(value))}"


def month_label(value: DateLike) -> str:
    d = _as_date(value)
    return f"{calendar.month_name[d.month]} {d.year}"


def previous_week(value: DateLike) -> date:
    return _as_date(value) - timedelta(days=7)


def next_week(value: DateLike) -> date:
    return _as_date(value) + timedelta(days=7)


def previous_biweek(value: DateLike) -> date:
    return _as_date(value) - timedelta(days=14)


def next_biweek(value: DateLike) -> date:
    return _as_date(value) + timedelta(days=14)


def add_months(value: DateLike, months: int) -> date:
    """Shift by calendar months, clamping the day to the target month's length."""
    d = _as_date(value)
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def previous_month(value: DateLike) -> date:
    return add_months(value, -1)


def next_month(value: DateLike) -> date:
    return add_months(value, 1)


def shift_anchor(anchor: DateLike, mode: ViewMode, steps: int = 1) -> date:
    """Move the anchor by whole periods (negative steps go back).

    Historical mode has no period unit, so the anchor stays put.
    """
    mode = ViewMode(mode)
    d = _as_date(anchor)
    if mode == ViewMode.WEEKLY:
        return d + timedelta(days=7 * steps)
    if mode == ViewMode.BIWEEKLY:
        return d + timedelta(days=14 * steps)
    if mode == ViewMode.MONTHLY:
        return add_months(d, steps)
    return d


def period_range(anchor: DateLike, mode: ViewMode) -> PeriodRange:
    """Compute the period containing the anchor date for a view mode."""
    mode = ViewMode(mode)
    if mode == ViewMode.HISTORICAL:
        return PeriodRange(start=None, end=None, label=ALL_TIME_LABEL, mode=mode)

    d = _as_date(anchor)
    if mode == ViewMode.WEEKLY:
        return PeriodRange(week_start(d), week_end(d), week_range_label(d), mode)
    if mode == ViewMode.BIWEEKLY:
        return PeriodRange(biweek_start(d), biweek_end(d), biweek_range_label(d), mode)
    return PeriodRange(month_start(d), month_end(d), month_label(d), mode)
