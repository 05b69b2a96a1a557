"""Entry aggregation: period filtering and totals.

Numeric rule used by every sum here: a field that is absent, None, empty,
non-numeric, NaN or infinite counts as 0. Entries can be the pydantic
models from schemas.py or plain dicts (snake_case or camelCase keys).
"""

import math
import numbers
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Optional, TypeVar

from .periods import PeriodRange, is_in_range


T = TypeVar("T")


def coerce_number(value: Any, default: float = 0.0) -> float:
    """Convert a raw value to float, falling back to default instead of raising.

    Strings may carry a leading "$" and thousands separators ("$1,234.50").

    Examples:
        coerce_number("8.5") -> 8.5
        coerce_number("$1,200") -> 1200.0
        coerce_number(None) -> 0.0
        coerce_number("n/a", 21) -> 21
        coerce_number(Decimal("8.25")) -> 8.25
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, (numbers.Real, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return default
    elif isinstance(value, str):
        text = value.strip().replace("$", "").replace(",", "")
        if not text:
            return default
        try:
            number = float(text)
        except ValueError:
            return default
    else:
        return default

    if math.isnan(number) or math.isinf(number):
        return default
    return number


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def get_field(entry: Any, name: str) -> Any:
    """Read a field from a model or dict; missing fields are None."""
    if isinstance(entry, dict):
        if name in entry:
            return entry[name]
        return entry.get(_camel(name))
    return getattr(entry, name, None)


def _sum_field(entries: Iterable[Any], name: str) -> float:
    return sum((coerce_number(get_field(e, name)) for e in entries), 0.0)


@dataclass(frozen=True)
class HoursTotals:
    total_regular: float
    total_overtime: float
    total_hours: float


def filter_by_range(entries: Iterable[T], period: Optional[PeriodRange]) -> List[T]:
    """Keep entries whose date lies in the period (inclusive both ends).

    An all-time period (or None) returns every entry, including those with
    unparseable dates. A bounded period drops entries whose date can't be
    parsed.
    """
    entries = list(entries)
    if period is None or period.is_all_time:
        return entries
    return [e for e in entries if is_in_range(get_field(e, "date"), period.start, period.end)]


def sum_hours(entries: Iterable[Any]) -> HoursTotals:
    """Sum regular and overtime hours.

    total_hours is always regular + overtime; a stored total on the entry
    is ignored since it can be stale.
    """
    entries = list(entries)
    regular = _sum_field(entries, "regular_hours")
    overtime = _sum_field(entries, "overtime_hours")
    return HoursTotals(
        total_regular=regular,
        total_overtime=overtime,
        total_hours=regular + overtime,
    )


def sum_miles(entries: Iterable[Any]) -> float:
    return _sum_field(entries, "miles")


def sum_expenses(entries: Iterable[Any]) -> float:
    return _sum_field(entries, "amount")


def sum_pto(entries: Iterable[Any]) -> float:
    return _sum_field(entries, "hours")
