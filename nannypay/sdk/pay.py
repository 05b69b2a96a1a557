"""Pay calculations: hours, mileage and PTO.

Pure multiplication. Nothing is rounded here; rounding to cents happens
only when an amount is formatted for display, so errors don't compound
across aggregation steps.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from .aggregate import coerce_number, get_field
from .periods import parse_date, today
from .schemas import RateConfig


DEFAULT_RATES = RateConfig(
    regular_hourly_rate=21.0,
    overtime_rate=25.0,
    mileage_rate=0.67,
    pto_accrual_hours=40.0,
)

# Config table "Setting" column -> RateConfig field
RATE_SETTINGS = {
    "Regular Hourly Rate": "regular_hourly_rate",
    "Overtime Rate": "overtime_rate",
    "Mileage Rate": "mileage_rate",
    "PTO Accrual Hours": "pto_accrual_hours",
}


@dataclass(frozen=True)
class HoursPay:
    regular_pay: float
    overtime_pay: float
    total_pay: float


@dataclass(frozen=True)
class PtoBalance:
    year: int
    accrued: float
    used: float
    remaining: float


def hours_pay(
    regular_hours: float,
    overtime_hours: float,
    regular_rate: float = DEFAULT_RATES.regular_hourly_rate,
    overtime_rate: float = DEFAULT_RATES.overtime_rate,
) -> HoursPay:
    """Regular hours at the regular rate plus overtime hours at the overtime rate.

    A rate that is missing, non-numeric or not positive falls back to its
    default instead of raising.
    """
    regular_pay = coerce_number(regular_hours) * _rate(regular_rate, DEFAULT_RATES.regular_hourly_rate)
    overtime_pay = coerce_number(overtime_hours) * _rate(overtime_rate, DEFAULT_RATES.overtime_rate)
    return HoursPay(
        regular_pay=regular_pay,
        overtime_pay=overtime_pay,
        total_pay=regular_pay + overtime_pay,
    )


def mileage_pay(total_miles: float, mileage_rate: float = DEFAULT_RATES.mileage_rate) -> float:
    return coerce_number(total_miles) * _rate(mileage_rate, DEFAULT_RATES.mileage_rate)


def pto_pay(total_pto_hours: float, regular_rate: float = DEFAULT_RATES.regular_hourly_rate) -> float:
    """PTO is paid at the regular hourly rate. There is no overtime-rate PTO."""
    return coerce_number(total_pto_hours) * _rate(regular_rate, DEFAULT_RATES.regular_hourly_rate)


def _rate(raw: Any, default: float) -> float:
    value = coerce_number(raw, default)
    # Zero or negative rates are treated like a blank cell
    return value if value > 0 else default


def load_rates(raw: Optional[Mapping[str, Any]]) -> RateConfig:
    """Build a RateConfig from loosely typed settings.

    Accepts the Config table's labels ("Regular Hourly Rate", ...) or
    RateConfig field names. Missing, non-numeric or non-positive values
    fall back to DEFAULT_RATES; this never raises.
    """
    raw = raw or {}
    values = {}
    for label, field in RATE_SETTINGS.items():
        cell = raw.get(label, raw.get(field))
        values[field] = _rate(cell, getattr(DEFAULT_RATES, field))
    return RateConfig(**values)


def pto_balance(
    pto_entries: Iterable[Any],
    accrual_hours: float = DEFAULT_RATES.pto_accrual_hours,
    year: Optional[int] = None,
) -> PtoBalance:
    """PTO hours taken in a calendar year against the annual accrual.

    Entries with unparseable dates can't be placed in a year and are skipped.
    """
    if year is None:
        year = today().year

    used = 0.0
    for entry in pto_entries:
        d = parse_date(get_field(entry, "date"))
        if d is not None and d.year == year:
            used += coerce_number(get_field(entry, "hours"))

    return PtoBalance(
        year=year,
        accrued=accrual_hours,
        used=used,
        remaining=accrual_hours - used,
    )
