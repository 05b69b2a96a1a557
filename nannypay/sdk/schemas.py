"""Pydantic schemas for Nanny Pay entries, rates and computed summaries.

Entries are immutable value records. Numeric fields go through
coerce_number() before validation, so a blank or garbled cell becomes 0
instead of failing the whole load. Dates keep the raw string as logged
(YYYY-MM-DD or MM/DD/YYYY); calendar_date parses it on demand.

Both snake_case and camelCase keys are accepted on input.
"""

import datetime as dt
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .aggregate import coerce_number, filter_by_range
from .periods import PeriodRange, format_date_iso, parse_date


EXPENSE_CATEGORIES = [
    "Supplies",
    "Food",
    "Activities",
    "Transportation",
    "Medical",
    "Other",
]

NOTE_CATEGORIES = [
    "General",
    "Milestone",
    "Health",
    "Behavior",
    "Activity",
    "Other",
]


class EntryKind(str, Enum):
    """The five kinds of logged entries."""

    HOURS = "hours"
    MILEAGE = "mileage"
    EXPENSES = "expenses"
    NOTES = "notes"
    PTO = "pto"


# =============================================================================
# Entries
# =============================================================================


class _Entry(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    row_id: Optional[int] = Field(
        default=None,
        alias="id",
        description="Storage row number (header is row 1, so data starts at 2)",
    )
    date: str = Field(default="", description="Calendar date as logged")

    @field_validator("date", mode="before")
    @classmethod
    def _date_to_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, dt.date):
            return format_date_iso(value)
        return str(value).strip()

    @property
    def calendar_date(self) -> Optional[dt.date]:
        return parse_date(self.date)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class HoursEntry(_Entry):
    regular_hours: float = 0.0
    overtime_hours: float = 0.0

    @field_validator("regular_hours", "overtime_hours", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> float:
        return coerce_number(value)

    @property
    def total_hours(self) -> float:
        """Always recomputed; never read from storage."""
        return self.regular_hours + self.overtime_hours


class MileageEntry(_Entry):
    miles: float = 0.0
    purpose: str = ""

    @field_validator("miles", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> float:
        return coerce_number(value)

    @field_validator("purpose", mode="before")
    @classmethod
    def _texts(cls, value: Any) -> str:
        return _text(value)


class ExpenseEntry(_Entry):
    amount: float = 0.0
    category: str = ""
    description: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> float:
        return coerce_number(value)

    @field_validator("category", "description", mode="before")
    @classmethod
    def _texts(cls, value: Any) -> str:
        return _text(value)


class PtoEntry(_Entry):
    hours: float = 0.0
    note: str = ""

    @field_validator("hours", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> float:
        return coerce_number(value)

    @field_validator("note", mode="before")
    @classmethod
    def _texts(cls, value: Any) -> str:
        return _text(value)


class NoteEntry(_Entry):
    """Free-form note. Carries no money and never enters pay calculations."""

    category: str = ""
    note: str = ""

    @field_validator("category", "note", mode="before")
    @classmethod
    def _texts(cls, value: Any) -> str:
        return _text(value)


ENTRY_MODELS = {
    EntryKind.HOURS: HoursEntry,
    EntryKind.MILEAGE: MileageEntry,
    EntryKind.EXPENSES: ExpenseEntry,
    EntryKind.NOTES: NoteEntry,
    EntryKind.PTO: PtoEntry,
}


class EntrySet(BaseModel):
    """All entries for a calculation, grouped by kind."""

    model_config = ConfigDict(frozen=True)

    hours: List[HoursEntry] = Field(default_factory=list)
    mileage: List[MileageEntry] = Field(default_factory=list)
    expenses: List[ExpenseEntry] = Field(default_factory=list)
    notes: List[NoteEntry] = Field(default_factory=list)
    pto: List[PtoEntry] = Field(default_factory=list)

    def for_kind(self, kind: EntryKind) -> list:
        return getattr(self, EntryKind(kind).value)

    def filter(self, period: Optional[PeriodRange]) -> "EntrySet":
        """Return a new set holding only entries inside the period."""
        return EntrySet(**{
            kind.value: filter_by_range(self.for_kind(kind), period)
            for kind in EntryKind
        })


# =============================================================================
# Rates and withholdings
# =============================================================================


class RateConfig(BaseModel):
    """Pay rates. Read fresh from the workbook for each calculation."""

    model_config = ConfigDict(frozen=True)

    regular_hourly_rate: float = Field(default=21.0, gt=0)
    overtime_rate: float = Field(default=25.0, gt=0)
    mileage_rate: float = Field(default=0.67, gt=0, description="Dollars per mile")
    pto_accrual_hours: float = Field(default=40.0, gt=0, description="PTO hours accrued per year")


class WithholdingRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    percentage: float = Field(..., ge=0, lt=100, description="Percent of gross taxable income")


class WithholdingItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    percentage: float
    amount: float


# =============================================================================
# Computed summary
# =============================================================================


class HoursSummary(BaseModel):
    regular: float = 0.0
    overtime: float = 0.0
    total: float = 0.0
    regular_pay: float = 0.0
    overtime_pay: float = 0.0
    total_pay: float = 0.0


class PtoSummary(BaseModel):
    total_hours: float = 0.0
    total_pay: float = 0.0


class MileageSummary(BaseModel):
    total_miles: float = 0.0
    reimbursement: float = 0.0


class ExpenseSummary(BaseModel):
    total: float = 0.0


class WithholdingSummary(BaseModel):
    gross_taxable_income: float = 0.0
    items: List[WithholdingItem] = Field(default_factory=list)
    total_withholdings: float = 0.0
    total_reimbursements: float = 0.0


class PeriodSummary(BaseModel):
    """Reconciled pay for one period. Amounts are unrounded."""

    hours: HoursSummary = Field(default_factory=HoursSummary)
    pto: PtoSummary = Field(default_factory=PtoSummary)
    mileage: MileageSummary = Field(default_factory=MileageSummary)
    expenses: ExpenseSummary = Field(default_factory=ExpenseSummary)
    withholdings: WithholdingSummary = Field(default_factory=WithholdingSummary)
    grand_total: float = 0.0


# =============================================================================
# Pay stub
# =============================================================================


class InfoLine(BaseModel):
    """One label/value line in the employer or employee block of a stub."""

    label: str
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def _texts(cls, value: Any) -> str:
        return _text(value)


class EmployeeInfo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = ""
    last_four: str = Field(default="", description="Last four digits of the SSN")
    address: str = ""

    @field_validator("last_four", mode="before")
    @classmethod
    def _last_four_text(cls, value: Any) -> str:
        # YAML reads 0123 as a string but 1234 as an int
        return _text(value)


class PayStub(BaseModel):
    period_label: str
    pay_date: str
    employer: List[InfoLine] = Field(default_factory=list)
    employee: List[InfoLine] = Field(default_factory=list)
    summary: PeriodSummary
