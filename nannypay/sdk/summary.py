"""Period summary composition.

summarize() reconciles one period:

    gross taxable  = hours pay + PTO pay
    withholdings   = sum of rule percentages applied to gross taxable
    reimbursements = mileage reimbursement + expenses
    grand total    = gross taxable - withholdings + reimbursements

No I/O and no module state. Rates and rules are explicit arguments so a
change takes effect on the next call.
"""

from typing import Iterable, List, Mapping, Optional

from .aggregate import sum_expenses, sum_hours, sum_miles, sum_pto
from .pay import DEFAULT_RATES, hours_pay, mileage_pay, pto_pay
from .periods import PeriodRange, format_date_display, today
from .schemas import (
    EmployeeInfo,
    EntrySet,
    ExpenseSummary,
    HoursSummary,
    InfoLine,
    MileageSummary,
    PayStub,
    PeriodSummary,
    PtoSummary,
    RateConfig,
    WithholdingRule,
    WithholdingSummary,
)
from .withholding import apply_withholdings


MASK = "****"


def summarize(
    entries: EntrySet,
    rates: Optional[RateConfig] = None,
    rules: Optional[Iterable[WithholdingRule]] = None,
) -> PeriodSummary:
    """Build the reconciled summary for entries that are already filtered."""
    rates = rates or DEFAULT_RATES
    rules = list(rules or [])

    hours_totals = sum_hours(entries.hours)
    total_miles = sum_miles(entries.mileage)
    total_expenses = sum_expenses(entries.expenses)
    total_pto_hours = sum_pto(entries.pto)

    pay = hours_pay(
        hours_totals.total_regular,
        hours_totals.total_overtime,
        rates.regular_hourly_rate,
        rates.overtime_rate,
    )
    pto_total_pay = pto_pay(total_pto_hours, rates.regular_hourly_rate)
    reimbursement = mileage_pay(total_miles, rates.mileage_rate)

    gross_taxable_income = pay.total_pay + pto_total_pay
    withheld = apply_withholdings(gross_taxable_income, rules)
    total_reimbursements = reimbursement + total_expenses

    return PeriodSummary(
        hours=HoursSummary(
            regular=hours_totals.total_regular,
            overtime=hours_totals.total_overtime,
            total=hours_totals.total_hours,
            regular_pay=pay.regular_pay,
            overtime_pay=pay.overtime_pay,
            total_pay=pay.total_pay,
        ),
        pto=PtoSummary(total_hours=total_pto_hours, total_pay=pto_total_pay),
        mileage=MileageSummary(total_miles=total_miles, reimbursement=reimbursement),
        expenses=ExpenseSummary(total=total_expenses),
        withholdings=WithholdingSummary(
            gross_taxable_income=gross_taxable_income,
            items=withheld.items,
            total_withholdings=withheld.total_withholdings,
            total_reimbursements=total_reimbursements,
        ),
        grand_total=gross_taxable_income - withheld.total_withholdings + total_reimbursements,
    )


def summarize_period(
    entries: EntrySet,
    rates: Optional[RateConfig],
    rules: Optional[Iterable[WithholdingRule]],
    period: Optional[PeriodRange],
) -> PeriodSummary:
    """Filter every entry kind to the period, then summarize."""
    return summarize(entries.filter(period), rates, rules)


def employee_lines(employee: Optional[EmployeeInfo], masked: bool = False) -> List[InfoLine]:
    """Employee block for a stub. Masked output hides SSN and address."""
    if employee is None or not employee.name:
        return []

    ssn = f"XXX-XX-{employee.last_four}" if employee.last_four else ""
    return [
        InfoLine(label="Employee Name", value=employee.name),
        InfoLine(label="Employee SSN", value=MASK if masked else ssn),
        InfoLine(label="Employee Address", value=MASK if masked else employee.address),
    ]


def build_pay_stub(
    summary: PeriodSummary,
    period: PeriodRange,
    employer: Optional[Iterable[Mapping]] = None,
    employee: Optional[EmployeeInfo] = None,
    pay_date=None,
    masked: bool = False,
) -> PayStub:
    """Assemble a printable pay stub from a computed summary.

    Args:
        employer: label/value dicts from the Employer table (blank labels dropped)
        pay_date: date printed on the stub (default: today)
        masked: show "****" for sensitive employee fields
    """
    employer_lines = [
        InfoLine(**line) if not isinstance(line, InfoLine) else line
        for line in (employer or [])
    ]
    return PayStub(
        period_label=period.label,
        pay_date=format_date_display(pay_date or today()),
        employer=[line for line in employer_lines if line.label],
        employee=employee_lines(employee, masked=masked),
        summary=summary,
    )


def format_currency(amount: Optional[float]) -> str:
    """Format as US dollars, e.g. 1234.5 -> "$1,234.50", -5 -> "-$5.00"."""
    if amount is None:
        return "-"
    if amount < 0 and round(amount, 2) != 0:
        return f"-${-amount:,.2f}"
    return f"${abs(amount):,.2f}"


def format_number(num: Optional[float]) -> str:
    """Two decimal places, no grouping."""
    if num is None:
        return "-"
    return f"{num:.2f}"
