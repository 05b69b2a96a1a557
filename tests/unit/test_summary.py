"""Unit tests for period summaries and pay stub assembly.

Uses synthetic entries; rates and rules are passed in explicitly.
"""
from datetime import date

import pytest

from nannypay.sdk.pay import DEFAULT_RATES
from nannypay.sdk.periods import ViewMode, period_range
from nannypay.sdk.schemas import (
    EmployeeInfo,
    EntrySet,
    ExpenseEntry,
    HoursEntry,
    MileageEntry,
    NoteEntry,
    PtoEntry,
    RateConfig,
    WithholdingRule,
)
from nannypay.sdk.summary import (
    MASK,
    build_pay_stub,
    format_currency,
    format_number,
    summarize,
    summarize_period,
)


@pytest.fixture
def week_entries():
    """Two workdays, one trip and one expense in the week of 2026-01-25."""
    return EntrySet(
        hours=[
            HoursEntry(date="2026-01-26", regular_hours=8, overtime_hours=0),
            HoursEntry(date="2026-01-27", regular_hours=8, overtime_hours=1),
        ],
        mileage=[MileageEntry(date="2026-01-27", miles=35, purpose="Zoo")],
        expenses=[ExpenseEntry(date="2026-01-28", amount=35, category="Food")],
    )


@pytest.fixture
def ss_medicare():
    return [
        WithholdingRule(name="Social Security", percentage=6.2),
        WithholdingRule(name="Medicare", percentage=1.45),
    ]


class TestSummarize:
    def test_without_withholdings(self, week_entries):
        result = summarize(week_entries, DEFAULT_RATES, [])
        assert result.hours.regular == 16
        assert result.hours.overtime == 1
        assert result.hours.total == 17
        assert result.hours.total_pay == 361
        assert result.mileage.reimbursement == pytest.approx(23.45)
        assert result.expenses.total == 35
        assert result.withholdings.gross_taxable_income == 361
        assert result.withholdings.total_reimbursements == pytest.approx(58.45)
        assert result.grand_total == pytest.approx(419.45)

    def test_split_trips_and_expenses(self):
        entries = EntrySet(
            hours=[
                HoursEntry(date="2026-01-26", regular_hours=8, overtime_hours=1),
                HoursEntry(date="2026-01-27", regular_hours=8, overtime_hours=0),
            ],
            mileage=[MileageEntry(date="2026-01-26", miles=20), MileageEntry(date="2026-01-27", miles=15)],
            expenses=[ExpenseEntry(date="2026-01-26", amount=25), ExpenseEntry(date="2026-01-27", amount=10)],
        )
        result = summarize(entries, DEFAULT_RATES, [])
        assert result.hours.total_pay == 361
        assert result.mileage.reimbursement == pytest.approx(23.45)
        assert result.expenses.total == 35
        assert result.withholdings.items == []
        assert result.grand_total == pytest.approx(419.45)

    def test_zero_percent_rule_only(self, week_entries):
        result = summarize(week_entries, DEFAULT_RATES, [WithholdingRule(name="WA Unemployment", percentage=0)])
        assert result.withholdings.items == []
        assert result.withholdings.total_withholdings == 0

    def test_with_social_security_and_medicare(self, week_entries, ss_medicare):
        result = summarize(week_entries, DEFAULT_RATES, ss_medicare)
        items = result.withholdings.items
        assert round(items[0].amount, 2) == 22.38
        assert round(items[1].amount, 2) == 5.23
        assert result.withholdings.total_withholdings == pytest.approx(27.6165)
        assert result.grand_total == pytest.approx(391.84, abs=0.01)

    def test_empty_entries_all_zero(self, ss_medicare):
        result = summarize(EntrySet(), DEFAULT_RATES, ss_medicare)
        assert result.hours.total_pay == 0
        assert result.pto.total_pay == 0
        assert result.mileage.reimbursement == 0
        assert result.expenses.total == 0
        assert result.withholdings.total_withholdings == 0
        assert result.grand_total == 0

    def test_pto_is_taxable_at_regular_rate(self, ss_medicare):
        entries = EntrySet(pto=[PtoEntry(date="2026-01-26", hours=8)])
        result = summarize(entries, DEFAULT_RATES, ss_medicare)
        assert result.pto.total_hours == 8
        assert result.pto.total_pay == 168
        assert result.withholdings.gross_taxable_income == 168
        assert result.withholdings.total_withholdings == pytest.approx(168 * 0.0765)

    def test_reimbursements_are_not_withheld(self, ss_medicare):
        entries = EntrySet(
            mileage=[MileageEntry(date="2026-01-26", miles=100)],
            expenses=[ExpenseEntry(date="2026-01-26", amount=50)],
        )
        result = summarize(entries, DEFAULT_RATES, ss_medicare)
        assert result.withholdings.gross_taxable_income == 0
        assert result.withholdings.total_withholdings == 0
        assert result.grand_total == pytest.approx(117.0)

    def test_notes_never_change_money(self, week_entries):
        with_notes = EntrySet(
            **{**dict(week_entries), "notes": [NoteEntry(date="2026-01-26", category="Milestone", note="Walked")]}
        )
        assert summarize(with_notes).grand_total == summarize(week_entries).grand_total

    def test_reconciles(self, week_entries, ss_medicare):
        rates = RateConfig(regular_hourly_rate=22.5, overtime_rate=33.75, mileage_rate=0.7, pto_accrual_hours=40)
        entries = EntrySet(**{**dict(week_entries), "pto": [PtoEntry(date="2026-01-29", hours=3.5)]})
        result = summarize(entries, rates, ss_medicare)
        w = result.withholdings
        assert w.gross_taxable_income == result.hours.total_pay + result.pto.total_pay
        assert w.total_reimbursements == result.mileage.reimbursement + result.expenses.total
        assert result.grand_total == pytest.approx(
            w.gross_taxable_income - w.total_withholdings + w.total_reimbursements
        )
        assert result.hours.total_pay == result.hours.regular_pay + result.hours.overtime_pay

    def test_defaults_when_rates_omitted(self, week_entries):
        assert summarize(week_entries).hours.total_pay == 361


class TestSummarizePeriod:
    def test_filters_every_kind(self, week_entries):
        entries = EntrySet(**{
            **dict(week_entries),
            "hours": week_entries.hours + [HoursEntry(date="2026-02-02", regular_hours=40)],
            "pto": [PtoEntry(date="2026-01-10", hours=8)],
        })
        period = period_range("2026-01-26", ViewMode.WEEKLY)
        result = summarize_period(entries, DEFAULT_RATES, [], period)
        assert result.hours.regular == 16
        assert result.pto.total_hours == 0
        assert result.grand_total == pytest.approx(419.45)

    def test_all_time_includes_unparseable_dates(self):
        entries = EntrySet(hours=[
            HoursEntry(date="2026-01-26", regular_hours=8),
            HoursEntry(date="sometime", regular_hours=2),
        ])
        historical = period_range("2026-01-26", ViewMode.HISTORICAL)
        weekly = period_range("2026-01-26", ViewMode.WEEKLY)
        assert summarize_period(entries, None, None, historical).hours.regular == 10
        assert summarize_period(entries, None, None, weekly).hours.regular == 8


class TestPayStub:
    @pytest.fixture
    def employee(self):
        return EmployeeInfo(name="Jane Doe", last_four="5678", address="1 Main St")

    def test_unmasked(self, week_entries, ss_medicare, employee):
        period = period_range("2026-01-26", ViewMode.WEEKLY)
        stub = build_pay_stub(
            summarize_period(week_entries, DEFAULT_RATES, ss_medicare, period),
            period,
            employer=[{"label": "Employer Name", "value": "The Smiths"}, {"label": "", "value": "x"}],
            employee=employee,
            pay_date=date(2026, 2, 2),
        )
        assert stub.period_label == "01/25/2026 - 01/31/2026"
        assert stub.pay_date == "02/02/2026"
        assert [(line.label, line.value) for line in stub.employer] == [("Employer Name", "The Smiths")]
        assert [(line.label, line.value) for line in stub.employee] == [
            ("Employee Name", "Jane Doe"),
            ("Employee SSN", "XXX-XX-5678"),
            ("Employee Address", "1 Main St"),
        ]
        assert stub.summary.grand_total == pytest.approx(391.84, abs=0.01)

    def test_masked(self, employee):
        period = period_range("2026-01-26", ViewMode.WEEKLY)
        stub = build_pay_stub(summarize(EntrySet()), period, employee=employee, masked=True)
        values = {line.label: line.value for line in stub.employee}
        assert values["Employee Name"] == "Jane Doe"
        assert values["Employee SSN"] == MASK
        assert values["Employee Address"] == MASK

    def test_no_employee(self):
        period = period_range("2026-01-26", ViewMode.HISTORICAL)
        stub = build_pay_stub(summarize(EntrySet()), period, employee=EmployeeInfo())
        assert stub.employee == []
        assert stub.employer == []
        assert stub.period_label == "All Time"


class TestFormatting:
    @pytest.mark.parametrize("amount, expected", [
        (0, "$0.00"),
        (1234.5, "$1,234.50"),
        (391.8335, "$391.83"),
        (-5, "-$5.00"),
        (-0.001, "$0.00"),
        (None, "-"),
    ])
    def test_currency(self, amount, expected):
        assert format_currency(amount) == expected

    def test_number(self):
        assert format_number(8) == "8.00"
        assert format_number(None) == "-"
