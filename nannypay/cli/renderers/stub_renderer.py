"""Rich renderers for period summaries and pay stubs.

Transforms SDK model output (model_dump() dicts) into formatted Rich
tables. All cents rounding happens here.
"""

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from nannypay.sdk.summary import format_currency


def render_summary(console: Console, summary: dict, period_label: str) -> None:
    """Render a period summary as a Rich table.

    Args:
        console: Rich Console instance
        summary: PeriodSummary.model_dump() output
        period_label: e.g. "01/25/2026 - 01/31/2026"
    """
    hours = summary.get("hours", {})
    pto = summary.get("pto", {})
    mileage = summary.get("mileage", {})
    expenses = summary.get("expenses", {})
    withholdings = summary.get("withholdings", {})

    table = Table(title=f"Summary: {period_label}", box=box.ROUNDED)
    table.add_column("", style="bold", min_width=24)
    table.add_column("Quantity", justify="right", min_width=10)
    table.add_column("Amount", justify="right", min_width=12)

    table.add_row("[bold]HOURS[/bold]", "", "")
    table.add_row("  Regular", _hrs(hours.get("regular")), _fmt(hours.get("regular_pay")))
    table.add_row("  Overtime", _hrs(hours.get("overtime")), _fmt(hours.get("overtime_pay")))
    table.add_row("  [dim]Total[/dim]", f"[dim]{_hrs(hours.get('total'))}[/dim]", f"[dim]{_fmt(hours.get('total_pay'))}[/dim]")
    table.add_row("", "", "")

    table.add_row("PTO", _hrs(pto.get("total_hours")), _fmt(pto.get("total_pay")))
    table.add_row("Mileage", f"{mileage.get('total_miles', 0):,.1f} mi", _fmt(mileage.get("reimbursement")))
    table.add_row("Expenses", "", _fmt(expenses.get("total")))
    table.add_row("", "", "")

    table.add_row("Gross Taxable Income", "", _fmt(withholdings.get("gross_taxable_income")))
    table.add_row("Withholdings", "", _deduction(withholdings.get("total_withholdings")))
    table.add_row("Reimbursements", "", _fmt(withholdings.get("total_reimbursements")))
    table.add_row("", "", "")

    table.add_row(
        "[bold green]GRAND TOTAL[/bold green]",
        "",
        f"[bold green]{_fmt(summary.get('grand_total'))}[/bold green]",
    )

    console.print(table)


def render_pay_stub(console: Console, stub: dict) -> None:
    """Render a pay stub: info panels, then earnings/withholdings/net table.

    Args:
        console: Rich Console instance
        stub: PayStub.model_dump() output
    """
    _render_info(console, stub.get("employer", []), "Employer")
    _render_info(console, stub.get("employee", []), "Employee")

    period = Table(show_header=False, box=None, padding=(0, 2))
    period.add_column("key", style="dim")
    period.add_column("value")
    period.add_row("Pay Period", stub.get("period_label", "?"))
    period.add_row("Pay Date", stub.get("pay_date", "?"))
    console.print(Panel(period, title="Pay Stub", border_style="dim"))

    _render_stub_table(console, stub.get("summary", {}))


def _render_info(console: Console, lines: list, title: str) -> None:
    """Render a label/value block; nothing is printed when empty."""
    if not lines:
        return

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value")
    for line in lines:
        table.add_row(line.get("label", ""), line.get("value", ""))

    console.print(Panel(table, title=title, border_style="dim"))


def _render_stub_table(console: Console, summary: dict) -> None:
    hours = summary.get("hours", {})
    pto = summary.get("pto", {})
    mileage = summary.get("mileage", {})
    expenses = summary.get("expenses", {})
    withholdings = summary.get("withholdings", {})

    table = Table(box=box.ROUNDED)
    table.add_column("", style="bold", min_width=30)
    table.add_column("Amount", justify="right", min_width=12)

    # Gross taxable income
    table.add_row("[bold]GROSS TAXABLE INCOME[/bold]", "")
    table.add_row("  Hours Pay", _fmt(hours.get("total_pay")))
    if pto.get("total_pay", 0) > 0:
        table.add_row("  PTO Pay", _fmt(pto.get("total_pay")))
    table.add_row("  [dim]Subtotal[/dim]", f"[dim]{_fmt(withholdings.get('gross_taxable_income'))}[/dim]")
    table.add_row("", "")

    items = withholdings.get("items", [])
    if items:
        table.add_row("[bold]WITHHOLDINGS[/bold]", "")
        for item in items:
            table.add_row(f"  {item['name']} ({item['percentage']:g}%)", _deduction(item["amount"]))
        table.add_row("  [dim]Total Withholdings[/dim]", f"[dim]{_deduction(withholdings.get('total_withholdings'))}[/dim]")
        table.add_row("", "")

    if withholdings.get("total_reimbursements", 0) > 0:
        table.add_row("[bold]REIMBURSEMENTS[/bold]", "")
        if mileage.get("reimbursement", 0) > 0:
            table.add_row("  Mileage", _fmt(mileage.get("reimbursement")))
        if expenses.get("total", 0) > 0:
            table.add_row("  Expenses", _fmt(expenses.get("total")))
        table.add_row("  [dim]Total Reimbursements[/dim]", f"[dim]{_fmt(withholdings.get('total_reimbursements'))}[/dim]")
        table.add_row("", "")

    table.add_row(
        "[bold green]NET PAY[/bold green]",
        f"[bold green]{_fmt(summary.get('grand_total'))}[/bold green]",
    )

    console.print(table)


def _fmt(amount: float | None) -> str:
    """Format currency amount."""
    return format_currency(amount)


def _deduction(amount: float | None) -> str:
    if amount is None:
        return "-"
    return f"-{format_currency(amount)}"


def _hrs(hours: float | None) -> str:
    if hours is None:
        return "-"
    return f"{hours:,.2f} h"
