"""Rates, withholdings and PTO commands.

Rates live in the workbook's Config table and withholdings in its
Withholdings table, so every summary reads the current values.
"""

import json

import click

from nannypay.sdk import WorkbookError, coerce_number, pto_balance
from nannypay.sdk.pay import RATE_SETTINGS
from nannypay.sdk.periods import today
from nannypay.sdk.summary import format_currency

from .options import open_workbook


RATE_NAMES = list(RATE_SETTINGS.values())


@click.group()
def rates():
    """Show or change pay rates (Config table)."""
    pass


@rates.command("show")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format (default: table)")
def rates_show(output_format):
    """Show effective rates (defaults fill any blank or invalid cell)."""
    try:
        config = open_workbook().load_rates()
    except WorkbookError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        click.echo(json.dumps(config.model_dump(), indent=2))
        return

    click.echo(f"  {'Regular Hourly Rate':<22} {format_currency(config.regular_hourly_rate):>10}/h")
    click.echo(f"  {'Overtime Rate':<22} {format_currency(config.overtime_rate):>10}/h")
    click.echo(f"  {'Mileage Rate':<22} {format_currency(config.mileage_rate):>10}/mi")
    click.echo(f"  {'PTO Accrual Hours':<22} {config.pto_accrual_hours:>10g} h/yr")


@rates.command("set")
@click.argument("name", type=click.Choice(RATE_NAMES))
@click.argument("value", type=float)
def rates_set(name, value):
    """Set rate NAME to VALUE.

    \b
    Examples:
        nanny-pay rates set regular_hourly_rate 22
        nanny-pay rates set mileage_rate 0.70
    """
    try:
        row = open_workbook().set_rate(name, value)
    except WorkbookError as e:
        raise click.ClickException(str(e))
    click.echo(f"Set {name} = {value:g} (Config row {row}).")


@click.group()
def withholdings():
    """Manage percentage withholdings (Withholdings table)."""
    pass


@withholdings.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include 0% (inactive) rows")
def withholdings_list(show_all):
    """List withholdings applied to gross taxable income."""
    workbook = open_workbook()
    try:
        if show_all:
            rows = [(name, coerce_number(pct)) for name, pct in workbook.load_withholding_rows()]
        else:
            rows = [(rule.name, rule.percentage) for rule in workbook.load_withholdings()]
    except WorkbookError as e:
        raise click.ClickException(str(e))

    if not rows:
        click.echo("No withholdings configured.")
        return

    for name, pct in rows:
        marker = "" if pct > 0 else "  (inactive)"
        click.echo(f"  {name:<30} {pct:>6.2f}%{marker}")
    click.echo(f"  {'Total':<30} {sum(p for _, p in rows if p > 0):>6.2f}%")


@withholdings.command("set")
@click.argument("name")
@click.argument("percentage", type=float)
def withholdings_set(name, percentage):
    """Add or change withholding NAME. Use 0 to keep the row but stop applying it."""
    try:
        open_workbook().set_withholding(name, percentage)
    except WorkbookError as e:
        raise click.ClickException(str(e))
    click.echo(f"Set {name} = {percentage:g}%.")


@withholdings.command("remove")
@click.argument("name")
def withholdings_remove(name):
    """Remove withholding NAME."""
    try:
        removed = open_workbook().remove_withholding(name)
    except WorkbookError as e:
        raise click.ClickException(str(e))
    if not removed:
        raise click.ClickException(f"No withholding named '{name}'.")
    click.echo(f"Removed {name}.")


@click.group()
def pto():
    """Paid time off."""
    pass


@pto.command("balance")
@click.option("--year", type=int, default=None, help="Calendar year (default: current)")
def pto_balance_cmd(year):
    """PTO used in a year against the annual accrual."""
    workbook = open_workbook()
    try:
        config = workbook.load_rates()
        entries = workbook.load_kind("pto")
    except WorkbookError as e:
        raise click.ClickException(str(e))

    balance = pto_balance(entries, config.pto_accrual_hours, year or today().year)
    click.echo(f"PTO {balance.year}")
    click.echo(f"  Accrued:   {balance.accrued:>7.2f} h")
    click.echo(f"  Used:      {balance.used:>7.2f} h")
    click.echo(f"  Remaining: {balance.remaining:>7.2f} h")
    if balance.remaining < 0:
        click.echo(click.style("  Warning: more PTO used than accrued.", fg="yellow"))
