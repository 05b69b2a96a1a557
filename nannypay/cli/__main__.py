"""Nanny Pay CLI - household employee hours, pay summaries and pay stubs."""

import json

import click
from rich.console import Console

from nannypay import __version__
from nannypay.sdk import (
    Workbook,
    WorkbookError,
    build_pay_stub,
    parse_date,
    summarize_period,
)

from .entries_commands import entries_cli as entries_group
from .options import open_workbook, period_options, resolve_period
from .profile_commands import load_employee, profile as profile_group
from .rates_commands import pto as pto_group, rates as rates_group, withholdings as withholdings_group
from .renderers.stub_renderer import render_pay_stub, render_summary
from .settings_commands import settings as settings_group


@click.group()
@click.version_option(version=__version__, prog_name="nanny-pay")
def cli():
    """Nanny Pay - track a household employee's hours and pay.

    Log hours, mileage, expenses, notes and PTO, then produce period
    summaries and printable pay stubs.

    Configuration is loaded from (in order):

    \b
    1. NANNY_PAY_CONFIG_PATH environment variable
    2. ~/.config/nanny-pay/ (XDG default)

    Run 'nanny-pay init' once to create the workbook.
    """
    pass


cli.add_command(entries_group, name="entries")
cli.add_command(rates_group)
cli.add_command(withholdings_group)
cli.add_command(pto_group)
cli.add_command(settings_group)
cli.add_command(profile_group)


@cli.command("init")
def init():
    """Create the workbook with its tables and default rates/withholdings.

    Safe to re-run: existing tables are kept.
    """
    workbook = Workbook()
    try:
        created = workbook.initialize()
    except WorkbookError as e:
        raise click.ClickException(str(e))

    click.echo(f"Workbook: {workbook.path}")
    if created:
        click.echo(f"Created tables: {', '.join(created)}")
    else:
        click.echo("All tables already exist.")


def _load_period_summary(view, anchor, offset):
    period = resolve_period(view, anchor, offset)
    workbook = open_workbook()
    try:
        entries = workbook.load_entries()
        config = workbook.load_rates()
        rules = workbook.load_withholdings()
    except WorkbookError as e:
        raise click.ClickException(str(e))
    return workbook, period, summarize_period(entries, config, rules, period)


@cli.command("summary")
@period_options
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format (default: table)")
def summary(view, anchor, offset, output_format):
    """Hours, PTO, mileage, expenses, withholdings and total for a period.

    \b
    Examples:
        nanny-pay summary
        nanny-pay summary --view monthly --offset -1
        nanny-pay summary --view biweekly --date 2026-01-26 --format json
    """
    _, period, result = _load_period_summary(view, anchor, offset)

    if output_format == "json":
        output = {"period": period.label, "mode": period.mode.value, **result.model_dump()}
        click.echo(json.dumps(output, indent=2))
        return

    render_summary(Console(), result.model_dump(), period.label)


@cli.command("stub")
@period_options
@click.option("--pay-date", default=None, help="Date printed on the stub (default: today)")
@click.option("--mask", is_flag=True, help="Hide employee SSN and address")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format (default: table)")
def stub(view, anchor, offset, pay_date, mask, output_format):
    """Printable pay stub for a period.

    \b
    Examples:
        nanny-pay stub --view biweekly
        nanny-pay stub --view weekly --offset -1 --pay-date 2026-02-02
    """
    paid_on = None
    if pay_date:
        paid_on = parse_date(pay_date)
        if paid_on is None:
            raise click.BadParameter(f"Invalid date '{pay_date}'.", param_hint="--pay-date")

    workbook, period, result = _load_period_summary(view, anchor, offset)
    try:
        employer = workbook.load_employer()
    except WorkbookError as e:
        raise click.ClickException(str(e))

    pay_stub = build_pay_stub(
        result,
        period,
        employer=employer,
        employee=load_employee(),
        pay_date=paid_on,
        masked=mask,
    )

    if output_format == "json":
        click.echo(json.dumps(pay_stub.model_dump(), indent=2))
        return

    render_pay_stub(Console(), pay_stub.model_dump())


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
