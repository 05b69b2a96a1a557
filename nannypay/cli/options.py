"""Shared CLI options: period selection and workbook access."""

import click

from nannypay.sdk import (
    PeriodRange,
    ViewMode,
    Workbook,
    get_setting,
    parse_date,
    period_range,
    shift_anchor,
)
from nannypay.sdk.periods import today


VIEW_CHOICES = [mode.value for mode in ViewMode]


def period_options(func):
    """Add --view, --date and --offset to a command."""
    options = [
        click.option("--view", "view", type=click.Choice(VIEW_CHOICES), default=None,
                     help="Period type (default: settings default_view, else weekly)"),
        click.option("--date", "anchor", default=None,
                     help="Any date inside the period, YYYY-MM-DD or MM/DD/YYYY (default: today)"),
        click.option("--offset", type=int, default=0,
                     help="Move by whole periods, e.g. -1 for the previous one"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_period(view, anchor, offset: int = 0) -> PeriodRange:
    """Turn CLI option values into a PeriodRange.

    Raises:
        click.BadParameter: If the date can't be parsed
    """
    raw_view = view or get_setting("default_view", ViewMode.WEEKLY.value)
    try:
        mode = ViewMode(raw_view)
    except ValueError:
        raise click.ClickException(
            f"Invalid default_view '{raw_view}' in settings.json. "
            f"Expected one of: {', '.join(VIEW_CHOICES)}"
        )

    if anchor:
        anchor_date = parse_date(anchor)
        if anchor_date is None:
            raise click.BadParameter(
                f"Invalid date '{anchor}'. Use YYYY-MM-DD or MM/DD/YYYY.",
                param_hint="--date",
            )
    else:
        anchor_date = today()

    if offset:
        anchor_date = shift_anchor(anchor_date, mode, offset)

    return period_range(anchor_date, mode)


def open_workbook() -> Workbook:
    """Open the configured workbook, failing with a hint if it doesn't exist."""
    workbook = Workbook()
    if not workbook.exists:
        raise click.ClickException(
            f"Workbook not found at {workbook.path}\n"
            f"Create it with: nanny-pay init"
        )
    return workbook
