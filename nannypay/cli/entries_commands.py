"""Entries command group: list, add, update, delete and bulk import.

KIND is one of: hours, mileage, expenses, notes, pto.
"""

import json
from pathlib import Path

import click
import yaml

from nannypay.sdk import (
    EntryKind,
    EXPENSE_CATEGORIES,
    NOTE_CATEGORIES,
    WorkbookError,
    filter_by_range,
    format_date_display,
    parse_date,
)
from nannypay.sdk.periods import today
from nannypay.sdk.summary import format_currency

from .options import open_workbook, period_options, resolve_period


KIND_CHOICES = [kind.value for kind in EntryKind]


def _entry_fields(kind: EntryKind, date, regular, overtime, miles, purpose,
                  amount, category, description, note, hours) -> dict:
    """Collect the options that apply to a kind into a record dict.

    Unset options are left out so update can fall back to stored values.
    """
    candidates = {
        EntryKind.HOURS: {"regular_hours": regular, "overtime_hours": overtime},
        EntryKind.MILEAGE: {"miles": miles, "purpose": purpose},
        EntryKind.EXPENSES: {"amount": amount, "category": category, "description": description},
        EntryKind.NOTES: {"category": category, "note": note},
        EntryKind.PTO: {"hours": hours, "note": note},
    }[kind]

    record = {key: value for key, value in candidates.items() if value is not None}
    if date is not None:
        record["date"] = date
    return record


def _check_date(value):
    if value is not None and parse_date(value) is None:
        raise click.BadParameter(f"Invalid date '{value}'. Use YYYY-MM-DD or MM/DD/YYYY.", param_hint="--date")
    return value


def _check_category(kind: EntryKind, category):
    if category is None:
        return
    allowed = EXPENSE_CATEGORIES if kind == EntryKind.EXPENSES else NOTE_CATEGORIES
    if kind in (EntryKind.EXPENSES, EntryKind.NOTES) and category not in allowed:
        raise click.BadParameter(
            f"Unknown category '{category}'. Expected one of: {', '.join(allowed)}",
            param_hint="--category",
        )


def entry_field_options(func):
    """Options for every entry field; each kind uses its own subset."""
    options = [
        click.option("--date", "entry_date", default=None, help="Entry date (YYYY-MM-DD or MM/DD/YYYY)"),
        click.option("--regular", type=click.FloatRange(min=0), default=None, help="[hours] Regular hours"),
        click.option("--overtime", type=click.FloatRange(min=0), default=None, help="[hours] Overtime hours"),
        click.option("--miles", type=click.FloatRange(min=0), default=None, help="[mileage] Miles driven"),
        click.option("--purpose", default=None, help="[mileage] Trip purpose"),
        click.option("--amount", type=click.FloatRange(min=0), default=None, help="[expenses] Amount in dollars"),
        click.option("--category", default=None, help="[expenses, notes] Category"),
        click.option("--description", default=None, help="[expenses] Description"),
        click.option("--note", default=None, help="[notes, pto] Note text"),
        click.option("--hours", type=click.FloatRange(min=0), default=None, help="[pto] PTO hours"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def format_entry_row(kind: EntryKind, entry) -> str:
    """Format one entry as a table row."""
    parsed = entry.calendar_date
    shown_date = format_date_display(parsed) if parsed else (entry.date or "?")
    prefix = f"{entry.row_id:<6} {shown_date:<12}"

    if kind == EntryKind.HOURS:
        return f"{prefix} {entry.regular_hours:>8.2f} {entry.overtime_hours:>8.2f} {entry.total_hours:>8.2f}"
    if kind == EntryKind.MILEAGE:
        return f"{prefix} {entry.miles:>8.1f}  {entry.purpose}"
    if kind == EntryKind.EXPENSES:
        return f"{prefix} {format_currency(entry.amount):>10}  {entry.category:<15} {entry.description}"
    if kind == EntryKind.NOTES:
        return f"{prefix} {entry.category:<10} {entry.note}"
    return f"{prefix} {entry.hours:>8.1f}  {entry.note}"


ENTRY_HEADERS = {
    EntryKind.HOURS: f"{'Row':<6} {'Date':<12} {'Regular':>8} {'OT':>8} {'Total':>8}",
    EntryKind.MILEAGE: f"{'Row':<6} {'Date':<12} {'Miles':>8}  Purpose",
    EntryKind.EXPENSES: f"{'Row':<6} {'Date':<12} {'Amount':>10}  {'Category':<15} Description",
    EntryKind.NOTES: f"{'Row':<6} {'Date':<12} {'Category':<10} Note",
    EntryKind.PTO: f"{'Row':<6} {'Date':<12} {'Hours':>8}  Note",
}


@click.group("entries")
def entries_cli():
    """Log and manage hours, mileage, expenses, notes and PTO.

    Rows are addressed by their workbook row number (shown by 'list').
    """
    pass


@entries_cli.command("list")
@click.argument("kind", type=click.Choice(KIND_CHOICES))
@period_options
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format (default: table)")
def entries_list(kind, view, anchor, offset, output_format):
    """List entries of KIND in a period, newest first.

    \b
    Examples:
        nanny-pay entries list hours
        nanny-pay entries list mileage --view monthly --offset -1
        nanny-pay entries list notes --view historical
    """
    kind = EntryKind(kind)
    period = resolve_period(view, anchor, offset)
    try:
        entries = open_workbook().load_kind(kind)
    except WorkbookError as e:
        raise click.ClickException(str(e))

    entries = filter_by_range(entries, period)
    entries.sort(key=lambda e: (e.calendar_date is not None, e.calendar_date or today()), reverse=True)

    if output_format == "json":
        click.echo(json.dumps([e.model_dump() for e in entries], indent=2))
        return

    click.echo(f"{kind.value.title()}: {period.label}")
    if not entries:
        click.echo("No entries in this period.")
        return

    click.echo(ENTRY_HEADERS[kind])
    click.echo("-" * len(ENTRY_HEADERS[kind]))
    for entry in entries:
        click.echo(format_entry_row(kind, entry))


@entries_cli.command("add")
@click.argument("kind", type=click.Choice(KIND_CHOICES))
@entry_field_options
def entries_add(kind, entry_date, regular, overtime, miles, purpose, amount,
                category, description, note, hours):
    """Add an entry of KIND (date defaults to today).

    \b
    Examples:
        nanny-pay entries add hours --regular 8 --overtime 1
        nanny-pay entries add mileage --date 2026-01-26 --miles 12.5 --purpose "School pickup"
        nanny-pay entries add expenses --amount 24.99 --category Food
        nanny-pay entries add pto --hours 8 --note "Holiday"
    """
    kind = EntryKind(kind)
    _check_date(entry_date)
    _check_category(kind, category)

    record = _entry_fields(kind, entry_date, regular, overtime, miles, purpose,
                           amount, category, description, note, hours)
    record.setdefault("date", today().isoformat())

    try:
        result = open_workbook().add(kind, record)
    except WorkbookError as e:
        raise click.ClickException(str(e))

    click.echo(f"Added {kind.value} entry at row {result['row']}.")


@entries_cli.command("update")
@click.argument("kind", type=click.Choice(KIND_CHOICES))
@click.argument("row", type=int)
@entry_field_options
def entries_update(kind, row, entry_date, regular, overtime, miles, purpose, amount,
                   category, description, note, hours):
    """Update the entry at ROW; fields not given keep their stored value."""
    kind = EntryKind(kind)
    _check_date(entry_date)
    _check_category(kind, category)

    workbook = open_workbook()
    try:
        existing = {e.row_id: e for e in workbook.load_kind(kind)}
        if row < 2:
            raise click.ClickException("Cannot update header row")
        if row not in existing:
            raise click.ClickException(f"No {kind.value} entry at row {row}")
        changes = _entry_fields(kind, entry_date, regular, overtime, miles, purpose,
                                amount, category, description, note, hours)
        # Dump then re-validate inside update() so the changed fields are coerced
        record = {**existing[row].model_dump(), **changes}
        workbook.update(kind, row, record)
    except WorkbookError as e:
        raise click.ClickException(str(e))

    click.echo(f"Updated {kind.value} entry at row {row}.")


@entries_cli.command("delete")
@click.argument("kind", type=click.Choice(KIND_CHOICES))
@click.argument("row", type=int)
@click.option("--force", is_flag=True, help="Skip confirmation")
def entries_delete(kind, row, force):
    """Delete the entry at ROW. Rows below it move up by one."""
    kind = EntryKind(kind)
    if not force:
        click.confirm(f"Delete {kind.value} entry at row {row}?", abort=True)

    try:
        open_workbook().delete(kind, row)
    except WorkbookError as e:
        raise click.ClickException(str(e))

    click.echo(f"Deleted {kind.value} entry at row {row}.")


@entries_cli.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def entries_import(path):
    """Bulk-add entries from a YAML or JSON file.

    The file holds a list of entries, each with a 'type' key plus the
    fields for that kind. A top-level 'date' applies to entries without
    their own:

    \b
        date: 2026-01-26
        entries:
          - {type: hours, regular_hours: 8, overtime_hours: 1}
          - {type: mileage, miles: 14, purpose: Park}
          - {type: notes, date: 2026-01-25, category: Milestone, note: First steps}

    Every entry is attempted; failures are reported and the rest still land.
    """
    text = Path(path).read_text()
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML in {path}: {e}")

    shared_date = None
    if isinstance(data, dict):
        shared_date = data.get("date")
        data = data.get("entries", [])
    if not isinstance(data, list):
        raise click.ClickException("Import file must contain a list of entries.")

    records = []
    for item in data:
        if not isinstance(item, dict):
            raise click.ClickException(f"Each entry must be a mapping, got: {item!r}")
        item = dict(item)
        kind = item.pop("type", None)
        if shared_date is not None:
            item.setdefault("date", shared_date)
        records.append((kind, item))

    workbook = open_workbook()
    results = workbook.bulk_add(records)

    added = sum(1 for r in results if r["success"])
    for (kind, _), result in zip(records, results):
        if not result["success"]:
            click.echo(f"  ! {kind}: {result['error']}", err=True)

    click.echo(f"Imported {added} of {len(records)} entries.")
    if added < len(records):
        raise click.ClickException(f"{len(records) - added} entries failed.")
