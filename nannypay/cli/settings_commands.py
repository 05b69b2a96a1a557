"""Settings CLI commands for Nanny Pay.

Manages settings.json: where the workbook lives and the default view.
"""

import shutil
from pathlib import Path

import click

from nannypay.sdk import (
    ViewMode,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_settings_path,
    get_default_data_path,
    get_workbook_path,
)
from nannypay.sdk.config import WORKBOOK_FILENAME


def _workbook_status(path: Path) -> str:
    if path.exists():
        return f"{path}"
    return f"{path} (not created - run 'nanny-pay init')"


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - data_dir: directory holding workbook.json
    - workbook: explicit path to workbook.json (wins over data_dir)
    - default_view: weekly, biweekly, monthly or historical
    """
    pass


@settings.command("show")
def settings_show():
    """Show the workbook in use and the current settings."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Workbook:     {_workbook_status(get_workbook_path())}")
    click.echo(f"Default view: {current.get('default_view', ViewMode.WEEKLY.value)}")
    click.echo()
    click.echo(f"Settings file: {settings_path}" + ("" if settings_path.exists() else " (not created)"))

    if current:
        for key, value in current.items():
            click.echo(f"  {key}: {value}")
    else:
        click.echo("  (using defaults)")


@settings.command("data-dir")
@click.argument("path", required=False, type=click.Path(file_okay=False))
@click.option("--clear", is_flag=True, help="Revert to the default data directory")
@click.option("--move", is_flag=True, help="Move the current workbook.json into the new directory")
def settings_data_dir(path, clear, move):
    """Show, set or clear the directory that holds workbook.json.

    Switching directories leaves the old workbook where it is unless
    --move is given; an existing workbook at the destination is never
    overwritten.

    \b
    Examples:
        nanny-pay settings data-dir
        nanny-pay settings data-dir ~/Documents/nanny --move
        nanny-pay settings data-dir --clear
    """
    if not path and not clear:
        custom = get_setting("data_dir")
        click.echo(f"Data directory: {custom or get_default_data_path()}" + ("" if custom else " (default)"))
        click.echo(f"Workbook:       {_workbook_status(get_workbook_path())}")
        return

    if path and clear:
        raise click.UsageError("Give a PATH or --clear, not both.")

    if move and get_setting("workbook"):
        raise click.ClickException("settings 'workbook' pins the workbook path; --move does not apply.")

    old_workbook = get_workbook_path()
    new_dir = get_default_data_path() if clear else Path(path).expanduser().resolve()
    new_workbook = new_dir / WORKBOOK_FILENAME

    if move and old_workbook.exists() and old_workbook != new_workbook and new_workbook.exists():
        raise click.ClickException(
            f"A workbook already exists at {new_workbook}\n"
            f"Remove it first, or switch without --move to use it."
        )

    try:
        new_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise click.ClickException(f"Cannot create directory: {new_dir}\n{e}")

    current = load_settings()
    if clear:
        current.pop("data_dir", None)
    else:
        current["data_dir"] = str(new_dir)
    save_settings(current)
    click.echo(f"Data directory: {new_dir}" + (" (default)" if clear else ""))

    if current.get("workbook"):
        click.echo(f"Note: settings 'workbook' = {current['workbook']} still takes precedence.")
        return

    if move and old_workbook.exists() and old_workbook != new_workbook:
        shutil.move(str(old_workbook), str(new_workbook))
        click.echo(f"Moved: {old_workbook}")
        click.echo(f"   to: {new_workbook}")
    elif new_workbook.exists():
        click.echo(f"Using existing workbook: {new_workbook}")
    elif old_workbook.exists():
        click.echo(f"No workbook here yet. The previous one is still at {old_workbook}")
        click.echo("Re-run with --move to bring it along, or 'nanny-pay init' to start fresh.")
    else:
        click.echo("No workbook yet. Create it with: nanny-pay init")


@settings.command("default-view")
@click.argument("view", type=click.Choice([mode.value for mode in ViewMode]))
def settings_default_view(view):
    """Set the period type used when --view is not given."""
    set_setting("default_view", view)
    click.echo(f"Set default_view: {view}")
