"""Profile CLI commands for Nanny Pay.

Manages household data printed on pay stubs: employee details in
profile.yaml and employer lines in the workbook's Employer table.
"""

import click
import yaml
from pydantic import ValidationError

from nannypay.sdk import (
    EmployeeInfo,
    WorkbookError,
    get_profile_path,
    load_profile,
    set_profile_value,
)

from .options import open_workbook


def load_employee() -> EmployeeInfo:
    """Employee details from profile.yaml (empty if not configured).

    Raises:
        click.ClickException: If the employee section has unknown or bad fields
    """
    raw = load_profile().get("employee") or {}
    try:
        return EmployeeInfo.model_validate(raw)
    except ValidationError as e:
        # Format pydantic errors for user-friendly output
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise click.ClickException(f"Invalid employee section in {get_profile_path()}: {problems}")


@click.group()
def profile():
    """Manage the household profile (profile.yaml) and employer info."""
    pass


@profile.command("show")
def profile_show():
    """Show profile contents and employer lines."""
    path = get_profile_path()
    click.echo(f"Profile: {path}")
    click.echo(f"File exists: {path.exists()}")

    data = load_profile()
    if data:
        click.echo()
        click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False).rstrip())

    employee = load_employee()
    click.echo()
    click.echo(f"Employee on stubs: {employee.name or '(not set)'}")

    try:
        employer = open_workbook().load_employer()
    except (click.ClickException, WorkbookError):
        employer = []
    click.echo("Employer on stubs:")
    if not employer:
        click.echo("  (none)")
    for line in employer:
        click.echo(f"  {line['label']}: {line['value']}")


@profile.command("set")
@click.argument("key", type=click.Choice(["employee.name", "employee.last_four", "employee.address"]))
@click.argument("value")
def profile_set(key, value):
    """Set an employee field.

    \b
    Examples:
        nanny-pay profile set employee.name "Jane Doe"
        nanny-pay profile set employee.last_four 5678
    """
    if key == "employee.last_four" and not (value.isdigit() and len(value) == 4):
        raise click.BadParameter(f"Expected 4 digits, got '{value}'.", param_hint="VALUE")

    path = set_profile_value(key, value)
    click.echo(f"Set {key} in {path}")


@profile.command("employer")
@click.argument("label")
@click.argument("value")
def profile_employer(label, value):
    """Add or change an employer line (e.g. "Employer Name", "EIN")."""
    try:
        open_workbook().set_employer_line(label, value)
    except WorkbookError as e:
        raise click.ClickException(str(e))
    click.echo(f"Set employer {label}: {value}")
