"""Workbook storage for entries, rates, withholdings and employer info.

The workbook is a single JSON file laid out like the household
spreadsheet: one table per sheet, each a list of rows whose first row is
the header.

    Hours:        Date | Day of Month | Regular Hours | Overtime | Total Hours
    Mileage:      Date | Miles | Purpose
    Expenses:     Date | Amount | Category | Description
    Notes:        Date | Category | Note
    PTO:          Date | Hours | Note
    Config:       Setting | Value
    Withholdings: Name | Percentage
    Employer:     Label | Value

Row identity
------------
Rows are addressed the way the spreadsheet addresses them: 1-indexed with
the header as row 1, so the first data row is row 2. Every loaded entry
carries that number as row_id, and update/delete take it back. Deleting a
row shifts the rows below it up by one, as in a sheet.

CRUD contract
-------------
    add(table, record)          -> {"success": True, "row": n}
    update(table, row, record)  -> {"success": True, "row": n}
    delete(table, row)          -> {"success": True}

Unknown tables, header rows (row < 2) and rows past the end raise
WorkbookError. Only the five entry tables accept add/update; rates and
withholdings have their own setters.

Stored derived values (Day of Month, Total Hours) are written for people
reading the file but are never trusted on load.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError

from .config import get_workbook_path
from .pay import DEFAULT_RATES, RATE_SETTINGS, load_rates
from .periods import format_date_iso, parse_date
from .schemas import (
    ENTRY_MODELS,
    EntryKind,
    EntrySet,
    ExpenseEntry,
    HoursEntry,
    MileageEntry,
    NoteEntry,
    PtoEntry,
    RateConfig,
    WithholdingRule,
)
from .withholding import DEFAULT_WITHHOLDINGS, load_withholding_rules

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)


CONFIG_SHEET = "Config"
WITHHOLDINGS_SHEET = "Withholdings"
EMPLOYER_SHEET = "Employer"


class WorkbookError(Exception):
    """Raised when a workbook operation can't be carried out."""
    pass


# =============================================================================
# TABLE LAYOUTS
# =============================================================================


def _cell(row: list, index: int) -> Any:
    return row[index] if index < len(row) else None


def _date_cell(value: str) -> str:
    parsed = parse_date(value)
    return format_date_iso(parsed) if parsed else value


def _hours_row(entry: HoursEntry) -> list:
    parsed = entry.calendar_date
    return [
        _date_cell(entry.date),
        parsed.day if parsed else "",
        entry.regular_hours,
        entry.overtime_hours,
        entry.total_hours,
    ]


def _hours_entry(row: list, row_id: int) -> HoursEntry:
    # Columns 1 (Day of Month) and 4 (Total Hours) are derived; not read back
    return HoursEntry(
        row_id=row_id,
        date=_cell(row, 0),
        regular_hours=_cell(row, 2),
        overtime_hours=_cell(row, 3),
    )


def _mileage_row(entry: MileageEntry) -> list:
    return [_date_cell(entry.date), entry.miles, entry.purpose]


def _mileage_entry(row: list, row_id: int) -> MileageEntry:
    return MileageEntry(row_id=row_id, date=_cell(row, 0), miles=_cell(row, 1), purpose=_cell(row, 2))


def _expense_row(entry: ExpenseEntry) -> list:
    return [_date_cell(entry.date), entry.amount, entry.category, entry.description]


def _expense_entry(row: list, row_id: int) -> ExpenseEntry:
    return ExpenseEntry(
        row_id=row_id,
        date=_cell(row, 0),
        amount=_cell(row, 1),
        category=_cell(row, 2),
        description=_cell(row, 3),
    )


def _note_row(entry: NoteEntry) -> list:
    return [_date_cell(entry.date), entry.category, entry.note]


def _note_entry(row: list, row_id: int) -> NoteEntry:
    return NoteEntry(row_id=row_id, date=_cell(row, 0), category=_cell(row, 1), note=_cell(row, 2))


def _pto_row(entry: PtoEntry) -> list:
    return [_date_cell(entry.date), entry.hours, entry.note]


def _pto_entry(row: list, row_id: int) -> PtoEntry:
    return PtoEntry(row_id=row_id, date=_cell(row, 0), hours=_cell(row, 1), note=_cell(row, 2))


@dataclass(frozen=True)
class TableLayout:
    """How one entry kind maps onto its table."""

    sheet: str
    headers: Tuple[str, ...]
    to_row: Callable[[Any], list]
    from_row: Callable[[list, int], Any]


ENTRY_TABLES: Dict[EntryKind, TableLayout] = {
    EntryKind.HOURS: TableLayout(
        "Hours",
        ("Date", "Day of Month", "Regular Hours", "Overtime", "Total Hours"),
        _hours_row,
        _hours_entry,
    ),
    EntryKind.MILEAGE: TableLayout("Mileage", ("Date", "Miles", "Purpose"), _mileage_row, _mileage_entry),
    EntryKind.EXPENSES: TableLayout(
        "Expenses",
        ("Date", "Amount", "Category", "Description"),
        _expense_row,
        _expense_entry,
    ),
    EntryKind.NOTES: TableLayout("Notes", ("Date", "Category", "Note"), _note_row, _note_entry),
    EntryKind.PTO: TableLayout("PTO", ("Date", "Hours", "Note"), _pto_row, _pto_entry),
}

SETTING_TABLE_HEADERS = {
    CONFIG_SHEET: ("Setting", "Value"),
    WITHHOLDINGS_SHEET: ("Name", "Percentage"),
    EMPLOYER_SHEET: ("Label", "Value"),
}


def resolve_kind(table: Union[str, EntryKind]) -> EntryKind:
    """Map a sheet name ("Hours") or kind ("hours") to an EntryKind.

    Raises:
        WorkbookError: If the name is not one of the five entry tables
    """
    if isinstance(table, EntryKind):
        return table
    for kind, layout in ENTRY_TABLES.items():
        if table == layout.sheet or table == kind.value:
            return kind
    raise WorkbookError(f"Unknown sheet: {table}")


def to_entry(kind: EntryKind, record: Any) -> Any:
    """Validate a record (dict or model) as the entry model for its kind.

    Hours, miles and amounts must not be negative. Rows already in the
    workbook are loaded as they are; this check applies to writes only.
    """
    model = ENTRY_MODELS[kind]
    if isinstance(record, model):
        entry = record
    else:
        try:
            entry = model.model_validate(record)
        except ValidationError as e:
            raise WorkbookError(f"Invalid {kind.value} entry: {e}") from e

    negative = [name for name, value in entry.model_dump().items() if isinstance(value, float) and value < 0]
    if negative:
        raise WorkbookError(f"Invalid {kind.value} entry: {', '.join(negative)} cannot be negative")
    return entry


def _is_blank(row: list) -> bool:
    return all(cell in (None, "") for cell in row)


# =============================================================================
# WORKBOOK
# =============================================================================


class Workbook:
    """A JSON-backed workbook of header-first tables."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else get_workbook_path()

    # --- file access ---------------------------------------------------------

    @property
    def exists(self) -> bool:
        return self.path.exists()

    def _load(self) -> Dict[str, list]:
        if not self.path.exists():
            raise WorkbookError(
                f"Workbook not found at {self.path}\n\n"
                f"Create it with: nanny-pay init"
            )
        with open(self.path, "r") as f:
            try:
                tables = json.load(f)
            except json.JSONDecodeError as e:
                raise WorkbookError(f"Workbook is not valid JSON: {self.path}: {e}") from e
        if not isinstance(tables, dict):
            raise WorkbookError(f"Workbook must be a JSON object of tables: {self.path}")
        return tables

    def _save(self, tables: Dict[str, list]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(tables, f, indent=2)
        logger.debug(f"saved workbook {self.path}")

    def initialize(self) -> List[str]:
        """Create any missing tables with headers and default settings rows.

        Existing tables are left untouched.

        Returns:
            Names of the tables that were created
        """
        tables = self._load() if self.path.exists() else {}
        created = []

        for layout in ENTRY_TABLES.values():
            if layout.sheet not in tables:
                tables[layout.sheet] = [list(layout.headers)]
                created.append(layout.sheet)

        if CONFIG_SHEET not in tables:
            tables[CONFIG_SHEET] = [list(SETTING_TABLE_HEADERS[CONFIG_SHEET])] + [
                [label, getattr(DEFAULT_RATES, field)] for label, field in RATE_SETTINGS.items()
            ]
            created.append(CONFIG_SHEET)

        if WITHHOLDINGS_SHEET not in tables:
            tables[WITHHOLDINGS_SHEET] = [list(SETTING_TABLE_HEADERS[WITHHOLDINGS_SHEET])] + [
                [name, pct] for name, pct in DEFAULT_WITHHOLDINGS
            ]
            created.append(WITHHOLDINGS_SHEET)

        if EMPLOYER_SHEET not in tables:
            tables[EMPLOYER_SHEET] = [list(SETTING_TABLE_HEADERS[EMPLOYER_SHEET])]
            created.append(EMPLOYER_SHEET)

        self._save(tables)
        if created:
            logger.info(f"Initialized workbook {self.path}: created {', '.join(created)}")
        return created

    def read_table(self, name: str) -> List[list]:
        """Raw rows of a table, header included.

        Raises:
            WorkbookError: If the table doesn't exist
        """
        tables = self._load()
        if name not in tables:
            raise WorkbookError(f'Sheet "{name}" not found')
        return tables[name]

    def _data_rows(self, name: str, required: bool = True) -> List[Tuple[int, list]]:
        """(row number, row) pairs after the header, skipping blank rows."""
        try:
            rows = self.read_table(name)
        except WorkbookError:
            if required:
                raise
            logger.debug(f"{name}: table missing, treating as empty")
            return []
        return [
            (index + 2, row)
            for index, row in enumerate(rows[1:])
            if not _is_blank(row)
        ]

    # --- CRUD ----------------------------------------------------------------

    def _sheet_for_write(self, tables: Dict[str, list], table: Union[str, EntryKind]) -> Tuple[EntryKind, list]:
        kind = resolve_kind(table)
        sheet = ENTRY_TABLES[kind].sheet
        if sheet not in tables:
            raise WorkbookError(f'Sheet "{sheet}" not found')
        return kind, tables[sheet]

    @staticmethod
    def _check_row(rows: list, row: int, action: str, sheet: str) -> None:
        if row < 2:
            raise WorkbookError(f"Cannot {action} header row")
        if row > len(rows):
            raise WorkbookError(f"Row {row} does not exist in {sheet}")

    def add(self, table: Union[str, EntryKind], record: Any) -> Dict[str, Any]:
        """Append an entry and return its row number."""
        tables = self._load()
        kind, rows = self._sheet_for_write(tables, table)
        entry = to_entry(kind, record)
        rows.append(ENTRY_TABLES[kind].to_row(entry))
        self._save(tables)
        logger.debug(f"{ENTRY_TABLES[kind].sheet}: added row {len(rows)}")
        return {"success": True, "row": len(rows)}

    def update(self, table: Union[str, EntryKind], row: int, record: Any) -> Dict[str, Any]:
        """Replace the entry at a row number."""
        tables = self._load()
        kind, rows = self._sheet_for_write(tables, table)
        self._check_row(rows, row, "update", ENTRY_TABLES[kind].sheet)
        entry = to_entry(kind, record)
        rows[row - 1] = ENTRY_TABLES[kind].to_row(entry)
        self._save(tables)
        logger.debug(f"{ENTRY_TABLES[kind].sheet}: updated row {row}")
        return {"success": True, "row": row}

    def delete(self, table: Union[str, EntryKind], row: int) -> Dict[str, Any]:
        """Remove the entry at a row number; rows below shift up."""
        tables = self._load()
        kind, rows = self._sheet_for_write(tables, table)
        self._check_row(rows, row, "delete", ENTRY_TABLES[kind].sheet)
        del rows[row - 1]
        self._save(tables)
        logger.debug(f"{ENTRY_TABLES[kind].sheet}: deleted row {row}")
        return {"success": True}

    def bulk_add(self, records: Iterable[Tuple[Union[str, EntryKind], Any]]) -> List[Dict[str, Any]]:
        """Add several (kind, record) pairs, continuing past failures.

        Returns:
            One result per record: the add() result, or
            {"success": False, "error": "..."} for records that failed
        """
        results = []
        for table, record in records:
            try:
                results.append(self.add(table, record))
            except WorkbookError as e:
                logger.warning(f"bulk add: {e}")
                results.append({"success": False, "error": str(e)})
        return results

    # --- readers -------------------------------------------------------------

    def load_kind(self, kind: Union[str, EntryKind]) -> list:
        """Parse one entry table into models. A missing table is empty."""
        kind = resolve_kind(kind)
        layout = ENTRY_TABLES[kind]
        entries = []
        for row_id, row in self._data_rows(layout.sheet, required=False):
            entry = layout.from_row(row, row_id)
            if entry.calendar_date is None:
                logger.warning(
                    f"{layout.sheet} row {row_id}: unparseable date {entry.date!r}, "
                    f"only shown in All Time views"
                )
            entries.append(entry)
        return entries

    def load_entries(self) -> EntrySet:
        """All five entry tables, header skipped and row ids preserved."""
        return EntrySet(**{kind.value: self.load_kind(kind) for kind in EntryKind})

    def load_config_values(self) -> Dict[str, Any]:
        """Config table as a Setting -> Value mapping."""
        return {
            str(row[0]): _cell(row, 1)
            for _, row in self._data_rows(CONFIG_SHEET, required=False)
            if row and row[0]
        }

    def load_rates(self) -> RateConfig:
        return load_rates(self.load_config_values())

    def load_withholdings(self) -> List[WithholdingRule]:
        """Active withholding rules (0% rows are filtered out)."""
        rows = [row for _, row in self._data_rows(WITHHOLDINGS_SHEET, required=False)]
        return load_withholding_rules(rows)

    def load_withholding_rows(self) -> List[Tuple[str, Any]]:
        """Every withholding row as stored, including 0% rules."""
        return [
            (str(_cell(row, 0) or ""), _cell(row, 1))
            for _, row in self._data_rows(WITHHOLDINGS_SHEET, required=False)
        ]

    def load_employer(self) -> List[Dict[str, str]]:
        """Employer label/value lines for the pay stub."""
        lines = []
        for _, row in self._data_rows(EMPLOYER_SHEET, required=False):
            label = _cell(row, 0)
            if label:
                value = _cell(row, 1)
                lines.append({"label": str(label), "value": "" if value is None else str(value)})
        return lines

    # --- settings tables -----------------------------------------------------

    def _upsert_setting(self, sheet: str, key: str, value: Any) -> int:
        tables = self._load()
        if sheet not in tables:
            tables[sheet] = [list(SETTING_TABLE_HEADERS[sheet])]
        rows = tables[sheet]

        for index, row in enumerate(rows[1:], start=2):
            if row and row[0] == key:
                rows[index - 1] = [key, value]
                break
        else:
            rows.append([key, value])
            index = len(rows)

        self._save(tables)
        logger.debug(f"{sheet}: set {key!r} = {value!r} (row {index})")
        return index

    def set_rate(self, name: str, value: float) -> int:
        """Set a Config rate by label ("Mileage Rate") or field name ("mileage_rate").

        Raises:
            WorkbookError: If the name isn't a known rate or value isn't positive
        """
        label = name
        if name not in RATE_SETTINGS:
            labels = {field: lbl for lbl, field in RATE_SETTINGS.items()}
            if name not in labels:
                raise WorkbookError(
                    f"Unknown rate '{name}'. Expected one of: {', '.join(RATE_SETTINGS.values())}"
                )
            label = labels[name]
        if value <= 0:
            raise WorkbookError(f"Rate must be positive, got {value}")
        return self._upsert_setting(CONFIG_SHEET, label, value)

    def set_withholding(self, name: str, percentage: float) -> int:
        """Add or replace a withholding row. 0% keeps the row but disables it."""
        if not 0 <= percentage < 100:
            raise WorkbookError(f"Percentage must be in [0, 100), got {percentage}")
        return self._upsert_setting(WITHHOLDINGS_SHEET, name, percentage)

    def remove_withholding(self, name: str) -> bool:
        """Delete a withholding row by name. Returns False if not present."""
        tables = self._load()
        rows = tables.get(WITHHOLDINGS_SHEET, [])
        for index, row in enumerate(rows[1:], start=1):
            if row and row[0] == name:
                del rows[index]
                self._save(tables)
                return True
        return False

    def set_employer_line(self, label: str, value: str) -> int:
        return self._upsert_setting(EMPLOYER_SHEET, label, value)
