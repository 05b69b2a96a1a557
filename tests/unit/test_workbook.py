"""Unit tests for the JSON workbook: table setup, CRUD by row number, readers.

Each test gets its own workbook file under tmp_path.
"""
import json
import logging

import pytest

from nannypay.sdk.pay import DEFAULT_RATES
from nannypay.sdk.schemas import EntryKind, HoursEntry
from nannypay.sdk.workbook import (
    CONFIG_SHEET,
    EMPLOYER_SHEET,
    WITHHOLDINGS_SHEET,
    Workbook,
    WorkbookError,
    resolve_kind,
)


@pytest.fixture
def workbook(tmp_path):
    wb = Workbook(tmp_path / "workbook.json")
    wb.initialize()
    return wb


def read_raw(wb):
    return json.loads(wb.path.read_text())


class TestInitialize:
    def test_creates_all_tables(self, tmp_path):
        wb = Workbook(tmp_path / "data" / "workbook.json")
        created = wb.initialize()
        assert created == ["Hours", "Mileage", "Expenses", "Notes", "PTO", "Config", "Withholdings", "Employer"]
        raw = read_raw(wb)
        assert raw["Hours"] == [["Date", "Day of Month", "Regular Hours", "Overtime", "Total Hours"]]
        assert raw[CONFIG_SHEET][1] == ["Regular Hourly Rate", 21.0]
        assert ["WA Unemployment", 0.0] in raw[WITHHOLDINGS_SHEET]

    def test_rerun_keeps_data(self, workbook):
        workbook.add("hours", {"date": "2026-01-26", "regular_hours": 8})
        assert workbook.initialize() == []
        assert len(workbook.load_kind("hours")) == 1

    def test_fills_missing_tables_only(self, tmp_path):
        path = tmp_path / "workbook.json"
        path.write_text(json.dumps({"Hours": [["Date"], ["2026-01-26"]]}))
        created = Workbook(path).initialize()
        assert "Hours" not in created
        assert read_raw(Workbook(path))["Hours"] == [["Date"], ["2026-01-26"]]


class TestLoadErrors:
    def test_missing_file(self, tmp_path):
        wb = Workbook(tmp_path / "nope.json")
        assert not wb.exists
        with pytest.raises(WorkbookError, match="nanny-pay init"):
            wb.load_entries()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "workbook.json"
        path.write_text("{not json")
        with pytest.raises(WorkbookError, match="not valid JSON"):
            Workbook(path).load_entries()

    def test_missing_table_on_write(self, tmp_path):
        path = tmp_path / "workbook.json"
        path.write_text("{}")
        with pytest.raises(WorkbookError, match='Sheet "Hours" not found'):
            Workbook(path).add("hours", {"date": "2026-01-26"})

    def test_missing_table_reads_as_empty(self, tmp_path):
        path = tmp_path / "workbook.json"
        path.write_text("{}")
        wb = Workbook(path)
        assert wb.load_entries().hours == []
        assert wb.load_rates() == DEFAULT_RATES
        assert wb.load_withholdings() == []
        assert wb.load_employer() == []

    def test_read_table_missing(self, workbook):
        with pytest.raises(WorkbookError, match='Sheet "Payroll" not found'):
            workbook.read_table("Payroll")


class TestResolveKind:
    def test_sheet_and_kind_names(self):
        assert resolve_kind("Hours") == EntryKind.HOURS
        assert resolve_kind("pto") == EntryKind.PTO
        assert resolve_kind("PTO") == EntryKind.PTO
        assert resolve_kind(EntryKind.NOTES) == EntryKind.NOTES

    def test_unknown(self):
        with pytest.raises(WorkbookError, match="Unknown sheet: Payroll"):
            resolve_kind("Payroll")


class TestCrud:
    def test_add_returns_row_numbers(self, workbook):
        assert workbook.add("Hours", {"date": "2026-01-26", "regularHours": 8}) == {"success": True, "row": 2}
        assert workbook.add("Hours", {"date": "2026-01-27", "regularHours": 8}) == {"success": True, "row": 3}

    def test_loaded_entries_carry_row_ids(self, workbook):
        workbook.add("mileage", {"date": "2026-01-26", "miles": 12, "purpose": "School"})
        workbook.add("mileage", {"date": "2026-01-27", "miles": 3})
        entries = workbook.load_kind("mileage")
        assert [e.row_id for e in entries] == [2, 3]
        assert entries[0].purpose == "School"

    def test_hours_row_layout_and_derived_columns(self, workbook):
        workbook.add("hours", HoursEntry(date="01/26/2026", regular_hours=8, overtime_hours=1.5))
        assert read_raw(workbook)["Hours"][1] == ["2026-01-26", 26, 8.0, 1.5, 9.5]

    def test_stored_total_not_trusted(self, workbook):
        raw = read_raw(workbook)
        raw["Hours"].append(["2026-01-26", 26, 8, 1, 999])
        workbook.path.write_text(json.dumps(raw))
        entry = workbook.load_kind("hours")[0]
        assert entry.total_hours == 9

    def test_update(self, workbook):
        workbook.add("expenses", {"date": "2026-01-26", "amount": 10, "category": "Food"})
        result = workbook.update("expenses", 2, {"date": "2026-01-26", "amount": "12.50", "category": "Food"})
        assert result == {"success": True, "row": 2}
        assert workbook.load_kind("expenses")[0].amount == 12.5

    def test_delete_shifts_rows_up(self, workbook):
        for day in (26, 27, 28):
            workbook.add("notes", {"date": f"2026-01-{day}", "category": "General", "note": str(day)})
        assert workbook.delete("notes", 3) == {"success": True}
        entries = workbook.load_kind("notes")
        assert [(e.row_id, e.note) for e in entries] == [(2, "26"), (3, "28")]

    @pytest.mark.parametrize("row", [0, 1])
    def test_header_row_protected(self, workbook, row):
        workbook.add("pto", {"date": "2026-01-26", "hours": 8})
        with pytest.raises(WorkbookError, match="Cannot update header row"):
            workbook.update("pto", row, {"date": "2026-01-26", "hours": 4})
        with pytest.raises(WorkbookError, match="Cannot delete header row"):
            workbook.delete("pto", row)

    def test_row_past_end(self, workbook):
        with pytest.raises(WorkbookError, match="Row 5 does not exist in Hours"):
            workbook.delete("hours", 5)

    def test_unknown_table(self, workbook):
        with pytest.raises(WorkbookError, match="Unknown sheet"):
            workbook.add("Config", {"date": "2026-01-26"})

    def test_unparseable_date_kept(self, workbook, caplog):
        workbook.add("hours", {"date": "last tuesday", "regular_hours": 3})
        with caplog.at_level(logging.WARNING):
            entries = workbook.load_kind("hours")
        assert entries[0].date == "last tuesday"
        assert entries[0].calendar_date is None
        assert "unparseable date" in caplog.text

    def test_out_of_range_year_loads_as_unparseable(self, workbook):
        raw = read_raw(workbook)
        raw["Hours"].append(["99999999999999999999-01-01", None, 8, 0, 8])
        workbook.path.write_text(json.dumps(raw))
        entries = workbook.load_kind("hours")
        assert entries[0].regular_hours == 8
        assert entries[0].calendar_date is None

    @pytest.mark.parametrize("table, record, field", [
        ("hours", {"date": "2026-01-26", "regular_hours": -5}, "regular_hours"),
        ("hours", {"date": "2026-01-26", "overtime_hours": "-1"}, "overtime_hours"),
        ("mileage", {"date": "2026-01-26", "miles": -12}, "miles"),
        ("expenses", {"date": "2026-01-26", "amount": "-$20"}, "amount"),
        ("pto", {"date": "2026-01-26", "hours": -8}, "hours"),
    ])
    def test_negative_quantities_rejected(self, workbook, table, record, field):
        with pytest.raises(WorkbookError, match=f"{field} cannot be negative"):
            workbook.add(table, record)
        assert workbook.load_kind(table) == []

    def test_negative_update_rejected(self, workbook):
        workbook.add("hours", {"date": "2026-01-26", "regular_hours": 8})
        with pytest.raises(WorkbookError, match="cannot be negative"):
            workbook.update("hours", 2, HoursEntry(date="2026-01-26", regular_hours=-8))
        assert workbook.load_kind("hours")[0].regular_hours == 8

    def test_blank_rows_skipped(self, workbook):
        raw = read_raw(workbook)
        raw["PTO"] += [["", None, ""], ["2026-01-26", 8, "Holiday"]]
        workbook.path.write_text(json.dumps(raw))
        entries = workbook.load_kind("pto")
        assert [(e.row_id, e.hours) for e in entries] == [(3, 8)]


class TestBulkAdd:
    def test_continues_past_failures(self, workbook):
        results = workbook.bulk_add([
            ("hours", {"date": "2026-01-26", "regular_hours": 8}),
            ("payroll", {"date": "2026-01-26"}),
            ("mileage", {"date": "2026-01-26", "miles": 4}),
        ])
        assert results[0] == {"success": True, "row": 2}
        assert results[1]["success"] is False
        assert "Unknown sheet" in results[1]["error"]
        assert results[2] == {"success": True, "row": 2}

    def test_negative_amount_fails_alone(self, workbook):
        results = workbook.bulk_add([
            ("expenses", {"date": "2026-01-26", "amount": -35, "category": "Food"}),
            ("expenses", {"date": "2026-01-27", "amount": 35, "category": "Food"}),
        ])
        assert results[0]["success"] is False
        assert "amount cannot be negative" in results[0]["error"]
        assert results[1] == {"success": True, "row": 2}


class TestSettingsTables:
    def test_default_rates(self, workbook):
        assert workbook.load_rates() == DEFAULT_RATES

    def test_set_rate_by_field_or_label(self, workbook):
        workbook.set_rate("regular_hourly_rate", 23)
        workbook.set_rate("Mileage Rate", 0.7)
        config = workbook.load_rates()
        assert config.regular_hourly_rate == 23
        assert config.mileage_rate == 0.7

    def test_set_rate_rejects_bad_values(self, workbook):
        with pytest.raises(WorkbookError, match="Unknown rate"):
            workbook.set_rate("bonus_rate", 5)
        with pytest.raises(WorkbookError, match="positive"):
            workbook.set_rate("overtime_rate", 0)

    def test_garbled_config_cell_falls_back(self, workbook):
        raw = read_raw(workbook)
        raw[CONFIG_SHEET][1] = ["Regular Hourly Rate", "twenty"]
        workbook.path.write_text(json.dumps(raw))
        assert workbook.load_rates().regular_hourly_rate == DEFAULT_RATES.regular_hourly_rate

    def test_withholdings_exclude_zero_percent(self, workbook):
        names = [rule.name for rule in workbook.load_withholdings()]
        assert "WA Unemployment" not in names
        assert names[0] == "Social Security"
        assert ("WA Unemployment", 0.0) in workbook.load_withholding_rows()

    def test_set_and_remove_withholding(self, workbook):
        workbook.set_withholding("WA Unemployment", 1.2)
        workbook.set_withholding("Local Tax", 0.5)
        rules = {rule.name: rule.percentage for rule in workbook.load_withholdings()}
        assert rules["WA Unemployment"] == 1.2
        assert rules["Local Tax"] == 0.5

        assert workbook.remove_withholding("Local Tax") is True
        assert workbook.remove_withholding("Local Tax") is False
        assert "Local Tax" not in {rule.name for rule in workbook.load_withholdings()}

    def test_withholding_range(self, workbook):
        with pytest.raises(WorkbookError):
            workbook.set_withholding("All", 100)
        with pytest.raises(WorkbookError):
            workbook.set_withholding("Negative", -1)

    def test_employer_lines(self, workbook):
        workbook.set_employer_line("Employer Name", "The Smiths")
        workbook.set_employer_line("EIN", "12-3456789")
        workbook.set_employer_line("Employer Name", "Smith Household")
        assert workbook.load_employer() == [
            {"label": "Employer Name", "value": "Smith Household"},
            {"label": "EIN", "value": "12-3456789"},
        ]
        assert read_raw(workbook)[EMPLOYER_SHEET][0] == ["Label", "Value"]
