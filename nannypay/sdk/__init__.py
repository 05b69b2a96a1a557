"""Nanny Pay SDK - period pay calculations and workbook storage."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_profile_path,
    load_profile,
    save_profile,
    get_profile_value,
    set_profile_value,
    get_default_data_path,
    get_data_path,
    get_workbook_path,
)

from .periods import (
    ViewMode,
    PeriodRange,
    ALL_TIME_LABEL,
    BIWEEKLY_EPOCH,
    parse_date,
    format_date_iso,
    format_date_display,
    day_of_month,
    week_start,
    week_end,
    biweek_start,
    biweek_end,
    month_start,
    month_end,
    is_in_range,
    previous_week,
    next_week,
    previous_biweek,
    next_biweek,
    previous_month,
    next_month,
    shift_anchor,
    period_range,
)

from .aggregate import (
    HoursTotals,
    coerce_number,
    filter_by_range,
    sum_hours,
    sum_miles,
    sum_expenses,
    sum_pto,
)

from .schemas import (
    EntryKind,
    EntrySet,
    HoursEntry,
    MileageEntry,
    ExpenseEntry,
    PtoEntry,
    NoteEntry,
    RateConfig,
    WithholdingRule,
    WithholdingItem,
    PeriodSummary,
    EmployeeInfo,
    PayStub,
    EXPENSE_CATEGORIES,
    NOTE_CATEGORIES,
)

from .pay import (
    DEFAULT_RATES,
    HoursPay,
    PtoBalance,
    hours_pay,
    mileage_pay,
    pto_pay,
    load_rates,
    pto_balance,
)

from .withholding import (
    WithholdingResult,
    apply_withholdings,
    load_withholding_rules,
)

from .summary import (
    summarize,
    summarize_period,
    build_pay_stub,
    format_currency,
    format_number,
)

from .workbook import (
    Workbook,
    WorkbookError,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_profile_path",
    "load_profile",
    "save_profile",
    "get_profile_value",
    "set_profile_value",
    "get_default_data_path",
    "get_data_path",
    "get_workbook_path",
    # Periods
    "ViewMode",
    "PeriodRange",
    "ALL_TIME_LABEL",
    "BIWEEKLY_EPOCH",
    "parse_date",
    "format_date_iso",
    "format_date_display",
    "day_of_month",
    "week_start",
    "week_end",
    "biweek_start",
    "biweek_end",
    "month_start",
    "month_end",
    "is_in_range",
    "previous_week",
    "next_week",
    "previous_biweek",
    "next_biweek",
    "previous_month",
    "next_month",
    "shift_anchor",
    "period_range",
    # Aggregation
    "HoursTotals",
    "coerce_number",
    "filter_by_range",
    "sum_hours",
    "sum_miles",
    "sum_expenses",
    "sum_pto",
    # Schemas
    "EntryKind",
    "EntrySet",
    "HoursEntry",
    "MileageEntry",
    "ExpenseEntry",
    "PtoEntry",
    "NoteEntry",
    "RateConfig",
    "WithholdingRule",
    "WithholdingItem",
    "PeriodSummary",
    "EmployeeInfo",
    "PayStub",
    "EXPENSE_CATEGORIES",
    "NOTE_CATEGORIES",
    # Pay
    "DEFAULT_RATES",
    "HoursPay",
    "PtoBalance",
    "hours_pay",
    "mileage_pay",
    "pto_pay",
    "load_rates",
    "pto_balance",
    # Withholding
    "WithholdingResult",
    "apply_withholdings",
    "load_withholding_rules",
    # Summary
    "summarize",
    "summarize_period",
    "build_pay_stub",
    "format_currency",
    "format_number",
    # Storage
    "Workbook",
    "WorkbookError",
]
