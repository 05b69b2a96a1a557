"""Percentage-based withholdings.

Each rule withholds a fixed percent of gross taxable income (hours pay
plus PTO pay). Mileage and expense reimbursements are not income and are
never part of the base.

Item amounts are exact; total_withholdings is the plain sum of the items
in order, so the two always agree to the last bit. Cents rounding is a
display concern.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List

from pydantic import ValidationError

from .aggregate import coerce_number, get_field
from .schemas import WithholdingItem, WithholdingRule

logger = logging.getLogger(__name__)


# Household employer defaults (WA)
DEFAULT_WITHHOLDINGS = [
    ("Social Security", 6.20),
    ("Medicare", 1.45),
    ("WA Paid Leave (PFML)", 0.81),
    ("WA Cares Fund", 0.58),
    ("WA Unemployment", 0.00),
]


@dataclass(frozen=True)
class WithholdingResult:
    items: List[WithholdingItem] = field(default_factory=list)
    total_withholdings: float = 0.0


def _rule_parts(raw: Any) -> tuple:
    if isinstance(raw, WithholdingRule):
        return raw.name, raw.percentage
    if isinstance(raw, (list, tuple)):
        name = raw[0] if len(raw) > 0 else ""
        pct = raw[1] if len(raw) > 1 else None
        return name, pct
    return get_field(raw, "name"), get_field(raw, "percentage")


def load_withholding_rules(rows: Iterable[Any]) -> List[WithholdingRule]:
    """Build rules from (name, percentage) rows, dicts or rules.

    Nameless rules and rules at 0% (or unparseable) are dropped here so
    they never reach a calculation. Rules at 100% or more are dropped
    with a warning.
    """
    rules = []
    for raw in rows:
        name, pct = _rule_parts(raw)
        name = str(name).strip() if name is not None else ""
        percentage = coerce_number(pct)

        if not name or percentage <= 0:
            continue

        try:
            rules.append(WithholdingRule(name=name, percentage=percentage))
        except ValidationError:
            logger.warning(f"Skipping withholding '{name}': {percentage}% is out of range")

    return rules


def apply_withholdings(gross_taxable_income: float, rules: Iterable[WithholdingRule]) -> WithholdingResult:
    """Apply each rule to gross taxable income, preserving rule order.

    Rules at 0% are skipped even if a caller didn't pre-filter them.
    """
    items = [
        WithholdingItem(
            name=rule.name,
            percentage=rule.percentage,
            amount=gross_taxable_income * rule.percentage / 100,
        )
        for rule in rules
        if rule.percentage > 0
    ]
    return WithholdingResult(
        items=items,
        total_withholdings=sum((item.amount for item in items), 0.0),
    )
