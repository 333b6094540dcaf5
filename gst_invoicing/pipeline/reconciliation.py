"""Line reconciliation: recompute a line's dependent amounts from its edit intent.

For every line the user may edit quantity, unit price, amount or line total
in any order. The last tracked field edited (the edit intent) decides which
values are inputs and which are derived:

Product lines
    lineTotal      -> amount and tax are backed out of the total, price = amount / qty
    amount         -> tax and total follow the amount, price = amount / qty
    quantity/price -> amount = qty x price, tax and total follow
    no intent      -> same as quantity/price

Service lines
    lineTotal      -> amount and tax are backed out of the total
    anything else  -> tax and total follow the amount

Every monetary value is rounded to two decimals before it is compared or
stored, and a field is only written back when its value actually changes.
That rule is what lets the surrounding form re-run the pass on every change
without feeding itself new changes once the values have converged.

A quantity of 0 skips the price back-derivation (price is left as-is).
A line total smaller than its own tax portion can yield a negative amount;
it is written back unclamped and left to validation to report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Optional

from ..models.line_item import STANDARD_GST_RATE, LineItem
from .edit_intent import EditField
from .number_normalizer import ZERO, coerce_amount, round2

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


@dataclass
class FieldChange:
    """A derived field written back by the recompute pass.

    Attributes:
        field: Attribute name on LineItem or DocumentTotals
        old: Value stored before the pass
        new: Value written
        line_index: Index of the line, None for document totals
    """

    field: str
    old: Any
    new: Decimal
    line_index: Optional[int] = None


@dataclass
class LineAmounts:
    """Mutually consistent amounts computed for one line.

    price_per_unit is only set when the branch back-derives a price.
    """

    amount: Decimal
    line_tax: Decimal
    line_total: Decimal
    price_per_unit: Optional[Decimal] = None


def effective_tax_rate(line: LineItem, tax_enabled: bool) -> Decimal:
    """Tax rate used for computation; 0 whenever tax is disabled.

    The stored rate is never changed here. A missing rate means the standard
    rate; any other unusable value counts as 0.
    """
    if not tax_enabled:
        return ZERO
    if line.tax_rate_percent is None:
        return STANDARD_GST_RATE
    return coerce_amount(line.tax_rate_percent)


def _split_total(total: Decimal, pct: Decimal):
    divisor = 1 + pct / HUNDRED
    # A rate of -100 zeroes the divisor: the whole total is kept as the base.
    if divisor == 0:
        return total, ZERO
    base = round2(total / divisor)
    return base, round2(total - base)


def _tax_on(base: Decimal, pct: Decimal):
    tax = round2(base * pct / HUNDRED)
    return tax, round2(base + tax)


def compute_line_amounts(
    line: LineItem,
    intent: Optional[EditField],
    tax_enabled: bool,
) -> LineAmounts:
    """Compute the consistent amounts for a line without touching it.

    Args:
        line: Line as currently stored (possibly inconsistent)
        intent: Last tracked field edited on the line, or None
        tax_enabled: Tax-enablement flag of the document

    Returns:
        LineAmounts with the derived values
    """
    pct = effective_tax_rate(line, tax_enabled)
    amount = coerce_amount(line.amount)
    line_total = coerce_amount(line.line_total)

    if line.is_service:
        if intent is EditField.LINE_TOTAL:
            total = round2(line_total)
            base, tax = _split_total(total, pct)
            return LineAmounts(amount=base, line_tax=tax, line_total=total)
        base = round2(amount)
        tax, total = _tax_on(base, pct)
        return LineAmounts(amount=base, line_tax=tax, line_total=total)

    quantity = coerce_amount(line.quantity)
    price = coerce_amount(line.price_per_unit)

    if intent is EditField.LINE_TOTAL:
        total = round2(line_total)
        base, tax = _split_total(total, pct)
        derived_price = round2(base / quantity) if quantity != 0 else None
        return LineAmounts(
            amount=base, line_tax=tax, line_total=total, price_per_unit=derived_price
        )

    if intent is EditField.AMOUNT:
        base = round2(amount)
        tax, total = _tax_on(base, pct)
        derived_price = round2(base / quantity) if quantity != 0 else None
        return LineAmounts(
            amount=base, line_tax=tax, line_total=total, price_per_unit=derived_price
        )

    base = round2(quantity * price)
    tax, total = _tax_on(base, pct)
    return LineAmounts(amount=base, line_tax=tax, line_total=total)


def _write_if_changed(
    line: LineItem,
    name: str,
    value: Decimal,
    line_index: Optional[int],
    changes: List[FieldChange],
) -> None:
    old = getattr(line, name)
    if coerce_amount(old) != value:
        setattr(line, name, value)
        changes.append(FieldChange(field=name, old=old, new=value, line_index=line_index))


def reconcile_line(
    line: LineItem,
    intent: Optional[EditField],
    tax_enabled: bool,
    line_index: Optional[int] = None,
) -> List[FieldChange]:
    """Recompute a line in place, writing back only the fields that changed.

    Args:
        line: Line to reconcile (mutated)
        intent: Last tracked field edited on the line, or None
        tax_enabled: Tax-enablement flag of the document
        line_index: Index of the line, recorded on the returned changes

    Returns:
        List of FieldChange, empty when the line was already consistent
    """
    result = compute_line_amounts(line, intent, tax_enabled)
    changes: List[FieldChange] = []

    _write_if_changed(line, "amount", result.amount, line_index, changes)
    if result.price_per_unit is not None:
        _write_if_changed(line, "price_per_unit", result.price_per_unit, line_index, changes)
    _write_if_changed(line, "line_tax", result.line_tax, line_index, changes)
    _write_if_changed(line, "line_total", result.line_total, line_index, changes)

    if changes:
        logger.debug(
            f"Line {line_index} ({line.item_type.value}, intent={intent.value if intent else None}): "
            f"{', '.join(f'{c.field}={c.new}' for c in changes)}"
        )
    return changes
