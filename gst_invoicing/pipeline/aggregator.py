"""Roll reconciled lines up into document-level totals."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List

from ..models.document_state import DocumentTotals
from ..models.line_item import LineItem
from .number_normalizer import ZERO, coerce_amount, round2
from .reconciliation import FieldChange

logger = logging.getLogger(__name__)


def calculate_totals(lines: Iterable[LineItem], tax_enabled: bool = True) -> DocumentTotals:
    """Sum reconciled lines into sub_total, tax_amount and invoice_total.

    Args:
        lines: Lines after reconciliation
        tax_enabled: When False the tax amount is always 0

    Returns:
        New DocumentTotals
    """
    sub_total = ZERO
    tax_amount = ZERO
    for line in lines:
        sub_total += coerce_amount(line.amount)
        if tax_enabled:
            tax_amount += coerce_amount(line.line_tax)

    sub_total = round2(sub_total)
    tax_amount = round2(tax_amount)
    return DocumentTotals(
        sub_total=sub_total,
        tax_amount=tax_amount,
        invoice_total=round2(sub_total + tax_amount),
    )


def apply_totals(totals: DocumentTotals, computed: DocumentTotals) -> List[FieldChange]:
    """Write computed totals into ``totals``, only where the value differs."""
    changes: List[FieldChange] = []
    for name in ("sub_total", "tax_amount", "invoice_total"):
        old = getattr(totals, name)
        new: Decimal = getattr(computed, name)
        if coerce_amount(old) != new:
            setattr(totals, name, new)
            changes.append(FieldChange(field=name, old=old, new=new))

    if changes:
        logger.debug(
            f"Totals updated: sub_total={totals.sub_total}, "
            f"tax_amount={totals.tax_amount}, invoice_total={totals.invoice_total}"
        )
    return changes
