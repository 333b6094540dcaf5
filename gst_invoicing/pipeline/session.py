"""Editing session: applies form events to a document and recomputes on named triggers.

Every event the form layer can raise maps to exactly one trigger:

- line contents changed (field edits, catalog selection)
- line count changed (add, remove, duplicate, reset, transaction type switch)
- tax flag changed

and the session runs the recompute pass once after each event. The pass
only writes fields whose value changes, so a converged document produces no
further changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Optional

from ..config.profile_loader import ProfileConfig
from ..config.profile_manager import get_profile
from ..models.document_state import DocumentState, TransactionType
from ..models.line_item import (
    EDITABLE_FIELDS,
    LineItem,
    new_product_line,
    new_service_line,
)
from .edit_intent import EditField, EditIntentTracker, tracked_field_for
from .number_normalizer import coerce_amount
from .recompute import RecomputeResult, recompute_in_place

logger = logging.getLogger(__name__)

# Documents whose catalog selection seeds prices and amounts.
SEEDING_TYPES = frozenset({TransactionType.SALES, TransactionType.PROFORMA})


def is_tax_registered(gstin: Optional[str]) -> bool:
    """Tax-enablement flag for a company: True when it has a non-blank GSTIN."""
    return bool(gstin and str(gstin).strip())


class RecomputeTrigger(str, Enum):
    """Why a recompute pass ran."""

    LINE_CONTENTS = "line_contents"
    LINE_COUNT = "line_count"
    TAX_FLAG = "tax_flag"


@dataclass
class CatalogEntry:
    """What the external product/service catalog returns for a selection.

    Attributes:
        ref: Catalog identifier
        selling_price: Product selling price, if any
        amount: Service amount, if any
        unit: Product unit label, if any
        tax_rate_hint: Tax rate suggested by the HSN/SAC code, if any
    """

    ref: str
    selling_price: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    unit: Optional[str] = None
    tax_rate_hint: Optional[Decimal] = None


class DocumentSession:
    """Owns a DocumentState and keeps it reconciled across form events."""

    def __init__(
        self,
        state: Optional[DocumentState] = None,
        profile: Optional[ProfileConfig] = None,
    ):
        self._profile = profile or get_profile()
        self._state = state if state is not None else DocumentState()
        self._tracker = EditIntentTracker(self._state.edit_intents)

        if self._state.transaction_type.has_line_items and not self._state.lines:
            self._state.lines.append(self._new_product_line())
        self.last_result = self._recompute(RecomputeTrigger.LINE_COUNT)

    @property
    def state(self) -> DocumentState:
        return self._state

    @property
    def tracker(self) -> EditIntentTracker:
        return self._tracker

    def _new_product_line(self) -> LineItem:
        return new_product_line(
            tax_rate_percent=self._profile.default_tax_rate,
            unit_type=self._profile.default_unit,
        )

    def _new_service_line(self) -> LineItem:
        return new_service_line(tax_rate_percent=self._profile.default_tax_rate)

    def _line(self, index: int) -> LineItem:
        if not 0 <= index < len(self._state.lines):
            raise IndexError(f"No line at index {index} (document has {len(self._state.lines)})")
        return self._state.lines[index]

    def _require_line_items(self) -> None:
        if not self._state.transaction_type.has_line_items:
            raise ValueError(
                f"{self._state.transaction_type.value} documents do not carry line items"
            )

    def _recompute(self, trigger: RecomputeTrigger) -> RecomputeResult:
        changes = recompute_in_place(self._state)
        logger.debug(f"Recompute after {trigger.value}: {len(changes)} change(s)")
        self.last_result = RecomputeResult(state=self._state, changes=changes)
        return self.last_result

    # Line contents

    def edit_field(self, index: int, field_name: str, value: Any) -> RecomputeResult:
        """Set a field on a line as the user typed it, then recompute.

        Edits of quantity, price_per_unit, amount or line_total record the
        edit intent before the value is stored.

        Raises:
            IndexError: If there is no line at ``index``
            ValueError: If ``field_name`` is not an editable LineItem field
        """
        line = self._line(index)
        if field_name not in EDITABLE_FIELDS:
            raise ValueError(f"Field '{field_name}' is not editable")

        if tracked_field_for(field_name) is not None:
            self._tracker.mark_edited(index, field_name)
        setattr(line, field_name, value)
        return self._recompute(RecomputeTrigger.LINE_CONTENTS)

    def select_catalog_item(self, index: int, entry: CatalogEntry) -> RecomputeResult:
        """Apply a catalog selection to a line and recompute.

        The catalog only seeds the initial values; afterwards the
        reconciliation pass owns them.
        """
        line = self._line(index)
        seeds = self._state.transaction_type in SEEDING_TYPES

        if line.is_product:
            line.product_ref = entry.ref
            if entry.unit:
                line.unit_type = entry.unit
            price = coerce_amount(entry.selling_price)
            if seeds and price > 0:
                line.price_per_unit = price
                self._tracker.mark_edited(index, EditField.PRICE_PER_UNIT)
            else:
                line.price_per_unit = Decimal("0")
        else:
            line.service_ref = entry.ref
            amount = coerce_amount(entry.amount)
            if seeds and amount > 0:
                line.amount = amount
                self._tracker.mark_edited(index, EditField.AMOUNT)

        if entry.tax_rate_hint is not None:
            line.tax_rate_percent = coerce_amount(entry.tax_rate_hint)

        logger.debug(f"Catalog item {entry.ref!r} selected on line {index}")
        return self._recompute(RecomputeTrigger.LINE_CONTENTS)

    # Line count

    def add_product_line(self) -> RecomputeResult:
        self._require_line_items()
        self._state.lines.append(self._new_product_line())
        return self._recompute(RecomputeTrigger.LINE_COUNT)

    def add_service_line(self) -> RecomputeResult:
        self._require_line_items()
        self._state.lines.append(self._new_service_line())
        return self._recompute(RecomputeTrigger.LINE_COUNT)

    def remove_line(self, index: int) -> RecomputeResult:
        """Remove a line; later lines keep their own edit intents."""
        self._line(index)
        del self._state.lines[index]
        self._tracker.forget_line(index)
        return self._recompute(RecomputeTrigger.LINE_COUNT)

    def duplicate_line(self, index: int) -> RecomputeResult:
        """Append a deep copy of a line. The copy starts without an edit intent."""
        self._require_line_items()
        copy = self._line(index).copy()
        self._state.lines.append(copy)
        self._state.edit_intents.pop(len(self._state.lines) - 1, None)
        return self._recompute(RecomputeTrigger.LINE_COUNT)

    def reset_lines(self, lines: Optional[Iterable[LineItem]] = None) -> RecomputeResult:
        """Replace the whole line collection and forget every edit intent.

        Without ``lines`` an item-bearing document gets one default product line.
        """
        self._tracker.clear()
        new_lines: List[LineItem] = list(lines) if lines is not None else []
        if not self._state.transaction_type.has_line_items:
            new_lines = []
        elif not new_lines:
            new_lines = [self._new_product_line()]
        self._state.lines[:] = new_lines
        return self._recompute(RecomputeTrigger.LINE_COUNT)

    def set_transaction_type(self, transaction_type) -> RecomputeResult:
        """Switch the document type; the line collection is reset."""
        new_type = TransactionType(transaction_type)
        if new_type is self._state.transaction_type:
            return RecomputeResult(state=self._state)
        logger.debug(
            f"Transaction type {self._state.transaction_type.value} -> {new_type.value}"
        )
        self._state.transaction_type = new_type
        return self.reset_lines()

    # Tax flag

    def set_tax_enabled(self, tax_enabled: bool) -> RecomputeResult:
        """Update the tax-enablement flag (derived from the company's tax registration)."""
        tax_enabled = bool(tax_enabled)
        if tax_enabled == self._state.tax_enabled:
            return RecomputeResult(state=self._state)
        self._state.tax_enabled = tax_enabled
        return self._recompute(RecomputeTrigger.TAX_FLAG)
