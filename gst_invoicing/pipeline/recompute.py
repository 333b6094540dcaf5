"""Recompute pass: reconcile every line, then aggregate document totals.

The pass is a batch transform over a DocumentState snapshot. ``recompute``
leaves its input untouched and returns the new snapshot together with the
list of fields that were written. Running it again on its own output is a
no-op (no changes).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from ..models.document_state import DocumentState
from .aggregator import apply_totals, calculate_totals
from .edit_intent import EditIntentTracker
from .reconciliation import FieldChange, reconcile_line

logger = logging.getLogger(__name__)


@dataclass
class RecomputeResult:
    """Outcome of one recompute pass.

    Attributes:
        state: Snapshot after the pass
        changes: Fields written during the pass (line fields first, then totals)
    """

    state: DocumentState
    changes: List[FieldChange] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def recompute_in_place(state: DocumentState) -> List[FieldChange]:
    """Run the pass directly on ``state``.

    Lines are processed top to bottom by index. Non item-bearing transaction
    types (receipt, payment, journal) are skipped entirely.

    Returns:
        List of FieldChange written into ``state``
    """
    if not state.transaction_type.has_line_items:
        logger.debug(f"Recompute skipped for {state.transaction_type.value} document")
        return []

    tracker = EditIntentTracker(state.edit_intents)
    changes: List[FieldChange] = []

    for index, line in enumerate(state.lines):
        changes.extend(
            reconcile_line(line, tracker.intent_for(index), state.tax_enabled, line_index=index)
        )

    computed = calculate_totals(state.lines, state.tax_enabled)
    changes.extend(apply_totals(state.totals, computed))

    logger.debug(
        f"Recompute: {len(state.lines)} line(s), {len(changes)} change(s), "
        f"invoice_total={state.totals.invoice_total}"
    )
    return changes


def recompute(state: DocumentState) -> RecomputeResult:
    """Return a new reconciled snapshot of ``state`` and the fields that changed."""
    new_state = state.snapshot()
    changes = recompute_in_place(new_state)
    return RecomputeResult(state=new_state, changes=changes)
