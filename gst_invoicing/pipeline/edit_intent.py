"""Edit-intent tracking: which field the user treats as ground truth per line."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class EditField(str, Enum):
    """Tracked fields whose edits select a reconciliation branch."""

    QUANTITY = "quantity"
    PRICE_PER_UNIT = "pricePerUnit"
    AMOUNT = "amount"
    LINE_TOTAL = "lineTotal"


# Python attribute name on LineItem -> tracked field marker
TRACKED_ATTRIBUTES = {
    "quantity": EditField.QUANTITY,
    "price_per_unit": EditField.PRICE_PER_UNIT,
    "amount": EditField.AMOUNT,
    "line_total": EditField.LINE_TOTAL,
}


def tracked_field_for(attribute: str) -> Optional[EditField]:
    """Map a LineItem attribute name to its tracked marker, or None if untracked."""
    return TRACKED_ATTRIBUTES.get(attribute)


class EditIntentTracker:
    """Records, per line index, the last tracked field the user changed.

    The tracker wraps a plain ``{line_index: marker}`` dict so the same
    mapping can live inside a DocumentState snapshot. Entries are never
    cleared automatically; they are only dropped when their line is removed
    or the whole line collection is reset.
    """

    def __init__(self, intents: Optional[Dict[int, str]] = None):
        self._intents: Dict[int, str] = intents if intents is not None else {}

    @property
    def intents(self) -> Dict[int, str]:
        return self._intents

    def mark_edited(self, line_index: int, field_name) -> None:
        """Record that ``field_name`` was the last tracked field edited on a line.

        Args:
            line_index: Index of the line in the document
            field_name: EditField, its wire value ("pricePerUnit") or the
                LineItem attribute name ("price_per_unit")

        Raises:
            ValueError: If field_name is not a tracked field
        """
        marker = tracked_field_for(field_name) if isinstance(field_name, str) else None
        if marker is None:
            marker = EditField(field_name)
        self._intents[line_index] = marker.value

    def intent_for(self, line_index: int) -> Optional[EditField]:
        """Return the recorded intent for a line, or None when nothing was recorded."""
        value = self._intents.get(line_index)
        if value is None:
            return None
        try:
            return EditField(value)
        except ValueError:
            logger.warning(f"Ignoring unknown edit intent {value!r} on line {line_index}")
            return None

    def forget_line(self, line_index: int) -> None:
        """Drop the intent of a removed line and shift later lines down one index."""
        shifted: Dict[int, str] = {}
        for index, value in self._intents.items():
            if index < line_index:
                shifted[index] = value
            elif index > line_index:
                shifted[index - 1] = value
        self._intents.clear()
        self._intents.update(shifted)

    def clear(self) -> None:
        """Forget every intent (line collection reset)."""
        self._intents.clear()
