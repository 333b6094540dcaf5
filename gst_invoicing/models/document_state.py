"""DocumentState data model: the snapshot the recompute pass works on."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List

from .line_item import LineItem


class TransactionType(str, Enum):
    """Kinds of transaction a document can represent."""

    SALES = "sales"
    PURCHASES = "purchases"
    RECEIPT = "receipt"
    PAYMENT = "payment"
    JOURNAL = "journal"
    PROFORMA = "proforma"

    @property
    def has_line_items(self) -> bool:
        """True for types whose form carries product/service rows."""
        return self in ITEM_BEARING_TYPES


ITEM_BEARING_TYPES = frozenset(
    {TransactionType.SALES, TransactionType.PURCHASES, TransactionType.PROFORMA}
)


@dataclass
class DocumentTotals:
    """Document-level totals derived from the line collection.

    Attributes:
        sub_total: Sum of all lines' amount
        tax_amount: Sum of all lines' line_tax (0 when tax is disabled)
        invoice_total: sub_total + tax_amount
    """

    sub_total: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    invoice_total: Decimal = Decimal("0")


@dataclass
class DocumentState:
    """Explicit document state passed to the recompute pass.

    Attributes:
        transaction_type: Kind of transaction; only item-bearing types are recomputed
        lines: Line items, addressed by list index
        edit_intents: Line index -> last tracked field edited ("quantity",
            "pricePerUnit", "amount" or "lineTotal")
        tax_enabled: Whether the selected company is tax-registered
        totals: Derived document totals
    """

    transaction_type: TransactionType = TransactionType.SALES
    lines: List[LineItem] = field(default_factory=list)
    edit_intents: Dict[int, str] = field(default_factory=dict)
    tax_enabled: bool = True
    totals: DocumentTotals = field(default_factory=DocumentTotals)

    def __post_init__(self):
        self.transaction_type = TransactionType(self.transaction_type)

    def snapshot(self) -> DocumentState:
        """Deep copy of the state; the copy shares nothing with the original."""
        return copy.deepcopy(self)
