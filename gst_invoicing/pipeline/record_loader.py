"""Load a stored transaction record into editable line items."""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..config.profile_manager import get_profile
from ..models.document_state import DocumentState, TransactionType
from ..models.line_item import (
    DEFAULT_UNIT,
    STANDARD_GST_RATE,
    ItemType,
    LineItem,
    new_product_line,
)
from .number_normalizer import coerce_amount

logger = logging.getLogger(__name__)


def _ref(value: Any) -> str:
    """Catalog reference from a plain id or an embedded object with ``_id``."""
    if isinstance(value, dict):
        value = value.get("_id")
    return str(value) if value else ""


def _rate(row: Dict[str, Any]) -> Decimal:
    rate = row.get("gstPercentage")
    if rate is None:
        return STANDARD_GST_RATE
    return coerce_amount(rate)


def _item_type(row: Dict[str, Any]) -> ItemType:
    if row.get("itemType"):
        return ItemType(row["itemType"])
    if row.get("product") or row.get("productId"):
        return ItemType.PRODUCT
    if row.get("service") or row.get("serviceName"):
        return ItemType.SERVICE
    return ItemType.PRODUCT


def _service_ref(row: Dict[str, Any]) -> str:
    return _ref(row.get("service")) or _ref(row.get("serviceName")) or _ref(row.get("serviceId"))


def line_from_row(row: Dict[str, Any], item_type: Optional[ItemType] = None) -> LineItem:
    """Build a LineItem from one stored product/service row.

    Args:
        row: Stored row with wire field names (product, quantity, pricePerUnit, ...)
        item_type: Variant to force; inferred from the row when None

    Returns:
        LineItem with missing values defaulted
    """
    item_type = item_type or _item_type(row)
    amount = coerce_amount(row.get("amount"))

    if item_type is ItemType.SERVICE:
        line = LineItem(
            item_type=ItemType.SERVICE,
            service_ref=_service_ref(row),
            description=row.get("description") or "",
        )
    else:
        quantity = coerce_amount(row.get("quantity"), default=Decimal("1"))
        price = coerce_amount(row.get("pricePerUnit"))
        if row.get("amount") is None:
            amount = quantity * price
        line = LineItem(
            item_type=ItemType.PRODUCT,
            product_ref=_ref(row.get("product")) or _ref(row.get("productId")),
            unit_type=row.get("unitType") or DEFAULT_UNIT,
            other_unit=(row.get("otherUnit") or "").strip(),
            description=row.get("description") or "",
        )
        line.quantity = quantity
        line.price_per_unit = price

    # Assigned after construction: stored rows may hold negative values for validation to report.
    line.amount = amount
    line.tax_rate_percent = _rate(row)
    line.line_tax = coerce_amount(row.get("lineTax"))
    line.line_total = coerce_amount(row.get("lineTotal")) or amount
    return line


def load_lines(record: Dict[str, Any]) -> List[LineItem]:
    """Extract the line items of a stored transaction.

    Accepts a unified ``items`` list, or separate ``products`` and ``services``
    arrays (the legacy singular ``service`` array is read too). A record
    without any rows loads as a single product line with the active
    profile's defaults.
    """
    lines: List[LineItem] = []

    items = record.get("items")
    if isinstance(items, list) and items:
        lines = [line_from_row(row) for row in items]
    else:
        for row in record.get("products") or []:
            lines.append(line_from_row(row, ItemType.PRODUCT))
        for key in ("services", "service"):
            rows = record.get(key)
            if isinstance(rows, list):
                lines.extend(line_from_row(row, ItemType.SERVICE) for row in rows)

    if not lines:
        logger.debug("Record has no item rows, loading a default product line")
        profile = get_profile()
        lines = [new_product_line(
            tax_rate_percent=profile.default_tax_rate,
            unit_type=profile.default_unit,
        )]
    return lines


def load_document(record: Dict[str, Any], tax_enabled: bool = True) -> DocumentState:
    """Build a DocumentState from a stored transaction record.

    Loaded lines start without edit intents. Non item-bearing records
    (receipt, payment, journal) load with no lines.
    """
    transaction_type = TransactionType(record.get("type") or TransactionType.SALES.value)
    lines = load_lines(record) if transaction_type.has_line_items else []

    state = DocumentState(
        transaction_type=transaction_type,
        lines=lines,
        tax_enabled=tax_enabled,
    )
    state.totals.sub_total = coerce_amount(record.get("subTotal", record.get("totalAmount")))
    state.totals.tax_amount = coerce_amount(record.get("taxAmount"))
    state.totals.invoice_total = coerce_amount(record.get("invoiceTotal"))
    return state
