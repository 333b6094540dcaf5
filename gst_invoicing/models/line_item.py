"""LineItem data model representing one product or service row of a transaction."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

STANDARD_GST_RATE = Decimal("18")

UNIT_TYPES = ("Kg", "Litre", "Piece", "Box", "Meter", "Dozen", "Pack", "Other")
DEFAULT_UNIT = "Piece"
OTHER_UNIT = "Other"


class ItemType(str, Enum):
    """Variant tag of a line item."""

    PRODUCT = "product"
    SERVICE = "service"


# Fields a user may edit on a line, keyed by their Python attribute name.
EDITABLE_FIELDS = (
    "product_ref",
    "service_ref",
    "quantity",
    "unit_type",
    "other_unit",
    "price_per_unit",
    "description",
    "amount",
    "tax_rate_percent",
    "line_total",
)


@dataclass
class LineItem:
    """Represents one row of a transaction's item list.

    A line is either a Product line (quantity x price_per_unit) or a Service
    line (flat amount). Both carry a tax rate and the derived line_tax and
    line_total. Numeric fields hold Decimals once reconciled; values written
    by the form layer (strings, None) are tolerated and coerced on read.

    Attributes:
        item_type: ItemType.PRODUCT or ItemType.SERVICE
        product_ref: Catalog identifier of the product (product lines)
        service_ref: Catalog identifier of the service (service lines)
        quantity: Quantity (product lines, None for services)
        unit_type: One of UNIT_TYPES or free text (product lines)
        other_unit: Free-text unit label used when unit_type is "Other"
        price_per_unit: Unit price (product lines, None for services)
        description: Free text
        amount: Pre-tax base of the line
        tax_rate_percent: Tax rate 0-100 (None means the standard rate)
        line_tax: Derived tax for the line
        line_total: Derived amount + line_tax
    """

    item_type: ItemType = ItemType.PRODUCT
    product_ref: str = ""
    service_ref: str = ""
    quantity: Optional[Decimal] = None
    unit_type: Optional[str] = None
    other_unit: str = ""
    price_per_unit: Optional[Decimal] = None
    description: str = ""
    amount: Decimal = Decimal("0")
    tax_rate_percent: Optional[Decimal] = STANDARD_GST_RATE
    line_tax: Decimal = Decimal("0")
    line_total: Decimal = Decimal("0")

    def __post_init__(self):
        """Normalize the variant tag and check non-negativity of numeric inputs."""
        self.item_type = ItemType(self.item_type)

        for name in ("quantity", "price_per_unit", "amount"):
            value = getattr(self, name)
            if isinstance(value, (int, float, Decimal)) and value < 0:
                raise ValueError(f"LineItem {name} must be >= 0, got {value}")

        rate = self.tax_rate_percent
        if isinstance(rate, (int, float, Decimal)) and not 0 <= rate <= 100:
            raise ValueError(
                f"LineItem tax_rate_percent must be between 0 and 100, got {rate}"
            )

    @property
    def is_product(self) -> bool:
        return self.item_type is ItemType.PRODUCT

    @property
    def is_service(self) -> bool:
        return self.item_type is ItemType.SERVICE

    @property
    def catalog_ref(self) -> str:
        """Identifier into the external catalog for this line's variant."""
        return self.product_ref if self.is_product else self.service_ref

    @property
    def display_unit(self) -> str:
        """Unit label to show: the custom label for "Other", else the unit type."""
        if self.unit_type == OTHER_UNIT and self.other_unit.strip():
            return self.other_unit.strip()
        if self.unit_type:
            return self.unit_type
        return DEFAULT_UNIT

    def copy(self) -> LineItem:
        """Deep copy of this line (used for duplication)."""
        return copy.deepcopy(self)


def new_product_line(
    tax_rate_percent: Any = STANDARD_GST_RATE,
    unit_type: str = DEFAULT_UNIT,
) -> LineItem:
    """Create a Product line with construction defaults (quantity 1, price 0)."""
    return LineItem(
        item_type=ItemType.PRODUCT,
        quantity=Decimal("1"),
        unit_type=unit_type,
        price_per_unit=Decimal("0"),
        amount=Decimal("0"),
        tax_rate_percent=Decimal(str(tax_rate_percent)),
    )


def new_service_line(tax_rate_percent: Any = STANDARD_GST_RATE) -> LineItem:
    """Create a Service line with construction defaults (amount 0)."""
    return LineItem(
        item_type=ItemType.SERVICE,
        amount=Decimal("0"),
        tax_rate_percent=Decimal(str(tax_rate_percent)),
    )
