"""Submission payload: the create/update request body built from a reconciled document."""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.document_state import DocumentState
from ..models.line_item import LineItem
from ..pipeline.number_normalizer import coerce_amount, round2
from ..pipeline.reconciliation import effective_tax_rate


class ProductLinePayload(BaseModel):
    """Wire shape of a product row."""

    product: str = Field(..., description="Product catalog identifier")
    quantity: float
    unitType: Optional[str] = None
    otherUnit: str = ""
    pricePerUnit: float
    amount: float = Field(..., description="Pre-tax base of the line")
    description: str = ""
    gstPercentage: float = 0.0
    lineTax: float = 0.0
    lineTotal: float


class ServiceLinePayload(BaseModel):
    """Wire shape of a service row."""

    service: str = Field(..., description="Service catalog identifier")
    amount: float
    description: str = ""
    gstPercentage: float = 0.0
    lineTax: float = 0.0
    lineTotal: float


class TransactionPayload(BaseModel):
    """Request body for creating or updating a transaction."""

    type: str
    products: List[ProductLinePayload] = Field(default_factory=list)
    services: List[ServiceLinePayload] = Field(default_factory=list)
    totalAmount: float = 0.0
    subTotal: float = 0.0
    taxAmount: float = 0.0
    invoiceTotal: float = 0.0


def _tax_fields(line: LineItem, tax_enabled: bool):
    amount = round2(coerce_amount(line.amount))
    if not tax_enabled:
        return 0.0, 0.0, float(amount)
    return (
        float(effective_tax_rate(line, tax_enabled)),
        float(round2(coerce_amount(line.line_tax))),
        float(round2(coerce_amount(line.line_total))),
    )


def build_payload(state: DocumentState) -> TransactionPayload:
    """Serialize a reconciled document into the submission request body.

    With tax disabled every line is sent with rate 0, line tax 0 and
    line total equal to its amount; tax amount is 0 and invoice total
    equals the sub total.
    """
    products: List[ProductLinePayload] = []
    services: List[ServiceLinePayload] = []

    for line in state.lines:
        gst_percentage, line_tax, line_total = _tax_fields(line, state.tax_enabled)
        amount = float(round2(coerce_amount(line.amount)))
        if line.is_product:
            products.append(ProductLinePayload(
                product=line.product_ref,
                quantity=float(coerce_amount(line.quantity)),
                unitType=line.unit_type,
                otherUnit=line.other_unit,
                pricePerUnit=float(round2(coerce_amount(line.price_per_unit))),
                amount=amount,
                description=line.description,
                gstPercentage=gst_percentage,
                lineTax=line_tax,
                lineTotal=line_total,
            ))
        else:
            services.append(ServiceLinePayload(
                service=line.service_ref,
                amount=amount,
                description=line.description,
                gstPercentage=gst_percentage,
                lineTax=line_tax,
                lineTotal=line_total,
            ))

    sub_total = float(round2(coerce_amount(state.totals.sub_total)))
    if state.tax_enabled:
        tax_amount = float(round2(coerce_amount(state.totals.tax_amount)))
        invoice_total = float(round2(coerce_amount(state.totals.invoice_total)))
    else:
        tax_amount = 0.0
        invoice_total = sub_total

    return TransactionPayload(
        type=state.transaction_type.value,
        products=products,
        services=services,
        totalAmount=sub_total,
        subTotal=sub_total,
        taxAmount=tax_amount,
        invoiceTotal=invoice_total,
    )
