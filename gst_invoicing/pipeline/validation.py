"""Form-layer validation of a reconciled document.

The recompute pass never raises on odd numbers; anything a user has to fix
(missing product, zero quantity, a line total that backs out to a negative
amount) is collected here as a ValidationIssue instead.
"""

from typing import List

from ..config.profile_manager import get_profile
from ..models.document_state import DocumentState
from ..models.line_item import OTHER_UNIT, LineItem
from ..models.validation_result import ValidationIssue, ValidationResult
from .edit_intent import EditField, EditIntentTracker
from .number_normalizer import ZERO, coerce_amount, round2


def validate_line(
    line: LineItem,
    line_index: int,
    intent=None,
    tolerance: float = 0.01,
):
    """Validate one line.

    Args:
        line: Reconciled line
        line_index: Index of the line (for messages)
        intent: Edit intent of the line, if any
        tolerance: Allowed difference between amount and quantity x price

    Returns:
        Tuple of (errors, warnings) as lists of ValidationIssue
    """
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    def error(field_name, message):
        errors.append(ValidationIssue(message=message, field=field_name, line_index=line_index))

    if line.is_product:
        if not line.product_ref:
            error("product_ref", "Select a product")

        quantity = coerce_amount(line.quantity)
        if quantity <= 0:
            error("quantity", "Quantity must be > 0")

        if line.price_per_unit is None or coerce_amount(line.price_per_unit) < 0:
            error("price_per_unit", "Price/Unit must be >= 0")

        if line.unit_type == OTHER_UNIT and not line.other_unit.strip():
            error("other_unit", "Please specify the unit type")

        # Amount may legitimately drift from qty x price while the user drives it
        if intent not in (EditField.AMOUNT, EditField.LINE_TOTAL):
            expected = round2(quantity * coerce_amount(line.price_per_unit))
            if abs(expected - coerce_amount(line.amount)) > coerce_amount(tolerance):
                warnings.append(ValidationIssue(
                    message=f"Amount {line.amount} differs from quantity x price ({expected})",
                    field="amount",
                    line_index=line_index,
                ))

    if coerce_amount(line.amount) < 0:
        error("amount", "Amount must be >= 0")

    if line.tax_rate_percent is not None:
        rate = coerce_amount(line.tax_rate_percent)
        if not 0 <= rate <= 100:
            error("tax_rate_percent", "Tax rate must be between 0 and 100")

    if coerce_amount(line.line_tax) < 0:
        error("line_tax", "Line tax must be >= 0")
    if coerce_amount(line.line_total) < 0:
        error("line_total", "Line total must be >= 0")

    return errors, warnings


def validate_document(state: DocumentState) -> ValidationResult:
    """Validate a document snapshot and assign status (OK/REVIEW).

    Status assignment logic:
    - any error -> REVIEW
    - otherwise -> OK (warnings do not block)

    Never raises for bad data; everything is reported in the result.
    """
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    if state.transaction_type.has_line_items and not state.lines:
        errors.append(ValidationIssue(message="At least one item is required"))

    tolerance = get_profile().tolerances.get("line_amount", 0.01)
    tracker = EditIntentTracker(state.edit_intents)
    for index, line in enumerate(state.lines):
        line_errors, line_warnings = validate_line(
            line, index, intent=tracker.intent_for(index), tolerance=tolerance
        )
        errors.extend(line_errors)
        warnings.extend(line_warnings)

    if coerce_amount(state.totals.invoice_total) < ZERO:
        errors.append(ValidationIssue(message="Invoice total must be >= 0", field="invoice_total"))

    return ValidationResult(
        status="REVIEW" if errors else "OK",
        errors=errors,
        warnings=warnings,
    )
