"""API request and response models."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..export.payload import TransactionPayload


class RecomputeRequest(BaseModel):
    """Request model for the recompute endpoint: a transaction as the form holds it."""

    type: str = Field("sales", description="sales, purchases, proforma, receipt, payment or journal")
    companyGstin: Optional[str] = Field(None, description="Tax is enabled when non-blank")
    taxEnabled: Optional[bool] = Field(None, description="Overrides the flag derived from companyGstin")
    items: List[Dict[str, Any]] = Field(default_factory=list, description="Unified product/service rows")
    products: List[Dict[str, Any]] = Field(default_factory=list)
    services: List[Dict[str, Any]] = Field(default_factory=list)
    editIntents: Dict[int, str] = Field(
        default_factory=dict,
        description="Line index -> last edited field (quantity, pricePerUnit, amount, lineTotal)",
    )


class FieldChangeResponse(BaseModel):
    """One field written by the recompute pass."""

    field: str
    line_index: Optional[int] = None
    new: float


class ValidationIssueResponse(BaseModel):
    message: str
    field: Optional[str] = None
    line_index: Optional[int] = None


class RecomputeResponse(BaseModel):
    """Response model for the recompute endpoint."""

    status: str = Field(..., description="Validation status: OK or REVIEW")
    tax_enabled: bool
    payload: TransactionPayload
    changes: List[FieldChangeResponse] = Field(default_factory=list)
    errors: List[ValidationIssueResponse] = Field(default_factory=list)
    warnings: List[ValidationIssueResponse] = Field(default_factory=list)


class ProfileResponse(BaseModel):
    """Active configuration profile as exposed to form clients."""

    name: str
    default_tax_rate: float
    tax_presets: List[float]
    unit_types: List[str]
    default_unit: str
