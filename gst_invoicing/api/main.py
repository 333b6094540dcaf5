"""FastAPI application exposing the recompute pass to form clients."""

import logging

from fastapi import FastAPI, HTTPException

from ..config import get_app_name, get_app_version
from ..config.profile_manager import get_profile
from ..export.payload import build_payload
from ..pipeline.edit_intent import EditIntentTracker
from ..pipeline.record_loader import load_document
from ..pipeline.session import DocumentSession, is_tax_registered
from ..pipeline.validation import validate_document
from .models import (
    FieldChangeResponse,
    ProfileResponse,
    RecomputeRequest,
    RecomputeResponse,
    ValidationIssueResponse,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=get_app_name(),
    description="Line-item tax/amount reconciliation for GST invoices",
    version=get_app_version(),
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": get_app_name(),
        "version": get_app_version(),
        "docs": "/docs",
    }


@app.get("/api/profile", response_model=ProfileResponse)
async def profile_endpoint():
    """Defaults a form needs to build new lines (tax presets, unit types)."""
    profile = get_profile()
    return ProfileResponse(
        name=profile.name,
        default_tax_rate=profile.default_tax_rate,
        tax_presets=profile.tax_presets,
        unit_types=profile.unit_types,
        default_unit=profile.default_unit,
    )


@app.post("/api/documents/recompute", response_model=RecomputeResponse)
async def recompute_endpoint(request: RecomputeRequest):
    """Reconcile a transaction's lines and totals.

    Returns:
        RecomputeResponse with the submission payload, the fields the pass
        wrote and the validation findings
    """
    tax_enabled = request.taxEnabled
    if tax_enabled is None:
        tax_enabled = is_tax_registered(request.companyGstin)

    try:
        state = load_document(request.model_dump(), tax_enabled=tax_enabled)
        tracker = EditIntentTracker(state.edit_intents)
        for index, field_name in request.editIntents.items():
            tracker.mark_edited(index, field_name)
        session = DocumentSession(state)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    validation_result = validate_document(session.state)
    logger.debug(
        f"Recomputed {len(session.state.lines)} line(s): status={validation_result.status}"
    )

    return RecomputeResponse(
        status=validation_result.status,
        tax_enabled=session.state.tax_enabled,
        payload=build_payload(session.state),
        changes=[
            FieldChangeResponse(field=c.field, line_index=c.line_index, new=float(c.new))
            for c in session.last_result.changes
        ],
        errors=[
            ValidationIssueResponse(message=i.message, field=i.field, line_index=i.line_index)
            for i in validation_result.errors
        ],
        warnings=[
            ValidationIssueResponse(message=i.message, field=i.field, line_index=i.line_index)
            for i in validation_result.warnings
        ],
    )
