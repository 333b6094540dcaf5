"""Reconciliation pipeline for transaction line items."""

from .recompute import RecomputeResult, recompute
from .session import CatalogEntry, DocumentSession

__all__ = ["recompute", "RecomputeResult", "DocumentSession", "CatalogEntry"]
