"""GST invoicing engine: line-item tax/amount reconciliation for transactions."""

__version__ = "1.0.0"
