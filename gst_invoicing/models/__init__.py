"""Data models for transactions, line items and validation results."""
