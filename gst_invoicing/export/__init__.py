"""Serialization of reconciled documents: submission payloads and Excel sheets."""
