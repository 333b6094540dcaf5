"""Unit tests for loading stored transaction records."""

from decimal import Decimal

import pytest

from gst_invoicing.models.document_state import TransactionType
from gst_invoicing.models.line_item import ItemType
from gst_invoicing.pipeline.record_loader import line_from_row, load_document, load_lines


class TestLineFromRow:
    """Test conversion of single stored rows."""

    def test_product_row(self):
        line = line_from_row({
            "product": {"_id": "p1", "name": "Widget"},
            "quantity": 2,
            "unitType": "Box",
            "pricePerUnit": 100,
            "amount": 200,
            "gstPercentage": 5,
            "lineTax": 10,
            "lineTotal": 210,
        })

        assert line.item_type is ItemType.PRODUCT
        assert line.product_ref == "p1"
        assert line.quantity == Decimal("2")
        assert line.unit_type == "Box"
        assert line.tax_rate_percent == Decimal("5")
        assert line.line_total == Decimal("210")

    def test_product_row_defaults(self):
        line = line_from_row({"productId": "p2", "pricePerUnit": "50"})

        assert line.product_ref == "p2"
        assert line.quantity == Decimal("1")
        assert line.unit_type == "Piece"
        assert line.amount == Decimal("50")
        assert line.line_total == Decimal("50")
        assert line.tax_rate_percent == Decimal("18")

    def test_service_row(self):
        line = line_from_row({"serviceName": "s1", "amount": "1,000", "gstPercentage": 0})

        assert line.item_type is ItemType.SERVICE
        assert line.service_ref == "s1"
        assert line.amount == Decimal("1000")
        assert line.tax_rate_percent == Decimal("0")
        assert line.quantity is None

    def test_forced_item_type(self):
        line = line_from_row({"service": "s1", "amount": 10}, ItemType.SERVICE)
        assert line.is_service

    def test_explicit_item_type(self):
        assert line_from_row({"itemType": "service", "amount": 10}).is_service

    def test_negative_stored_values_loaded_for_validation(self):
        line = line_from_row({
            "product": "p1",
            "quantity": 1,
            "pricePerUnit": -8.47,
            "amount": -8.47,
            "lineTax": -1.53,
            "lineTotal": -10,
        })

        assert line.amount == Decimal("-8.47")
        assert line.price_per_unit == Decimal("-8.47")
        assert line.line_total == Decimal("-10")

    def test_out_of_range_stored_rate_loaded(self):
        line = line_from_row({"service": "s1", "amount": 10, "gstPercentage": 150})
        assert line.tax_rate_percent == Decimal("150")

    def test_zero_line_total_falls_back_to_amount(self):
        line = line_from_row({"service": "s1", "amount": 50, "lineTotal": 0})
        assert line.line_total == Decimal("50")


class TestLoadLines:
    """Test line extraction from a record."""

    def test_unified_items(self):
        lines = load_lines({"items": [
            {"product": "p1", "quantity": 1, "pricePerUnit": 10},
            {"service": "s1", "amount": 20},
        ]})

        assert [line.item_type for line in lines] == [ItemType.PRODUCT, ItemType.SERVICE]

    def test_split_arrays_products_first(self):
        lines = load_lines({
            "services": [{"service": "s1", "amount": 20}],
            "products": [{"product": "p1", "quantity": 1, "pricePerUnit": 10}],
        })

        assert [line.catalog_ref for line in lines] == ["p1", "s1"]

    def test_legacy_service_key(self):
        lines = load_lines({"service": [{"serviceName": "s1", "amount": 20}]})

        assert len(lines) == 1
        assert lines[0].service_ref == "s1"

    def test_empty_record_gets_default_line(self):
        lines = load_lines({})

        assert len(lines) == 1
        assert lines[0].is_product
        assert lines[0].quantity == Decimal("1")
        assert lines[0].unit_type == "Piece"

    def test_default_line_uses_active_profile(self, tmp_path, monkeypatch):
        (tmp_path / "kg.yaml").write_text(
            "name: kg\ndefault_tax_rate: 5\ndefault_unit: Kg\n", encoding="utf-8"
        )
        monkeypatch.setenv("GST_INVOICING_PROFILES_DIR", str(tmp_path))
        monkeypatch.setenv("GST_INVOICING_PROFILE", "kg")

        line = load_lines({})[0]

        assert line.unit_type == "Kg"
        assert line.tax_rate_percent == Decimal("5")


class TestLoadDocument:
    """Test full record loading."""

    def test_sales_record(self):
        state = load_document({
            "type": "sales",
            "products": [{"product": "p1", "quantity": 2, "pricePerUnit": 100}],
            "totalAmount": 200,
            "taxAmount": 36,
            "invoiceTotal": 236,
        })

        assert state.transaction_type is TransactionType.SALES
        assert state.tax_enabled
        assert state.edit_intents == {}
        assert state.totals.sub_total == Decimal("200")
        assert state.totals.invoice_total == Decimal("236")

    def test_sub_total_preferred_over_total_amount(self):
        state = load_document({"subTotal": 150, "totalAmount": 999})
        assert state.totals.sub_total == Decimal("150")

    def test_missing_type_is_sales(self):
        assert load_document({}).transaction_type is TransactionType.SALES

    def test_non_item_record(self):
        state = load_document({"type": "payment", "items": [{"product": "p1"}]})

        assert state.lines == []

    def test_tax_flag(self):
        assert not load_document({}, tax_enabled=False).tax_enabled

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            load_document({"type": "credit_note"})
