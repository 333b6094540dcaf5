"""Tests for the CLI entry point and process_document."""

import json
from decimal import Decimal
from unittest.mock import patch

import pytest

from gst_invoicing.cli.main import DocumentProcessingError, main, process_document


@pytest.fixture
def record():
    """Stored sales record from a tax-registered company."""
    return {
        "type": "sales",
        "companyGstin": "27ABCDE1234F1Z5",
        "products": [{"product": "p1", "quantity": 2, "pricePerUnit": 100}],
    }


@pytest.fixture
def record_path(tmp_path, record):
    path = tmp_path / "invoice.json"
    path.write_text(json.dumps(record), encoding="utf-8")
    return path


def write_record(tmp_path, data, name="record.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def run_main(*args):
    with patch("sys.argv", ["gst-invoicing", *args]):
        with pytest.raises(SystemExit) as exc_info:
            main()
    return exc_info.value.code


class TestProcessDocument:
    """Test process_document."""

    def test_reconciles_record(self, record_path):
        result = process_document(str(record_path))

        state = result["state"]
        assert state.tax_enabled
        assert state.lines[0].line_total == Decimal("236.00")
        assert state.totals.invoice_total == Decimal("236.00")
        assert {c.field for c in result["changes"]} >= {"line_tax", "line_total", "invoice_total"}
        assert result["validation_result"].status == "OK"
        assert result["payload"].invoiceTotal == 236.0
        assert result["excel_path"] is None

    def test_without_gstin_tax_is_disabled(self, tmp_path, record):
        del record["companyGstin"]

        result = process_document(str(write_record(tmp_path, record)))

        assert not result["state"].tax_enabled
        assert result["payload"].invoiceTotal == 200.0

    def test_tax_flag_override(self, record_path):
        result = process_document(str(record_path), tax_enabled=False)
        assert result["payload"].taxAmount == 0.0

    def test_edit_intents_applied(self, tmp_path, record):
        record["products"][0]["lineTotal"] = 118
        record["editIntents"] = {"0": "lineTotal"}

        result = process_document(str(write_record(tmp_path, record)))

        line = result["state"].lines[0]
        assert line.amount == Decimal("100.00")
        assert line.price_per_unit == Decimal("50.00")

    def test_excel_export(self, record_path, tmp_path):
        excel_path = tmp_path / "out" / "invoice.xlsx"

        result = process_document(str(record_path), excel_path=str(excel_path))

        assert result["excel_path"] == str(excel_path)
        assert excel_path.exists()

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentProcessingError, match="Cannot read"):
            process_document(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(DocumentProcessingError, match="Invalid JSON"):
            process_document(str(path))

    def test_non_object_record(self, tmp_path):
        with pytest.raises(DocumentProcessingError, match="JSON object"):
            process_document(str(write_record(tmp_path, [1, 2])))

    def test_negative_stored_amount_is_reported(self, tmp_path, record):
        record["products"][0]["amount"] = -5
        record["editIntents"] = {"0": "amount"}

        result = process_document(str(write_record(tmp_path, record)))

        validation_result = result["validation_result"]
        assert validation_result.status == "REVIEW"
        assert "Amount must be >= 0" in [issue.message for issue in validation_result.errors]

    def test_unknown_edit_intent(self, tmp_path, record):
        record["editIntents"] = {"0": "discount"}

        with pytest.raises(DocumentProcessingError, match="Invalid transaction record"):
            process_document(str(write_record(tmp_path, record)))


class TestMain:
    """Test the argparse entry point."""

    def test_writes_payload_and_summary(self, record_path, tmp_path):
        output = tmp_path / "out" / "payload.json"
        summary_path = tmp_path / "out" / "summary.json"

        code = run_main("--input", str(record_path), "--output", str(output), "--summary", str(summary_path))

        assert code == 0
        payload = json.loads(output.read_text(encoding="utf-8"))
        assert payload["invoiceTotal"] == 236.0

        summary = json.loads(summary_path.read_text(encoding="utf-8"))
        assert summary["status"] == "COMPLETED"
        assert summary["validation_status"] == "OK"
        assert summary["line_count"] == 1
        assert summary["totals"]["invoice_total"] == 236.0
        assert summary["profile_name"] == "default"

    def test_prints_payload_to_stdout(self, record_path, capsys):
        code = run_main("--input", str(record_path), "--no-tax")

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["taxAmount"] == 0.0

    def test_output_dir_summary(self, record_path, tmp_path):
        out_dir = tmp_path / "runs"

        run_main("--input", str(record_path), "--output-dir", str(out_dir), "--gstin", "")

        summary = json.loads((out_dir / "run_summary.json").read_text(encoding="utf-8"))
        assert summary["tax_enabled"] is False

    def test_strict_fails_on_review(self, tmp_path):
        path = write_record(tmp_path, {"products": [{"quantity": 1, "pricePerUnit": 10}]})

        assert run_main("--input", str(path), "--strict") == 1

    def test_review_without_strict_succeeds(self, tmp_path, capsys):
        path = write_record(tmp_path, {"products": [{"quantity": 1, "pricePerUnit": 10}]})

        assert run_main("--input", str(path)) == 0
        assert "Select a product" in capsys.readouterr().err

    def test_missing_input_fails(self, tmp_path):
        summary_path = tmp_path / "summary.json"

        code = run_main("--input", str(tmp_path / "missing.json"), "--summary", str(summary_path))

        assert code == 1
        summary = json.loads(summary_path.read_text(encoding="utf-8"))
        assert summary["status"] == "FAILED"
        assert summary["errors"]

    def test_missing_profile_fails(self, record_path):
        assert run_main("--input", str(record_path), "--profile", "nonexistent") == 1
