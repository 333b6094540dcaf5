"""CLI interface: recompute a stored transaction and emit its submission payload."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import get_log_level, get_profile_name
from ..config.profile_manager import activate_profile
from ..export.excel_export import export_to_excel
from ..export.payload import build_payload
from ..pipeline.edit_intent import EditIntentTracker
from ..pipeline.record_loader import load_document
from ..pipeline.session import DocumentSession, is_tax_registered
from ..pipeline.validation import validate_document
from ..run_summary import RunSummary

logger = logging.getLogger(__name__)


class DocumentProcessingError(Exception):
    """Raised when a document cannot be read or processed."""
    pass


def _read_record(input_path: str) -> Dict[str, Any]:
    try:
        with open(input_path, "r", encoding="utf-8") as f:
            record = json.load(f)
    except OSError as e:
        raise DocumentProcessingError(f"Cannot read {input_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise DocumentProcessingError(f"Invalid JSON in {input_path}: {e}") from e

    if not isinstance(record, dict):
        raise DocumentProcessingError(f"{input_path} must contain a JSON object")
    return record


def process_document(
    input_path: str,
    tax_enabled: Optional[bool] = None,
    excel_path: Optional[str] = None,
) -> Dict[str, Any]:
    """Load a transaction record, reconcile it and build its payload.

    Args:
        input_path: JSON file with a stored transaction record. An optional
            ``editIntents`` object ({"0": "lineTotal"}) is applied before the
            pass; an optional ``companyGstin`` decides the tax flag.
        tax_enabled: Overrides the tax flag derived from ``companyGstin``
        excel_path: Also export the reconciled lines to this .xlsx file

    Returns:
        Dict with:
        - state: reconciled DocumentState
        - changes: fields written by the recompute pass
        - validation_result: ValidationResult
        - payload: TransactionPayload
        - excel_path: path of the Excel file, if exported

    Raises:
        DocumentProcessingError: If the record cannot be read or loaded
    """
    record = _read_record(input_path)
    if tax_enabled is None:
        tax_enabled = is_tax_registered(record.get("companyGstin"))

    try:
        state = load_document(record, tax_enabled=tax_enabled)
        tracker = EditIntentTracker(state.edit_intents)
        for index, field_name in (record.get("editIntents") or {}).items():
            tracker.mark_edited(int(index), field_name)
    except (TypeError, ValueError) as e:
        raise DocumentProcessingError(f"Invalid transaction record: {e}") from e

    session = DocumentSession(state)
    validation_result = validate_document(session.state)

    result: Dict[str, Any] = {
        "state": session.state,
        "changes": session.last_result.changes,
        "validation_result": validation_result,
        "payload": build_payload(session.state),
        "excel_path": None,
    }
    if excel_path:
        result["excel_path"] = export_to_excel(session.state, excel_path)
    return result


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="GST invoicing engine - reconcile transaction line items and totals"
    )

    parser.add_argument(
        "--input",
        required=True,
        help="JSON file with the stored transaction record"
    )

    parser.add_argument(
        "--output",
        required=False,
        help="Write the submission payload JSON here (default: stdout)"
    )

    parser.add_argument(
        "--excel",
        required=False,
        help="Also export the reconciled lines to this .xlsx file"
    )

    parser.add_argument(
        "--summary",
        required=False,
        help="Write a run summary JSON to this path"
    )

    parser.add_argument(
        "--output-dir",
        required=False,
        help="Write run_summary.json into this directory"
    )

    tax_group = parser.add_mutually_exclusive_group()
    tax_group.add_argument(
        "--gstin",
        help="Company GSTIN; tax is enabled when it is non-blank"
    )
    tax_group.add_argument(
        "--no-tax",
        action="store_true",
        help="Treat the company as not tax-registered"
    )

    parser.add_argument(
        "--profile",
        type=str,
        default=None,
        help="Configuration profile name (default: GST_INVOICING_PROFILE or 'default')"
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with error code if validation requires review"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose debug output"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, get_log_level()),
        format="%(levelname)s %(name)s: %(message)s",
    )

    summary = RunSummary.create(args.input)
    summary.profile_name = args.profile or get_profile_name()

    tax_enabled: Optional[bool] = None
    if args.no_tax:
        tax_enabled = False
    elif args.gstin is not None:
        tax_enabled = is_tax_registered(args.gstin)

    try:
        activate_profile(summary.profile_name)
        result = process_document(args.input, tax_enabled=tax_enabled, excel_path=args.excel)
    except (DocumentProcessingError, FileNotFoundError, ValueError) as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        summary.errors.append(str(e))
        summary.complete("FAILED")
        _save_summary(summary, args)
        sys.exit(1)

    state = result["state"]
    validation_result = result["validation_result"]
    payload_json = json.dumps(result["payload"].model_dump(), indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).parent.mkdir(parents=True, exist_ok=True)
        Path(args.output).write_text(payload_json, encoding="utf-8")
        summary.output_path = args.output
        print(f"Payload: {args.output}")
    else:
        print(payload_json)

    summary.transaction_type = state.transaction_type.value
    summary.tax_enabled = state.tax_enabled
    summary.line_count = len(state.lines)
    summary.change_count = len(result["changes"])
    summary.validation_status = validation_result.status
    summary.totals = {
        "sub_total": state.totals.sub_total,
        "tax_amount": state.totals.tax_amount,
        "invoice_total": state.totals.invoice_total,
    }
    summary.errors = [str(issue) for issue in validation_result.errors]
    summary.warnings = [str(issue) for issue in validation_result.warnings]
    summary.excel_path = result["excel_path"]
    summary.complete()
    _save_summary(summary, args)

    for issue in validation_result.errors:
        print(f"Error: {issue}", file=sys.stderr)
    for issue in validation_result.warnings:
        print(f"Warning: {issue}", file=sys.stderr)

    exit_code = 0
    if args.strict and not validation_result.passed:
        exit_code = 1
    sys.exit(exit_code)


def _save_summary(summary: RunSummary, args: argparse.Namespace) -> None:
    path = args.summary
    if not path and args.output_dir:
        path = str(Path(args.output_dir) / "run_summary.json")
    if not path:
        return
    if not Path(path).parent.exists():
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    summary.save(Path(path))
    logger.info(f"Run summary: {path}")


if __name__ == "__main__":
    main()
