"""Excel export of a reconciled document: one row per line plus a totals block."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from ..models.document_state import DocumentState
from ..models.line_item import LineItem
from ..pipeline.number_normalizer import coerce_amount
from ..pipeline.reconciliation import effective_tax_rate

logger = logging.getLogger(__name__)

SHEET_NAME = "Invoice"

LINE_COLUMNS = [
    "Line",
    "Type",
    "Reference",
    "Description",
    "Quantity",
    "Unit",
    "Price/Unit",
    "Amount",
    "GST %",
    "Line Tax",
    "Line Total",
]

MONEY_COLUMNS = ("Price/Unit", "Amount", "Line Tax", "Line Total")


def _line_row(index: int, line: LineItem, tax_enabled: bool) -> Dict[str, Any]:
    return {
        "Line": index + 1,
        "Type": line.item_type.value,
        "Reference": line.catalog_ref,
        "Description": line.description,
        "Quantity": float(coerce_amount(line.quantity)) if line.is_product else "",
        "Unit": line.display_unit if line.is_product else "",
        "Price/Unit": float(coerce_amount(line.price_per_unit)) if line.is_product else "",
        "Amount": float(coerce_amount(line.amount)),
        "GST %": float(effective_tax_rate(line, tax_enabled)),
        "Line Tax": float(coerce_amount(line.line_tax)) if tax_enabled else 0.0,
        "Line Total": float(coerce_amount(line.line_total)),
    }


def export_to_excel(state: DocumentState, output_path: Union[str, Path]) -> str:
    """Export a document's lines and totals to an Excel file.

    Args:
        state: Reconciled DocumentState
        output_path: Path to output Excel file

    Returns:
        Path to created Excel file

    Excel structure:
    - Sheet "Invoice", one row per line with LINE_COLUMNS
    - A blank row, then Sub Total / Tax Amount / Invoice Total rows with the
      label in "Line Tax" and the value in "Line Total"
    """
    rows: List[Dict[str, Any]] = [
        _line_row(index, line, state.tax_enabled) for index, line in enumerate(state.lines)
    ]
    df = pd.DataFrame(rows, columns=LINE_COLUMNS)

    totals = [
        ("Sub Total", state.totals.sub_total),
        ("Tax Amount", state.totals.tax_amount if state.tax_enabled else 0),
        ("Invoice Total", state.totals.invoice_total),
    ]

    output_path_obj = Path(output_path)
    output_path_obj.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_path_obj, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
        worksheet = writer.sheets[SHEET_NAME]

        from openpyxl.styles import Font
        from openpyxl.styles.numbers import FORMAT_NUMBER_00

        def _col(name: str) -> int:
            # openpyxl columns are 1-based
            return LINE_COLUMNS.index(name) + 1

        for row in worksheet.iter_rows(min_row=2, max_row=worksheet.max_row):
            for name in MONEY_COLUMNS:
                cell = row[_col(name) - 1]
                if isinstance(cell.value, (int, float)):
                    cell.number_format = FORMAT_NUMBER_00

        first_total_row = worksheet.max_row + 2
        for offset, (label, value) in enumerate(totals):
            row_number = first_total_row + offset
            label_cell = worksheet.cell(row=row_number, column=_col("Line Tax"), value=label)
            label_cell.font = Font(bold=True)
            value_cell = worksheet.cell(
                row=row_number, column=_col("Line Total"), value=float(coerce_amount(value))
            )
            value_cell.number_format = FORMAT_NUMBER_00

    logger.info(f"Exported {len(rows)} line(s) to {output_path_obj}")
    return str(output_path_obj)
