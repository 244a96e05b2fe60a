# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Spreadsheet serialisation of query results.

Both writers go through :func:`~dataverse_query_designer.utils._pandas.result_to_dataframe`;
the workbook writer then styles the sheet with openpyxl.
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import TYPE_CHECKING, List

import pandas as pd
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import IllegalCharacterError

from ..common.constants import (
    EXPORT_COLUMN_WIDTH,
    EXPORT_HEADER_FILL,
    EXPORT_HEADER_FONT_COLOR,
    EXPORT_SHEET_NAME,
    LOGGER_NAME,
)
from ..core._error_codes import EXPORT_WRITE_FAILED
from ..core.errors import ExportError
from ._pandas import cell_value, result_to_dataframe

if TYPE_CHECKING:
    from ..core.results import QueryResult

logger = logging.getLogger(f"{LOGGER_NAME}.export")

_WRITE_ERRORS = (ValueError, TypeError, OSError, IllegalCharacterError)


def _headers(result: "QueryResult") -> List[str]:
    return [c.display_name for c in result.columns]


def write_xlsx(result: "QueryResult") -> bytes:
    """
    Serialise a result to an ``.xlsx`` workbook.

    One sheet, header row in bold white on a solid blue fill, every column 20
    characters wide and an auto-filter over the header and all data rows.

    :raises ExportError: If the workbook cannot be written.
    """
    headers = _headers(result)
    buffer = BytesIO()
    try:
        df = result_to_dataframe(result, convert=cell_value)
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=EXPORT_SHEET_NAME, index=False, header=headers if headers else False)
            ws = writer.sheets[EXPORT_SHEET_NAME]
            if headers:
                font = Font(bold=True, color=EXPORT_HEADER_FONT_COLOR)
                fill = PatternFill(start_color=EXPORT_HEADER_FILL, end_color=EXPORT_HEADER_FILL, fill_type="solid")
                for cell in ws[1]:
                    cell.font = font
                    cell.fill = fill
                for idx in range(1, len(headers) + 1):
                    ws.column_dimensions[get_column_letter(idx)].width = EXPORT_COLUMN_WIDTH
                ws.auto_filter.ref = f"A1:{get_column_letter(len(headers))}{len(result.rows) + 1}"
    except _WRITE_ERRORS as exc:
        logger.warning("Excel export failed: %s", exc)
        raise ExportError(
            f"Failed to generate Excel file: {exc}",
            subcode=EXPORT_WRITE_FAILED,
            details={"format": "xlsx", "rows": len(result.rows), "columns": len(headers)},
        ) from exc
    return buffer.getvalue()


def write_csv(result: "QueryResult") -> bytes:
    """
    Serialise a result to UTF-8 CSV with display names as the header line.

    :raises ExportError: If the rows cannot be written.
    """
    headers = _headers(result)
    try:
        df = result_to_dataframe(result, convert=cell_value)
        text = df.to_csv(index=False, header=headers if headers else False)
    except _WRITE_ERRORS as exc:
        logger.warning("CSV export failed: %s", exc)
        raise ExportError(
            f"Failed to generate CSV file: {exc}",
            subcode=EXPORT_WRITE_FAILED,
            details={"format": "csv", "rows": len(result.rows), "columns": len(headers)},
        ) from exc
    return text.encode("utf-8")
