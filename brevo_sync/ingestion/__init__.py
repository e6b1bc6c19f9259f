"""Utilities for importing source records and exporting run reports."""
from __future__ import annotations

from .exporters import check_export_path, export_report, report_to_dataframe
from .loaders import UnsupportedFileTypeError, load_source_records, rows_to_records

__all__ = [
    "UnsupportedFileTypeError",
    "check_export_path",
    "export_report",
    "load_source_records",
    "report_to_dataframe",
    "rows_to_records",
]
