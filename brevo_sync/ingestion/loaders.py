"""Utilities for loading source records from the daily spreadsheet export."""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, List, Sequence, Union

import pandas as pd

from ..errors import ValidationError
from ..models import SOURCE_FIELDS, SourceRecord

PathLike = Union[str, Path]

CSV_SUFFIXES = {".csv", ".tsv"}
EXCEL_SUFFIXES = {".xls", ".xlsx", ".xlsm", ".xlsb"}


class UnsupportedFileTypeError(ValidationError):
    """Raised when an unsupported file format is passed to the loader."""


def load_source_records(path: PathLike, *, sheet_name: Union[str, int] = 0) -> List[SourceRecord]:
    """Load records from a CSV/TSV or Excel file.

    The first row is a header and is skipped. Every data row must carry exactly
    one value per entry of :data:`~brevo_sync.models.SOURCE_FIELDS`; a single
    malformed row fails the whole load. Excel sheets are checked by width only:
    a blank trailing cell and a missing one read the same, so short rows in a
    sheet of the right width load with empty values.
    """

    rows = _read_rows(Path(path), sheet_name=sheet_name)
    return rows_to_records(rows)


def rows_to_records(rows: Sequence[Sequence[Any]]) -> List[SourceRecord]:
    if len(rows) < 2:
        raise ValidationError("CSV file is empty or has no data rows")

    expected = len(SOURCE_FIELDS)
    records: List[SourceRecord] = []
    for index, row in enumerate(rows[1:], start=1):
        if len(row) != expected:
            raise ValidationError(f"row {index} has {len(row)} columns, expected {expected}", payload=list(row))
        records.append(SourceRecord.from_row([_clean_text(value) for value in row]))
    return records


def _read_rows(path: Path, *, sheet_name: Union[str, int]) -> List[List[Any]]:
    suffix = path.suffix.lower()

    if suffix in CSV_SUFFIXES:
        delimiter = "\t" if suffix == ".tsv" else ","
        with path.open(newline="", encoding="utf-8-sig") as handle:
            return [row for row in csv.reader(handle, delimiter=delimiter)]

    if suffix in EXCEL_SUFFIXES:
        dataframe = pd.read_excel(
            path,
            sheet_name=sheet_name,
            header=None,
            dtype=str,
            keep_default_na=False,
            engine="openpyxl" if suffix != ".xls" else None,
        )
        # Rows come back padded to the widest row, so only the sheet width is checkable.
        expected = len(SOURCE_FIELDS)
        if not dataframe.empty and dataframe.shape[1] != expected:
            raise ValidationError(f"sheet has {dataframe.shape[1]} columns, expected {expected}")
        return dataframe.values.tolist()

    raise UnsupportedFileTypeError(f"Unsupported file extension: {path.suffix}")


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str) and pd.isna(value):
        return ""
    return str(value)


__all__ = ["load_source_records", "rows_to_records", "UnsupportedFileTypeError"]
