"""Export utilities for processing reports."""
from __future__ import annotations

from pathlib import Path
from typing import List, MutableMapping, Optional, Union

import pandas as pd

from ..io import write_report
from ..models import SOURCE_FIELDS, ErrorOutcome, ProcessingReport, RecordOutcome
from .loaders import CSV_SUFFIXES, EXCEL_SUFFIXES, UnsupportedFileTypeError

PathLike = Union[str, Path]

BASE_COLUMNS = ["status", "email", "action", "error", "details"]
EXPORT_SUFFIXES = frozenset({".json"} | CSV_SUFFIXES | EXCEL_SUFFIXES)


def report_to_dataframe(report: ProcessingReport, *, include_records: bool = True) -> pd.DataFrame:
    """Flatten added, updated and error outcomes into one row per outcome."""

    rows: List[MutableMapping[str, object]] = []
    for outcome in report.added:
        rows.append(_outcome_to_row("added", outcome, include_records=include_records))
    for outcome in report.updated:
        rows.append(_outcome_to_row("updated", outcome, include_records=include_records))
    for error in report.errors:
        rows.append(_error_to_row(error))

    columns = BASE_COLUMNS + ([f"record.{name}" for name in SOURCE_FIELDS] if include_records else [])
    return pd.DataFrame(rows, columns=columns)


def check_export_path(path: PathLike) -> Path:
    """Return ``path`` as a :class:`Path` if :func:`export_report` can write it."""

    output_path = Path(path)
    if output_path.suffix.lower() not in EXPORT_SUFFIXES:
        raise UnsupportedFileTypeError(f"Unsupported export file extension: {output_path.suffix}")
    return output_path


def export_report(
    report: ProcessingReport,
    path: PathLike,
    *,
    include_records: bool = True,
    sheet_name: str = "Results",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write ``report`` as JSON or as an outcome table (CSV/TSV/Excel)."""

    output_path = check_export_path(path)
    suffix = output_path.suffix.lower()
    if suffix == ".json":
        return write_report(output_path, report)

    options = dict(exporter_kwargs or {})
    dataframe = report_to_dataframe(report, include_records=include_records)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if suffix in CSV_SUFFIXES:
        options.setdefault("sep", "\t" if suffix == ".tsv" else ",")
        dataframe.to_csv(output_path, index=False, **options)
    else:
        options.setdefault("engine", "openpyxl")
        dataframe.to_excel(output_path, index=False, sheet_name=sheet_name, **options)
    return output_path


def _outcome_to_row(status: str, outcome: RecordOutcome, *, include_records: bool) -> MutableMapping[str, object]:
    row: MutableMapping[str, object] = {
        "status": status,
        "email": outcome.email,
        "action": outcome.action.value,
        "error": "",
        "details": "",
    }
    if include_records and outcome.record is not None:
        row.update({f"record.{key}": value for key, value in outcome.record.as_dict().items()})
    return row


def _error_to_row(error: ErrorOutcome) -> MutableMapping[str, object]:
    return {
        "status": "error",
        "email": error.email or "",
        "action": "",
        "error": error.error,
        "details": error.details,
    }


__all__ = ["check_export_path", "export_report", "report_to_dataframe"]
