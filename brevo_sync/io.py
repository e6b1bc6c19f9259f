"""Input/output helpers for the campaign template and the JSON run report."""
from __future__ import annotations

import json
from pathlib import Path

from .errors import ConfigurationError
from .models import ProcessingReport


def load_template(path: str | Path) -> str:
    """Return the campaign HTML body stored at ``path``."""

    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigurationError(f"Campaign template '{file_path}' was not found")
    return file_path.read_text(encoding="utf-8")


def write_report(path: str | Path, report: ProcessingReport) -> Path:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(report.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    return destination
