"""Command line interface for running the Brevo sync pipeline."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .client import BrevoClient
from .config import load_settings
from .errors import BrevoSyncError, ConfigurationError
from .indexer import build_contact_index
from .ingestion import check_export_path, export_report
from .scheduler import run_daily, run_pipeline

LOGGER = logging.getLogger(__name__)


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Sync contact records into Brevo and dispatch the daily campaign",
    )
    parser.add_argument("--env-file", help="Path to a .env file with BREVO_API_KEY, SENDER_NAME, SENDER_EMAIL")
    parser.add_argument("--config", help="Optional YAML or JSON file overriding settings")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run the pipeline once for an input file")
    run_parser.add_argument("input", help="Path to the source spreadsheet (CSV or XLSX)")
    run_parser.add_argument("--output", help="Where to write the report (.json, .csv or .xlsx)")
    run_parser.add_argument("--folder", help="Brevo folder that holds the run's list")
    run_parser.add_argument("--template", help="Path to the campaign HTML template")
    run_parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Upsert records concurrently with this many workers",
    )
    run_parser.add_argument(
        "--calls-per-minute",
        type=float,
        default=None,
        help="Upsert rate limit applied when --max-workers is above 1",
    )

    subparsers.add_parser("index", help="Count the contacts already stored in Brevo")

    daily_parser = subparsers.add_parser("daily", help="Run the pipeline every day at a fixed time")
    daily_parser.add_argument("--at", default="02:00", help="Local time of day (HH:MM)")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    overrides = {}
    if args.command == "run":
        overrides = {
            "folder_name": args.folder,
            "template_path": args.template,
            "max_workers": args.max_workers,
            "calls_per_minute": args.calls_per_minute,
        }
    try:
        settings = load_settings(env_file=args.env_file, config_path=args.config, overrides=overrides)
    except ConfigurationError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    try:
        if args.command == "index":
            with BrevoClient.from_settings(settings) as client:
                index = build_contact_index(
                    client,
                    page_size=settings.page_size,
                    delay_seconds=settings.page_delay_seconds,
                )
            print(index.size)
            return 0

        if args.command == "daily":
            run_daily(settings, at=args.at)
            return 0

        if args.output:
            check_export_path(args.output)
        report = run_pipeline(settings, Path(args.input))
    except (BrevoSyncError, OSError) as exc:
        logging.error("Sync failed: %s", exc)
        return 1

    exit_code = 1 if report.aborted else 0
    if args.output:
        try:
            written = export_report(report, args.output)
        except (BrevoSyncError, OSError) as exc:
            logging.error("Could not write report to %s: %s", args.output, exc)
            exit_code = 1
        else:
            logging.info("Report written to %s", written.resolve())

    print(
        f"added={len(report.added)} updated={len(report.updated)} errors={len(report.errors)} "
        f"existing={report.total_existing_contacts}"
    )
    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
