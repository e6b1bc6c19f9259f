"""CLI helper to inspect Brevo folders and the contact index for debugging."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Sequence

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from brevo_sync.client import BrevoClient  # noqa: E402  (import after path fix)
from brevo_sync.config import load_settings  # noqa: E402
from brevo_sync.indexer import ContactIndexer  # noqa: E402
from brevo_sync.models import Folder  # noqa: E402
from brevo_sync.provisioning import FolderListProvisioner  # noqa: E402
from brevo_sync.rate_limit import DelayPolicy  # noqa: E402

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List Brevo folders without changing anything.")
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument("--folder", help="Folder name to look for (defaults to the configured one)")
    parser.add_argument(
        "--with-contacts",
        action="store_true",
        help="Also page through all contacts and report the index size",
    )
    parser.add_argument(
        "--output-json",
        type=Path,
        help="Optional path to save the folder listing as JSON",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Console log level",
    )
    return parser.parse_args(argv)


def run_inspection(args: argparse.Namespace) -> None:
    logging.basicConfig(level=getattr(logging, args.log_level))
    settings = load_settings(env_file=args.env_file)
    target = args.folder or settings.folder_name

    with BrevoClient.from_settings(settings) as client:
        folders = FolderListProvisioner(client).list_folders()
        pretty_print_folders(folders, target)

        if args.with_contacts:
            index = ContactIndexer(
                client,
                page_size=settings.page_size,
                delay_policy=DelayPolicy(settings.page_delay_seconds),
            ).build()
            print(f"Existing contacts: {index.size}")

    if args.output_json:
        payload = [{"id": folder.id, "name": folder.name} for folder in folders]
        args.output_json.write_text(json.dumps(payload, indent=2, ensure_ascii=False))
        LOGGER.info("Wrote folder JSON to %s", args.output_json)


def pretty_print_folders(folders: List[Folder], target: str) -> None:
    if not folders:
        print("No folders found.")
        return
    print("Folders:")
    for folder in folders:
        marker = " <- target" if folder.name == target else ""
        invalid = " [invalid id]" if folder.id <= 0 else ""
        print(f"  - {folder.id}: {folder.name}{marker}{invalid}")
    if not any(folder.name == target for folder in folders):
        print(f"Folder '{target}' does not exist yet; the next run will create it.")


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv or sys.argv[1:])
    try:
        run_inspection(args)
    except Exception as exc:  # pragma: no cover - CLI convenience
        LOGGER.exception("Inspection failed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
