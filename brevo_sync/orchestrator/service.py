"""Pipeline driver that syncs source records into Brevo and dispatches the campaign."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from ..campaign import CampaignOrchestrator
from ..errors import BrevoSyncError
from ..indexer import ContactIndexer
from ..models import (
    ContactList,
    ErrorOutcome,
    ExistingContactIndex,
    ProcessingReport,
    RecordAction,
    RecordOutcome,
    SourceRecord,
)
from ..provisioning import FolderListProvisioner
from ..upsert import UpsertResult

LOGGER = logging.getLogger(__name__)

MISSING_EMAIL = "missing email"


class UpsertProtocol(Protocol):
    """Interface the pipeline expects from the per-record upsert step."""

    def upsert(
        self,
        email: str,
        existing: ExistingContactIndex,
        list_ids: Iterable[int],
        record: Optional[SourceRecord] = None,
    ) -> UpsertResult:  # pragma: no cover - runtime protocol
        """Create or update one contact."""


def classify(record: SourceRecord, result: UpsertResult, existing: ExistingContactIndex) -> RecordOutcome | ErrorOutcome:
    """Turn an upsert result into an outcome using only the pre-run snapshot."""

    if not result.success:
        return ErrorOutcome(
            email=record.email,
            error=result.error or f"status {result.status_code}",
            details="Failed to add/update contact",
        )
    action = RecordAction.UPDATED if record.email in existing else RecordAction.ADDED
    LOGGER.info("%s contact %s with additional data", action.value, record.email)
    return RecordOutcome(email=record.email, record=record, action=action)


class SyncPipeline:
    """Runs one index -> provision -> upsert -> campaign cycle and returns its report."""

    def __init__(
        self,
        *,
        indexer: ContactIndexer,
        provisioner: FolderListProvisioner,
        executor: UpsertProtocol,
        campaigns: CampaignOrchestrator,
        folder_name: str = "Winners",
        list_prefix: str = "Winners List",
        max_workers: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._indexer = indexer
        self._provisioner = provisioner
        self._executor = executor
        self._campaigns = campaigns
        self._folder_name = folder_name
        self._list_prefix = list_prefix
        self._max_workers = max_workers
        self._clock = clock

    @property
    def executor(self) -> UpsertProtocol:
        return self._executor

    def run(self, records: Sequence[SourceRecord]) -> ProcessingReport:
        report = ProcessingReport()
        now = self._clock()

        try:
            existing = self._indexer.build()
        except BrevoSyncError as exc:
            LOGGER.error("Failed to fetch existing contacts: %s", exc)
            return report.abort(str(exc), "Failed to fetch existing contacts")
        report.total_existing_contacts = existing.size

        try:
            contact_list = self._provisioner.provision(self._folder_name, self._list_prefix, now)
        except BrevoSyncError as exc:
            LOGGER.error("Failed to create contact list: %s", exc)
            return report.abort(str(exc), "Failed to create contact list")

        for outcome in self._sync_records(records, existing, contact_list):
            report.record(outcome)

        campaign = self._campaigns.create(contact_list, now)
        report.campaign = campaign
        if not campaign.created:
            return report.abort(campaign.error or "unknown error", "Failed to create campaign")

        campaign = self._campaigns.send(campaign)
        report.campaign = campaign
        if not campaign.success:
            report.errors.append(ErrorOutcome(error=campaign.error or "unknown error", details="Failed to send campaign"))
        return report

    def _sync_records(
        self,
        records: Sequence[SourceRecord],
        existing: ExistingContactIndex,
        contact_list: ContactList,
    ) -> List[RecordOutcome | ErrorOutcome]:
        if not self._max_workers or self._max_workers <= 1 or len(records) <= 1:
            return [self._sync_record(record, existing, contact_list) for record in records]

        # Outcomes are collected in input order regardless of completion order.
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures = [pool.submit(self._sync_record, record, existing, contact_list) for record in records]
            return [future.result() for future in futures]

    def _sync_record(
        self,
        record: SourceRecord,
        existing: ExistingContactIndex,
        contact_list: ContactList,
    ) -> RecordOutcome | ErrorOutcome:
        if not record.email:
            LOGGER.warning("Skipping contact with no email address (id=%s)", record.id)
            return ErrorOutcome(email=record.email, error=MISSING_EMAIL, details="Skipping contact with no email address")
        result = self._executor.upsert(record.email, existing, [contact_list.id], record)
        return classify(record, result, existing)


def log_summary(report: ProcessingReport, logger: logging.Logger = LOGGER) -> None:
    logger.info("Processing Results:")
    logger.info("Total Existing Contacts: %d", report.total_existing_contacts)
    logger.info("Added Contacts: %d", len(report.added))
    logger.info("Updated Contacts: %d", len(report.updated))
    logger.info("Errors: %d", len(report.errors))
    if report.campaign is not None:
        logger.info(
            "Campaign: %s (ID: %s, State: %s)",
            report.campaign.name,
            report.campaign.id,
            report.campaign.state.value,
        )
    for error in report.errors:
        logger.info("Error: %s (%s)", error.error, error.details)
