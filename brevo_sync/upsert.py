"""Create-or-update a single contact with a one-shot retry on SMS conflicts."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .client import ApiResponse, BrevoClient
from .errors import ConflictError, TransportError
from .mapping import SMS_ATTRIBUTE, build_attributes
from .models import ExistingContactIndex, SourceRecord, UpsertPayload

LOGGER = logging.getLogger(__name__)

SUCCESS_STATUSES = frozenset({200, 201, 204})
NO_CONTENT = 204
DUPLICATE_SMS_MESSAGE = "SMS is already associated with another Contact"


class UpsertStage(str, Enum):
    ATTEMPTED = "attempted"
    CONFLICT_DETECTED = "conflict_detected"
    RETRIED_ONCE = "retried_once"


@dataclass(frozen=True)
class UpsertResult:
    """Terminal outcome of one upsert; ``success`` is False for any error."""

    email: str
    success: bool
    stage: UpsertStage
    status_code: int = 0
    body: str = ""
    error: Optional[str] = None

    @property
    def retried(self) -> bool:
        return self.stage is UpsertStage.RETRIED_ONCE

    @property
    def skipped_retry(self) -> bool:
        return self.stage is UpsertStage.CONFLICT_DETECTED


def build_payload(email: str, list_ids: Iterable[int], record: Optional[SourceRecord]) -> UpsertPayload:
    attributes = build_attributes(record)
    if attributes:
        LOGGER.debug("Adding contact %s with attributes: %s", email, attributes)
    else:
        LOGGER.debug("No attributes to add for %s - record was empty or had no valid fields", email)
    return UpsertPayload(email=email, attributes=attributes, list_ids=list(list_ids))


def raise_for_conflict(response: ApiResponse) -> None:
    """Raise :class:`ConflictError` when Brevo rejects a duplicate SMS number."""

    if response.status_code == 400 and DUPLICATE_SMS_MESSAGE in response.text:
        raise ConflictError(DUPLICATE_SMS_MESSAGE, attribute=SMS_ATTRIBUTE, body=response.text)


class UpsertExecutor:
    """Sends ``POST /contacts`` for one record, retrying at most once without SMS."""

    def __init__(self, client: BrevoClient) -> None:
        self._client = client

    def upsert(
        self,
        email: str,
        existing: ExistingContactIndex,
        list_ids: Iterable[int],
        record: Optional[SourceRecord] = None,
    ) -> UpsertResult:
        if email in existing:
            LOGGER.info("[-] %s already exists. Will update with new data if provided.", email)

        payload = build_payload(email, list_ids, record)
        stage = UpsertStage.ATTEMPTED
        try:
            response = self._send(payload, stage)
            try:
                raise_for_conflict(response)
            except ConflictError as conflict:
                stage = UpsertStage.CONFLICT_DETECTED
                payload = payload.without_attribute(conflict.attribute)
                LOGGER.warning(
                    "%s already used by another contact. Retrying %s without %s...",
                    conflict.attribute,
                    email,
                    conflict.attribute,
                )
                if not payload.attributes:
                    LOGGER.info("No other attributes to update for %s, treating as success", email)
                    return UpsertResult(email=email, success=True, stage=stage, status_code=NO_CONTENT)
                stage = UpsertStage.RETRIED_ONCE
                response = self._send(payload, stage)
        except TransportError as exc:
            LOGGER.error("Exception occurred while contacting Brevo for %s: %s", email, exc)
            return UpsertResult(email=email, success=False, stage=stage, error=str(exc))

        return self._finish(email, stage, response)

    def _send(self, payload: UpsertPayload, stage: UpsertStage) -> ApiResponse:
        response = self._client.post("/contacts", payload.to_json())
        LOGGER.info("Brevo contact upsert (%s) for %s: %d - %s", stage.value, payload.email, response.status_code, response.text)
        return response

    def _finish(self, email: str, stage: UpsertStage, response: ApiResponse) -> UpsertResult:
        if response.status_code in SUCCESS_STATUSES:
            return UpsertResult(
                email=email,
                success=True,
                stage=stage,
                status_code=response.status_code,
                body=response.text,
            )
        LOGGER.warning("Failed to add/update contact %s: %d %s", email, response.status_code, response.text)
        return UpsertResult(
            email=email,
            success=False,
            stage=stage,
            status_code=response.status_code,
            body=response.text,
            error=f"status {response.status_code} - {response.text}",
        )


__all__ = [
    "DUPLICATE_SMS_MESSAGE",
    "UpsertExecutor",
    "UpsertResult",
    "UpsertStage",
    "build_payload",
    "raise_for_conflict",
]
