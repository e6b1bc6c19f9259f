"""Create the run's email campaign and trigger its send."""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from .client import BrevoClient
from .config import Settings
from .errors import BrevoSyncError, DecodeError, TransportError, ValidationError
from .models import Campaign, CampaignState, ContactList
from .provisioning import CREATED_STATUSES, extract_id

LOGGER = logging.getLogger(__name__)

SEND_STATUSES = frozenset({200, 202, 204})


class CampaignOrchestrator:
    """Drives ``NOT_CREATED -> CREATED -> SEND_REQUESTED -> SENT`` (or ``FAILED``).

    Neither step is retried; remote failures are captured on the returned
    :class:`Campaign` instead of being raised.
    """

    def __init__(self, client: BrevoClient, settings: Settings, html_content: str) -> None:
        self._client = client
        self._settings = settings
        self._html_content = html_content

    def draft(self, contact_list: ContactList, now: datetime) -> Campaign:
        return Campaign(
            name=f"{self._settings.campaign_name_prefix} - {int(now.timestamp())}",
            sender_name=self._settings.sender_name,
            sender_email=self._settings.sender_email,
            subject=self._settings.campaign_subject,
            html_content=self._html_content,
            list_id=contact_list.id,
        )

    def create(self, contact_list: ContactList, now: datetime) -> Campaign:
        campaign = self.draft(contact_list, now)
        try:
            response = self._client.post("/emailCampaigns", campaign.to_payload())
        except TransportError as exc:
            return _failed(campaign, f"Exception: {exc}", 0)

        if response.status_code not in CREATED_STATUSES:
            return _failed(campaign, f"API Error: {response.status_code} - {response.text}", response.status_code)

        try:
            campaign_id = extract_id(response.json_object(), "campaign")
        except DecodeError as exc:
            return _failed(campaign, str(exc), response.status_code)
        except ValidationError:
            return _failed(campaign, "Invalid campaign ID in response", response.status_code)

        LOGGER.info("Campaign '%s' created successfully with ID: %d", campaign.name, campaign_id)
        return replace(campaign, id=campaign_id, state=CampaignState.CREATED, status_code=response.status_code)

    def send(self, campaign: Campaign) -> Campaign:
        if campaign.state is not CampaignState.CREATED or campaign.id is None:
            raise BrevoSyncError(f"Campaign '{campaign.name}' cannot be sent from state {campaign.state.value}")

        campaign = replace(campaign, state=CampaignState.SEND_REQUESTED)
        try:
            response = self._client.post(f"/emailCampaigns/{campaign.id}/sendNow")
        except TransportError as exc:
            return _failed(campaign, f"Exception: {exc}", 0)

        if response.status_code in SEND_STATUSES:
            LOGGER.info("Campaign %d sent successfully", campaign.id)
            return replace(
                campaign,
                state=CampaignState.SENT,
                status_code=response.status_code,
                message=f"Campaign {campaign.id} sent to all contacts",
            )

        LOGGER.error("Failed to send campaign %d: %d %s", campaign.id, response.status_code, response.text)
        return _failed(campaign, f"Send failed: {response.status_code} - {response.text}", response.status_code)


def _failed(campaign: Campaign, error: str, status_code: int) -> Campaign:
    LOGGER.error("Campaign '%s' failed: %s", campaign.name, error)
    return replace(campaign, state=CampaignState.FAILED, error=error, status_code=status_code)


__all__ = ["CampaignOrchestrator", "SEND_STATUSES"]
