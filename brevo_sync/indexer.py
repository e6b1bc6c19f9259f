"""Build the set of emails already known to Brevo."""
from __future__ import annotations

import logging
from typing import Optional, Set

from .client import BrevoClient
from .errors import DecodeError
from .models import ExistingContactIndex
from .rate_limit import DelayPolicy

LOGGER = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


class ContactIndexer:
    """Paginates ``GET /contacts`` into an :class:`ExistingContactIndex`."""

    def __init__(
        self,
        client: BrevoClient,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        delay_policy: Optional[DelayPolicy] = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._client = client
        self._page_size = page_size
        self._delay_policy = delay_policy or DelayPolicy(delay_seconds=0.1)

    def build(self) -> ExistingContactIndex:
        """Fetch every contact page; any failing page aborts the whole build."""

        emails: Set[str] = set()
        offset = 0
        LOGGER.info("Starting to fetch all existing contacts...")

        while True:
            response = self._client.get(
                "/contacts", params={"limit": self._page_size, "offset": offset}
            ).expect({200}, f"Failed to fetch contacts at offset {offset}")
            contacts = response.json_object().get("contacts") or []
            if not isinstance(contacts, list):
                raise DecodeError(f"'contacts' is not a list at offset {offset}")
            if not contacts:
                break

            for contact in contacts:
                email = contact.get("email") if isinstance(contact, dict) else None
                if email:
                    emails.add(str(email).lower())

            LOGGER.info(
                "Fetched %d contacts (offset: %d). Total so far: %d", len(contacts), offset, len(emails)
            )
            if len(contacts) < self._page_size:
                break

            offset += self._page_size
            self._delay_policy.wait()

        LOGGER.info("Finished fetching contacts. Total: %d unique emails found", len(emails))
        return ExistingContactIndex(frozenset(emails))


def build_contact_index(client: BrevoClient, *, page_size: int = DEFAULT_PAGE_SIZE, delay_seconds: float = 0.1) -> ExistingContactIndex:
    return ContactIndexer(client, page_size=page_size, delay_policy=DelayPolicy(delay_seconds)).build()


__all__ = ["ContactIndexer", "build_contact_index"]
