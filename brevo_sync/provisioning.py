"""Get-or-create the contact folder and create the run's recipient list."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from .client import ApiResponse, BrevoClient
from .errors import DecodeError, InvalidStateError, ValidationError
from .models import ContactList, Folder

LOGGER = logging.getLogger(__name__)

CREATED_STATUSES = frozenset({201, 202})
FOLDER_PAGE_SIZE = 50
LIST_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def extract_id(body: Mapping[str, Any], kind: str) -> int:
    """Return the positive integer ``id`` of a creation response."""

    value = body.get("id")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value or value <= 0:
        raise ValidationError(f"Invalid or missing {kind} ID in response: {dict(body)}", payload=dict(body))
    return int(value)


class FolderListProvisioner:
    """Resolves the target folder and creates a fresh list inside it every run."""

    def __init__(self, client: BrevoClient, *, folder_page_size: int = FOLDER_PAGE_SIZE) -> None:
        self._client = client
        self._folder_page_size = folder_page_size

    def list_folders(self) -> List[Folder]:
        folders: List[Folder] = []
        offset = 0
        while True:
            response = self._client.get(
                "/contacts/folders", params={"limit": self._folder_page_size, "offset": offset}
            ).expect({200}, "Failed to fetch folders")
            LOGGER.debug("Folders API response: %d - %s", response.status_code, response.text)
            page = _folders_from(response)
            folders.extend(page)
            if len(page) < self._folder_page_size:
                return folders
            offset += self._folder_page_size

    def find_folder(self, name: str) -> Optional[Folder]:
        for folder in self.list_folders():
            if folder.name == name:
                if folder.id <= 0:
                    raise InvalidStateError(f"invalid folder ID {folder.id} for folder '{name}'")
                LOGGER.info("Found existing folder '%s' with ID: %d", name, folder.id)
                return folder
        return None

    def create_folder(self, name: str) -> Folder:
        response = self._client.post("/contacts/folders", {"name": name})
        LOGGER.info("Create Folder API response: %d - %s", response.status_code, response.text)
        response.expect(CREATED_STATUSES, f"Failed to create folder '{name}'")
        folder = Folder(id=extract_id(response.json_object(), "folder"), name=name)
        LOGGER.info("Created new folder '%s' with ID: %d", name, folder.id)
        return folder

    def get_or_create_folder(self, name: str) -> Folder:
        folder = self.find_folder(name)
        if folder is not None:
            return folder
        LOGGER.info("Folder '%s' not found. Creating new one...", name)
        return self.create_folder(name)

    def create_list(self, folder: Folder, prefix: str, now: datetime) -> ContactList:
        if folder.id <= 0:
            raise InvalidStateError(f"invalid folder ID {folder.id} for contact list creation")
        name = f"{prefix} - {now.strftime(LIST_TIMESTAMP_FORMAT)}"
        response = self._client.post("/contacts/lists", {"name": name, "folderId": folder.id})
        LOGGER.info("Create Contact List API response: %d - %s", response.status_code, response.text)
        response.expect(CREATED_STATUSES, "Failed to create contact list")
        contact_list = ContactList(id=extract_id(response.json_object(), "list"), folder_id=folder.id, name=name)
        LOGGER.info("Created new contact list '%s' with ID: %d", name, contact_list.id)
        return contact_list

    def provision(self, folder_name: str, list_prefix: str, now: datetime) -> ContactList:
        """Resolve ``folder_name`` and create a timestamped list; every failure raises."""

        folder = self.get_or_create_folder(folder_name)
        return self.create_list(folder, list_prefix, now)


def _folders_from(response: ApiResponse) -> List[Folder]:
    body: Dict[str, Any] = response.json_object()
    raw = body.get("folders") or []
    if not isinstance(raw, list):
        raise DecodeError("'folders' is not a list")
    folders: List[Folder] = []
    for item in raw:
        if not isinstance(item, dict):
            raise DecodeError(f"Unexpected folder entry: {item!r}")
        try:
            folders.append(Folder(id=int(item.get("id") or 0), name=str(item.get("name") or "")))
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"Unexpected folder entry: {item!r}") from exc
    return folders


__all__ = ["FolderListProvisioner", "extract_id"]
