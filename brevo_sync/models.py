"""Data models shared by the ingestion helpers, the Brevo client and the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .errors import ValidationError

SOURCE_FIELDS: Tuple[str, ...] = (
    "nat",
    "stop",
    "category",
    "id",
    "contacts",
    "email",
    "website",
    "vendor_name",
    "address",
    "id_code",
    "phone",
    "fax",
    "city",
    "country",
)


# --- Core Input Models ---

@dataclass(frozen=True, slots=True)
class SourceRecord:
    """One row of the daily winners export, in its fixed column order."""

    nat: str = ""
    stop: str = ""
    category: str = ""
    id: str = ""
    contacts: str = ""
    email: str = ""
    website: str = ""
    vendor_name: str = ""
    address: str = ""
    id_code: str = ""
    phone: str = ""
    fax: str = ""
    city: str = ""
    country: str = ""

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "SourceRecord":
        """Build a record from exactly ``len(SOURCE_FIELDS)`` positional values."""

        if len(row) != len(SOURCE_FIELDS):
            raise ValidationError(
                f"expected {len(SOURCE_FIELDS)} fields, got {len(row)}", payload=list(row)
            )
        return cls(*("" if value is None else str(value) for value in row))

    def as_row(self) -> Tuple[str, ...]:
        return tuple(getattr(self, name) for name in SOURCE_FIELDS)

    def as_dict(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in SOURCE_FIELDS}


@dataclass(frozen=True, slots=True)
class ExistingContactIndex:
    """Lower-cased emails known to Brevo when the run started."""

    emails: FrozenSet[str] = frozenset()

    @classmethod
    def from_emails(cls, emails: Iterable[str]) -> "ExistingContactIndex":
        return cls(frozenset(email.lower() for email in emails if email))

    def __contains__(self, email: object) -> bool:
        return isinstance(email, str) and email.lower() in self.emails

    def __len__(self) -> int:
        return len(self.emails)

    @property
    def size(self) -> int:
        return len(self.emails)


# --- Remote Payloads & Objects ---

@dataclass(slots=True)
class UpsertPayload:
    """Body of ``POST /contacts`` with ``updateEnabled`` always set."""

    email: str
    attributes: Dict[str, str] = field(default_factory=dict)
    list_ids: List[int] = field(default_factory=list)
    update_enabled: bool = True

    def to_json(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"email": self.email, "updateEnabled": self.update_enabled}
        if self.attributes:
            body["attributes"] = dict(self.attributes)
        if self.list_ids:
            body["listIds"] = list(self.list_ids)
        return body

    def without_attribute(self, name: str) -> "UpsertPayload":
        return UpsertPayload(
            email=self.email,
            attributes={key: value for key, value in self.attributes.items() if key != name},
            list_ids=list(self.list_ids),
            update_enabled=self.update_enabled,
        )


@dataclass(frozen=True, slots=True)
class Folder:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class ContactList:
    id: int
    folder_id: int
    name: str


class CampaignState(str, Enum):
    NOT_CREATED = "not_created"
    CREATED = "created"
    SEND_REQUESTED = "send_requested"
    SENT = "sent"
    FAILED = "failed"


@dataclass(slots=True)
class Campaign:
    """A single email campaign and where it is in its create/send lifecycle."""

    name: str
    sender_name: str
    sender_email: str
    subject: str
    html_content: str
    list_id: int
    id: Optional[int] = None
    state: CampaignState = CampaignState.NOT_CREATED
    status_code: int = 0
    error: Optional[str] = None
    message: Optional[str] = None

    @property
    def created(self) -> bool:
        return self.id is not None and self.state in {
            CampaignState.CREATED,
            CampaignState.SEND_REQUESTED,
            CampaignState.SENT,
        }

    @property
    def success(self) -> bool:
        return self.state is not CampaignState.FAILED and self.state is not CampaignState.NOT_CREATED

    def to_payload(self) -> Dict[str, Any]:
        return {
            "sender": {"name": self.sender_name, "email": self.sender_email},
            "name": self.name,
            "subject": self.subject,
            "htmlContent": self.html_content,
            "recipients": {"listIds": [self.list_id]},
        }

    def as_dict(self) -> Dict[str, Any]:
        """Return the report representation (the HTML body is left out)."""

        return {
            "success": self.success,
            "state": self.state.value,
            "campaign_id": self.id,
            "campaign_name": self.name,
            "list_id": self.list_id,
            "status_code": self.status_code,
            "error": self.error,
            "message": self.message,
        }


# --- Outcomes ---

class RecordAction(str, Enum):
    ADDED = "Added"
    UPDATED = "Updated"


@dataclass(frozen=True, slots=True)
class RecordOutcome:
    email: str
    record: Optional[SourceRecord]
    action: RecordAction

    def as_dict(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "data": self.record.as_dict() if self.record is not None else None,
            "action": self.action.value,
        }


@dataclass(frozen=True, slots=True)
class ErrorOutcome:
    error: str
    details: str = ""
    email: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ProcessingReport:
    """Everything a pipeline run produced; the only observable result of a run."""

    added: List[RecordOutcome] = field(default_factory=list)
    updated: List[RecordOutcome] = field(default_factory=list)
    errors: List[ErrorOutcome] = field(default_factory=list)
    campaign: Optional[Campaign] = None
    total_existing_contacts: int = 0
    aborted: bool = False
    fatal_error: Optional[str] = None

    def record(self, outcome: RecordOutcome | ErrorOutcome) -> None:
        if isinstance(outcome, ErrorOutcome):
            self.errors.append(outcome)
        elif outcome.action is RecordAction.UPDATED:
            self.updated.append(outcome)
        else:
            self.added.append(outcome)

    def abort(self, error: str, details: str) -> "ProcessingReport":
        self.aborted = True
        self.fatal_error = error
        self.errors.append(ErrorOutcome(error=error, details=details))
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "added_to_campaign": [outcome.as_dict() for outcome in self.added],
            "updated_contacts": [outcome.as_dict() for outcome in self.updated],
            "errors": [outcome.as_dict() for outcome in self.errors],
            "campaign_info": self.campaign.as_dict() if self.campaign is not None else None,
            "total_existing_contacts": self.total_existing_contacts,
            "aborted": self.aborted,
            "fatal_error": self.fatal_error,
        }


__all__ = [
    "SOURCE_FIELDS",
    "Campaign",
    "CampaignState",
    "ContactList",
    "ErrorOutcome",
    "ExistingContactIndex",
    "Folder",
    "ProcessingReport",
    "RecordAction",
    "RecordOutcome",
    "SourceRecord",
    "UpsertPayload",
]
