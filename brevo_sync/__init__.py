"""Top-level package for the Brevo contact sync and campaign dispatch pipeline."""

from . import ingestion, models  # noqa: F401
from .config import Settings, load_settings
from .errors import (
    BrevoSyncError,
    ConfigurationError,
    ConflictError,
    DecodeError,
    InvalidStateError,
    RemoteError,
    TransportError,
    ValidationError,
)
from .factory import build_pipeline
from .models import (
    Campaign,
    CampaignState,
    ContactList,
    ErrorOutcome,
    ExistingContactIndex,
    Folder,
    ProcessingReport,
    RecordAction,
    RecordOutcome,
    SourceRecord,
    UpsertPayload,
)
from .orchestrator import SyncPipeline

__all__ = [
    "BrevoSyncError",
    "Campaign",
    "CampaignState",
    "ConfigurationError",
    "ConflictError",
    "ContactList",
    "DecodeError",
    "ErrorOutcome",
    "ExistingContactIndex",
    "Folder",
    "InvalidStateError",
    "ProcessingReport",
    "RecordAction",
    "RecordOutcome",
    "RemoteError",
    "Settings",
    "SourceRecord",
    "SyncPipeline",
    "TransportError",
    "UpsertPayload",
    "ValidationError",
    "build_pipeline",
    "load_settings",
    "ingestion",
    "models",
    "orchestrator",
]
