"""Factory helpers for constructing the sync pipeline from settings."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

import requests

from .campaign import CampaignOrchestrator
from .client import BrevoClient
from .config import Settings
from .indexer import ContactIndexer
from .io import load_template
from .orchestrator import SyncPipeline
from .provisioning import FolderListProvisioner
from .rate_limit import DelayPolicy, RateLimitedExecutor, RateLimiter
from .upsert import UpsertExecutor


def build_pipeline(
    settings: Settings,
    *,
    client: Optional[BrevoClient] = None,
    session: Optional[requests.Session] = None,
    html_content: Optional[str] = None,
    calls_per_minute: Optional[float] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> SyncPipeline:
    """Wire every pipeline component to one client and one settings value."""

    client = client or BrevoClient.from_settings(settings, session=session)
    if html_content is None:
        html_content = load_template(settings.template_path)

    executor = UpsertExecutor(client)
    if settings.max_workers and settings.max_workers > 1:
        limiter = RateLimiter(calls_per_minute or settings.calls_per_minute)
        executor = RateLimitedExecutor(executor, rate_limiter=limiter)

    return SyncPipeline(
        indexer=ContactIndexer(
            client,
            page_size=settings.page_size,
            delay_policy=DelayPolicy(delay_seconds=settings.page_delay_seconds),
        ),
        provisioner=FolderListProvisioner(client),
        executor=executor,
        campaigns=CampaignOrchestrator(client, settings, html_content),
        folder_name=settings.folder_name,
        list_prefix=settings.list_name_prefix,
        max_workers=settings.max_workers,
        clock=clock,
    )
