"""Daily trigger: run the pipeline once per day against that day's export."""
from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Optional

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import Settings
from .factory import build_pipeline
from .ingestion.loaders import load_source_records
from .models import ProcessingReport
from .orchestrator import log_summary

LOGGER = logging.getLogger(__name__)

DAILY_JOB_ID = "brevo_daily_sync"

PipelineRunner = Callable[[Settings, Path], ProcessingReport]


def resolve_input_path(pattern: str, day: date) -> Path:
    """Substitute ``{date}`` (``YYYY-MM-DD``) into ``pattern``."""

    return Path(pattern.replace("{date}", day.strftime("%Y-%m-%d")))


def parse_time_of_day(value: str) -> tuple[int, int]:
    try:
        hour_text, minute_text = value.split(":", 1)
        hour, minute = int(hour_text), int(minute_text)
    except ValueError as exc:
        raise ValueError(f"Invalid time of day '{value}', expected HH:MM") from exc
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time of day '{value}', expected HH:MM")
    return hour, minute


def run_pipeline(settings: Settings, input_path: Path) -> ProcessingReport:
    records = load_source_records(input_path)
    pipeline = build_pipeline(settings)
    report = pipeline.run(records)
    log_summary(report)
    return report


def run_scheduled(
    settings: Settings,
    *,
    today: Optional[date] = None,
    runner: PipelineRunner = run_pipeline,
) -> Optional[ProcessingReport]:
    """Run once for ``today``; a missing input file skips the run."""

    input_path = resolve_input_path(settings.input_pattern, today or date.today())
    if not input_path.exists():
        LOGGER.info("Input file not found: %s. Skipping this run.", input_path)
        return None
    LOGGER.info("Running scheduled sync for %s", input_path)
    return runner(settings, input_path)


def _daily_job(settings: Settings, runner: PipelineRunner) -> None:
    LOGGER.info("Running scheduled task at %s", datetime.now().isoformat(timespec="seconds"))
    try:
        run_scheduled(settings, runner=runner)
    except Exception:
        LOGGER.exception("Scheduled run failed")


def build_scheduler(
    settings: Settings,
    *,
    at: str = "02:00",
    runner: PipelineRunner = run_pipeline,
    scheduler: Optional[BaseScheduler] = None,
) -> BaseScheduler:
    """Register the daily sync job on ``scheduler`` (a new :class:`BlockingScheduler` by default).

    ``max_instances=1`` keeps runs from overlapping and ``coalesce`` folds
    triggers missed while a run was still going into a single one.
    """

    hour, minute = parse_time_of_day(at)
    scheduler = scheduler or BlockingScheduler()
    scheduler.add_job(
        _daily_job,
        trigger=CronTrigger(hour=hour, minute=minute),
        args=(settings, runner),
        id=DAILY_JOB_ID,
        name="Brevo daily sync",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    return scheduler


def run_daily(
    settings: Settings,
    *,
    at: str = "02:00",
    runner: PipelineRunner = run_pipeline,
    scheduler: Optional[BaseScheduler] = None,
) -> None:
    """Block and trigger :func:`run_scheduled` every day at ``at`` (local time)."""

    scheduler = build_scheduler(settings, at=at, runner=runner, scheduler=scheduler)
    LOGGER.info("Scheduler is running. Task will run at %s every day.", at)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        LOGGER.info("Scheduler stopped")


__all__ = ["build_scheduler", "parse_time_of_day", "resolve_input_path", "run_daily", "run_pipeline", "run_scheduled"]
