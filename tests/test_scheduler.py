from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from brevo_sync.models import ProcessingReport
from brevo_sync.scheduler import (
    DAILY_JOB_ID,
    build_scheduler,
    parse_time_of_day,
    resolve_input_path,
    run_daily,
    run_scheduled,
)


def test_resolve_input_path_substitutes_date() -> None:
    path = resolve_input_path("winners/applications_{date}.csv", date(2026, 10, 19))

    assert path == Path("winners/applications_2026-10-19.csv")


@pytest.mark.parametrize("value", ["2", "25:00", "02:60", "aa:bb"])
def test_parse_time_of_day_rejects_invalid_values(value) -> None:
    with pytest.raises(ValueError):
        parse_time_of_day(value)


def test_run_scheduled_skips_missing_file(tmp_path, settings) -> None:
    pattern = str(tmp_path / "applications_{date}.csv")
    runs = []

    result = run_scheduled(
        _with_pattern(settings, pattern),
        today=date(2026, 10, 19),
        runner=lambda s, p: runs.append(p),
    )

    assert result is None
    assert runs == []


def test_run_scheduled_runs_existing_file(tmp_path, settings) -> None:
    pattern = str(tmp_path / "applications_{date}.csv")
    (tmp_path / "applications_2026-10-19.csv").write_text("header\n", encoding="utf-8")
    report = ProcessingReport()
    seen = []

    def runner(run_settings, input_path):
        seen.append(input_path)
        return report

    result = run_scheduled(_with_pattern(settings, pattern), today=date(2026, 10, 19), runner=runner)

    assert result is report
    assert seen == [tmp_path / "applications_2026-10-19.csv"]


def test_build_scheduler_registers_single_instance_cron_job(settings) -> None:
    scheduler = build_scheduler(settings, at="02:30", scheduler=BackgroundScheduler())

    (job,) = scheduler.get_jobs()
    assert job.id == DAILY_JOB_ID
    assert isinstance(job.trigger, CronTrigger)
    assert "hour='2'" in str(job.trigger)
    assert "minute='30'" in str(job.trigger)
    assert job.max_instances == 1
    assert job.coalesce is True


def test_build_scheduler_rejects_invalid_time(settings) -> None:
    with pytest.raises(ValueError):
        build_scheduler(settings, at="26:00", scheduler=BackgroundScheduler())


def test_daily_job_runs_todays_file_and_survives_failures(tmp_path, settings) -> None:
    pattern = str(tmp_path / "applications_{date}.csv")
    (tmp_path / f"applications_{date.today():%Y-%m-%d}.csv").write_text("header\n", encoding="utf-8")
    attempts = []

    def runner(run_settings, input_path):
        attempts.append(input_path.name)
        if len(attempts) == 1:
            raise RuntimeError("remote exploded")
        return ProcessingReport()

    scheduler = build_scheduler(_with_pattern(settings, pattern), runner=runner, scheduler=BackgroundScheduler())
    (job,) = scheduler.get_jobs()

    job.func(*job.args, **job.kwargs)
    job.func(*job.args, **job.kwargs)

    assert attempts == [f"applications_{date.today():%Y-%m-%d}.csv"] * 2


def test_run_daily_starts_the_scheduler(settings) -> None:
    class RecordingScheduler(BackgroundScheduler):
        started = False

        def start(self, *args, **kwargs):
            self.started = True

    scheduler = RecordingScheduler()

    run_daily(settings, at="02:00", scheduler=scheduler)

    assert scheduler.started is True
    assert [job.id for job in scheduler.get_jobs()] == [DAILY_JOB_ID]


def test_run_daily_returns_on_keyboard_interrupt(settings) -> None:
    class InterruptedScheduler(BackgroundScheduler):
        def start(self, *args, **kwargs):
            raise KeyboardInterrupt

    run_daily(settings, scheduler=InterruptedScheduler())


def _with_pattern(settings, pattern):
    return replace(settings, input_pattern=pattern)
