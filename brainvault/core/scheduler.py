"""Daily and weekly digest timers.

Each enabled job runs its own loop on a daemon thread: compute the next
occurrence, wait on a cancellable event, run the job, repeat. Delays are
recomputed after every run, so a slow digest never causes drift or
catch-up bursts. Nothing is persisted; a restart simply computes the next
occurrence from the current time.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, tzinfo
from typing import Any, Callable, Dict, Optional, Tuple
from zoneinfo import ZoneInfo

from loguru import logger

from brainvault.core.digest import DigestGenerator
from brainvault.core.interfaces import Notifier
from brainvault.core.models import ScheduledJob

DAILY = "daily"
WEEKLY = "weekly"
WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_time(value: str) -> Tuple[int, int]:
    try:
        hours, minutes = (int(part) for part in value.split(":"))
    except ValueError as exc:
        raise ValueError(f"Invalid time '{value}', expected HH:MM") from exc
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return hours, minutes


def parse_weekday(value: str) -> int:
    try:
        return WEEKDAYS.index(value.strip().lower())
    except ValueError as exc:
        raise ValueError(f"Invalid weekday '{value}'") from exc


def next_daily_run(now: datetime, time_of_day: str) -> datetime:
    hours, minutes = parse_time(time_of_day)
    target = now.replace(hour=hours, minute=minutes, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return target


def next_weekly_run(now: datetime, day: str, time_of_day: str) -> datetime:
    hours, minutes = parse_time(time_of_day)
    target = now.replace(hour=hours, minute=minutes, second=0, microsecond=0)
    days_until = (parse_weekday(day) - now.weekday()) % 7
    if days_until == 0 and target <= now:
        days_until = 7
    return target + timedelta(days=days_until)


def seconds_until(target: datetime, now: datetime) -> float:
    # timestamps rather than subtraction: same-tzinfo subtraction ignores DST
    return max(0.0, target.timestamp() - now.timestamp())


class Scheduler:
    def __init__(
        self,
        digest: DigestGenerator,
        notifier: Notifier,
        destination_id: str,
        daily_time: Optional[str] = None,
        weekly_day: Optional[str] = None,
        weekly_time: Optional[str] = None,
        daily_timezone: str = "",
        weekly_timezone: str = "",
        clock: Optional[Callable[[Optional[tzinfo]], datetime]] = None,
        log: Optional[Any] = None,
    ) -> None:
        self.digest = digest
        self.notifier = notifier
        self.destination_id = destination_id
        self.daily_time = daily_time
        self.weekly_day = weekly_day
        self.weekly_time = weekly_time
        self.daily_tz = ZoneInfo(daily_timezone) if daily_timezone else None
        self.weekly_tz = ZoneInfo(weekly_timezone) if weekly_timezone else None
        self.clock = clock or _wall_clock
        self.log = log or logger.bind(component="scheduler")
        self._jobs: Dict[str, ScheduledJob] = {}
        self._stops: Dict[str, threading.Event] = {}
        self._threads: Dict[str, threading.Thread] = {}
        self._lock = threading.Lock()

    @property
    def enabled_jobs(self) -> Dict[str, str]:
        jobs = {}
        if self.daily_time:
            jobs[DAILY] = "Daily digest"
        if self.weekly_day and self.weekly_time:
            jobs[WEEKLY] = "Weekly review"
        return jobs

    def start(self) -> None:
        for job_id, label in self.enabled_jobs.items():
            if job_id in self._threads:
                continue
            stop = threading.Event()
            next_run = self._arm(job_id, label)
            thread = threading.Thread(
                target=self._run_loop,
                args=(job_id, label, stop, next_run),
                name=f"brainvault-{job_id}",
                daemon=True,
            )
            self._stops[job_id] = stop
            self._threads[job_id] = thread
            thread.start()
        self.log.info("Scheduler started with jobs {}", sorted(self._threads))

    def stop(self, timeout: float = 5.0) -> None:
        for stop in self._stops.values():
            stop.set()
        for job_id, thread in self._threads.items():
            if thread is not threading.current_thread():
                thread.join(timeout)
            self.log.debug("Job {} stopped", job_id)
        self._stops.clear()
        self._threads.clear()
        with self._lock:
            self._jobs.clear()

    def get_next_runs(self) -> Dict[str, ScheduledJob]:
        with self._lock:
            return {
                job_id: ScheduledJob(job.job_id, job.label, job.next_run)
                for job_id, job in self._jobs.items()
            }

    def trigger_now(self, job_id: str) -> None:
        if job_id == DAILY:
            text = self.digest.generate_daily_digest()
        elif job_id == WEEKLY:
            text = self.digest.generate_weekly_review()
        else:
            self.log.warning("Unknown job id {}", job_id)
            return
        self.notifier.deliver(self.destination_id, text)

    def next_run(self, job_id: str, now: Optional[datetime] = None) -> datetime:
        if job_id == DAILY:
            return next_daily_run(now or self.clock(self.daily_tz), self.daily_time)
        return next_weekly_run(now or self.clock(self.weekly_tz), self.weekly_day, self.weekly_time)

    def _arm(self, job_id: str, label: str, after: Optional[datetime] = None) -> datetime:
        now = self.clock(self.daily_tz if job_id == DAILY else self.weekly_tz)
        if after is not None and now < after:
            # woke early; never re-fire the occurrence that just ran
            now = after
        next_run = self.next_run(job_id, now)
        with self._lock:
            self._jobs[job_id] = ScheduledJob(job_id=job_id, label=label, next_run=next_run)
        self.log.info("{} scheduled for {}", label, next_run.isoformat())
        return next_run

    def _run_loop(self, job_id: str, label: str, stop: threading.Event, next_run: datetime) -> None:
        while not stop.is_set():
            delay = seconds_until(next_run, self.clock(next_run.tzinfo))
            if stop.wait(delay) or stop.is_set():
                break
            try:
                self.trigger_now(job_id)
            except Exception as exc:
                self.log.error("{} failed: {}", label, exc)
            if stop.is_set():
                break
            next_run = self._arm(job_id, label, after=next_run)


def _wall_clock(zone: Optional[tzinfo]) -> datetime:
    return datetime.now(zone) if zone is not None else datetime.now()
