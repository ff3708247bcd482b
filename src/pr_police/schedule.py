"""Schedule gate and the once-a-minute ticker that drives scheduled reports."""

from __future__ import annotations

from datetime import datetime
import threading
import time
from typing import Callable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from .config import CHECK_INTERVAL_SECONDS, ScheduleConfig


# Fixed English names so DAYS_TO_RUN does not depend on the process locale.
WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# Wake slightly after the boundary so the clock already reads the new minute
TICK_MARGIN = 0.01


def _localize(now: datetime, schedule: ScheduleConfig) -> datetime:
    if schedule.timezone and now.tzinfo is not None:
        return now.astimezone(ZoneInfo(schedule.timezone))
    return now


def weekday_name(now: datetime) -> str:
    return WEEKDAY_NAMES[now.weekday()]


def timecode(now: datetime) -> int:
    """Time of day as hour*100 + minute, e.g. 9:05 -> 905."""
    return now.hour * 100 + now.minute


def should_run(now: datetime, schedule: ScheduleConfig) -> bool:
    now = _localize(now, schedule)
    run_today = weekday_name(now) in schedule.days_to_run
    run_this_minute = timecode(now) in schedule.times_to_run
    return run_today and run_this_minute


def readable_timestamp(now: datetime) -> str:
    return now.strftime("%A %Y-%m-%d %I:%M %p")


class MinuteTicker:
    """Evaluates the schedule once per interval on a daemon thread.

    The gate itself has no memory, so the ticker remembers the last minute it
    fired for and never calls ``on_run`` twice for the same qualifying minute.
    Each run gets its own daemon thread, so evaluations keep to the minute
    boundary no matter how long a report takes.
    """

    def __init__(
        self,
        schedule: ScheduleConfig,
        on_run: Callable[[datetime], None],
        interval: float = CHECK_INTERVAL_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.schedule = schedule
        self.on_run = on_run
        self.interval = interval
        self.clock = clock or self._default_clock
        self._last_fired: Optional[Tuple[int, int, int, int]] = None
        self._runs: List[threading.Thread] = []
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _default_clock(self) -> datetime:
        if self.schedule.timezone:
            return datetime.now(tz=ZoneInfo(self.schedule.timezone))
        return datetime.now()

    def tick(self) -> bool:
        """Run a single evaluation. Returns True if the run fired."""
        now = _localize(self.clock(), self.schedule)
        minute_key = (now.year, now.timetuple().tm_yday, now.hour, now.minute)

        if not should_run(now, self.schedule):
            print(f"[SCHEDULE] Nothing to run at: {readable_timestamp(now)}", flush=True)
            return False

        if minute_key == self._last_fired:
            print(f"[SCHEDULE] Already ran for: {readable_timestamp(now)}", flush=True)
            return False

        self._last_fired = minute_key
        print(f"[SCHEDULE] Running at: {readable_timestamp(now)}", flush=True)

        # Runs may overlap; a slow report must not hold up the next tick
        run = threading.Thread(target=self._run, args=(now,), name="pr-police-run", daemon=True)
        self._runs = [t for t in self._runs if t.is_alive()] + [run]
        run.start()
        return True

    def _run(self, now: datetime) -> None:
        try:
            self.on_run(now)
        except Exception as e:
            print(f"[ERROR] Scheduled run failed: {e}", flush=True)

    def join_runs(self, timeout: Optional[float] = None) -> None:
        """Wait for scheduled runs that are still in flight."""
        for run in list(self._runs):
            run.join(timeout)

    def seconds_until_next_tick(self) -> float:
        """Delay to the next interval boundary (the next whole minute by default), plus a small margin."""
        return self.interval - (time.time() % self.interval) + self.interval * TICK_MARGIN

    def _loop(self) -> None:
        while not self._stop.wait(self.seconds_until_next_tick()):
            self.tick()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="pr-police-ticker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval)
            self._thread = None
