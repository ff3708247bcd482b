from __future__ import annotations

from datetime import datetime, timedelta
import itertools
import threading
import time
from unittest.mock import patch

import pytest

from pr_police.config import ScheduleConfig
from pr_police.schedule import MinuteTicker, should_run, timecode, weekday_name


WEEKDAYS = frozenset({"monday", "tuesday", "wednesday", "thursday", "friday"})
SCHEDULE = ScheduleConfig(days_to_run=WEEKDAYS, times_to_run=frozenset({900, 1430}))

# 2024-01-01 is a Monday
MONDAY = datetime(2024, 1, 1)
SATURDAY = datetime(2024, 1, 6)


@pytest.mark.parametrize(
    "now, expected",
    [
        (MONDAY.replace(hour=9, minute=0), True),
        (MONDAY.replace(hour=14, minute=30), True),
        (MONDAY.replace(hour=9, minute=1), False),
        (MONDAY.replace(hour=21, minute=0), False),
        (SATURDAY.replace(hour=9, minute=0), False),
        (SATURDAY.replace(hour=14, minute=30), False),
        (datetime(2024, 1, 5, 14, 30), True),  # Friday
        (datetime(2024, 1, 7, 9, 0), False),  # Sunday
    ],
)
def test_should_run_table(now, expected):
    assert should_run(now, SCHEDULE) is expected


def test_should_run_requires_both_day_and_time():
    for day in range(1, 8):
        for hour, minute in [(9, 0), (9, 30), (14, 30), (0, 0)]:
            now = datetime(2024, 1, day, hour, minute)
            expected = weekday_name(now) in SCHEDULE.days_to_run and timecode(now) in SCHEDULE.times_to_run
            assert should_run(now, SCHEDULE) is expected


def test_timecode():
    assert timecode(datetime(2024, 1, 1, 9, 5)) == 905
    assert timecode(datetime(2024, 1, 1, 0, 0)) == 0
    assert timecode(datetime(2024, 1, 1, 23, 59)) == 2359


def test_weekday_name_is_lowercase_english():
    assert weekday_name(MONDAY) == "monday"
    assert weekday_name(SATURDAY) == "saturday"


def test_ignores_seconds():
    assert should_run(datetime(2024, 1, 1, 9, 0, 59), SCHEDULE) is True


def test_ticker_fires_once_per_qualifying_minute():
    calls = []
    times = iter([
        datetime(2024, 1, 1, 8, 59, 30),
        datetime(2024, 1, 1, 9, 0, 1),
        datetime(2024, 1, 1, 9, 0, 58),  # timer drifted, still the same minute
        datetime(2024, 1, 1, 9, 1, 0),
        datetime(2024, 1, 2, 9, 0, 0),  # next day fires again
    ])
    ticker = MinuteTicker(SCHEDULE, calls.append, clock=lambda: next(times))

    fired = [ticker.tick() for _ in range(5)]
    ticker.join_runs(timeout=5)

    assert fired == [False, True, False, False, True]
    assert [c.day for c in calls] == [1, 2]


def test_ticker_survives_failing_run():
    def boom(now):
        raise RuntimeError("slack down")

    ticker = MinuteTicker(SCHEDULE, boom, clock=lambda: datetime(2024, 1, 1, 9, 0))

    assert ticker.tick() is True
    ticker.join_runs(timeout=5)


def test_ticker_keeps_ticking_while_a_slow_run_is_in_flight():
    """Each fake minute lasts 0.05 s while every run takes three of them."""
    every_minute = ScheduleConfig(days_to_run=frozenset({"monday"}), times_to_run=frozenset(range(900, 960)))
    minutes = itertools.count()
    fired = []
    release = threading.Event()

    def slow_run(now):
        fired.append(timecode(now))
        release.wait(0.15)

    ticker = MinuteTicker(
        every_minute,
        slow_run,
        interval=0.05,
        clock=lambda: datetime(2024, 1, 1, 9, 0) + timedelta(minutes=next(minutes)),
    )

    ticker.start()
    deadline = time.monotonic() + 5
    while len(fired) < 6 and time.monotonic() < deadline:
        time.sleep(0.01)
    ticker.stop()
    release.set()
    ticker.join_runs(timeout=5)

    assert sorted(fired)[:6] == [900, 901, 902, 903, 904, 905]
    assert ticker._thread is None


def test_seconds_until_next_tick_lands_on_boundary():
    ticker = MinuteTicker(SCHEDULE, lambda now: None)

    with patch("pr_police.schedule.time.time", return_value=165.0):
        delay = ticker.seconds_until_next_tick()

    # 45 s into the minute: 15 s to the boundary plus the margin
    assert delay == pytest.approx(15.6)
