from datetime import datetime, timedelta

import pytz

from morningproof.utils.routine_time import (
    cutoff_datetime,
    format_time_remaining,
    is_day_locked,
    is_past_cutoff,
    seconds_until_cutoff,
    seconds_until_next_deadline,
)

NEW_YORK = pytz.timezone("America/New_York")
CUTOFF = 9 * 60


def local(hour, minute=0, day=10):
    return NEW_YORK.localize(datetime(2025, 3, day, hour, minute))


def test_past_cutoff_is_strict():
    assert not is_past_cutoff(local(8, 59), CUTOFF)
    assert not is_past_cutoff(local(9, 0), CUTOFF)
    assert is_past_cutoff(local(9, 1), CUTOFF)


def test_day_lock_truth_table():
    assert not is_day_locked(local(8, 0), CUTOFF, all_habits_completed=False)
    assert not is_day_locked(local(8, 0), CUTOFF, all_habits_completed=True)
    assert is_day_locked(local(9, 30), CUTOFF, all_habits_completed=False)
    assert not is_day_locked(local(9, 30), CUTOFF, all_habits_completed=True)


def test_seconds_until_cutoff_floors_at_zero():
    assert seconds_until_cutoff(local(8, 30), CUTOFF) == 1800
    assert seconds_until_cutoff(local(9, 30), CUTOFF) == 0


def test_next_deadline_rolls_to_tomorrow():
    assert seconds_until_next_deadline(local(8, 0), CUTOFF) == 3600
    assert seconds_until_next_deadline(local(9, 30), CUTOFF) == 23.5 * 3600


def test_cutoff_uses_the_dates_utc_offset():
    # Clocks spring forward at 2 AM on 9 March 2025
    just_after_midnight = local(1, 0, day=9)
    assert just_after_midnight.utcoffset() == timedelta(hours=-5)
    assert cutoff_datetime(just_after_midnight, CUTOFF).utcoffset() == timedelta(hours=-4)


def test_format_time_remaining():
    assert format_time_remaining(3900) == "1h 05m"
    assert format_time_remaining(720) == "12m"
    assert format_time_remaining(0) == "0m"
