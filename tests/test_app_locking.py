from datetime import date, datetime, timedelta

import pytz

from morningproof.models.app_locking import ENABLED_KEY, AppLockingState
from morningproof.models.habits import MorningProofSettings
from morningproof.models.schemas import AppLockingSettingsUpdate
from morningproof.models.streak import StreakData

NEW_YORK = pytz.timezone("America/New_York")


def local(hour, minute=0, day=10):
    return NEW_YORK.localize(datetime(2025, 3, day, hour, minute))


def test_shield_predicate():
    active = AppLockingState(is_enabled=True, blocking_start_minutes=6 * 60)

    assert not AppLockingState(is_enabled=False, blocking_start_minutes=360).should_apply_shields(local(7))
    assert not AppLockingState(is_enabled=True, blocking_start_minutes=0).should_apply_shields(local(7))
    assert active.should_apply_shields(local(7))
    assert active.should_apply_shields(local(6))
    assert not active.should_apply_shields(local(5, 59))


def test_lock_in_only_counts_for_today():
    locked_today = AppLockingState(
        is_enabled=True, blocking_start_minutes=360,
        is_day_locked_in=True, last_lock_in_date=local(6, 30),
    )
    locked_yesterday = AppLockingState(
        is_enabled=True, blocking_start_minutes=360,
        is_day_locked_in=True, last_lock_in_date=local(6, 30) - timedelta(days=1),
    )

    assert locked_today.has_locked_in_today(local(7))
    assert not locked_today.should_apply_shields(local(7))
    assert not locked_yesterday.has_locked_in_today(local(7))
    assert locked_yesterday.should_apply_shields(local(7))


def test_effective_cutoff_honours_weekend_deadlines():
    state = AppLockingState(cutoff_minutes=540, weekday_deadline_minutes=480, weekend_deadline_minutes=660)
    monday, saturday = date(2025, 3, 10), date(2025, 3, 8)

    assert state.cutoff_minutes_for(monday) == 540
    state.custom_deadlines_enabled = True
    assert state.cutoff_minutes_for(monday) == 480
    assert state.cutoff_minutes_for(saturday) == 660


def test_from_preferences_ignores_missing_values():
    state = AppLockingState.from_preferences({ENABLED_KEY: True, "appLocking_cutoffMinutes": None})
    assert state.is_enabled
    assert state.cutoff_minutes == 540


async def test_settings_update_is_persisted(app_locking, store):
    await app_locking.update_settings(AppLockingSettingsUpdate(is_enabled=True, blocking_start_minutes=330))

    assert await store.get(ENABLED_KEY) is True
    state = await app_locking.load_state()
    assert state.blocking_start_minutes == 330
    assert state.is_enabled


async def test_lock_in_lifts_shields(app_locking):
    await app_locking.update_settings(AppLockingSettingsUpdate(is_enabled=True, blocking_start_minutes=360))
    assert (await app_locking.shield_decision(local(7))).should_apply_shields

    await app_locking.lock_in_day(local(7, 15))
    decision = await app_locking.shield_decision(local(7, 20))
    assert decision.is_locked_in_today
    assert not decision.should_apply_shields


async def test_emergency_unlock_breaks_streak(app_locking, storage):
    await storage.save_streak_data(StreakData(current_streak=5, longest_streak=5))
    await app_locking.update_settings(AppLockingSettingsUpdate(is_enabled=True, blocking_start_minutes=360))

    state = await app_locking.emergency_unlock(local(7), storage)
    decision = await app_locking.shield_decision(local(7), state)

    streak = await storage.load_streak_data()
    assert streak.current_streak == 0
    assert streak.last_lost_streak == 5
    assert decision.was_emergency_unlock
    assert not decision.should_apply_shields


async def test_interval_start_resets_the_day(app_locking):
    await app_locking.update_settings(AppLockingSettingsUpdate(is_enabled=True, blocking_start_minutes=360))
    await app_locking.lock_in_day(local(7, 0, day=9))

    decision = await app_locking.interval_did_start(local(6, 0))

    assert decision.should_apply_shields
    assert not decision.is_locked_in_today
    state = await app_locking.load_state()
    assert state.last_reset_date == date(2025, 3, 10)
    assert not state.was_emergency_unlock


async def test_interval_start_when_disabled_changes_nothing(app_locking):
    await app_locking.lock_in_day(local(7, 0, day=9))
    decision = await app_locking.interval_did_start(local(6, 0))

    assert not decision.should_apply_shields
    assert (await app_locking.load_state()).is_day_locked_in


async def test_interval_end_clears_shields(app_locking):
    await app_locking.update_settings(AppLockingSettingsUpdate(is_enabled=True, blocking_start_minutes=360))
    decision = await app_locking.interval_did_end(local(7))
    assert not decision.should_apply_shields


async def test_sync_with_routine_settings(app_locking):
    settings = MorningProofSettings(
        morning_cutoff_hour=8, morning_cutoff_minute=30,
        custom_deadlines_enabled=True, weekday_deadline_minutes=450, weekend_deadline_minutes=600,
    )
    await app_locking.sync_with_settings(settings)

    state = await app_locking.load_state()
    assert state.cutoff_minutes == 510
    assert state.custom_deadlines_enabled
    assert state.cutoff_minutes_for(date(2025, 3, 8)) == 600
