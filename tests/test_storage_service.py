from datetime import date

from morningproof.models.habits import DailyLog, HabitConfig, HabitType, MorningProofSettings
from morningproof.models.streak import StreakData
from morningproof.services.preferences_store import prefix_pattern
from morningproof.services.storage_service import (
    HABIT_CONFIGS_KEY,
    STREAK_KEY,
    daily_log_key,
)

TODAY = date(2025, 3, 10)


def test_daily_log_key():
    assert daily_log_key(TODAY) == "morningproof_daily_2025-03-10"


async def test_missing_values_load_as_defaults(storage):
    assert (await storage.load_streak_data()).current_streak == 0
    assert (await storage.load_achievements()).unlocked_count == 0
    assert await storage.load_settings() is None
    assert await storage.load_habit_configs() is None
    assert await storage.load_custom_habits() == []
    assert not await storage.has_completed_onboarding()


async def test_values_survive_a_save(storage, store):
    await storage.save_settings(MorningProofSettings(user_name="Sam", morning_cutoff_hour=8))
    await storage.save_habit_configs(HabitConfig.default_configs())
    await storage.save_daily_log(DailyLog(date=TODAY))

    assert (await storage.load_settings()).morning_cutoff_minutes == 480
    configs = await storage.load_habit_configs()
    assert configs[0].habit_type == HabitType.MADE_BED
    assert (await storage.load_daily_log(TODAY)).date == TODAY
    assert isinstance(await store.get(HABIT_CONFIGS_KEY), list)


async def test_corrupt_values_fall_back_to_defaults(storage, store):
    await store.set(STREAK_KEY, {"current_streak": "lots"})
    await store.set(HABIT_CONFIGS_KEY, [{"habit_type": "flying"}])

    assert (await storage.load_streak_data()).current_streak == 0
    assert await storage.load_habit_configs() is None


async def test_routine_reset_keeps_streak(storage):
    await storage.save_streak_data(StreakData(current_streak=4))
    await storage.save_settings(MorningProofSettings(user_name="Sam"))
    await storage.save_daily_log(DailyLog(date=TODAY))
    await storage.save_custom_completions(TODAY, [])
    await storage.set_onboarding_completed(True)

    await storage.reset_routine_data()

    assert (await storage.load_streak_data()).current_streak == 4
    assert await storage.load_settings() is None
    assert await storage.load_daily_log(TODAY) is None
    assert not await storage.has_completed_onboarding()


def test_prefix_pattern_escapes_wildcards():
    assert prefix_pattern("appLocking_") == "appLocking\\_%"
    assert prefix_pattern("100%_") == "100\\%\\_%"


async def test_prefix_lookups_treat_underscore_literally(store):
    await store.set("appLocking_enabled", True)
    await store.set("appLockingXenabled", "lookalike")

    assert await store.get_prefixed("appLocking_") == {"appLocking_enabled": True}

    await store.set("morningproof_daily_2025-03-10", {"kept": False})
    await store.set("morningproofXdaily_2025-03-10", {"kept": True})
    await store.delete_prefixed("morningproof_daily_")

    assert await store.get("morningproof_daily_2025-03-10") is None
    assert await store.get("morningproofXdaily_2025-03-10") == {"kept": True}
