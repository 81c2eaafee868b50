import logging
from datetime import date
from typing import List, Optional, Type, TypeVar
from pydantic import BaseModel, TypeAdapter, ValidationError

from morningproof.models.habits import (
    DailyLog, HabitConfig, MorningProofSettings, CustomHabit, CustomHabitCompletion
)
from morningproof.models.streak import StreakData
from morningproof.models.achievements import UserAchievements
from morningproof.services.preferences_store import PreferencesStore

logger = logging.getLogger(__name__)

STREAK_KEY = "morningproof_streak_data"
ACHIEVEMENTS_KEY = "morningproof_achievements"
SETTINGS_KEY = "morningproof_settings"
HABIT_CONFIGS_KEY = "morningproof_habit_configs"
DAILY_LOG_PREFIX = "morningproof_daily_"
ONBOARDING_KEY = "morningproof_onboarding_completed"
CUSTOM_HABITS_KEY = "morningproof_custom_habits"
CUSTOM_DAILY_PREFIX = "morningproof_custom_daily_"

ModelT = TypeVar("ModelT", bound=BaseModel)

_habit_configs_adapter = TypeAdapter(List[HabitConfig])
_custom_habits_adapter = TypeAdapter(List[CustomHabit])
_custom_completions_adapter = TypeAdapter(List[CustomHabitCompletion])


def daily_log_key(day: date) -> str:
    return f"{DAILY_LOG_PREFIX}{day.isoformat()}"


def custom_daily_key(day: date) -> str:
    return f"{CUSTOM_DAILY_PREFIX}{day.isoformat()}"


class StorageService:
    """Typed access to a user's stored routine data. Unreadable values fall back to defaults."""

    def __init__(self, store: PreferencesStore):
        self.store = store

    async def _load_model(self, key: str, model: Type[ModelT]) -> Optional[ModelT]:
        raw = await self.store.get(key)
        if raw is None:
            return None
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Discarding unreadable value for {key} (user {self.store.user_id}): {e}")
            return None

    async def _load_list(self, key: str, adapter: TypeAdapter) -> Optional[list]:
        raw = await self.store.get(key)
        if raw is None:
            return None
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            logger.error(f"Discarding unreadable value for {key} (user {self.store.user_id}): {e}")
            return None

    # Streak and achievements

    async def load_streak_data(self) -> StreakData:
        return await self._load_model(STREAK_KEY, StreakData) or StreakData()

    async def save_streak_data(self, streak_data: StreakData):
        await self.store.set(STREAK_KEY, streak_data.model_dump(mode="json"))

    async def load_achievements(self) -> UserAchievements:
        return await self._load_model(ACHIEVEMENTS_KEY, UserAchievements) or UserAchievements()

    async def save_achievements(self, achievements: UserAchievements):
        await self.store.set(ACHIEVEMENTS_KEY, achievements.model_dump(mode="json"))

    # Settings and habit configs

    async def load_settings(self) -> Optional[MorningProofSettings]:
        return await self._load_model(SETTINGS_KEY, MorningProofSettings)

    async def save_settings(self, settings: MorningProofSettings):
        await self.store.set(SETTINGS_KEY, settings.model_dump(mode="json"))

    async def load_habit_configs(self) -> Optional[List[HabitConfig]]:
        return await self._load_list(HABIT_CONFIGS_KEY, _habit_configs_adapter)

    async def save_habit_configs(self, configs: List[HabitConfig]):
        await self.store.set(HABIT_CONFIGS_KEY, _habit_configs_adapter.dump_python(configs, mode="json"))

    # Daily logs

    async def load_daily_log(self, day: date) -> Optional[DailyLog]:
        return await self._load_model(daily_log_key(day), DailyLog)

    async def save_daily_log(self, log: DailyLog):
        await self.store.set(daily_log_key(log.date), log.model_dump(mode="json"))

    async def load_daily_logs(self, start: date, end: date) -> List[DailyLog]:
        """Stored logs dated start..end inclusive, oldest first"""
        values = await self.store.get_prefixed(DAILY_LOG_PREFIX)
        logs = []
        for key, raw in values.items():
            try:
                day = date.fromisoformat(key[len(DAILY_LOG_PREFIX):])
                if not start <= day <= end:
                    continue
                logs.append(DailyLog.model_validate(raw))
            except (ValueError, ValidationError) as e:
                logger.error(f"Skipping unreadable daily log {key} (user {self.store.user_id}): {e}")
        return sorted(logs, key=lambda log: log.date)

    # Custom habits

    async def load_custom_habits(self) -> List[CustomHabit]:
        return await self._load_list(CUSTOM_HABITS_KEY, _custom_habits_adapter) or []

    async def save_custom_habits(self, habits: List[CustomHabit]):
        await self.store.set(CUSTOM_HABITS_KEY, _custom_habits_adapter.dump_python(habits, mode="json"))

    async def load_custom_completions(self, day: date) -> List[CustomHabitCompletion]:
        return await self._load_list(custom_daily_key(day), _custom_completions_adapter) or []

    async def save_custom_completions(self, day: date, completions: List[CustomHabitCompletion]):
        await self.store.set(custom_daily_key(day), _custom_completions_adapter.dump_python(completions, mode="json"))

    # Onboarding

    async def has_completed_onboarding(self) -> bool:
        return bool(await self.store.get(ONBOARDING_KEY))

    async def set_onboarding_completed(self, completed: bool):
        await self.store.set(ONBOARDING_KEY, completed)

    # Reset

    async def reset_routine_data(self):
        """Clear settings, habit configs, onboarding and day logs. Streaks survive."""
        await self.store.delete(SETTINGS_KEY)
        await self.store.delete(HABIT_CONFIGS_KEY)
        await self.store.delete(ONBOARDING_KEY)
        await self.store.delete_prefixed(DAILY_LOG_PREFIX)
        await self.store.delete_prefixed(CUSTOM_DAILY_PREFIX)
