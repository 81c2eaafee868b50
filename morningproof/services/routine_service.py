"""
Morning routine manager.

Holds one user's routine state for a single request: settings, habit
configs, today's log and custom habits. Every mutation recalculates the
morning score, persists the state and, once every habit scheduled for today
is done, locks in the day.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from fastapi import HTTPException
from pydantic import ValidationError

from morningproof.models.day_schedule import is_active_on
from morningproof.models.habits import (
    CustomHabit,
    CustomHabitCompletion,
    CustomVerificationType,
    DailyLog,
    HabitCompletion,
    HabitConfig,
    HabitType,
    MorningProofSettings,
    VerificationData,
)
from morningproof.models.schemas import (
    BedVerificationResult,
    CustomHabitStatus,
    HabitConfigUpdate,
    LockInResult,
    RoutineStatus,
    SettingsUpdate,
)
from morningproof.services.app_locking_service import AppLockingService
from morningproof.services.storage_service import StorageService
from morningproof.services.verification_service import verify_bed_service
from morningproof.services.vision_service import VisionService
from morningproof.utils.routine_time import (
    cutoff_datetime,
    format_time_remaining,
    is_day_locked,
    is_past_cutoff,
    minutes_since_midnight,
    seconds_until_cutoff,
)
from morningproof.utils.validation import invalid_fields

logger = logging.getLogger(__name__)

SPEED_DEMON_WINDOW_MINUTES = 5


class MorningRoutineService:
    def __init__(self, storage: StorageService, app_locking: AppLockingService, now: datetime):
        self.storage = storage
        self.app_locking = app_locking
        self.now = now

        self.settings = MorningProofSettings()
        self.habit_configs: List[HabitConfig] = HabitConfig.default_configs()
        self.today_log = DailyLog(date=now.date())
        self.custom_habits: List[CustomHabit] = []
        self.custom_completions: List[CustomHabitCompletion] = []
        self.has_completed_onboarding = False
        # Set when a mutation in this request locked in the day
        self.last_lock_in: Optional[LockInResult] = None

    @property
    def today(self):
        return self.now.date()

    # Loading

    async def load(self) -> "MorningRoutineService":
        saved_settings = await self.storage.load_settings()
        if saved_settings is not None:
            self.settings = saved_settings

        saved_configs = await self.storage.load_habit_configs()
        if saved_configs:
            self.habit_configs = self._with_missing_configs(saved_configs)

        saved_log = await self.storage.load_daily_log(self.today)
        self.today_log = saved_log if saved_log is not None else self.create_daily_log()

        self.custom_habits = await self.storage.load_custom_habits()
        self.custom_completions = await self.storage.load_custom_completions(self.today)
        self.has_completed_onboarding = await self.storage.has_completed_onboarding()
        return self

    def _with_missing_configs(self, configs: List[HabitConfig]) -> List[HabitConfig]:
        """Append disabled defaults for habit types added since the configs were saved"""
        known = {config.habit_type for config in configs}
        next_order = max((config.display_order for config in configs), default=-1) + 1
        for default in HabitConfig.default_configs():
            if default.habit_type not in known:
                configs.append(default.model_copy(update={"is_enabled": False, "display_order": next_order}))
                next_order += 1
        return configs

    def create_daily_log(self) -> DailyLog:
        log = DailyLog(date=self.today)
        for config in self.habit_configs:
            if config.is_enabled and is_active_on(self.today, config.active_days):
                log.completions.append(HabitCompletion(habit_type=config.habit_type, date=self.today))
        return log

    # Lookups

    def get_config(self, habit_type: HabitType) -> Optional[HabitConfig]:
        for config in self.habit_configs:
            if config.habit_type == habit_type:
                return config
        return None

    def _require_completion(self, habit_type: HabitType) -> HabitCompletion:
        completion = self.today_log.get_completion(habit_type)
        if completion is None:
            raise HTTPException(status_code=404, detail=f"{habit_type.display_name} is not part of today's routine")
        return completion

    @property
    def enabled_habits(self) -> List[HabitConfig]:
        enabled = [config for config in self.habit_configs if config.is_enabled]
        return sorted(enabled, key=lambda config: config.display_order)

    @property
    def custom_habits_today(self) -> List[CustomHabit]:
        active = [
            habit for habit in self.custom_habits
            if habit.is_active and is_active_on(self.today, habit.active_days)
        ]
        return sorted(active, key=lambda habit: habit.display_order)

    def get_custom_completion(self, habit_id: UUID) -> Optional[CustomHabitCompletion]:
        for completion in self.custom_completions:
            if completion.custom_habit_id == habit_id:
                return completion
        return None

    @property
    def cutoff_minutes(self) -> int:
        return self.settings.cutoff_minutes_for(self.today)

    @property
    def completed_count(self) -> int:
        predefined = sum(1 for c in self.today_log.completions if c.is_completed)
        custom = 0
        for habit in self.custom_habits_today:
            completion = self.get_custom_completion(habit.id)
            if completion is not None and completion.is_completed:
                custom += 1
        return predefined + custom

    @property
    def total_enabled(self) -> int:
        return len(self.today_log.completions) + len(self.custom_habits_today)

    @property
    def all_habits_completed(self) -> bool:
        """Every habit scheduled today is done. An empty routine never counts as done."""
        if self.total_enabled == 0:
            return False
        return self.completed_count == self.total_enabled

    # Habit completion

    async def complete_habit(self, habit_type: HabitType, verification_data: Optional[VerificationData] = None) -> HabitCompletion:
        completion = self._require_completion(habit_type)
        completion.mark_completed(self.now, score=100, verification_data=verification_data)
        await self._after_change()
        return completion

    async def complete_bed_verification(self, image_base64: str, vision: VisionService):
        """Run the bed photo through the vision model; a made bed completes the habit"""
        completion = self._require_completion(HabitType.MADE_BED)
        result: BedVerificationResult = await verify_bed_service(image_base64, vision)

        if not result.is_made:
            return result, None

        # Score arrives on a 1-10 scale; a pass without one counts as full marks
        score = min(100, result.score * 10) if result.score is not None else 100
        completion.mark_completed(
            self.now,
            score=score,
            verification_data=VerificationData(ai_score=result.score, ai_feedback=result.feedback),
        )
        await self._after_change()
        return result, completion

    async def complete_journaling(self, text: str) -> HabitCompletion:
        minimum = HabitType.JOURNALING.minimum_text_length
        if len(text.strip()) < minimum:
            raise HTTPException(status_code=400, detail=f"Journal entry must be at least {minimum} characters")

        completion = self._require_completion(HabitType.JOURNALING)
        completion.mark_completed(self.now, score=100, verification_data=VerificationData(text_entry=text))
        await self._after_change()
        return completion

    def _apply_sleep(self, completion: HabitCompletion, hours: float):
        config = self.get_config(HabitType.SLEEP_DURATION)
        goal = float(config.goal if config else self.settings.sleep_goal_hours)

        completion.verification_data = VerificationData(sleep_hours=hours)
        completion.score = min(100, int((hours / goal) * 100))
        completion.is_completed = hours >= goal
        if completion.is_completed and completion.completed_at is None:
            completion.completed_at = self.now

    def _apply_steps(self, completion: HabitCompletion, steps: int):
        config = self.get_config(HabitType.MORNING_STEPS)
        goal = config.goal if config else self.settings.step_goal

        completion.verification_data = VerificationData(step_count=steps)
        completion.score = min(100, (steps * 100) // goal)
        completion.is_completed = steps >= goal
        if completion.is_completed and completion.completed_at is None:
            completion.completed_at = self.now

    async def update_manual_sleep(self, hours: float) -> HabitCompletion:
        completion = self._require_completion(HabitType.SLEEP_DURATION)
        self._apply_sleep(completion, hours)
        await self._after_change()
        return completion

    async def sync_health_data(self, steps: Optional[int] = None, sleep_hours: Optional[float] = None):
        """Apply device health readings to the auto-tracked habits present today"""
        if steps is not None:
            completion = self.today_log.get_completion(HabitType.MORNING_STEPS)
            if completion is not None:
                self._apply_steps(completion, steps)

        if sleep_hours is not None:
            completion = self.today_log.get_completion(HabitType.SLEEP_DURATION)
            if completion is not None:
                self._apply_sleep(completion, sleep_hours)

        await self._after_change()

    async def complete_custom_habit(self, habit_id: UUID, ai_feedback: Optional[str] = None) -> CustomHabitCompletion:
        habit = next((h for h in self.custom_habits_today if h.id == habit_id), None)
        if habit is None:
            raise HTTPException(status_code=404, detail="Custom habit not scheduled today")

        completion = self.get_custom_completion(habit_id)
        if completion is None:
            completion = CustomHabitCompletion(custom_habit_id=habit_id, date=self.today)
            self.custom_completions.append(completion)

        completion.is_completed = True
        completion.completed_at = self.now
        if ai_feedback is not None:
            completion.ai_feedback = ai_feedback

        await self.storage.save_custom_completions(self.today, self.custom_completions)
        await self._after_change()
        return completion

    def require_ai_custom_habit(self, habit_id: UUID) -> CustomHabit:
        habit = next((h for h in self.custom_habits if h.id == habit_id), None)
        if habit is None:
            raise HTTPException(status_code=404, detail="Custom habit not found")
        if habit.verification_type != CustomVerificationType.AI_VERIFIED:
            raise HTTPException(status_code=400, detail="This habit is confirmed by the honor system, not by photo")
        return habit

    # Score and lock-in

    def recalculate_score(self):
        self.today_log.calculate_score(self.habit_configs)

        cutoff = cutoff_datetime(self.now, self.cutoff_minutes)
        relevant = self.today_log.relevant_completions(self.habit_configs)
        self.today_log.all_completed_before_cutoff = bool(relevant) and all(
            c.is_completed and c.completed_at is not None and c.completed_at <= cutoff
            for c in relevant
        )

    async def _after_change(self):
        self.recalculate_score()
        await self.save_current_state()
        lock_in = await self.check_lock_in()
        if lock_in is not None:
            self.last_lock_in = lock_in

    async def check_lock_in(self) -> Optional[LockInResult]:
        """Lock in the day the first time every scheduled habit is complete"""
        if self.today_log.locked_in_at is not None or not self.all_habits_completed:
            return None

        streak_data = await self.storage.load_streak_data()
        streak_data.record_completion(self.now)
        await self.storage.save_streak_data(streak_data)

        stats = streak_data.to_achievement_stats()
        wake_minutes = self.settings.wake_time_hour * 60 + self.settings.wake_time_minute
        minutes_after_wake = minutes_since_midnight(self.now) - wake_minutes
        if 0 <= minutes_after_wake <= SPEED_DEMON_WINDOW_MINUTES:
            stats.locked_in_within_minutes_of_wake = minutes_after_wake

        achievements = await self.storage.load_achievements()
        newly_unlocked = achievements.check_and_unlock_all(stats, self.now)
        if newly_unlocked:
            await self.storage.save_achievements(achievements)
            logger.info(f"Unlocked achievements: {[a.id for a in newly_unlocked]}")

        await self.app_locking.lock_in_day(self.now)

        self.today_log.locked_in_at = self.now
        await self.storage.save_daily_log(self.today_log)

        logger.info(f"Day locked in on {self.today}, streak now {streak_data.current_streak}")
        return LockInResult(
            locked_in=True,
            current_streak=streak_data.current_streak,
            longest_streak=streak_data.longest_streak,
            newly_unlocked=newly_unlocked,
        )

    # Settings

    async def update_habit_config(self, habit_type: HabitType, update: HabitConfigUpdate) -> HabitConfig:
        config = self.get_config(habit_type)
        if config is None:
            raise HTTPException(status_code=404, detail="Habit config not found")

        if update.is_enabled is not None:
            config.is_enabled = update.is_enabled
        if update.goal is not None:
            config.goal = update.goal
        if update.active_days is not None:
            config.active_days = sorted(set(update.active_days))

        # Add or remove the habit from today's log
        scheduled_today = config.is_enabled and is_active_on(self.today, config.active_days)
        existing = self.today_log.get_completion(habit_type)
        if scheduled_today and existing is None:
            self.today_log.completions.append(HabitCompletion(habit_type=habit_type, date=self.today))
        elif not scheduled_today and existing is not None:
            self.today_log.completions = [c for c in self.today_log.completions if c.habit_type != habit_type]

        await self._after_change()
        return config

    async def update_settings(self, update: SettingsUpdate) -> MorningProofSettings:
        changes = update.model_dump(exclude_unset=True)
        try:
            self.settings = MorningProofSettings.model_validate({**self.settings.model_dump(), **changes})
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid settings: {invalid_fields(e)}")
        await self.app_locking.sync_with_settings(self.settings)
        await self._after_change()
        return self.settings

    async def complete_onboarding(self):
        self.has_completed_onboarding = True
        await self.storage.set_onboarding_completed(True)
        await self.save_current_state()

    async def reset_all_data(self):
        await self.storage.reset_routine_data()
        self.settings = MorningProofSettings()
        self.habit_configs = HabitConfig.default_configs()
        self.today_log = self.create_daily_log()
        self.custom_completions = []
        self.has_completed_onboarding = False
        logger.info(f"Routine data reset for user {self.storage.store.user_id}")

    # Persistence and status

    async def save_current_state(self):
        await self.storage.save_settings(self.settings)
        await self.storage.save_habit_configs(self.habit_configs)
        await self.storage.save_daily_log(self.today_log)

    def status(self) -> RoutineStatus:
        cutoff_minutes = self.cutoff_minutes
        remaining = seconds_until_cutoff(self.now, cutoff_minutes)
        all_done = self.all_habits_completed
        return RoutineStatus(
            date=self.today,
            daily_log=self.today_log,
            habit_configs=self.habit_configs,
            custom_habits=[
                CustomHabitStatus(habit=habit, completion=self.get_custom_completion(habit.id))
                for habit in self.custom_habits_today
            ],
            settings=self.settings,
            completed_count=self.completed_count,
            total_enabled=self.total_enabled,
            morning_score=self.today_log.morning_score,
            all_habits_completed=all_done,
            is_past_cutoff=is_past_cutoff(self.now, cutoff_minutes),
            is_day_locked=is_day_locked(self.now, cutoff_minutes, all_done),
            is_locked_in=self.today_log.locked_in_at is not None,
            cutoff_at=cutoff_datetime(self.now, cutoff_minutes),
            seconds_until_cutoff=remaining,
            time_remaining=format_time_remaining(remaining),
        )
