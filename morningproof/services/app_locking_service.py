import logging
from datetime import date, datetime
from typing import Optional
from fastapi import HTTPException
from pydantic import ValidationError

from morningproof.models.app_locking import (
    APP_LOCKING_PREFIX,
    FIELD_KEYS,
    AppLockingState,
)
from morningproof.models.habits import MorningProofSettings
from morningproof.models.schemas import AppLockingSettingsUpdate, ShieldDecision
from morningproof.services.preferences_store import PreferencesStore
from morningproof.services.storage_service import StorageService
from morningproof.utils.validation import invalid_fields

logger = logging.getLogger(__name__)


class AppLockingService:
    """Lock-in and shield state shared with the device-activity monitor"""

    def __init__(self, store: PreferencesStore):
        self.store = store

    async def load_state(self) -> AppLockingState:
        values = await self.store.get_prefixed(APP_LOCKING_PREFIX)
        return AppLockingState.from_preferences(values)

    async def _save_fields(self, state: AppLockingState, *fields: str):
        dumped = state.model_dump(mode="json")
        for field in fields:
            await self.store.set(FIELD_KEYS[field], dumped[field])

    async def shield_decision(self, now: datetime, state: Optional[AppLockingState] = None) -> ShieldDecision:
        if state is None:
            state = await self.load_state()
        return ShieldDecision(
            should_apply_shields=state.should_apply_shields(now),
            is_enabled=state.is_enabled,
            is_locked_in_today=state.has_locked_in_today(now),
            was_emergency_unlock=state.was_emergency_unlock,
            blocking_start_minutes=state.blocking_start_minutes,
            effective_cutoff_minutes=state.cutoff_minutes_for(now.date()),
        )

    async def lock_in_day(self, now: datetime) -> AppLockingState:
        """Mark the day as locked in, lifting shields until the next reset"""
        state = await self.load_state()
        state.is_day_locked_in = True
        state.last_lock_in_date = now
        await self._save_fields(state, "is_day_locked_in", "last_lock_in_date")
        logger.info(f"Day locked in for user {self.store.user_id}")
        return state

    async def emergency_unlock(self, now: datetime, storage: StorageService) -> AppLockingState:
        """Lift shields without finishing the routine. The bypass breaks the streak."""
        state = await self.load_state()
        state.was_emergency_unlock = True
        state.is_day_locked_in = True
        state.last_lock_in_date = now
        await self._save_fields(state, "was_emergency_unlock", "is_day_locked_in", "last_lock_in_date")

        streak_data = await storage.load_streak_data()
        lost = streak_data.current_streak
        streak_data.break_streak()
        await storage.save_streak_data(streak_data)

        logger.warning(f"Emergency unlock for user {self.store.user_id}, streak of {lost} broken")
        return state

    async def reset_for_new_day(self, today: date) -> AppLockingState:
        state = await self.load_state()
        state.is_day_locked_in = False
        state.was_emergency_unlock = False
        state.last_reset_date = today
        await self._save_fields(state, "is_day_locked_in", "was_emergency_unlock", "last_reset_date")
        return state

    async def interval_did_start(self, now: datetime) -> ShieldDecision:
        """Start of the morning blocking interval: reset the day, then decide on shields"""
        state = await self.load_state()
        if not state.is_enabled:
            return await self.shield_decision(now, state)
        state = await self.reset_for_new_day(now.date())
        return await self.shield_decision(now, state)

    async def interval_did_end(self, now: datetime) -> ShieldDecision:
        """End of the blocking interval clears all shields"""
        decision = await self.shield_decision(now)
        decision.should_apply_shields = False
        return decision

    async def update_settings(self, update: AppLockingSettingsUpdate) -> AppLockingState:
        state = await self.load_state()
        changes = update.model_dump(exclude_unset=True)
        # Merge and re-check before anything is written
        try:
            state = AppLockingState.model_validate({**state.model_dump(), **changes})
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid app locking settings: {invalid_fields(e)}")
        await self._save_fields(state, *changes.keys())
        return state

    async def sync_with_settings(self, settings: MorningProofSettings):
        """Mirror the routine cutoff and deadlines into the shared keys"""
        state = await self.load_state()
        state.cutoff_minutes = settings.morning_cutoff_minutes
        state.custom_deadlines_enabled = settings.custom_deadlines_enabled
        state.weekday_deadline_minutes = settings.weekday_deadline_minutes
        state.weekend_deadline_minutes = settings.weekend_deadline_minutes
        await self._save_fields(
            state,
            "cutoff_minutes",
            "custom_deadlines_enabled",
            "weekday_deadline_minutes",
            "weekend_deadline_minutes",
        )
