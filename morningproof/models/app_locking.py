from pydantic import BaseModel
from typing import Any, Optional
from datetime import date, datetime

from morningproof.models.day_schedule import is_weekend
from morningproof.utils.routine_time import minutes_since_midnight

# Shared keys read by the device-activity monitor
IS_DAY_LOCKED_IN_KEY = "appLocking_isDayLockedIn"
CUTOFF_MINUTES_KEY = "appLocking_cutoffMinutes"
BLOCKING_START_MINUTES_KEY = "appLocking_blockingStartMinutes"
ENABLED_KEY = "appLocking_enabled"
LAST_LOCK_IN_DATE_KEY = "appLocking_lastLockInDate"
SELECTED_APPS_KEY = "appLocking_selectedApps"
WAS_EMERGENCY_UNLOCK_KEY = "appLocking_wasEmergencyUnlock"
CUSTOM_DEADLINES_ENABLED_KEY = "appLocking_customDeadlinesEnabled"
WEEKDAY_DEADLINE_MINUTES_KEY = "appLocking_weekdayDeadlineMinutes"
WEEKEND_DEADLINE_MINUTES_KEY = "appLocking_weekendDeadlineMinutes"
LAST_RESET_DATE_KEY = "appLocking_lastResetDate"

APP_LOCKING_PREFIX = "appLocking_"

FIELD_KEYS = {
    "is_day_locked_in": IS_DAY_LOCKED_IN_KEY,
    "cutoff_minutes": CUTOFF_MINUTES_KEY,
    "blocking_start_minutes": BLOCKING_START_MINUTES_KEY,
    "is_enabled": ENABLED_KEY,
    "last_lock_in_date": LAST_LOCK_IN_DATE_KEY,
    "selected_apps": SELECTED_APPS_KEY,
    "was_emergency_unlock": WAS_EMERGENCY_UNLOCK_KEY,
    "custom_deadlines_enabled": CUSTOM_DEADLINES_ENABLED_KEY,
    "weekday_deadline_minutes": WEEKDAY_DEADLINE_MINUTES_KEY,
    "weekend_deadline_minutes": WEEKEND_DEADLINE_MINUTES_KEY,
    "last_reset_date": LAST_RESET_DATE_KEY,
}


class AppLockingState(BaseModel):
    is_day_locked_in: bool = False
    cutoff_minutes: int = 540  # 9:00 AM
    blocking_start_minutes: int = 0  # 0 = not configured
    is_enabled: bool = False
    last_lock_in_date: Optional[datetime] = None
    selected_apps: Optional[Any] = None
    was_emergency_unlock: bool = False
    custom_deadlines_enabled: bool = False
    weekday_deadline_minutes: int = 540
    weekend_deadline_minutes: int = 660  # 11:00 AM
    last_reset_date: Optional[date] = None

    @classmethod
    def from_preferences(cls, values: dict) -> "AppLockingState":
        data = {}
        for field, key in FIELD_KEYS.items():
            if values.get(key) is not None:
                data[field] = values[key]
        return cls.model_validate(data)

    @property
    def has_configured_blocking_start(self) -> bool:
        return self.blocking_start_minutes > 0

    def has_locked_in_today(self, now: datetime) -> bool:
        """Lock-in only counts when it was stamped on now's local date"""
        if not self.is_day_locked_in or self.last_lock_in_date is None:
            return False
        lock_date = self.last_lock_in_date
        if now.tzinfo is not None and lock_date.tzinfo is not None:
            lock_date = lock_date.astimezone(now.tzinfo)
        return lock_date.date() == now.date()

    def cutoff_minutes_for(self, day: date) -> int:
        if not self.custom_deadlines_enabled:
            return self.cutoff_minutes
        return self.weekend_deadline_minutes if is_weekend(day) else self.weekday_deadline_minutes

    def should_apply_shields(self, now: datetime) -> bool:
        """Shields stay up from the blocking start until the day is locked in"""
        if not self.is_enabled:
            return False
        if not self.has_configured_blocking_start:
            return False
        if self.has_locked_in_today(now):
            return False
        return minutes_since_midnight(now) >= self.blocking_start_minutes
