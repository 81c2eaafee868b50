from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Dict, Any
from enum import Enum
from datetime import date, datetime
from uuid import UUID

from morningproof.models.habits import (
    CustomHabit,
    CustomHabitCompletion,
    CustomVerificationType,
    DailyLog,
    HabitCompletion,
    HabitConfig,
    MorningProofSettings,
    VerificationData,
)
from morningproof.models.achievements import Achievement


# Users and auth

class User(BaseModel):
    id: UUID
    name: str = ""
    timezone: str = "UTC"
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        json_encoders = {
            UUID: str
        }

class AnonymousSignInRequest(BaseModel):
    name: str = Field("", max_length=100)
    timezone: str = "UTC"

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User

class TimezoneUpdate(BaseModel):
    timezone: str


# AI verification requests use the app's camelCase field names.
# Required fields are Optional here so missing values produce a 400 with
# the app's error message instead of a generic 422.

class ImageVerificationRequest(BaseModel):
    image_base64: Optional[str] = Field(None, alias="imageBase64")

    class Config:
        populate_by_name = True

class CustomHabitVerificationRequest(BaseModel):
    image_base64: Optional[str] = Field(None, alias="imageBase64")
    habit_name: Optional[str] = Field(None, alias="habitName")
    ai_prompt: Optional[str] = Field(None, alias="aiPrompt")
    allows_screenshots: bool = Field(False, alias="allowsScreenshots")

    class Config:
        populate_by_name = True

class VideoVerificationRequest(BaseModel):
    frames: Optional[List[str]] = None
    habit_name: Optional[str] = Field(None, alias="habitName")
    ai_prompt: Optional[str] = Field(None, alias="aiPrompt")
    duration: float = 0

    class Config:
        populate_by_name = True

class PredefinedHabitVerificationRequest(BaseModel):
    image_base64: Optional[str] = Field(None, alias="imageBase64")
    habit_type: Optional[str] = Field(None, alias="habitType")

    class Config:
        populate_by_name = True


# AI verification results, keyed exactly as the model is asked to answer

class BedVerificationResult(BaseModel):
    is_made: bool
    detected_subject: Optional[str] = None
    feedback: str = ""
    score: Optional[int] = Field(None, description="Optional 1-10 quality score")

class SunlightVerificationResult(BaseModel):
    is_outside: bool
    detected_subject: Optional[str] = None
    feedback: str = ""

class HydrationVerificationResult(BaseModel):
    is_water: bool
    detected_subject: Optional[str] = None
    feedback: str = ""

class HabitVerificationResult(BaseModel):
    is_verified: bool
    detected_subject: Optional[str] = None
    feedback: str = ""

class VerificationConfidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

class VideoVerificationResult(BaseModel):
    is_verified: bool
    feedback: str = ""
    detected_action: str = ""
    confidence: VerificationConfidence = VerificationConfidence.MEDIUM

    @field_validator('confidence', mode='before')
    @classmethod
    def normalize_confidence(cls, v):
        # Anything the model invents outside the three levels reads as medium
        if isinstance(v, str) and v.strip().lower() in {c.value for c in VerificationConfidence}:
            return v.strip().lower()
        return VerificationConfidence.MEDIUM


# Daily routine

class CompleteHabitRequest(BaseModel):
    verification_data: Optional[VerificationData] = None

class JournalEntryRequest(BaseModel):
    text: str

class SleepEntryRequest(BaseModel):
    hours: float = Field(..., ge=0, le=24)

class HealthSyncRequest(BaseModel):
    """Health data the device read for this morning"""
    steps: Optional[int] = Field(None, ge=0)
    sleep_hours: Optional[float] = Field(None, ge=0, le=24)

class HabitConfigUpdate(BaseModel):
    is_enabled: Optional[bool] = None
    goal: Optional[int] = Field(None, ge=1)
    active_days: Optional[List[int]] = Field(None, description="Weekday numbers (0-6, Sunday=0)")

    @field_validator('active_days')
    @classmethod
    def validate_active_days(cls, v):
        if v is not None:
            for day in v:
                if day < 0 or day > 6:
                    raise ValueError('active_days must contain weekday numbers between 0 (Sunday) and 6 (Saturday)')
            if not v:
                raise ValueError('active_days cannot be empty')
        return v

class SettingsUpdate(BaseModel):
    user_name: Optional[str] = Field(None, max_length=100)
    wake_time_hour: Optional[int] = Field(None, ge=0, le=23)
    wake_time_minute: Optional[int] = Field(None, ge=0, le=59)
    morning_cutoff_hour: Optional[int] = Field(None, ge=0, le=23)
    morning_cutoff_minute: Optional[int] = Field(None, ge=0, le=59)
    step_goal: Optional[int] = Field(None, ge=1)
    sleep_goal_hours: Optional[int] = Field(None, ge=1, le=24)
    custom_deadlines_enabled: Optional[bool] = None
    weekday_deadline_minutes: Optional[int] = Field(None, ge=0, lt=1440)
    weekend_deadline_minutes: Optional[int] = Field(None, ge=0, lt=1440)

class CustomHabitStatus(BaseModel):
    habit: CustomHabit
    completion: Optional[CustomHabitCompletion] = None

class RoutineStatus(BaseModel):
    date: date
    daily_log: DailyLog
    habit_configs: List[HabitConfig]
    custom_habits: List[CustomHabitStatus] = []
    settings: MorningProofSettings
    completed_count: int
    total_enabled: int
    morning_score: int
    all_habits_completed: bool
    is_past_cutoff: bool
    is_day_locked: bool
    is_locked_in: bool
    cutoff_at: datetime
    seconds_until_cutoff: float
    time_remaining: str

class LockInResult(BaseModel):
    locked_in: bool
    current_streak: int
    longest_streak: int
    newly_unlocked: List[Achievement] = []

class HabitCompletionResponse(BaseModel):
    completion: HabitCompletion
    status: RoutineStatus
    lock_in: Optional[LockInResult] = None

class BedCompletionResponse(BaseModel):
    result: BedVerificationResult
    completion: Optional[HabitCompletion] = None
    status: RoutineStatus
    lock_in: Optional[LockInResult] = None


# Custom habits

class CustomHabitCreate(BaseModel):
    name: str
    icon: str = "star.fill"
    verification_type: CustomVerificationType = CustomVerificationType.HONOR_SYSTEM
    ai_prompt: Optional[str] = None
    allows_screenshots: bool = False
    active_days: Optional[List[int]] = None

class CustomHabitUpdate(BaseModel):
    name: Optional[str] = None
    icon: Optional[str] = None
    verification_type: Optional[CustomVerificationType] = None
    ai_prompt: Optional[str] = None
    allows_screenshots: Optional[bool] = None
    active_days: Optional[List[int]] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None

class CustomHabitVerificationResponse(BaseModel):
    result: HabitVerificationResult
    completion: Optional[CustomHabitCompletion] = None
    lock_in: Optional[LockInResult] = None


# Streaks and achievements

class AchievementStatus(BaseModel):
    achievement: Achievement
    unlocked_at: Optional[datetime] = None

class StreakSummary(BaseModel):
    current_streak: int
    longest_streak: int
    total_completions: int
    last_completion_date: Optional[date] = None
    has_completed_today: bool
    comeback_count: int
    perfect_months: int
    next_achievement: Optional[Achievement] = None

class DayHistory(BaseModel):
    """One calendar cell: whether the day was locked in, plus its log if one was kept"""
    date: date
    completed: bool
    morning_score: Optional[int] = None
    completed_habits: int = 0
    total_habits: int = 0

class StreakHistory(BaseModel):
    start: date
    end: date
    days: List[DayHistory]
    completed_days: int
    completions_in_month: int

class AchievementsResponse(BaseModel):
    achievements: List[AchievementStatus]
    unlocked_count: int
    total_count: int
    unlocked_by_category: Dict[str, int]


# App locking

class AppLockingSettingsUpdate(BaseModel):
    is_enabled: Optional[bool] = None
    blocking_start_minutes: Optional[int] = Field(None, ge=0, lt=1440, description="0 means not configured")
    selected_apps: Optional[Any] = Field(None, description="Opaque app selection blob from the device")

class ShieldDecision(BaseModel):
    should_apply_shields: bool
    is_enabled: bool
    is_locked_in_today: bool
    was_emergency_unlock: bool
    blocking_start_minutes: int
    effective_cutoff_minutes: int
