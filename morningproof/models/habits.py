from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from enum import Enum, IntEnum
from datetime import date, datetime
from uuid import UUID, uuid4

from morningproof.models.day_schedule import ALL_DAYS, is_weekend


class HabitVerificationTier(IntEnum):
    """How a habit gets confirmed"""
    AI_VERIFIED = 1      # Requires AI analysis (e.g., bed photo)
    AUTO_TRACKED = 2     # Reported from device health data
    HONOR_SYSTEM = 3     # Manual confirmation

    @property
    def description(self) -> str:
        return {
            HabitVerificationTier.AI_VERIFIED: "AI Verified",
            HabitVerificationTier.AUTO_TRACKED: "Auto-Tracked",
            HabitVerificationTier.HONOR_SYSTEM: "Honor System",
        }[self]


class HabitType(str, Enum):
    MADE_BED = "made_bed"
    MORNING_STEPS = "morning_steps"
    SLEEP_DURATION = "sleep_duration"
    DRANK_WATER = "drank_water"
    MORNING_STRETCH = "morning_stretch"
    NO_SNOOZE = "no_snooze"
    JOURNALING = "journaling"
    MEDITATION = "meditation"
    BREAKFAST = "breakfast"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @property
    def tier(self) -> HabitVerificationTier:
        if self == HabitType.MADE_BED:
            return HabitVerificationTier.AI_VERIFIED
        if self in (HabitType.MORNING_STEPS, HabitType.SLEEP_DURATION):
            return HabitVerificationTier.AUTO_TRACKED
        return HabitVerificationTier.HONOR_SYSTEM

    @property
    def default_goal(self) -> int:
        if self == HabitType.MADE_BED:
            return 7  # Score out of 10
        if self == HabitType.MORNING_STEPS:
            return 500  # Steps
        if self == HabitType.SLEEP_DURATION:
            return 7  # Hours
        return 1  # Binary

    @property
    def requires_hold_to_confirm(self) -> bool:
        return self in (HabitType.DRANK_WATER, HabitType.MORNING_STRETCH)

    @property
    def requires_text_entry(self) -> bool:
        return self == HabitType.JOURNALING

    @property
    def minimum_text_length(self) -> int:
        return 10 if self == HabitType.JOURNALING else 0


_DISPLAY_NAMES = {
    HabitType.MADE_BED: "Made Bed",
    HabitType.MORNING_STEPS: "Morning Walk",
    HabitType.SLEEP_DURATION: "Sleep Goal",
    HabitType.DRANK_WATER: "Drank Water",
    HabitType.MORNING_STRETCH: "Morning Stretch",
    HabitType.NO_SNOOZE: "No Snooze",
    HabitType.JOURNALING: "Journaling",
    HabitType.MEDITATION: "Meditation",
    HabitType.BREAKFAST: "Made Breakfast",
}

_ICONS = {
    HabitType.MADE_BED: "bed.double.fill",
    HabitType.MORNING_STEPS: "figure.walk",
    HabitType.SLEEP_DURATION: "moon.zzz.fill",
    HabitType.DRANK_WATER: "drop.fill",
    HabitType.MORNING_STRETCH: "figure.flexibility",
    HabitType.NO_SNOOZE: "alarm.fill",
    HabitType.JOURNALING: "book.fill",
    HabitType.MEDITATION: "brain.head.profile",
    HabitType.BREAKFAST: "fork.knife",
}

DEFAULT_ENABLED_HABITS = {
    HabitType.MADE_BED,
    HabitType.MORNING_STEPS,
    HabitType.SLEEP_DURATION,
    HabitType.DRANK_WATER,
}


def _validate_active_days(v):
    if v is None:
        return sorted(ALL_DAYS)
    for day in v:
        if day < 0 or day > 6:
            raise ValueError('active_days must contain weekday numbers between 0 (Sunday) and 6 (Saturday)')
    return sorted(set(v))


class HabitConfig(BaseModel):
    """User's configuration for a predefined habit"""
    habit_type: HabitType
    is_enabled: bool = True
    goal: int = 0
    display_order: int = 0
    active_days: List[int] = Field(default_factory=lambda: sorted(ALL_DAYS), description="Weekday numbers (0-6, Sunday=0)")

    @field_validator('active_days', mode='before')
    @classmethod
    def validate_active_days(cls, v):
        return _validate_active_days(v)

    def model_post_init(self, __context) -> None:
        if self.goal <= 0:
            self.goal = self.habit_type.default_goal

    @classmethod
    def default_configs(cls) -> List["HabitConfig"]:
        return [
            cls(
                habit_type=habit_type,
                is_enabled=habit_type in DEFAULT_ENABLED_HABITS,
                display_order=index,
            )
            for index, habit_type in enumerate(HabitType)
        ]


class VerificationData(BaseModel):
    photo_url: Optional[str] = None
    ai_score: Optional[int] = None
    ai_feedback: Optional[str] = None
    step_count: Optional[int] = None
    sleep_hours: Optional[float] = None
    text_entry: Optional[str] = None


class HabitCompletion(BaseModel):
    """A single habit completion record for one day"""
    id: UUID = Field(default_factory=uuid4)
    habit_type: HabitType
    date: date
    is_completed: bool = False
    score: int = Field(0, description="0-100, percentage of goal achieved")
    verification_data: Optional[VerificationData] = None
    completed_at: Optional[datetime] = None

    def mark_completed(self, now: datetime, score: int = 100, verification_data: Optional[VerificationData] = None):
        self.is_completed = True
        self.completed_at = now
        self.score = score
        if verification_data is not None:
            self.verification_data = verification_data


class DailyLog(BaseModel):
    """Daily log containing all habit completions for a day"""
    id: UUID = Field(default_factory=uuid4)
    date: date
    completions: List[HabitCompletion] = Field(default_factory=list)
    morning_score: int = 0  # 0-100
    all_completed_before_cutoff: bool = False
    locked_in_at: Optional[datetime] = None

    def get_completion(self, habit_type: HabitType) -> Optional[HabitCompletion]:
        for completion in self.completions:
            if completion.habit_type == habit_type:
                return completion
        return None

    def relevant_completions(self, enabled_habits: List[HabitConfig]) -> List[HabitCompletion]:
        enabled_types = {config.habit_type for config in enabled_habits if config.is_enabled}
        return [c for c in self.completions if c.habit_type in enabled_types]

    def calculate_score(self, enabled_habits: List[HabitConfig]):
        relevant = self.relevant_completions(enabled_habits)
        if not relevant:
            self.morning_score = 0
            return
        self.morning_score = sum(c.score for c in relevant) // len(relevant)


class CustomVerificationType(str, Enum):
    AI_VERIFIED = "ai_verified"
    HONOR_SYSTEM = "honor_system"

    @property
    def display_name(self) -> str:
        return "AI Verified" if self == CustomVerificationType.AI_VERIFIED else "Honor System"

    @property
    def description(self) -> str:
        if self == CustomVerificationType.AI_VERIFIED:
            return "Take a photo and AI verifies completion"
        return "Hold to confirm you completed the habit"


# Curated icons offered by the custom habit picker
CUSTOM_HABIT_ICONS = [
    "star.fill",
    "heart.fill",
    "bolt.fill",
    "leaf.fill",
    "flame.fill",
    "book.fill",
    "pencil",
    "lightbulb.fill",
    "cup.and.saucer.fill",
    "pill.fill",
    "dumbbell.fill",
    "figure.run",
    "brain.head.profile",
    "eye.fill",
    "moon.fill",
]


class CustomHabit(BaseModel):
    """User-created custom habit definition"""
    id: UUID = Field(default_factory=uuid4)
    name: str
    icon: str = "star.fill"
    verification_type: CustomVerificationType = CustomVerificationType.HONOR_SYSTEM
    ai_prompt: Optional[str] = None
    allows_screenshots: bool = False
    active_days: List[int] = Field(default_factory=lambda: sorted(ALL_DAYS))
    display_order: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    is_active: bool = True

    @field_validator('active_days', mode='before')
    @classmethod
    def validate_active_days(cls, v):
        return _validate_active_days(v)


class CustomHabitCompletion(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    custom_habit_id: UUID
    date: date
    is_completed: bool = False
    ai_feedback: Optional[str] = None
    completed_at: Optional[datetime] = None


class MorningProofSettings(BaseModel):
    user_name: str = ""
    wake_time_hour: int = Field(7, ge=0, le=23)
    wake_time_minute: int = Field(0, ge=0, le=59)
    morning_cutoff_hour: int = Field(9, ge=0, le=23)
    morning_cutoff_minute: int = Field(0, ge=0, le=59)
    step_goal: int = Field(500, ge=1)
    sleep_goal_hours: int = Field(7, ge=1, le=24)
    # Separate weekday (Mon-Fri) and weekend deadlines, minutes from midnight
    custom_deadlines_enabled: bool = False
    weekday_deadline_minutes: int = Field(540, ge=0, lt=1440)
    weekend_deadline_minutes: int = Field(660, ge=0, lt=1440)

    @property
    def morning_cutoff_minutes(self) -> int:
        return self.morning_cutoff_hour * 60 + self.morning_cutoff_minute

    def cutoff_minutes_for(self, target_date: date) -> int:
        """Effective cutoff for a date, honouring weekday/weekend deadlines"""
        if not self.custom_deadlines_enabled:
            return self.morning_cutoff_minutes
        return self.weekend_deadline_minutes if is_weekend(target_date) else self.weekday_deadline_minutes
