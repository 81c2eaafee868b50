from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from enum import Enum
from datetime import datetime


class AchievementCategory(str, Enum):
    STREAK = "Streak Milestones"
    CUMULATIVE = "Total Completions"
    TIMING = "Early Bird"
    COMEBACK = "Resilience"
    SPECIAL = "Special"

    @property
    def icon(self) -> str:
        return {
            AchievementCategory.STREAK: "flame.fill",
            AchievementCategory.CUMULATIVE: "chart.bar.fill",
            AchievementCategory.TIMING: "sunrise.fill",
            AchievementCategory.COMEBACK: "arrow.counterclockwise",
            AchievementCategory.SPECIAL: "sparkles",
        }[self]

    @property
    def sort_order(self) -> int:
        return list(AchievementCategory).index(self)


class AchievementType(str, Enum):
    STREAK = "streak"                        # Current consecutive streak
    TOTAL_COMPLETIONS = "total_completions"  # Total completions ever
    EARLY_COMPLETION = "early_completion"    # Completed before a given hour
    COMEBACK = "comeback"                    # Bouncing back after a lost streak
    PERFECT_WEEK = "perfect_week"
    WEEKEND_WARRIOR = "weekend_warrior"
    MONDAY_MOTIVATION = "monday_motivation"
    SPECIAL = "special"


class Achievement(BaseModel):
    id: str
    title: str
    description: str
    icon: str
    category: AchievementCategory
    type: AchievementType
    requirement: int
    secondary_requirement: Optional[int] = None  # Hour of day for early completions
    is_hidden: bool = False


def _streak(id, title, description, icon, requirement):
    return Achievement(id=id, title=title, description=description, icon=icon,
                       category=AchievementCategory.STREAK, type=AchievementType.STREAK,
                       requirement=requirement)


def _total(id, title, description, icon, requirement):
    return Achievement(id=id, title=title, description=description, icon=icon,
                       category=AchievementCategory.CUMULATIVE, type=AchievementType.TOTAL_COMPLETIONS,
                       requirement=requirement)


def _early(id, title, description, icon, requirement, before_hour):
    return Achievement(id=id, title=title, description=description, icon=icon,
                       category=AchievementCategory.TIMING, type=AchievementType.EARLY_COMPLETION,
                       requirement=requirement, secondary_requirement=before_hour)


def _comeback(id, title, description, icon, requirement):
    return Achievement(id=id, title=title, description=description, icon=icon,
                       category=AchievementCategory.COMEBACK, type=AchievementType.COMEBACK,
                       requirement=requirement)


def _special(id, title, description, icon, type, requirement, is_hidden=False):
    return Achievement(id=id, title=title, description=description, icon=icon,
                       category=AchievementCategory.SPECIAL, type=type,
                       requirement=requirement, is_hidden=is_hidden)


STREAK_ACHIEVEMENTS: List[Achievement] = [
    _streak("first_bed", "First Step", "Made your bed for the first time", "bed.double.fill", 1),
    _streak("three_days", "Getting Started", "3 day streak", "flame", 3),
    _streak("one_week", "One Week Wonder", "7 day streak", "flame.fill", 7),
    _streak("two_weeks", "Habit Forming", "14 day streak", "star.fill", 14),
    _streak("three_weeks", "Committed", "21 day streak - it's a habit now!", "star.circle.fill", 21),
    _streak("one_month", "Monthly Master", "30 day streak", "crown", 30),
    _streak("sixty_days", "Unstoppable", "60 day streak", "crown.fill", 60),
    _streak("ninety_days", "Quarter Champion", "90 day streak", "trophy", 90),
    _streak("half_year", "Half Year Hero", "180 day streak", "trophy.fill", 180),
    _streak("one_year", "Legendary", "365 day streak - You're a legend!", "medal.fill", 365),
]

CUMULATIVE_ACHIEVEMENTS: List[Achievement] = [
    _total("total_10", "Getting Consistent", "10 total completions", "10.circle.fill", 10),
    _total("total_25", "Quarter Century", "25 total completions", "25.circle.fill", 25),
    _total("total_50", "Fifty Strong", "50 total completions", "50.circle.fill", 50),
    _total("total_100", "Century Club", "100 total completions", "100.circle.fill", 100),
    _total("total_250", "Dedicated", "250 total completions", "chart.line.uptrend.xyaxis", 250),
    _total("total_500", "500 Strong", "500 total completions", "star.leadinghalf.filled", 500),
    _total("total_1000", "Thousand Days", "1000 total completions - incredible!", "diamond.fill", 1000),
]

TIMING_ACHIEVEMENTS: List[Achievement] = [
    _early("early_bird_1", "Early Bird", "Complete before 7 AM", "sunrise", 1, 7),
    _early("early_bird_7", "Dawn Patrol", "Complete before 7 AM, 7 times", "sunrise.fill", 7, 7),
    _early("early_bird_30", "Rise and Shine", "Complete before 7 AM, 30 times", "sun.max.fill", 30, 7),
    _early("super_early_1", "Before Dawn", "Complete before 6 AM", "moon.stars", 1, 6),
    _early("super_early_10", "Night Owl Reformed", "Complete before 6 AM, 10 times", "moon.stars.fill", 10, 6),
]

COMEBACK_ACHIEVEMENTS: List[Achievement] = [
    _comeback("bounce_back", "Bounce Back", "Complete a day after losing a 7+ day streak", "arrow.uturn.up", 7),
    _comeback("phoenix_rising", "Phoenix Rising", "Rebuild to a 14-day streak after losing one", "flame.circle.fill", 14),
    _comeback("never_give_up", "Never Give Up", "Comeback 3 times after losing streaks", "heart.circle.fill", 3),
    _comeback("resilient", "Resilient", "Comeback 5 times after losing streaks", "shield.fill", 5),
    _comeback("unbreakable_spirit", "Unbreakable Spirit", "Comeback 10 times - nothing stops you!", "bolt.shield.fill", 10),
]

SPECIAL_ACHIEVEMENTS: List[Achievement] = [
    _special("perfect_week", "Perfect Week", "Complete every day for 7 days straight",
             "checkmark.seal.fill", AchievementType.PERFECT_WEEK, 7),
    _special("weekend_warrior_1", "Weekend Warrior", "Complete on both Saturday and Sunday",
             "calendar.badge.checkmark", AchievementType.WEEKEND_WARRIOR, 1),
    _special("weekend_warrior_4", "Weekend Champion", "Complete 4 full weekends",
             "calendar.badge.checkmark", AchievementType.WEEKEND_WARRIOR, 4),
    _special("monday_motivation_5", "Monday Motivation", "Complete on 5 Mondays",
             "1.circle.fill", AchievementType.MONDAY_MOTIVATION, 5),
    _special("monday_motivation_10", "Monday Master", "Complete on 10 Mondays",
             "1.square.fill", AchievementType.MONDAY_MOTIVATION, 10),
    _special("speed_demon", "Speed Demon", "Complete within 5 minutes of waking",
             "hare.fill", AchievementType.SPECIAL, 1, is_hidden=True),
    _special("new_year", "New Year, New You", "Complete on January 1st",
             "party.popper.fill", AchievementType.SPECIAL, 1, is_hidden=True),
]

ALL_ACHIEVEMENTS: List[Achievement] = (
    STREAK_ACHIEVEMENTS
    + CUMULATIVE_ACHIEVEMENTS
    + TIMING_ACHIEVEMENTS
    + COMEBACK_ACHIEVEMENTS
    + SPECIAL_ACHIEVEMENTS
)

ACHIEVEMENTS_BY_ID: Dict[str, Achievement] = {a.id: a for a in ALL_ACHIEVEMENTS}


def achievements_by_category() -> Dict[AchievementCategory, List[Achievement]]:
    grouped: Dict[AchievementCategory, List[Achievement]] = {}
    for achievement in ALL_ACHIEVEMENTS:
        grouped.setdefault(achievement.category, []).append(achievement)
    return grouped


class AchievementStats(BaseModel):
    """Snapshot of streak data used for unlock checks"""
    current_streak: int = 0
    longest_streak: int = 0
    total_completions: int = 0
    early_completions: Dict[int, int] = Field(default_factory=dict)  # hour -> completions in that hour
    comeback_count: int = 0
    last_lost_streak: int = 0
    has_rebuilt_after_loss: bool = False
    perfect_months: int = 0
    completed_weekends: int = 0
    monday_completions: int = 0
    has_new_year_completion: bool = False
    has_anniversary_completion: bool = False
    locked_in_within_minutes_of_wake: Optional[int] = None

    def completions_before_hour(self, hour: int) -> int:
        return sum(count for h, count in self.early_completions.items() if h < hour)


class UserAchievements(BaseModel):
    unlocked_achievements: Dict[str, datetime] = Field(default_factory=dict)  # achievement id -> unlock time

    def is_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self.unlocked_achievements

    def get_unlocked_date(self, achievement_id: str) -> Optional[datetime]:
        return self.unlocked_achievements.get(achievement_id)

    @property
    def unlocked_ids(self) -> set:
        return set(self.unlocked_achievements)

    @property
    def unlocked_count(self) -> int:
        return len(self.unlocked_achievements)

    @property
    def next_achievement(self) -> Optional[Achievement]:
        """Next streak milestone still locked"""
        for achievement in STREAK_ACHIEVEMENTS:
            if not self.is_unlocked(achievement.id):
                return achievement
        return None

    def check_and_unlock_all(self, stats: AchievementStats, now: datetime) -> List[Achievement]:
        """Unlock every achievement the stats now satisfy, returning the new ones"""
        newly_unlocked = []
        for achievement in ALL_ACHIEVEMENTS:
            if self.is_unlocked(achievement.id):
                continue
            if should_unlock(achievement, stats):
                self.unlocked_achievements[achievement.id] = now
                newly_unlocked.append(achievement)
        return newly_unlocked

    def visible_achievements(self) -> List[Achievement]:
        return [a for a in ALL_ACHIEVEMENTS if not a.is_hidden or self.is_unlocked(a.id)]

    def unlocked_count_by_category(self) -> Dict[AchievementCategory, int]:
        counts = {}
        for category, achievements in achievements_by_category().items():
            counts[category] = sum(1 for a in achievements if self.is_unlocked(a.id))
        return counts


def should_unlock(achievement: Achievement, stats: AchievementStats) -> bool:
    if achievement.type == AchievementType.STREAK:
        return stats.current_streak >= achievement.requirement

    if achievement.type == AchievementType.TOTAL_COMPLETIONS:
        return stats.total_completions >= achievement.requirement

    if achievement.type == AchievementType.EARLY_COMPLETION:
        if achievement.secondary_requirement is None:
            return False
        return stats.completions_before_hour(achievement.secondary_requirement) >= achievement.requirement

    if achievement.type == AchievementType.COMEBACK:
        if achievement.id == "bounce_back":
            return stats.last_lost_streak >= 7 and stats.current_streak >= 1
        if achievement.id == "phoenix_rising":
            return stats.comeback_count >= 1 and stats.current_streak >= 14
        return stats.comeback_count >= achievement.requirement

    if achievement.type == AchievementType.PERFECT_WEEK:
        return stats.current_streak >= 7

    if achievement.type == AchievementType.WEEKEND_WARRIOR:
        return stats.completed_weekends >= achievement.requirement

    if achievement.type == AchievementType.MONDAY_MOTIVATION:
        return stats.monday_completions >= achievement.requirement

    if achievement.id == "new_year":
        return stats.has_new_year_completion
    if achievement.id == "speed_demon":
        return (
            stats.locked_in_within_minutes_of_wake is not None
            and stats.locked_in_within_minutes_of_wake <= 5
        )
    return False
