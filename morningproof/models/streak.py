"""
Streak tracking.

A streak counts consecutive local days on which the morning routine was
locked in. Dates stored here are always the user's local calendar dates.
"""

import calendar
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Set
from datetime import date, datetime, timedelta


def streak_after_completion(last_completion: Optional[date], today: date, current: int) -> int:
    """Streak value after completing on `today` given the previous completion date"""
    if last_completion == today:
        return current
    if last_completion == today - timedelta(days=1):
        return current + 1
    return 1


def _month_key(day: date) -> str:
    return f"{day.year}-{day.month}"


class StreakData(BaseModel):
    current_streak: int = 0
    longest_streak: int = 0
    last_completion_date: Optional[date] = None
    total_completions: int = 0
    completion_dates: List[date] = Field(default_factory=list)

    # Completions keyed by local hour of day
    early_completions: Dict[int, int] = Field(default_factory=dict)

    # Comeback tracking
    comeback_count: int = 0
    last_lost_streak: int = 0
    has_rebuilt_after_loss: bool = False

    # Special achievement tracking
    perfect_months: int = 0
    checked_perfect_months: Set[str] = Field(default_factory=set)
    has_new_year_completion: bool = False
    has_anniversary_completion: bool = False
    install_date: Optional[date] = None

    def has_completed_today(self, today: date) -> bool:
        return self.last_completion_date == today

    def was_completed_on(self, day: date) -> bool:
        return day in self.completion_dates

    def completions_in_month(self, day: date) -> int:
        return len({d for d in self.completion_dates if d.year == day.year and d.month == day.month})

    def completions_before_hour(self, hour: int) -> int:
        return sum(count for h, count in self.early_completions.items() if h < hour)

    def completed_weekends(self) -> int:
        """Weekends (Saturday and the following Sunday) where both days were completed"""
        dates = set(self.completion_dates)
        return sum(
            1 for d in dates
            if d.weekday() == 5 and d + timedelta(days=1) in dates
        )

    def monday_completions(self) -> int:
        return sum(1 for d in set(self.completion_dates) if d.weekday() == 0)

    def record_completion(self, now: datetime):
        """Record a lock-in at local time `now`. Repeated calls on the same day are ignored."""
        today = now.date()
        if self.last_completion_date == today:
            return

        if self.last_completion_date == today - timedelta(days=1):
            self.current_streak += 1
            if self.last_lost_streak > 0:
                self.has_rebuilt_after_loss = True
        else:
            if self.current_streak > 0:
                self.last_lost_streak = self.current_streak
                self.comeback_count += 1
                self.has_rebuilt_after_loss = False
            self.current_streak = 1

        self.last_completion_date = today
        self.total_completions += 1
        self.completion_dates.append(today)
        self.longest_streak = max(self.longest_streak, self.current_streak)

        self.early_completions[now.hour] = self.early_completions.get(now.hour, 0) + 1

        if today.month == 1 and today.day == 1:
            self.has_new_year_completion = True

        if self.install_date is None:
            self.install_date = today
        elif (
            today.month == self.install_date.month
            and today.day == self.install_date.day
            and today.year - self.install_date.year >= 1
        ):
            self.has_anniversary_completion = True

        self._check_perfect_months(today)

    def break_streak(self):
        """Reset the running streak, remembering it for comeback achievements"""
        if self.current_streak > 0:
            self.last_lost_streak = self.current_streak
            self.comeback_count += 1
            self.has_rebuilt_after_loss = False
        self.current_streak = 0

    def _check_perfect_months(self, today: date):
        previous_month = today.replace(day=1) - timedelta(days=1)
        self._check_month(previous_month)

        days_in_month = calendar.monthrange(today.year, today.month)[1]
        if today.day == days_in_month:
            self._check_month(today)

    def _check_month(self, day: date):
        key = _month_key(day)
        if key in self.checked_perfect_months:
            return
        days_in_month = calendar.monthrange(day.year, day.month)[1]
        if self.completions_in_month(day) >= days_in_month:
            self.perfect_months += 1
        # Months are only checked once they are over, so a miss is final
        self.checked_perfect_months.add(key)

    def to_achievement_stats(self):
        from morningproof.models.achievements import AchievementStats

        return AchievementStats(
            current_streak=self.current_streak,
            longest_streak=self.longest_streak,
            total_completions=self.total_completions,
            early_completions=dict(self.early_completions),
            comeback_count=self.comeback_count,
            last_lost_streak=self.last_lost_streak,
            has_rebuilt_after_loss=self.has_rebuilt_after_loss,
            perfect_months=self.perfect_months,
            completed_weekends=self.completed_weekends(),
            monday_completions=self.monday_completions(),
            has_new_year_completion=self.has_new_year_completion,
            has_anniversary_completion=self.has_anniversary_completion,
        )
