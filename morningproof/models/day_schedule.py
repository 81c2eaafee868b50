"""
Day-of-week scheduling helpers.

Weekdays are numbered 0-6 with Sunday=0, the same convention habit schedules
use everywhere else in the API.
"""

from datetime import date
from typing import Iterable, Set

ALL_DAYS: Set[int] = set(range(7))
WEEKDAYS: Set[int] = set(range(1, 6))  # Monday through Friday
WEEKENDS: Set[int] = {0, 6}

SHORT_DAY_NAMES = ["S", "M", "T", "W", "T", "F", "S"]
ABBREVIATED_DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
FULL_DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def sunday_based_weekday(target_date: date) -> int:
    """Convert Python's Monday=0 weekday into the Sunday=0 convention"""
    return (target_date.weekday() + 1) % 7


def is_weekend(target_date: date) -> bool:
    return sunday_based_weekday(target_date) in WEEKENDS


def is_active_on(target_date: date, active_days: Iterable[int]) -> bool:
    """Check if a habit scheduled on active_days is active on target_date"""
    return sunday_based_weekday(target_date) in set(active_days)


def display_string(active_days: Iterable[int]) -> str:
    days = set(active_days)
    if days == ALL_DAYS:
        return "Every day"
    if days == WEEKDAYS:
        return "Weekdays"
    if days == WEEKENDS:
        return "Weekends"

    return ", ".join(ABBREVIATED_DAY_NAMES[day] for day in sorted(days) if 0 <= day <= 6)


def short_display_string(active_days: Iterable[int]) -> str:
    """Compact variant of display_string: custom sets only show their size"""
    days = set(active_days)
    if days in (ALL_DAYS, WEEKDAYS, WEEKENDS):
        return display_string(days)
    return f"{len(days)} days"
