from fastapi import APIRouter, Depends, HTTPException
from datetime import date, datetime, timedelta
from typing import Optional
import logging

from morningproof.models.achievements import ALL_ACHIEVEMENTS
from morningproof.models.schemas import (
    AchievementsResponse,
    AchievementStatus,
    DayHistory,
    StreakHistory,
    StreakSummary,
)
from morningproof.routers.dependencies import get_storage_service, get_user_now_for
from morningproof.services.storage_service import StorageService

router = APIRouter()
logger = logging.getLogger(__name__)

# A year of calendar cells is the most one request returns
MAX_HISTORY_DAYS = 366


@router.get("/streak", response_model=StreakSummary)
async def get_streak(
    storage: StorageService = Depends(get_storage_service),
    now: datetime = Depends(get_user_now_for)
):
    streak_data = await storage.load_streak_data()
    achievements = await storage.load_achievements()
    return StreakSummary(
        current_streak=streak_data.current_streak,
        longest_streak=streak_data.longest_streak,
        total_completions=streak_data.total_completions,
        last_completion_date=streak_data.last_completion_date,
        has_completed_today=streak_data.has_completed_today(now.date()),
        comeback_count=streak_data.comeback_count,
        perfect_months=streak_data.perfect_months,
        next_achievement=achievements.next_achievement,
    )


@router.get("/history", response_model=StreakHistory)
async def get_history(
    start: Optional[date] = None,
    end: Optional[date] = None,
    storage: StorageService = Depends(get_storage_service),
    now: datetime = Depends(get_user_now_for)
):
    """Per-day completion history for the calendar. Defaults to the current month so far."""
    end = end or now.date()
    start = start or end.replace(day=1)
    if start > end:
        raise HTTPException(status_code=400, detail="start must be on or before end")
    if (end - start).days + 1 > MAX_HISTORY_DAYS:
        raise HTTPException(status_code=400, detail=f"History is limited to {MAX_HISTORY_DAYS} days per request")

    streak_data = await storage.load_streak_data()
    logs = {log.date: log for log in await storage.load_daily_logs(start, end)}

    days = []
    day = start
    while day <= end:
        log = logs.get(day)
        days.append(DayHistory(
            date=day,
            completed=streak_data.was_completed_on(day),
            morning_score=log.morning_score if log else None,
            completed_habits=sum(1 for c in log.completions if c.is_completed) if log else 0,
            total_habits=len(log.completions) if log else 0,
        ))
        day += timedelta(days=1)

    return StreakHistory(
        start=start,
        end=end,
        days=days,
        completed_days=sum(1 for d in days if d.completed),
        completions_in_month=streak_data.completions_in_month(end),
    )


@router.get("/achievements", response_model=AchievementsResponse)
async def get_achievements(storage: StorageService = Depends(get_storage_service)):
    """Visible achievements with unlock dates. Hidden ones appear once unlocked."""
    achievements = await storage.load_achievements()
    statuses = [
        AchievementStatus(achievement=a, unlocked_at=achievements.get_unlocked_date(a.id))
        for a in achievements.visible_achievements()
    ]
    return AchievementsResponse(
        achievements=statuses,
        unlocked_count=achievements.unlocked_count,
        total_count=len(ALL_ACHIEVEMENTS),
        unlocked_by_category={
            category.value: count
            for category, count in achievements.unlocked_count_by_category().items()
        },
    )
