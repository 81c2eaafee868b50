"""
Daily rollover for app locking.

Runs hourly and clears yesterday's lock-in and emergency-unlock flags for
every user whose local day has turned over, so shields go back up for the
new morning even when the device never reported an interval start.
"""

from datetime import datetime
import logging
import pytz
from supabase._async.client import AsyncClient

from morningproof.config.database import get_async_supabase_client
from morningproof.services.app_locking_service import AppLockingService
from morningproof.services.preferences_store import PreferencesStore
from morningproof.utils.timezone_utils import normalize_timezone

logger = logging.getLogger(__name__)


async def roll_over_user(supabase: AsyncClient, user_id: str, user_now: datetime) -> bool:
    """Reset one user's day if it has not been reset yet. Returns True when reset."""
    app_locking = AppLockingService(PreferencesStore(supabase, user_id))
    state = await app_locking.load_state()

    today = user_now.date()
    if state.last_reset_date == today:
        return False
    # A lock-in already made today must survive the rollover
    if state.has_locked_in_today(user_now):
        return False

    await app_locking.reset_for_new_day(today)
    return True


async def run_daily_rollover(supabase: AsyncClient = None, utc_now: datetime = None) -> int:
    """Roll over every user whose local date has changed since their last reset"""
    if supabase is None:
        supabase = await get_async_supabase_client()
    if utc_now is None:
        utc_now = datetime.now(pytz.UTC)

    users = await supabase.table("users").select("id, timezone").execute()
    reset_count = 0

    for user in users.data or []:
        user_id = user["id"]
        try:
            user_tz = pytz.timezone(normalize_timezone(user.get("timezone") or "UTC"))
            user_now = utc_now.astimezone(user_tz)
            if await roll_over_user(supabase, user_id, user_now):
                reset_count += 1
        except Exception as e:
            # One bad user record must not stop the rollover for everyone else
            logger.error(f"Daily rollover failed for user {user_id}: {e}")

    if reset_count:
        logger.info(f"Daily rollover reset {reset_count} user(s)")
    return reset_count
