"""Per-request service wiring shared by the authenticated routers."""

from typing import Callable
from datetime import datetime
from fastapi import Depends
from supabase._async.client import AsyncClient

from morningproof.config.database import get_async_supabase_client
from morningproof.models.schemas import User
from morningproof.routers.auth import get_current_user
from morningproof.services.app_locking_service import AppLockingService
from morningproof.services.preferences_store import PreferencesStore
from morningproof.services.routine_service import MorningRoutineService
from morningproof.services.storage_service import StorageService
from morningproof.utils.timezone_utils import get_user_now


def get_clock() -> Callable[[str], datetime]:
    """Returns a function giving the current local time for a timezone name"""
    return get_user_now


def get_user_now_for(
    current_user: User = Depends(get_current_user),
    clock: Callable[[str], datetime] = Depends(get_clock)
) -> datetime:
    return clock(current_user.timezone)


def get_preferences_store(
    current_user: User = Depends(get_current_user),
    supabase: AsyncClient = Depends(get_async_supabase_client)
) -> PreferencesStore:
    return PreferencesStore(supabase, str(current_user.id))


def get_storage_service(store: PreferencesStore = Depends(get_preferences_store)) -> StorageService:
    return StorageService(store)


def get_app_locking_service(store: PreferencesStore = Depends(get_preferences_store)) -> AppLockingService:
    return AppLockingService(store)


async def get_routine_service(
    storage: StorageService = Depends(get_storage_service),
    app_locking: AppLockingService = Depends(get_app_locking_service),
    now: datetime = Depends(get_user_now_for)
) -> MorningRoutineService:
    return await MorningRoutineService(storage, app_locking, now).load()
