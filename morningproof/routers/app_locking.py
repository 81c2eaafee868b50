"""
App Locking Router

Shield state for the device-activity monitor. The device asks whether
shields belong up, reports the start and end of the blocking interval, and
can spend an emergency unlock at the cost of the current streak.
"""

from fastapi import APIRouter, Depends
from datetime import datetime
import logging

from morningproof.models.schemas import AppLockingSettingsUpdate, ShieldDecision
from morningproof.routers.dependencies import (
    get_app_locking_service,
    get_storage_service,
    get_user_now_for,
)
from morningproof.services.app_locking_service import AppLockingService
from morningproof.services.storage_service import StorageService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/status", response_model=ShieldDecision)
async def get_shield_status(
    app_locking: AppLockingService = Depends(get_app_locking_service),
    now: datetime = Depends(get_user_now_for)
):
    return await app_locking.shield_decision(now)


@router.put("/settings", response_model=ShieldDecision)
async def update_app_locking_settings(
    update: AppLockingSettingsUpdate,
    app_locking: AppLockingService = Depends(get_app_locking_service),
    now: datetime = Depends(get_user_now_for)
):
    state = await app_locking.update_settings(update)
    return await app_locking.shield_decision(now, state)


@router.post("/emergency-unlock", response_model=ShieldDecision)
async def emergency_unlock(
    app_locking: AppLockingService = Depends(get_app_locking_service),
    storage: StorageService = Depends(get_storage_service),
    now: datetime = Depends(get_user_now_for)
):
    state = await app_locking.emergency_unlock(now, storage)
    return await app_locking.shield_decision(now, state)


@router.post("/interval-start", response_model=ShieldDecision)
async def interval_did_start(
    app_locking: AppLockingService = Depends(get_app_locking_service),
    now: datetime = Depends(get_user_now_for)
):
    return await app_locking.interval_did_start(now)


@router.post("/interval-end", response_model=ShieldDecision)
async def interval_did_end(
    app_locking: AppLockingService = Depends(get_app_locking_service),
    now: datetime = Depends(get_user_now_for)
):
    return await app_locking.interval_did_end(now)
