"""
Morning Routine Router

Endpoints for today's routine: status, habit completion, bed photo
verification, journaling, sleep and step readings, habit configuration and
routine settings. Every call works on the signed-in user's local day.
"""

from fastapi import APIRouter, Depends
from typing import List, Optional
import logging

from morningproof.models.habits import HabitConfig, HabitType, MorningProofSettings
from morningproof.models.schemas import (
    BedCompletionResponse,
    CompleteHabitRequest,
    HabitCompletionResponse,
    HabitConfigUpdate,
    HealthSyncRequest,
    ImageVerificationRequest,
    JournalEntryRequest,
    RoutineStatus,
    SettingsUpdate,
    SleepEntryRequest,
)
from morningproof.routers.dependencies import get_routine_service
from morningproof.services.routine_service import MorningRoutineService
from morningproof.services.vision_service import VisionService, get_vision_service

router = APIRouter()
logger = logging.getLogger(__name__)


def _completion_response(service: MorningRoutineService, completion) -> HabitCompletionResponse:
    return HabitCompletionResponse(
        completion=completion,
        status=service.status(),
        lock_in=service.last_lock_in,
    )


@router.get("/status", response_model=RoutineStatus)
async def get_routine_status(service: MorningRoutineService = Depends(get_routine_service)):
    return service.status()


@router.post("/habits/{habit_type}/complete", response_model=HabitCompletionResponse)
async def complete_habit(
    habit_type: HabitType,
    request: Optional[CompleteHabitRequest] = None,
    service: MorningRoutineService = Depends(get_routine_service)
):
    """Mark an honor-system or hold-to-confirm habit as done"""
    verification_data = request.verification_data if request else None
    completion = await service.complete_habit(habit_type, verification_data)
    return _completion_response(service, completion)


@router.post("/bed/verify", response_model=BedCompletionResponse)
async def verify_and_complete_bed(
    request: ImageVerificationRequest,
    service: MorningRoutineService = Depends(get_routine_service),
    vision: VisionService = Depends(get_vision_service)
):
    result, completion = await service.complete_bed_verification(request.image_base64, vision)
    return BedCompletionResponse(
        result=result,
        completion=completion,
        status=service.status(),
        lock_in=service.last_lock_in,
    )


@router.post("/journal", response_model=HabitCompletionResponse)
async def submit_journal_entry(
    request: JournalEntryRequest,
    service: MorningRoutineService = Depends(get_routine_service)
):
    completion = await service.complete_journaling(request.text)
    return _completion_response(service, completion)


@router.post("/sleep", response_model=HabitCompletionResponse)
async def log_sleep(
    request: SleepEntryRequest,
    service: MorningRoutineService = Depends(get_routine_service)
):
    completion = await service.update_manual_sleep(request.hours)
    return _completion_response(service, completion)


@router.post("/health-sync", response_model=RoutineStatus)
async def sync_health(
    request: HealthSyncRequest,
    service: MorningRoutineService = Depends(get_routine_service)
):
    """Apply step count and sleep readings from the device's health store"""
    await service.sync_health_data(steps=request.steps, sleep_hours=request.sleep_hours)
    return service.status()


@router.get("/habits", response_model=List[HabitConfig])
async def list_habit_configs(service: MorningRoutineService = Depends(get_routine_service)):
    return sorted(service.habit_configs, key=lambda config: config.display_order)


@router.put("/habits/{habit_type}/config", response_model=HabitConfig)
async def update_habit_config(
    habit_type: HabitType,
    update: HabitConfigUpdate,
    service: MorningRoutineService = Depends(get_routine_service)
):
    return await service.update_habit_config(habit_type, update)


@router.get("/settings", response_model=MorningProofSettings)
async def get_settings(service: MorningRoutineService = Depends(get_routine_service)):
    return service.settings


@router.put("/settings", response_model=MorningProofSettings)
async def update_settings(
    update: SettingsUpdate,
    service: MorningRoutineService = Depends(get_routine_service)
):
    return await service.update_settings(update)


@router.post("/onboarding/complete", response_model=RoutineStatus)
async def complete_onboarding(service: MorningRoutineService = Depends(get_routine_service)):
    await service.complete_onboarding()
    return service.status()


@router.post("/reset", response_model=RoutineStatus)
async def reset_routine(service: MorningRoutineService = Depends(get_routine_service)):
    """Clear settings, habit configs and logs. Streaks and achievements are kept."""
    await service.reset_all_data()
    return service.status()
