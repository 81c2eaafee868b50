"""
Custom Habits Router

User-defined habits on top of the predefined routine. A custom habit is
either confirmed on the honor system or verified by a photo checked against
the user's own criteria.
"""

from fastapi import APIRouter, Depends, status
from typing import List
from uuid import UUID
import logging

from morningproof.models.habits import CustomHabit, CustomHabitCompletion
from morningproof.models.schemas import (
    CustomHabitCreate,
    CustomHabitUpdate,
    CustomHabitVerificationRequest,
    CustomHabitVerificationResponse,
    ImageVerificationRequest,
)
from morningproof.routers.dependencies import get_routine_service, get_storage_service
from morningproof.services.custom_habit_service import (
    create_custom_habit_service,
    delete_custom_habit_service,
    list_custom_habits_service,
    update_custom_habit_service,
)
from morningproof.services.routine_service import MorningRoutineService
from morningproof.services.storage_service import StorageService
from morningproof.services.verification_service import verify_custom_habit_service
from morningproof.services.vision_service import VisionService, get_vision_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[CustomHabit])
async def list_custom_habits(
    include_inactive: bool = False,
    storage: StorageService = Depends(get_storage_service)
):
    return await list_custom_habits_service(storage, include_inactive)


@router.post("/", response_model=CustomHabit, status_code=status.HTTP_201_CREATED)
async def create_custom_habit(
    habit_data: CustomHabitCreate,
    storage: StorageService = Depends(get_storage_service)
):
    return await create_custom_habit_service(habit_data, storage)


@router.put("/{habit_id}", response_model=CustomHabit)
async def update_custom_habit(
    habit_id: UUID,
    update: CustomHabitUpdate,
    storage: StorageService = Depends(get_storage_service)
):
    return await update_custom_habit_service(habit_id, update, storage)


@router.delete("/{habit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_custom_habit(
    habit_id: UUID,
    storage: StorageService = Depends(get_storage_service)
):
    await delete_custom_habit_service(habit_id, storage)


@router.post("/{habit_id}/complete", response_model=CustomHabitCompletion)
async def complete_custom_habit(
    habit_id: UUID,
    service: MorningRoutineService = Depends(get_routine_service)
):
    """Honor-system completion of a custom habit scheduled today"""
    return await service.complete_custom_habit(habit_id)


@router.post("/{habit_id}/verify", response_model=CustomHabitVerificationResponse)
async def verify_custom_habit(
    habit_id: UUID,
    request: ImageVerificationRequest,
    service: MorningRoutineService = Depends(get_routine_service),
    vision: VisionService = Depends(get_vision_service)
):
    """Check a photo against the habit's criteria; a pass completes it for today"""
    habit = service.require_ai_custom_habit(habit_id)
    result = await verify_custom_habit_service(
        CustomHabitVerificationRequest(
            image_base64=request.image_base64,
            habit_name=habit.name,
            ai_prompt=habit.ai_prompt,
            allows_screenshots=habit.allows_screenshots,
        ),
        vision,
    )

    completion = None
    if result.is_verified:
        completion = await service.complete_custom_habit(habit_id, ai_feedback=result.feedback)
    else:
        logger.info(f"Custom habit {habit_id} photo rejected: {result.feedback}")

    return CustomHabitVerificationResponse(
        result=result,
        completion=completion,
        lock_in=service.last_lock_in,
    )
