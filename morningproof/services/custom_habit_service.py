import logging
from typing import List
from uuid import UUID
from fastapi import HTTPException
from pydantic import ValidationError

from morningproof.models.habits import CUSTOM_HABIT_ICONS, CustomHabit
from morningproof.models.schemas import CustomHabitCreate, CustomHabitUpdate
from morningproof.services.storage_service import StorageService
from morningproof.utils.validation import validate_ai_prompt, validate_habit_name

logger = logging.getLogger(__name__)


def _validate_fields(name=None, icon=None, ai_prompt=None, check_name=False):
    if check_name:
        name_check = validate_habit_name(name)
        if not name_check["valid"]:
            raise HTTPException(status_code=400, detail=name_check["error"])

    prompt_check = validate_ai_prompt(ai_prompt)
    if not prompt_check["valid"]:
        raise HTTPException(status_code=400, detail=prompt_check["error"])

    if icon is not None and icon not in CUSTOM_HABIT_ICONS:
        raise HTTPException(status_code=400, detail=f"Unsupported icon: {icon}")


async def list_custom_habits_service(storage: StorageService, include_inactive: bool = False) -> List[CustomHabit]:
    habits = await storage.load_custom_habits()
    if not include_inactive:
        habits = [habit for habit in habits if habit.is_active]
    return sorted(habits, key=lambda habit: habit.display_order)


async def create_custom_habit_service(habit_data: CustomHabitCreate, storage: StorageService) -> CustomHabit:
    _validate_fields(habit_data.name, habit_data.icon, habit_data.ai_prompt, check_name=True)

    habits = await storage.load_custom_habits()
    next_order = max((habit.display_order for habit in habits), default=-1) + 1

    try:
        habit = CustomHabit(
            name=habit_data.name.strip(),
            icon=habit_data.icon,
            verification_type=habit_data.verification_type,
            ai_prompt=habit_data.ai_prompt,
            allows_screenshots=habit_data.allows_screenshots,
            active_days=habit_data.active_days,
            display_order=next_order,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    habits.append(habit)
    await storage.save_custom_habits(habits)

    logger.info(f"Created custom habit {habit.id} ('{habit.name}') for user {storage.store.user_id}")
    return habit


async def update_custom_habit_service(habit_id: UUID, update: CustomHabitUpdate, storage: StorageService) -> CustomHabit:
    habits = await storage.load_custom_habits()
    index = next((i for i, habit in enumerate(habits) if habit.id == habit_id), None)
    if index is None:
        raise HTTPException(status_code=404, detail="Custom habit not found")

    changes = update.model_dump(exclude_unset=True)
    _validate_fields(
        changes.get("name"),
        changes.get("icon"),
        changes.get("ai_prompt"),
        check_name="name" in changes,
    )
    if "name" in changes:
        changes["name"] = changes["name"].strip()

    # Re-validate so active_days goes through the model's checks
    try:
        updated = CustomHabit.model_validate({**habits[index].model_dump(), **changes})
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    habits[index] = updated
    await storage.save_custom_habits(habits)
    return updated


async def delete_custom_habit_service(habit_id: UUID, storage: StorageService):
    habits = await storage.load_custom_habits()
    remaining = [habit for habit in habits if habit.id != habit_id]
    if len(remaining) == len(habits):
        raise HTTPException(status_code=404, detail="Custom habit not found")

    await storage.save_custom_habits(remaining)
    logger.info(f"Deleted custom habit {habit_id} for user {storage.store.user_id}")
