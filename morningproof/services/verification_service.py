import logging
from typing import List, Type, TypeVar
from fastapi import HTTPException
from pydantic import BaseModel, ValidationError

from morningproof.config.settings import get_settings
from morningproof.models.schemas import (
    BedVerificationResult,
    CustomHabitVerificationRequest,
    HabitVerificationResult,
    HydrationVerificationResult,
    PredefinedHabitVerificationRequest,
    SunlightVerificationResult,
    VideoVerificationRequest,
    VideoVerificationResult,
)
from morningproof.services.verification_prompts import (
    BED_PROMPT,
    DEFAULT_CUSTOM_CRITERIA,
    DEFAULT_VIDEO_CRITERIA,
    HYDRATION_PROMPT,
    PREDEFINED_PROMPTS,
    SUNLIGHT_PROMPT,
    build_custom_habit_prompt,
    build_video_prompt,
)
from morningproof.services.video_frame_extractor import ExtractedVideo
from morningproof.services.vision_service import VisionService, VisionServiceError
from morningproof.utils.image_processing import ImageConversionError, prepare_image_for_vision
from morningproof.utils.validation import (
    decode_image_payload,
    sanitize_for_prompt,
    validate_ai_prompt,
    validate_habit_name,
)

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)

VERIFICATION_FAILED = "Verification failed"

# Completion budgets per verification kind
BED_MAX_TOKENS = 512
SIMPLE_MAX_TOKENS = 256
CUSTOM_MAX_TOKENS = 512
VIDEO_MAX_TOKENS = 512

PREDEFINED_RESULT_MODELS = {
    "bed": BedVerificationResult,
    "sunlight": SunlightVerificationResult,
    "hydration": HydrationVerificationResult,
}


def _prepare_image(image_base64: str, max_dimension: int = None) -> bytes:
    try:
        image_bytes = decode_image_payload(image_base64)
        if max_dimension is None:
            return prepare_image_for_vision(image_bytes)
        return prepare_image_for_vision(image_bytes, max_dimension=max_dimension)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ImageConversionError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _check_habit_inputs(habit_name: str, ai_prompt: str):
    name_check = validate_habit_name(habit_name)
    if not name_check["valid"]:
        raise HTTPException(status_code=400, detail=name_check["error"])

    prompt_check = validate_ai_prompt(ai_prompt)
    if not prompt_check["valid"]:
        raise HTTPException(status_code=400, detail=prompt_check["error"])


async def _run_verification(
    vision: VisionService,
    images: List[bytes],
    prompt: str,
    max_tokens: int,
    result_model: Type[ResultT],
    label: str,
    label_frames: bool = False
) -> ResultT:
    try:
        payload = await vision.analyze(images, prompt, max_tokens=max_tokens, label_frames=label_frames)
        return result_model.model_validate(payload)
    except (VisionServiceError, ValidationError) as e:
        logger.error(f"{label} error: {e}")
        raise HTTPException(status_code=500, detail=VERIFICATION_FAILED)


async def verify_bed_service(image_base64: str, vision: VisionService) -> BedVerificationResult:
    if not image_base64:
        raise HTTPException(status_code=400, detail="Missing imageBase64")
    image = _prepare_image(image_base64)
    return await _run_verification(vision, [image], BED_PROMPT, BED_MAX_TOKENS, BedVerificationResult, "verifyBed")


async def verify_sunlight_service(image_base64: str, vision: VisionService) -> SunlightVerificationResult:
    if not image_base64:
        raise HTTPException(status_code=400, detail="Missing imageBase64")
    image = _prepare_image(image_base64)
    return await _run_verification(
        vision, [image], SUNLIGHT_PROMPT, SIMPLE_MAX_TOKENS, SunlightVerificationResult, "verifySunlight"
    )


async def verify_hydration_service(image_base64: str, vision: VisionService) -> HydrationVerificationResult:
    if not image_base64:
        raise HTTPException(status_code=400, detail="Missing imageBase64")
    image = _prepare_image(image_base64)
    return await _run_verification(
        vision, [image], HYDRATION_PROMPT, SIMPLE_MAX_TOKENS, HydrationVerificationResult, "verifyHydration"
    )


async def verify_custom_habit_service(
    request: CustomHabitVerificationRequest,
    vision: VisionService
) -> HabitVerificationResult:
    """Verify a photo against a user-defined habit name and criteria"""
    if not request.image_base64 or not request.habit_name:
        raise HTTPException(status_code=400, detail="Missing required fields")

    _check_habit_inputs(request.habit_name, request.ai_prompt)

    habit_name = sanitize_for_prompt(request.habit_name)
    criteria = sanitize_for_prompt(request.ai_prompt) if request.ai_prompt else DEFAULT_CUSTOM_CRITERIA
    prompt = build_custom_habit_prompt(habit_name, criteria, request.allows_screenshots)

    image = _prepare_image(request.image_base64)
    return await _run_verification(
        vision, [image], prompt, CUSTOM_MAX_TOKENS, HabitVerificationResult, "verifyCustomHabit"
    )


async def verify_video_frames(
    frames: List[bytes],
    duration: float,
    habit_name: str,
    ai_prompt: str,
    vision: VisionService
) -> VideoVerificationResult:
    """Judge an ordered sequence of JPEG frames as one recorded action"""
    sanitized_name = sanitize_for_prompt(habit_name)
    criteria = sanitize_for_prompt(ai_prompt) if ai_prompt else DEFAULT_VIDEO_CRITERIA
    prompt = build_video_prompt(sanitized_name, criteria, len(frames), duration)
    return await _run_verification(
        vision, frames, prompt, VIDEO_MAX_TOKENS, VideoVerificationResult, "verifyVideo", label_frames=True
    )


async def verify_video_service(request: VideoVerificationRequest, vision: VisionService) -> VideoVerificationResult:
    if not request.frames or not request.habit_name:
        raise HTTPException(status_code=400, detail="Missing required fields")

    _check_habit_inputs(request.habit_name, request.ai_prompt)

    max_dimension = get_settings().video_max_frame_dimension
    frames = [_prepare_image(frame, max_dimension=max_dimension) for frame in request.frames]
    return await verify_video_frames(frames, request.duration, request.habit_name, request.ai_prompt, vision)


async def verify_extracted_video_service(
    video: ExtractedVideo,
    habit_name: str,
    ai_prompt: str,
    vision: VisionService
) -> VideoVerificationResult:
    """Verify frames sampled server-side from an uploaded video"""
    if not habit_name:
        raise HTTPException(status_code=400, detail="Missing required fields")

    _check_habit_inputs(habit_name, ai_prompt)
    return await verify_video_frames(video.frames, video.duration, habit_name, ai_prompt, vision)


async def verify_predefined_habit_service(
    request: PredefinedHabitVerificationRequest,
    vision: VisionService
) -> BaseModel:
    """Verify a photo with one of the stock prompts, looked up by habit type"""
    if not request.image_base64 or not request.habit_type:
        raise HTTPException(status_code=400, detail="Missing imageBase64 or habitType")

    prompt = PREDEFINED_PROMPTS.get(request.habit_type)
    if prompt is None:
        raise HTTPException(status_code=400, detail=f"Unknown habit type: {request.habit_type}")

    result_model = PREDEFINED_RESULT_MODELS.get(request.habit_type, HabitVerificationResult)
    image = _prepare_image(request.image_base64)
    return await _run_verification(
        vision, [image], prompt, SIMPLE_MAX_TOKENS, result_model, "verifyPredefinedHabit"
    )
