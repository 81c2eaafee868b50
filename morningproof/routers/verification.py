from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from typing import Optional
import os
import logging

from morningproof.models.schemas import (
    BedVerificationResult,
    CustomHabitVerificationRequest,
    HabitVerificationResult,
    HydrationVerificationResult,
    ImageVerificationRequest,
    PredefinedHabitVerificationRequest,
    SunlightVerificationResult,
    VideoVerificationRequest,
    VideoVerificationResult,
)
from morningproof.services.verification_service import (
    verify_bed_service,
    verify_custom_habit_service,
    verify_extracted_video_service,
    verify_hydration_service,
    verify_predefined_habit_service,
    verify_sunlight_service,
    verify_video_service,
)
from morningproof.services.video_frame_extractor import ExtractionError, VideoFrameExtractor
from morningproof.services.vision_service import VisionService, get_vision_service

router = APIRouter()
logger = logging.getLogger(__name__)

# Uploaded videos are capped well above what a 60s phone clip needs
MAX_VIDEO_UPLOAD_BYTES = 100 * 1024 * 1024


def get_frame_extractor() -> VideoFrameExtractor:
    return VideoFrameExtractor()


@router.post("/verify-bed", response_model=BedVerificationResult, response_model_exclude_none=True)
async def verify_bed(
    request: ImageVerificationRequest,
    vision: VisionService = Depends(get_vision_service)
):
    return await verify_bed_service(request.image_base64, vision)


@router.post("/verify-sunlight", response_model=SunlightVerificationResult, response_model_exclude_none=True)
async def verify_sunlight(
    request: ImageVerificationRequest,
    vision: VisionService = Depends(get_vision_service)
):
    return await verify_sunlight_service(request.image_base64, vision)


@router.post("/verify-hydration", response_model=HydrationVerificationResult, response_model_exclude_none=True)
async def verify_hydration(
    request: ImageVerificationRequest,
    vision: VisionService = Depends(get_vision_service)
):
    return await verify_hydration_service(request.image_base64, vision)


@router.post("/verify-custom-habit", response_model=HabitVerificationResult, response_model_exclude_none=True)
async def verify_custom_habit(
    request: CustomHabitVerificationRequest,
    vision: VisionService = Depends(get_vision_service)
):
    return await verify_custom_habit_service(request, vision)


@router.post("/verify-video", response_model=VideoVerificationResult)
async def verify_video(
    request: VideoVerificationRequest,
    vision: VisionService = Depends(get_vision_service)
):
    return await verify_video_service(request, vision)


@router.post("/verify-video-upload", response_model=VideoVerificationResult)
async def verify_video_upload(
    video: UploadFile = File(...),
    habit_name: str = Form(..., alias="habitName"),
    ai_prompt: Optional[str] = Form(None, alias="aiPrompt"),
    vision: VisionService = Depends(get_vision_service),
    extractor: VideoFrameExtractor = Depends(get_frame_extractor)
):
    """Accept a raw video, sample frames server-side and verify them"""
    video_bytes = await video.read()
    if len(video_bytes) > MAX_VIDEO_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="Video file is too large")

    suffix = os.path.splitext(video.filename or "")[1] or ".mp4"
    try:
        extracted = extractor.extract_from_bytes(video_bytes, suffix=suffix)
    except ExtractionError as e:
        logger.warning(f"Video frame extraction failed: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)

    return await verify_extracted_video_service(extracted, habit_name, ai_prompt, vision)


@router.post("/verify-predefined-habit")
async def verify_predefined_habit(
    request: PredefinedHabitVerificationRequest,
    vision: VisionService = Depends(get_vision_service)
):
    result = await verify_predefined_habit_service(request, vision)
    return result.model_dump(exclude_none=True)
