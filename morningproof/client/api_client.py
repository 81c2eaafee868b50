"""
Async client for the verification endpoints.

Photos are normalised locally before upload, the JSON result is decoded
into the same result models the server returns, and every failure is
raised as an APIError carrying a message that can be shown to the user.
"""

import base64
import logging
from typing import List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from morningproof.models.schemas import (
    BedVerificationResult,
    HabitVerificationResult,
    HydrationVerificationResult,
    SunlightVerificationResult,
    VideoVerificationResult,
)
from morningproof.utils.image_processing import ImageConversionError, prepare_image_for_vision

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)

DEFAULT_TIMEOUT = 60.0

IMAGE_CONVERSION_MESSAGE = "Couldn't process your photo. Please try again."
INVALID_RESPONSE_MESSAGE = "Couldn't connect to the server. Please check your connection and try again."
PARSING_FAILED_MESSAGE = "Couldn't understand the response. Please try again."
GENERIC_MESSAGE = "Something went wrong. Please try again."

PREDEFINED_RESULT_MODELS = {
    "bed": BedVerificationResult,
    "sunlight": SunlightVerificationResult,
    "hydration": HydrationVerificationResult,
}


def message_for_status(status_code: int) -> str:
    if status_code == 400:
        return "Couldn't process your photo. Please try taking another one."
    if status_code in (401, 403):
        return "Authentication error. Please restart the app and try again."
    if status_code == 429:
        return "Too many requests. Please wait a moment and try again."
    if 500 <= status_code <= 599:
        return "Server is temporarily unavailable. Please try again later."
    return GENERIC_MESSAGE


class APIError(Exception):
    """A failed API call with a user-facing message"""

    IMAGE_CONVERSION_FAILED = "image_conversion_failed"
    INVALID_RESPONSE = "invalid_response"
    SERVER_ERROR = "server_error"
    PARSING_FAILED = "parsing_failed"

    def __init__(self, kind: str, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.detail = detail

    @classmethod
    def server_error(cls, status_code: int, detail: str = "") -> "APIError":
        return cls(cls.SERVER_ERROR, message_for_status(status_code), status_code=status_code, detail=detail)

    @property
    def is_retryable(self) -> bool:
        """Whether offering the user a "try again" is worthwhile"""
        if self.kind == self.SERVER_ERROR:
            return self.status_code == 429 or (self.status_code or 0) >= 500
        return self.kind in (self.INVALID_RESPONSE, self.PARSING_FAILED)


def encode_image(image_bytes: bytes) -> str:
    """Compress a photo for upload and return it base64 encoded"""
    try:
        return base64.b64encode(prepare_image_for_vision(image_bytes)).decode("ascii")
    except ImageConversionError as e:
        raise APIError(APIError.IMAGE_CONVERSION_FAILED, IMAGE_CONVERSION_MESSAGE) from e


class MorningProofClient:
    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        headers = {}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self) -> "MorningProofClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _post(self, path: str, payload: dict, result_model: Type[ResultT]) -> ResultT:
        try:
            response = await self._client.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Request to {path} failed: {e}")
            raise APIError(APIError.INVALID_RESPONSE, INVALID_RESPONSE_MESSAGE) from e

        if response.status_code != 200:
            logger.error(f"{path} returned {response.status_code}: {response.text[:200]}")
            raise APIError.server_error(response.status_code, response.text)

        try:
            return result_model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Could not decode response from {path}: {e}")
            raise APIError(APIError.PARSING_FAILED, PARSING_FAILED_MESSAGE) from e

    async def verify_bed(self, image_bytes: bytes) -> BedVerificationResult:
        payload = {"imageBase64": encode_image(image_bytes)}
        return await self._post("/api/verification/verify-bed", payload, BedVerificationResult)

    async def verify_sunlight(self, image_bytes: bytes) -> SunlightVerificationResult:
        payload = {"imageBase64": encode_image(image_bytes)}
        return await self._post("/api/verification/verify-sunlight", payload, SunlightVerificationResult)

    async def verify_hydration(self, image_bytes: bytes) -> HydrationVerificationResult:
        payload = {"imageBase64": encode_image(image_bytes)}
        return await self._post("/api/verification/verify-hydration", payload, HydrationVerificationResult)

    async def verify_custom_habit(
        self,
        image_bytes: bytes,
        habit_name: str,
        ai_prompt: Optional[str] = None,
        allows_screenshots: bool = False
    ) -> HabitVerificationResult:
        payload = {
            "imageBase64": encode_image(image_bytes),
            "habitName": habit_name,
            "aiPrompt": ai_prompt,
            "allowsScreenshots": allows_screenshots,
        }
        return await self._post("/api/verification/verify-custom-habit", payload, HabitVerificationResult)

    async def verify_video(
        self,
        frames: List[bytes],
        habit_name: str,
        duration: float,
        ai_prompt: Optional[str] = None
    ) -> VideoVerificationResult:
        """Frames are sent as already-encoded JPEGs in capture order"""
        payload = {
            "frames": [base64.b64encode(frame).decode("ascii") for frame in frames],
            "habitName": habit_name,
            "aiPrompt": ai_prompt,
            "duration": duration,
        }
        return await self._post("/api/verification/verify-video", payload, VideoVerificationResult)

    async def verify_predefined_habit(self, image_bytes: bytes, habit_type: str) -> BaseModel:
        """Bed, sunlight and hydration answer with their own result keys"""
        payload = {"imageBase64": encode_image(image_bytes), "habitType": habit_type}
        result_model = PREDEFINED_RESULT_MODELS.get(habit_type, HabitVerificationResult)
        return await self._post("/api/verification/verify-predefined-habit", payload, result_model)
