"""
Vision model client for habit verification.

Sends one or more JPEG images plus a prompt to an OpenAI vision-capable chat
model and returns the JSON object found in the reply.
"""

import openai
import base64
import json
import logging
from typing import Any, Dict, List, Optional

from morningproof.config.settings import get_settings

logger = logging.getLogger(__name__)


class VisionServiceError(Exception):
    """Raised when the model call fails or its reply holds no usable JSON"""


def extract_json_payload(text: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a model reply.

    Strips a leading ```json or ``` fence and a trailing ```, then keeps the
    span from the first "{" to the last "}".

    Raises:
        VisionServiceError: If no JSON object can be parsed
    """
    if not text:
        raise VisionServiceError("Empty response from vision model")

    response_text = text.strip()
    if response_text.startswith("```json"):
        response_text = response_text[7:]
    elif response_text.startswith("```"):
        response_text = response_text[3:]
    if response_text.endswith("```"):
        response_text = response_text[:-3]
    response_text = response_text.strip()

    json_start = response_text.find("{")
    json_end = response_text.rfind("}")
    if json_start != -1 and json_end != -1:
        response_text = response_text[json_start:json_end + 1]

    try:
        payload = json.loads(response_text)
    except json.JSONDecodeError as e:
        raise VisionServiceError(f"Failed to parse vision response as JSON: {e}") from e

    if not isinstance(payload, dict):
        raise VisionServiceError("Vision response JSON is not an object")
    return payload


class VisionService:
    """Service for habit verification using OpenAI Vision API"""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        settings = get_settings()
        self._api_key = api_key or settings.openai_api_key
        self.model = model or settings.vision_model
        self._client = None

    @property
    def client(self) -> openai.AsyncOpenAI:
        # Created on first use so the app can start without a key configured
        if self._client is None:
            self._client = openai.AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def analyze(
        self,
        images: List[bytes],
        prompt: str,
        max_tokens: int = 512,
        label_frames: bool = False
    ) -> Dict[str, Any]:
        """
        Ask the model to judge the images and return its JSON verdict.

        Args:
            images: JPEG images, in order
            prompt: Instructions placed after the images
            max_tokens: Completion budget
            label_frames: Add "Frame i of n" captions after each image (video)

        Returns:
            The decoded JSON object

        Raises:
            VisionServiceError: On API errors or unparseable output
        """
        if not images:
            raise VisionServiceError("No images to analyze")

        content = []
        for index, image_bytes in enumerate(images):
            base64_image = base64.b64encode(image_bytes).decode('utf-8')
            content.append({"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{base64_image}"}})
            if label_frames:
                content.append({"type": "text", "text": f"Frame {index + 1} of {len(images)}"})
        content.append({"type": "text", "text": prompt})

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "system",
                        "content": "You are a habit verification assistant. Always respond with valid JSON."
                    },
                    {
                        "role": "user",
                        "content": content
                    }
                ],
                response_format={"type": "json_object"},
                max_tokens=max_tokens
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI Vision API error: {e}")
            raise VisionServiceError(str(e)) from e

        if not response.choices:
            raise VisionServiceError("No choices in vision response")

        raw_response = response.choices[0].message.content
        logger.info(f"Raw OpenAI response: {raw_response}")
        return extract_json_payload(raw_response)


# Global service instance
vision_service = VisionService()


def get_vision_service() -> VisionService:
    return vision_service
