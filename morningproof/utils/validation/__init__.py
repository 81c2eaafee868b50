from .verification_validation import (
    sanitize_for_prompt,
    validate_habit_name,
    validate_ai_prompt,
    decode_image_payload
)
from .settings_validation import invalid_fields

__all__ = [
    "sanitize_for_prompt",
    "validate_habit_name",
    "validate_ai_prompt",
    "decode_image_payload",
    "invalid_fields"
]
