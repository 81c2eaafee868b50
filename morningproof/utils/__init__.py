# Utils package: time, timezone, image and input validation helpers

from .timezone_utils import (
    normalize_timezone,
    get_user_now
)

from .routine_time import (
    cutoff_datetime,
    is_past_cutoff,
    seconds_until_cutoff,
    seconds_until_next_deadline,
    is_day_locked
)

from .image_processing import (
    ImageConversionError,
    prepare_image_for_vision
)

from .validation import (
    sanitize_for_prompt,
    validate_habit_name,
    validate_ai_prompt,
    decode_image_payload
)

__all__ = [
    "normalize_timezone",
    "get_user_now",
    "cutoff_datetime",
    "is_past_cutoff",
    "seconds_until_cutoff",
    "seconds_until_next_deadline",
    "is_day_locked",
    "ImageConversionError",
    "prepare_image_for_vision",
    "sanitize_for_prompt",
    "validate_habit_name",
    "validate_ai_prompt",
    "decode_image_payload"
]
