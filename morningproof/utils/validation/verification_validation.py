import base64
import binascii
from typing import Dict, Any, Optional
from morningproof.config.settings import get_settings

MAX_AI_PROMPT_LENGTH = 2000


def sanitize_for_prompt(value: Optional[str], max_length: int = MAX_AI_PROMPT_LENGTH) -> str:
    """
    Make user text safe to embed inside a quoted prompt string.

    Truncates to max_length, escapes backslashes and double quotes, turns
    newlines into spaces, drops carriage returns and trims whitespace.
    """
    if not value or not isinstance(value, str):
        return ""

    sanitized = value[:max_length]
    sanitized = (
        sanitized.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", " ")
        .replace("\r", "")
        .strip()
    )
    return sanitized


def validate_habit_name(name: Optional[str]) -> Dict[str, Any]:
    """
    Validate a habit name before it is used in a prompt or stored.

    Returns:
        Dict with "valid" and, on failure, an "error" message
    """
    max_length = get_settings().max_habit_name_length
    if not name or not isinstance(name, str):
        return {"valid": False, "error": "Habit name is required"}
    if not name.strip():
        return {"valid": False, "error": "Habit name cannot be empty"}
    if len(name) > max_length:
        return {"valid": False, "error": f"Habit name must be {max_length} characters or less"}
    return {"valid": True}


def validate_ai_prompt(prompt: Optional[str]) -> Dict[str, Any]:
    max_length = get_settings().max_ai_prompt_length
    if prompt and isinstance(prompt, str) and len(prompt) > max_length:
        return {"valid": False, "error": f"AI prompt must be {max_length} characters or less"}
    return {"valid": True}


def decode_image_payload(image_base64: str) -> bytes:
    """
    Decode a base64 image payload, accepting an optional data URI prefix.

    Raises:
        ValueError: If the payload is not base64 or is over the size limit
    """
    if image_base64.startswith("data:") and "," in image_base64:
        image_base64 = image_base64.split(",", 1)[1]

    try:
        image_bytes = base64.b64decode(image_base64, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("Image data is not valid base64")

    if not image_bytes:
        raise ValueError("Image data is empty")

    max_bytes = get_settings().max_image_bytes
    if len(image_bytes) > max_bytes:
        size_mb = len(image_bytes) / 1024 / 1024
        raise ValueError(f"Image too large ({size_mb:.1f}MB). Maximum {max_bytes // (1024 * 1024)}MB allowed.")

    return image_bytes
