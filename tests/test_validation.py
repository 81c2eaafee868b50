import base64

import pytest

from morningproof.config.settings import get_settings
from morningproof.services.verification_prompts import (
    PREDEFINED_PROMPTS,
    SCREENSHOTS_ACCEPTED,
    SCREENSHOTS_REJECTED,
    build_custom_habit_prompt,
    build_video_prompt,
)
from morningproof.utils.validation import (
    decode_image_payload,
    sanitize_for_prompt,
    validate_ai_prompt,
    validate_habit_name,
)


def test_sanitize_escapes_quotes_and_flattens_newlines():
    assert sanitize_for_prompt('He said "hi"\nok\r') == 'He said \\"hi\\" ok'
    assert sanitize_for_prompt("back\\slash") == "back\\\\slash"
    assert sanitize_for_prompt("  padded  ") == "padded"


def test_sanitize_truncates_and_handles_empty():
    assert len(sanitize_for_prompt("x" * 3000)) == 2000
    assert sanitize_for_prompt(None) == ""
    assert sanitize_for_prompt("") == ""


def test_validate_habit_name():
    assert validate_habit_name("Read") == {"valid": True}
    assert validate_habit_name(None)["error"] == "Habit name is required"
    assert validate_habit_name("   ")["error"] == "Habit name cannot be empty"
    assert not validate_habit_name("a" * 101)["valid"]
    assert validate_habit_name("a" * 100)["valid"]


def test_validate_ai_prompt():
    assert validate_ai_prompt(None)["valid"]
    assert validate_ai_prompt("x" * 2000)["valid"]
    assert validate_ai_prompt("x" * 2001)["error"] == "AI prompt must be 2000 characters or less"


def test_decode_image_payload_accepts_data_uri(jpeg_bytes):
    payload = "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode("ascii")
    assert decode_image_payload(payload) == jpeg_bytes


def test_decode_image_payload_rejects_bad_input():
    with pytest.raises(ValueError, match="not valid base64"):
        decode_image_payload("not-base64!!")
    with pytest.raises(ValueError, match="empty"):
        decode_image_payload("")


def test_decode_image_payload_enforces_size_limit(monkeypatch):
    monkeypatch.setattr(get_settings(), "max_image_bytes", 4)
    with pytest.raises(ValueError, match="Image too large"):
        decode_image_payload(base64.b64encode(b"12345678").decode("ascii"))


def test_predefined_prompt_catalog():
    assert set(PREDEFINED_PROMPTS) == {
        "bed", "sunlight", "hydration", "healthyBreakfast",
        "morningJournal", "vitamins", "skincare", "mealPrep",
    }
    assert '"is_made"' in PREDEFINED_PROMPTS["bed"]
    assert '"is_verified"' in PREDEFINED_PROMPTS["vitamins"]


def test_custom_habit_prompt_screenshot_policy():
    accepted = build_custom_habit_prompt("Read", "Show a book", allows_screenshots=True)
    rejected = build_custom_habit_prompt("Read", "Show a book", allows_screenshots=False)

    assert SCREENSHOTS_ACCEPTED in accepted
    assert SCREENSHOTS_REJECTED in rejected
    assert 'custom habit "Read"' in accepted
    assert "User's verification criteria: Show a book" in accepted


def test_video_prompt_describes_the_frames():
    prompt = build_video_prompt("Pushups", "Ten reps", frame_count=4, duration=12.4)
    assert "4 frames extracted from a 12-second video" in prompt
    assert '"Pushups"' in prompt
