from types import SimpleNamespace

import httpx
import openai
import pytest

from morningproof.services.vision_service import VisionService, VisionServiceError, extract_json_payload


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _service_with(completions: FakeCompletions) -> VisionService:
    service = VisionService(api_key="test-key", model="gpt-4o")
    service._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return service


def test_extract_plain_json():
    assert extract_json_payload('{"is_made": true, "score": 8, "feedback": "Great job!"}') == {
        "is_made": True,
        "score": 8,
        "feedback": "Great job!",
    }


def test_extract_fenced_json():
    text = '```json\n{"is_water": false, "feedback": "No drink"}\n```'
    assert extract_json_payload(text) == {"is_water": False, "feedback": "No drink"}


def test_extract_json_surrounded_by_prose():
    text = 'Here is my verdict: {"is_verified": true, "feedback": "ok"} Hope that helps!'
    assert extract_json_payload(text)["is_verified"] is True


@pytest.mark.parametrize("text", ["", "no json here", "[1, 2]", "{not json}"])
def test_extract_rejects_unusable_output(text):
    with pytest.raises(VisionServiceError):
        extract_json_payload(text)


async def test_analyze_sends_images_then_prompt():
    completions = FakeCompletions(content='{"is_made": true, "feedback": "Nice"}')
    service = _service_with(completions)

    result = await service.analyze([b"one", b"two"], "Is the bed made?", max_tokens=256)

    assert result == {"is_made": True, "feedback": "Nice"}
    content = completions.kwargs["messages"][1]["content"]
    assert [part["type"] for part in content] == ["image_url", "image_url", "text"]
    assert content[0]["image_url"]["url"].startswith("data:image/jpeg;base64,")
    assert content[-1]["text"] == "Is the bed made?"
    assert completions.kwargs["response_format"] == {"type": "json_object"}
    assert completions.kwargs["max_tokens"] == 256


async def test_analyze_labels_video_frames():
    completions = FakeCompletions(content='{"is_verified": true}')
    service = _service_with(completions)

    await service.analyze([b"a", b"b"], "prompt", label_frames=True)

    texts = [part["text"] for part in completions.kwargs["messages"][1]["content"] if part["type"] == "text"]
    assert texts == ["Frame 1 of 2", "Frame 2 of 2", "prompt"]


async def test_analyze_wraps_api_errors():
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    service = _service_with(FakeCompletions(error=error))

    with pytest.raises(VisionServiceError):
        await service.analyze([b"img"], "prompt")


async def test_analyze_requires_images():
    with pytest.raises(VisionServiceError):
        await _service_with(FakeCompletions(content="{}")).analyze([], "prompt")
