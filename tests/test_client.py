import base64
import json

import httpx
import pytest

from morningproof.client.api_client import APIError, MorningProofClient, message_for_status
from morningproof.models.schemas import BedVerificationResult, VideoVerificationResult


def _client(handler, token="token-123"):
    return MorningProofClient("http://testserver/", access_token=token, transport=httpx.MockTransport(handler))


async def test_verify_bed_sends_compressed_photo(jpeg_bytes):
    seen = {}

    def handler(request: httpx.Request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"is_made": True, "score": 7, "feedback": "Tidy"})

    async with _client(handler) as client:
        result = await client.verify_bed(jpeg_bytes)

    assert isinstance(result, BedVerificationResult)
    assert result.score == 7
    assert seen["path"] == "/api/verification/verify-bed"
    assert seen["auth"] == "Bearer token-123"
    assert base64.b64decode(seen["body"]["imageBase64"]).startswith(b"\xff\xd8")


async def test_verify_video_encodes_frames():
    seen = {}

    def handler(request: httpx.Request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"is_verified": True, "feedback": "ok", "confidence": "High"})

    async with _client(handler) as client:
        result = await client.verify_video([b"one", b"two"], "Pushups", duration=6)

    assert isinstance(result, VideoVerificationResult)
    assert result.confidence.value == "high"
    assert seen["body"]["frames"] == [base64.b64encode(b"one").decode(), base64.b64encode(b"two").decode()]
    assert seen["body"]["habitName"] == "Pushups"


async def test_predefined_bed_decodes_bed_result(jpeg_bytes):
    def handler(request):
        return httpx.Response(200, json={"is_made": False, "feedback": "Try again"})

    async with _client(handler) as client:
        result = await client.verify_predefined_habit(jpeg_bytes, "bed")

    assert isinstance(result, BedVerificationResult)
    assert result.is_made is False


@pytest.mark.parametrize("status_code,retryable", [(400, False), (401, False), (429, True), (503, True), (418, False)])
async def test_http_errors_map_to_messages(jpeg_bytes, status_code, retryable):
    def handler(request):
        return httpx.Response(status_code, json={"detail": "nope"})

    async with _client(handler) as client:
        with pytest.raises(APIError) as exc_info:
            await client.verify_sunlight(jpeg_bytes)

    error = exc_info.value
    assert error.kind == APIError.SERVER_ERROR
    assert error.status_code == status_code
    assert error.message == message_for_status(status_code)
    assert error.is_retryable is retryable


def test_status_messages():
    assert message_for_status(403) == message_for_status(401)
    assert "Too many requests" in message_for_status(429)
    assert message_for_status(418) == "Something went wrong. Please try again."


async def test_unparseable_body(jpeg_bytes):
    def handler(request):
        return httpx.Response(200, content=b"<html>oops</html>")

    async with _client(handler) as client:
        with pytest.raises(APIError) as exc_info:
            await client.verify_hydration(jpeg_bytes)

    assert exc_info.value.kind == APIError.PARSING_FAILED


async def test_wrong_shape_is_a_parsing_failure(jpeg_bytes):
    def handler(request):
        return httpx.Response(200, json={"feedback": "missing verdict"})

    async with _client(handler) as client:
        with pytest.raises(APIError) as exc_info:
            await client.verify_custom_habit(jpeg_bytes, "Read")

    assert exc_info.value.kind == APIError.PARSING_FAILED


async def test_connection_failure(jpeg_bytes):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(APIError) as exc_info:
            await client.verify_bed(jpeg_bytes)

    assert exc_info.value.kind == APIError.INVALID_RESPONSE
    assert exc_info.value.is_retryable is True


async def test_unreadable_photo_never_hits_the_network():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    async with _client(handler) as client:
        with pytest.raises(APIError) as exc_info:
            await client.verify_bed(b"definitely not an image")

    assert exc_info.value.kind == APIError.IMAGE_CONVERSION_FAILED
    assert calls == []
