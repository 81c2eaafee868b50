
import cv2
import numpy as np
import pytest

from morningproof.services.video_frame_extractor import (
    ExtractionError,
    VideoFrameExtractor,
    frame_count_for_duration,
    frame_timestamps,
    resize_frame,
)


def test_frame_count_for_duration():
    assert frame_count_for_duration(5) == 2
    assert frame_count_for_duration(10) == 4
    assert frame_count_for_duration(29.9) == 4
    assert frame_count_for_duration(30) == 6


def test_frame_timestamps_stop_short_of_the_end():
    assert frame_timestamps(5.0, 2) == pytest.approx([0.0, 4.9])
    assert frame_timestamps(12.0, 4) == pytest.approx([0.0, 4.0, 8.0, 11.9])
    assert frame_timestamps(5.0, 1) == [0.0]


def test_resize_frame_caps_longest_side():
    frame = np.zeros((2000, 1000, 3), dtype=np.uint8)
    assert resize_frame(frame, 1024).shape == (1024, 512, 3)

    small = np.zeros((480, 640, 3), dtype=np.uint8)
    assert resize_frame(small, 1024) is small


def test_duration_limits():
    extractor = VideoFrameExtractor(min_duration=2.0, max_duration=60.0)
    extractor.validate_duration(2.0)
    extractor.validate_duration(60.0)

    with pytest.raises(ExtractionError) as too_short:
        extractor.validate_duration(1.5)
    assert too_short.value.message == ExtractionError.DURATION_TOO_SHORT

    with pytest.raises(ExtractionError) as too_long:
        extractor.validate_duration(61)
    assert too_long.value.message == ExtractionError.DURATION_TOO_LONG


def test_empty_upload_is_invalid():
    with pytest.raises(ExtractionError) as error:
        VideoFrameExtractor().extract_from_bytes(b"")
    assert error.value.message == ExtractionError.INVALID_VIDEO


def test_extracts_frames_from_a_short_clip(tmp_path):
    path = str(tmp_path / "clip.avi")
    writer = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (64, 48))
    if not writer.isOpened():
        pytest.skip("MJPG writer unavailable in this OpenCV build")
    for index in range(30):
        writer.write(np.full((48, 64, 3), index * 8, dtype=np.uint8))
    writer.release()

    with open(path, "rb") as f:
        video = VideoFrameExtractor().extract_from_bytes(f.read(), suffix=".avi")

    assert video.duration == pytest.approx(3.0)
    assert len(video.frames) == 2
    assert all(frame.startswith(b"\xff\xd8") for frame in video.frames)
