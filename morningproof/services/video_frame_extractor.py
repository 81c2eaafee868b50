"""
Frame sampling for video habit verification.

Short clips are reduced to a handful of evenly spaced JPEG frames which the
vision model judges as one sequence.
"""

import os
import logging
import tempfile
from dataclasses import dataclass, field
from typing import List

import cv2
import numpy as np

from morningproof.config.settings import get_settings

logger = logging.getLogger(__name__)

FRAME_JPEG_QUALITY = 80
END_OFFSET_SECONDS = 0.1  # Stay clear of the final frame, which often fails to decode


class ExtractionError(Exception):
    """Frame extraction failure carrying a message fit for the user"""

    INVALID_VIDEO = "Could not load the video. Please try recording again."
    DURATION_TOO_SHORT = "Video must be at least 2 seconds long."
    DURATION_TOO_LONG = "Video must be 60 seconds or less."
    FRAME_EXTRACTION_FAILED = "Could not extract frames from video. Please try again."
    NO_FRAMES_EXTRACTED = "No frames could be extracted from the video."

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass
class ExtractedVideo:
    frames: List[bytes]
    duration: float
    frame_timestamps: List[float] = field(default_factory=list)


def frame_count_for_duration(duration: float) -> int:
    """2 frames under 10s, 4 under 30s, otherwise 6"""
    if duration < 10:
        return 2
    if duration < 30:
        return 4
    return 6


def frame_timestamps(duration: float, frame_count: int) -> List[float]:
    """Evenly spaced timestamps from 0 to just before the end"""
    if frame_count <= 1:
        return [0.0]
    interval = duration / (frame_count - 1)
    return [min(i * interval, duration - END_OFFSET_SECONDS) for i in range(frame_count)]


def resize_frame(frame: np.ndarray, max_dimension: int) -> np.ndarray:
    height, width = frame.shape[:2]
    if width <= max_dimension and height <= max_dimension:
        return frame
    scale = min(max_dimension / width, max_dimension / height)
    new_size = (max(1, int(width * scale)), max(1, int(height * scale)))
    return cv2.resize(frame, new_size, interpolation=cv2.INTER_AREA)


class VideoFrameExtractor:
    def __init__(self, min_duration: float = None, max_duration: float = None, max_frame_dimension: int = None):
        settings = get_settings()
        self.min_duration = min_duration if min_duration is not None else settings.video_min_duration_seconds
        self.max_duration = max_duration if max_duration is not None else settings.video_max_duration_seconds
        self.max_frame_dimension = max_frame_dimension or settings.video_max_frame_dimension

    def validate_duration(self, duration: float):
        if duration < self.min_duration:
            raise ExtractionError(ExtractionError.DURATION_TOO_SHORT)
        if duration > self.max_duration:
            raise ExtractionError(ExtractionError.DURATION_TOO_LONG)

    def extract_from_bytes(self, video_bytes: bytes, suffix: str = ".mp4") -> ExtractedVideo:
        """Write the upload to a temp file (OpenCV reads from paths) and extract"""
        if not video_bytes:
            raise ExtractionError(ExtractionError.INVALID_VIDEO)

        fd, path = tempfile.mkstemp(suffix=suffix)
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(video_bytes)
            return self.extract_from_path(path)
        finally:
            os.remove(path)

    def extract_from_path(self, path: str) -> ExtractedVideo:
        capture = cv2.VideoCapture(path)
        try:
            if not capture.isOpened():
                raise ExtractionError(ExtractionError.INVALID_VIDEO)

            fps = capture.get(cv2.CAP_PROP_FPS)
            total_frames = capture.get(cv2.CAP_PROP_FRAME_COUNT)
            if not fps or fps <= 0 or total_frames <= 0:
                raise ExtractionError(ExtractionError.INVALID_VIDEO)

            duration = total_frames / fps
            self.validate_duration(duration)

            timestamps = frame_timestamps(duration, frame_count_for_duration(duration))
            frames = []
            extracted_timestamps = []
            for timestamp in timestamps:
                try:
                    frame_bytes = self._read_frame_at(capture, timestamp, fps)
                except cv2.error as e:
                    logger.error(f"OpenCV failed reading frame at {timestamp:.2f}s: {e}")
                    raise ExtractionError(ExtractionError.FRAME_EXTRACTION_FAILED) from e
                if frame_bytes is None:
                    # Keep going, later frames may still decode
                    logger.warning(f"Failed to extract frame at {timestamp:.2f}s")
                    continue
                frames.append(frame_bytes)
                extracted_timestamps.append(timestamp)

            if not frames:
                raise ExtractionError(ExtractionError.NO_FRAMES_EXTRACTED)

            logger.info(f"Extracted {len(frames)} frames from {duration:.1f}s video")
            return ExtractedVideo(frames=frames, duration=duration, frame_timestamps=extracted_timestamps)
        finally:
            capture.release()

    def _read_frame_at(self, capture, timestamp: float, fps: float):
        capture.set(cv2.CAP_PROP_POS_FRAMES, int(timestamp * fps))
        ok, frame = capture.read()
        if not ok or frame is None:
            return None

        frame = resize_frame(frame, self.max_frame_dimension)
        ok, encoded = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, FRAME_JPEG_QUALITY])
        if not ok:
            return None
        return encoded.tobytes()
