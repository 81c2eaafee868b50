import io
import logging
from PIL import Image, ImageOps, UnidentifiedImageError
from typing import Tuple

logger = logging.getLogger(__name__)

MAX_VISION_DIMENSION = 2048
MAX_VISION_BYTES = int(4.5 * 1024 * 1024)  # Vision request limit with headroom
JPEG_QUALITY_LADDER = (70, 50, 30, 20)
FALLBACK_QUALITY = 30


class ImageConversionError(Exception):
    """Raised when uploaded bytes cannot be turned into a JPEG"""


def get_scaled_dimensions(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    """Scale (width, height) so the longer side is at most max_dimension"""
    longest = max(width, height)
    if longest <= max_dimension:
        return (width, height)
    ratio = max_dimension / longest
    return (max(1, int(width * ratio)), max(1, int(height * ratio)))


def _encode_jpeg(img: Image.Image, quality: int) -> bytes:
    with io.BytesIO() as output_buffer:
        img.save(output_buffer, format="JPEG", quality=quality, optimize=True)
        return output_buffer.getvalue()


def prepare_image_for_vision(
    image_bytes: bytes,
    max_dimension: int = MAX_VISION_DIMENSION,
    max_bytes: int = MAX_VISION_BYTES
) -> bytes:
    """
    Normalise an uploaded photo into a JPEG the vision model accepts.

    The image is rotated per EXIF, converted to RGB and scaled so the longer
    side is at most max_dimension. JPEG quality steps down until the payload
    fits under max_bytes; if nothing fits, a half-size copy at low quality
    is returned.

    Raises:
        ImageConversionError: If the bytes are not a readable image
    """
    try:
        with io.BytesIO(image_bytes) as input_buffer:
            with Image.open(input_buffer) as original:
                img = ImageOps.exif_transpose(original)
                if img.mode != 'RGB':
                    img = img.convert('RGB')

                target_size = get_scaled_dimensions(img.width, img.height, max_dimension)
                if target_size != img.size:
                    img = img.resize(target_size, Image.Resampling.LANCZOS)

                for quality in JPEG_QUALITY_LADDER:
                    data = _encode_jpeg(img, quality)
                    if len(data) <= max_bytes:
                        return data

                half_size = (max(1, img.width // 2), max(1, img.height // 2))
                logger.warning(f"Image still over {max_bytes} bytes at lowest quality, halving to {half_size}")
                return _encode_jpeg(img.resize(half_size, Image.Resampling.LANCZOS), FALLBACK_QUALITY)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        logger.error(f"Error processing image: {e}")
        raise ImageConversionError("Couldn't process your photo. Please try again.") from e
