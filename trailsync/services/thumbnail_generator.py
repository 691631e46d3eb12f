"""Thumbnail generation for synced trail-camera photos.

Thumbnails are always exactly the requested size: the photo is scaled to
fit while keeping its aspect ratio and centered on a black canvas. Photos
that cannot be decoded still get a thumbnail (a solid black one) so that a
corrupt vendor image never blocks the upload of the original.
"""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from trailsync.core.exceptions import InvalidImageSizeError
from trailsync.core.logging import get_logger, sanitize_error

logger = get_logger(__name__)

DEFAULT_THUMBNAIL_SIZE = (400, 400)
THUMBNAIL_QUALITY = 95
MAX_THUMBNAIL_DIMENSION = 10000
BACKGROUND_COLOR = (0, 0, 0)


def _validate_size(width: int, height: int) -> None:
    for value in (width, height):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidImageSizeError(
                image_size=None,
                reason=f"dimensions must be integers, got {type(value).__name__}",
            )
    if width <= 0 or height <= 0:
        raise InvalidImageSizeError(
            image_size=(width, height), reason="dimensions must be positive"
        )
    if width > MAX_THUMBNAIL_DIMENSION or height > MAX_THUMBNAIL_DIMENSION:
        raise InvalidImageSizeError(
            image_size=(width, height),
            reason=f"dimensions must not exceed {MAX_THUMBNAIL_DIMENSION}",
        )


def _resize_with_padding(image: Image.Image, target_size: tuple[int, int]) -> Image.Image:
    """Resize image to target size, maintaining aspect ratio with padding.

    Args:
        image: PIL Image to resize
        target_size: Target size as (width, height)

    Returns:
        RGB image of exactly ``target_size``
    """
    target_width, target_height = target_size
    original_width, original_height = image.size

    scale = min(target_width / original_width, target_height / original_height)
    new_width = max(1, round(original_width * scale))
    new_height = max(1, round(original_height * scale))

    resized = image.convert("RGB").resize((new_width, new_height), Image.Resampling.BILINEAR)

    padded = Image.new("RGB", target_size, BACKGROUND_COLOR)
    paste_x = (target_width - new_width) // 2
    paste_y = (target_height - new_height) // 2
    padded.paste(resized, (paste_x, paste_y))

    return padded


def _encode_jpeg(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=THUMBNAIL_QUALITY)
    return buffer.getvalue()


def make_thumbnail(
    data: bytes,
    width: int = DEFAULT_THUMBNAIL_SIZE[0],
    height: int = DEFAULT_THUMBNAIL_SIZE[1],
) -> bytes:
    """Produce a JPEG thumbnail of exactly ``width`` x ``height``.

    Args:
        data: Encoded JPEG source image
        width: Thumbnail width in pixels
        height: Thumbnail height in pixels

    Returns:
        JPEG bytes at quality 95. A solid black image when ``data`` is not
        a decodable JPEG.

    Raises:
        InvalidImageSizeError: If the dimensions are not positive integers
    """
    _validate_size(width, height)
    target_size = (width, height)

    try:
        with Image.open(io.BytesIO(data), formats=["JPEG"]) as image:
            image.load()
            thumbnail = _resize_with_padding(image, target_size)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning(
            f"Could not decode image, using blank thumbnail: {sanitize_error(e)}",
            extra={"byte_count": len(data)},
        )
        thumbnail = Image.new("RGB", target_size, BACKGROUND_COLOR)

    return _encode_jpeg(thumbnail)
