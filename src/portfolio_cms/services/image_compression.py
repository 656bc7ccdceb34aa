"""Image helpers used before uploads: compression and data-URL previews.

Compression bounds both the longest side and the encoded size. The file
keeps its name; JPEG-like inputs are re-encoded with decreasing quality
and lossless formats are re-saved optimized, shrinking dimensions until
the size bound is met. Undecodable input is returned unchanged.
"""

from __future__ import annotations

import base64
import io
import logging
from collections.abc import Sequence

from PIL import Image, ImageOps

from portfolio_cms.models import ImageFile

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE_MB = 1.0
DEFAULT_MAX_DIMENSION = 1920

_JPEG_QUALITIES = (85, 75, 65, 55, 45, 35)
_SHRINK_FACTOR = 0.8
_MIN_DIMENSION = 64
_LOSSLESS_FORMATS = {"PNG", "GIF", "BMP", "WEBP"}

FORMAT_TO_MIME = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
    "BMP": "image/bmp",
}


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info)


def _encode_jpeg(img: Image.Image, max_bytes: int) -> bytes:
    rgb = img.convert("RGB")
    data = b""
    for quality in _JPEG_QUALITIES:
        buffer = io.BytesIO()
        rgb.save(buffer, format="JPEG", quality=quality, optimize=True)
        data = buffer.getvalue()
        if len(data) <= max_bytes:
            break
    return data


def _encode_png(img: Image.Image) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()


def _encode(img: Image.Image, fmt: str, max_bytes: int) -> tuple[bytes, str]:
    """Encode ``img`` under ``max_bytes`` where possible.

    Returns:
        Tuple of (encoded bytes, Pillow format name used).
    """
    lossless = fmt == "PNG" or (fmt in _LOSSLESS_FORMATS and _has_alpha(img))
    current = img
    while True:
        if lossless:
            data, used = _encode_png(current), "PNG"
        else:
            data, used = _encode_jpeg(current, max_bytes), "JPEG"
        if len(data) <= max_bytes or max(current.size) <= _MIN_DIMENSION:
            return data, used
        width, height = current.size
        current = current.resize(
            (max(1, int(width * _SHRINK_FACTOR)), max(1, int(height * _SHRINK_FACTOR))),
            Image.Resampling.LANCZOS,
        )


def compress_image(
    image: ImageFile,
    *,
    max_size_mb: float = DEFAULT_MAX_SIZE_MB,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
) -> ImageFile:
    """Return a compressed copy of ``image``.

    Args:
        image: The selected image.
        max_size_mb: Upper bound on the encoded size.
        max_dimension: Upper bound on the longest side, in pixels.

    Returns:
        The compressed image, or ``image`` itself when it is already within
        bounds or cannot be decoded.
    """
    max_bytes = int(max_size_mb * 1024 * 1024)
    try:
        with Image.open(io.BytesIO(image.content)) as opened:
            opened.load()
            fmt = (opened.format or "").upper()
            if getattr(opened, "is_animated", False):
                return image
            img = ImageOps.exif_transpose(opened)
            resized = max(img.size) > max_dimension
            if resized:
                img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
            if not resized and image.size <= max_bytes:
                return image
            data, used = _encode(img, fmt, max_bytes)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning("Image compression failed for %s: %s", image.filename, exc)
        return image

    return ImageFile(filename=image.filename, content=data, content_type=FORMAT_TO_MIME[used])


def compress_images(
    images: Sequence[ImageFile],
    *,
    max_size_mb: float = DEFAULT_MAX_SIZE_MB,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
) -> list[ImageFile]:
    """Compress each image in order."""
    return [
        compress_image(image, max_size_mb=max_size_mb, max_dimension=max_dimension)
        for image in images
    ]


def to_data_url(image: ImageFile) -> str:
    """Encode ``image`` as a ``data:`` URL for previews."""
    encoded = base64.b64encode(image.content).decode("ascii")
    return f"data:{image.content_type};base64,{encoded}"
