"""
Image loading and PNG export.

These sit on either side of the render core: uploads are decoded into a
SourceImage before rendering, and finished canvases are encoded to PNG for
preview and download.
"""
import logging
import time
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from domain.models import ExportedImage, SourceImage

logger = logging.getLogger(__name__)

EXPORT_FILENAME_PREFIX = "subtitle-export-"


class InvalidImageError(ValueError):
    """Raised when uploaded bytes cannot be decoded as an image."""


class EmptyCanvasError(ValueError):
    """Raised when a canvas with no pixels is encoded (collapsed band geometry)."""


def register_heif_opener() -> bool:
    """
    Register HEIF/HEIC opener with Pillow if pillow-heif is available.

    Call this at application startup to enable HEIC support.
    Safe to call multiple times or if pillow-heif is not installed.
    """
    try:
        from pillow_heif import register_heif_opener as _register
        _register()
        return True
    except ImportError:
        return False


def load_source_image(data: Union[bytes, str, Path]) -> SourceImage:
    """
    Decode image bytes (or a file path) into a SourceImage.

    EXIF orientation is applied so the bitmap matches what a browser shows.

    Raises:
        InvalidImageError: if the data is not a readable image.
    """
    fp = BytesIO(data) if isinstance(data, (bytes, bytearray)) else data
    try:
        with Image.open(fp) as img:
            img.load()
            oriented = ImageOps.exif_transpose(img)
            source = SourceImage.from_image(oriented)
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImageError(f"Could not decode image: {exc}") from exc
    logger.debug("image_io: loaded source %sx%s", source.width, source.height)
    return source


def export_filename(timestamp_ms: Optional[int] = None) -> str:
    """Download filename, e.g. subtitle-export-1767225600000.png."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{EXPORT_FILENAME_PREFIX}{timestamp_ms}.png"


def encode_png(image: Image.Image) -> bytes:
    """
    Encode a canvas as PNG.

    Raises:
        EmptyCanvasError: if the canvas is zero pixels wide or high; PNG
            cannot hold an empty image.
    """
    if image.width <= 0 or image.height <= 0:
        raise EmptyCanvasError(
            f"Canvas is {image.width}x{image.height}; band height and line gap leave no pixels to export"
        )
    output = BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


def export_png(image: Image.Image, timestamp_ms: Optional[int] = None) -> ExportedImage:
    """Encode a rendered canvas as a downloadable PNG."""
    return ExportedImage(
        filename=export_filename(timestamp_ms),
        data=encode_png(image),
        width=image.width,
        height=image.height,
    )
