"""
Bold sans-serif font resolution for subtitle text.
"""
import logging
from functools import lru_cache
from typing import Optional, Sequence, Union

from PIL import ImageFont

from settings import settings

logger = logging.getLogger(__name__)

FontType = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

# Size a browser keeps when handed an unusable CSS font size.
FALLBACK_FONT_SIZE = 10

BOLD_SANS_CANDIDATES: Sequence[str] = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "LiberationSans-Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    "arialbd.ttf",
)


def _candidate_paths(font_path: Optional[str]) -> list[str]:
    paths = []
    if font_path:
        paths.append(font_path)
    paths.extend(BOLD_SANS_CANDIDATES)
    return paths


@lru_cache(maxsize=64)
def _load_font(font_path: Optional[str], size: int) -> FontType:
    for path in _candidate_paths(font_path):
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    logger.warning("fonts: no bold sans-serif font found, using Pillow default at size=%s", size)
    return ImageFont.load_default(size=size)


def load_bold_font(size: int, font_path: Optional[str] = None) -> FontType:
    """
    Load a bold sans-serif font at `size` pixels.

    Resolution order: explicit font_path, SUBTITLE_FONT_PATH, common system
    bold fonts, then Pillow's bundled default font.
    """
    if size <= 0:
        logger.warning("fonts: font_size=%s is not drawable, using %spx", size, FALLBACK_FONT_SIZE)
        size = FALLBACK_FONT_SIZE
    return _load_font(font_path or settings.SUBTITLE_FONT_PATH, size)
