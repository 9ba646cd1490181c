"""
Background band synthesis.

Every extra subtitle line gets a band whose background is the bottom strip of
the source image. The strip is always taken from the untouched source so text
already drawn on a canvas can never leak into it.
"""
import logging

from PIL import Image

from domain.models import SourceImage

logger = logging.getLogger(__name__)


def band_source_offset(source_height: int, band_height: int) -> int:
    """First source row sampled for the band. Never negative."""
    return max(0, source_height - band_height)


def synthesize_background_band(source: SourceImage, band_height: int) -> Image.Image:
    """
    Build the reusable band raster.

    Samples source rows [offset, offset + band_height), clipped to the image.
    When the image is shorter than the band, the available rows are stretched
    to the full band height.

    Returns:
        RGBA image of size (source.width, band_height). A non-positive band
        height yields an empty (zero-height) band.
    """
    if band_height <= 0:
        logger.debug("background_band: band_height=%s, returning empty band", band_height)
        return Image.new("RGBA", (source.width, 0))

    top = band_source_offset(source.height, band_height)
    bottom = min(top + band_height, source.height)
    strip = source.image.crop((0, top, source.width, bottom))
    if strip.height != band_height:
        logger.debug(
            "background_band: stretching %s source rows to band_height=%s",
            strip.height,
            band_height,
        )
        strip = strip.resize((source.width, band_height), Image.Resampling.BILINEAR)
    return strip
