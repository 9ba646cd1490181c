"""
Subtitle compositor.

Paints the final canvas in three strict passes:
1) the source image at the origin,
2) one copy of the background band for every line after the first,
3) the text of every line, centred on its anchor (outline first, then fill).

Each pass finishes before the next starts so nothing is ever sampled from a
partially drawn canvas.
"""
import logging
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from domain.models import CanvasLayout, DrawParameters, SourceImage
from services.fonts import FontType, load_bold_font

logger = logging.getLogger(__name__)

# Horizontal centre / vertical middle, like textAlign=center + textBaseline=middle
TEXT_ANCHOR = "mm"
TRANSPARENT = (0, 0, 0, 0)


def stroke_radius(stroke_width: int) -> int:
    """
    Outline radius for Pillow's stroker.

    A canvas stroke of width w is centred on the glyph edge, so only w/2 of it
    shows outside the fill. Pillow strokes outward by the radius given.
    """
    return max(1, (stroke_width + 1) // 2)


def new_canvas(width: int, height: int) -> Image.Image:
    # Pillow cannot allocate negative sizes; degenerate layouts give an empty canvas.
    return Image.new("RGBA", (max(0, width), max(0, height)), TRANSPARENT)


def draw_image(canvas: Image.Image, image: Image.Image, x: int, y: int) -> None:
    """Source-over draw of `image` at (x, y), clipped to the canvas."""
    left = max(0, -x)
    top = max(0, -y)
    right = min(image.width, canvas.width - x)
    bottom = min(image.height, canvas.height - y)
    if right <= left or bottom <= top:
        return
    visible = image.crop((left, top, right, bottom))
    canvas.alpha_composite(visible, dest=(x + left, y + top))


def draw_subtitle_line(
    draw: ImageDraw.ImageDraw,
    anchor: Tuple[float, float],
    line: str,
    font: FontType,
    params: DrawParameters,
) -> None:
    """Draw one line centred on anchor: outline pass when stroke_width > 0, then fill."""
    if not line:
        return
    if params.stroke_width > 0:
        draw.text(
            anchor,
            line,
            font=font,
            fill=params.stroke_color,
            anchor=TEXT_ANCHOR,
            stroke_width=stroke_radius(params.stroke_width),
            stroke_fill=params.stroke_color,
        )
    draw.text(anchor, line, font=font, fill=params.font_color, anchor=TEXT_ANCHOR)


def composite(
    source: Optional[SourceImage],
    layout: CanvasLayout,
    band: Image.Image,
    params: DrawParameters,
    lines: Sequence[str],
) -> Optional[Image.Image]:
    """
    Paint source image, extension bands and text onto a fresh canvas.

    Returns:
        The RGBA output canvas, or None when there is no source image.
    """
    if source is None:
        return None

    canvas = new_canvas(layout.width, layout.height)

    # 1) Source image
    draw_image(canvas, source.image, 0, 0)

    # 2) Extension bands for lines 2..n
    for y in layout.band_offsets:
        draw_image(canvas, band, 0, y)

    # 3) Text
    if canvas.width and canvas.height:
        font = load_bold_font(params.font_size)
        text_layer = Image.new("RGBA", canvas.size, TRANSPARENT)
        draw = ImageDraw.Draw(text_layer)
        for line, anchor in zip(lines, layout.anchors):
            draw_subtitle_line(draw, anchor, line, font, params)
        canvas.alpha_composite(text_layer)

    logger.debug(
        "compositor: canvas=%sx%s lines=%s bands=%s stroke_width=%s",
        canvas.width,
        canvas.height,
        len(lines),
        len(layout.band_offsets),
        params.stroke_width,
    )
    return canvas
