"""
Canvas layout calculator.

Pure arithmetic for the output canvas: its size, where each extra band goes
and the point each text line is centred on. Degenerate inputs (negative band
height or line gap) are not clamped here.
"""
from typing import List, Tuple

from domain.models import CanvasLayout, DrawParameters


def split_lines(text: str) -> List[str]:
    """Split on newline, keeping empty lines. Always returns at least one line."""
    return text.split("\n")


def compute_canvas_size(
    source_width: int,
    source_height: int,
    band_height: int,
    line_gap: int,
    line_count: int,
) -> Tuple[int, int]:
    """
    Output canvas size.

    The first line sits inside the source image, so only lines 2..n add a
    band (and a gap) below it.
    """
    if line_count <= 1:
        return source_width, source_height
    return source_width, source_height + (line_count - 1) * (band_height + line_gap)


def band_offset(source_height: int, band_height: int, line_gap: int, index: int) -> int:
    """Top edge of the band hosting line `index` (index >= 1)."""
    return source_height + (index - 1) * (band_height + line_gap) + line_gap


def line_anchor(
    canvas_width: int,
    source_height: int,
    band_height: int,
    line_gap: int,
    index: int,
) -> Tuple[float, float]:
    center_x = canvas_width / 2
    if index == 0:
        return center_x, source_height - band_height / 2
    return center_x, band_offset(source_height, band_height, line_gap, index) + band_height / 2


def compute_layout(source_width: int, source_height: int, params: DrawParameters) -> CanvasLayout:
    """Compute canvas size, band offsets and line anchors for params.text."""
    line_count = len(split_lines(params.text))
    width, height = compute_canvas_size(
        source_width, source_height, params.band_height, params.line_gap, line_count
    )
    offsets = [
        band_offset(source_height, params.band_height, params.line_gap, i)
        for i in range(1, line_count)
    ]
    anchors = [
        line_anchor(width, source_height, params.band_height, params.line_gap, i)
        for i in range(line_count)
    ]
    return CanvasLayout(
        width=width,
        height=height,
        line_count=line_count,
        band_offsets=offsets,
        anchors=anchors,
    )
