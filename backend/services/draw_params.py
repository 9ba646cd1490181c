"""
Parameter normalization.

Turns raw UI values (form fields, JSON bodies, CLI strings) into a fully
populated DrawParameters record. Bad input never raises: every integer field
falls back to its default when the value cannot be parsed, following the
editor's `parseInt(value) || default` behaviour.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Any, Mapping, Optional, Tuple

from domain.models import (
    DEFAULT_BAND_HEIGHT,
    DEFAULT_FONT_SIZE,
    DEFAULT_LINE_GAP,
    DEFAULT_STROKE_WIDTH,
    DEFAULT_TEXT,
    DrawParameters,
)
from settings import settings

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?[0-9]+)")

# Accepted keys per field, first match wins. camelCase names are the editor
# form control names.
FIELD_KEYS: dict[str, Tuple[str, ...]] = {
    "band_height": ("band_height", "bandHeight", "subtitleHeight"),
    "font_size": ("font_size", "fontSize"),
    "font_color": ("font_color", "fontColor"),
    "stroke_color": ("stroke_color", "strokeColor"),
    "stroke_width": ("stroke_width", "strokeWidth"),
    "line_gap": ("line_gap", "lineGap"),
    "text": ("text", "subtitleText"),
}


def parse_int(value: Any) -> Optional[int]:
    """
    Parse a leading integer the way a browser's parseInt does.

    Returns None when nothing usable is found (no digits, NaN, infinity,
    booleans, unsupported types).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if not match:
            return None
        return int(match.group(1))
    return None


def int_or_default(value: Any, default: int) -> int:
    """Parse value, substituting default for unparseable input and for zero."""
    parsed = parse_int(value)
    if not parsed:
        if value is not None and parsed is None:
            logger.debug("draw_params: could not parse %r, using default %s", value, default)
        return default
    return parsed


def _lookup(raw: Mapping[str, Any], field_name: str) -> Any:
    for key in FIELD_KEYS[field_name]:
        if key in raw:
            return raw[key]
    return None


def _color_or_default(value: Any, default: str) -> str:
    if value is None:
        return default
    return str(value)


def normalize_draw_parameters(raw: Optional[Mapping[str, Any]] = None) -> DrawParameters:
    """
    Build validated DrawParameters from raw values.

    Args:
        raw: Mapping of field name (snake_case or the camelCase UI name) to a
            raw value. Missing keys take their defaults.

    Returns:
        DrawParameters with every field populated. Colors are passed through
        unvalidated; negative sizes are kept as given.
    """
    raw = raw or {}
    text = _lookup(raw, "text")
    return DrawParameters(
        band_height=int_or_default(_lookup(raw, "band_height"), DEFAULT_BAND_HEIGHT),
        font_size=int_or_default(_lookup(raw, "font_size"), DEFAULT_FONT_SIZE),
        font_color=_color_or_default(_lookup(raw, "font_color"), settings.SUBTITLE_DEFAULT_FONT_COLOR),
        stroke_color=_color_or_default(_lookup(raw, "stroke_color"), settings.SUBTITLE_DEFAULT_STROKE_COLOR),
        stroke_width=int_or_default(_lookup(raw, "stroke_width"), DEFAULT_STROKE_WIDTH),
        line_gap=int_or_default(_lookup(raw, "line_gap"), DEFAULT_LINE_GAP),
        text=DEFAULT_TEXT if text is None else str(text),
    )
