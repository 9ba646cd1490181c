"""
Core domain models for the subtitle band compositor.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
import uuid

from PIL import Image


# Styling defaults shared by the parameter model, API and CLI
DEFAULT_BAND_HEIGHT = 80
DEFAULT_FONT_SIZE = 32
DEFAULT_FONT_COLOR = "#ffffff"
DEFAULT_STROKE_COLOR = "#000000"
DEFAULT_STROKE_WIDTH = 0
DEFAULT_LINE_GAP = 0
DEFAULT_TEXT = ""


class SessionState(str, Enum):
    """Lifecycle of a render session."""
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"


@dataclass(frozen=True)
class SourceImage:
    """
    A decoded source bitmap.

    The wrapped Pillow image is kept in RGBA mode and is never drawn on;
    every render copies from it.
    """
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    @classmethod
    def from_image(cls, image: Image.Image) -> "SourceImage":
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        else:
            image = image.copy()
        return cls(image=image)


@dataclass(frozen=True)
class DrawParameters:
    """Validated styling parameters for one render."""
    band_height: int = DEFAULT_BAND_HEIGHT
    font_size: int = DEFAULT_FONT_SIZE
    font_color: str = DEFAULT_FONT_COLOR
    stroke_color: str = DEFAULT_STROKE_COLOR
    stroke_width: int = DEFAULT_STROKE_WIDTH
    line_gap: int = DEFAULT_LINE_GAP
    text: str = DEFAULT_TEXT

    @property
    def lines(self) -> List[str]:
        # Empty lines are kept: each one still occupies a band.
        return self.text.split("\n")

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def to_dict(self) -> dict:
        return {
            "band_height": self.band_height,
            "font_size": self.font_size,
            "font_color": self.font_color,
            "stroke_color": self.stroke_color,
            "stroke_width": self.stroke_width,
            "line_gap": self.line_gap,
            "text": self.text,
        }


@dataclass(frozen=True)
class CanvasLayout:
    """
    Geometry of one output canvas.

    band_offsets[i - 1] is the top edge of the band hosting line i (i >= 1);
    anchors[i] is the (center_x, center_y) point line i is centred on.
    """
    width: int
    height: int
    line_count: int
    band_offsets: List[int] = field(default_factory=list)
    anchors: List[Tuple[float, float]] = field(default_factory=list)


@dataclass
class ExportedImage:
    """A rendered canvas encoded for download."""
    filename: str
    data: bytes
    width: int
    height: int

    @property
    def media_type(self) -> str:
        return "image/png"


@dataclass
class SessionInfo:
    """Snapshot of a render session, as reported by the API."""
    id: str
    state: SessionState
    width: Optional[int] = None
    height: Optional[int] = None
    canvas_width: Optional[int] = None
    canvas_height: Optional[int] = None
    line_count: Optional[int] = None

    @staticmethod
    def generate_id() -> str:
        return str(uuid.uuid4())
