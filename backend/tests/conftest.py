import sys
from io import BytesIO
from pathlib import Path

from PIL import Image

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from domain.models import SourceImage  # noqa: E402


def make_source(width=200, height=100, color=(40, 40, 40), bottom=None, bottom_rows=0) -> SourceImage:
    """Solid source image, optionally with a differently coloured bottom strip."""
    img = Image.new("RGBA", (width, height), color + (255,))
    if bottom is not None and bottom_rows > 0:
        img.paste(Image.new("RGBA", (width, bottom_rows), bottom + (255,)), (0, height - bottom_rows))
    return SourceImage.from_image(img)


def png_bytes(width=120, height=80, color=(10, 120, 200)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()

