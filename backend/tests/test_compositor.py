from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from PIL import Image, ImageChops

from api.routes import render as render_router
from domain.models import CanvasLayout, DrawParameters
from services.background_band import synthesize_background_band
from services.canvas_layout import compute_layout, split_lines
from services.compositor import composite, draw_image, draw_subtitle_line, stroke_radius
from services.image_io import EmptyCanvasError, export_png

from conftest import make_source, png_bytes

GREEN = (0, 160, 0)
BLUE = (0, 0, 200)
BLACK = (0, 0, 0)


def _render(source, params):
    layout = compute_layout(source.width, source.height, params)
    band = synthesize_background_band(source, params.band_height)
    return composite(source, layout, band, params, split_lines(params.text))


def _count_colors(img, predicate):
    colors = img.convert("RGB").getcolors(maxcolors=img.width * img.height)
    return sum(count for count, rgb in colors if predicate(rgb))


def test_missing_source_is_a_no_op():
    params = DrawParameters(text="hello")
    layout = CanvasLayout(width=10, height=10, line_count=1, anchors=[(5.0, 5.0)])
    assert composite(None, layout, Image.new("RGBA", (10, 10)), params, ["hello"]) is None


def test_source_painted_at_origin_with_no_text():
    source = make_source(60, 40, color=BLUE)
    out = _render(source, DrawParameters(band_height=20, text=""))
    assert out.size == (60, 40)
    assert out.tobytes() == source.image.tobytes()


def test_bands_are_sampled_from_untouched_source():
    source = make_source(200, 100, color=BLUE, bottom=GREEN, bottom_rows=40)
    # Line 0 draws text into the image bottom; line 1 is empty so its band must stay clean.
    params = DrawParameters(band_height=40, line_gap=10, font_size=30, text="XX\n")
    out = _render(source, params)

    assert out.size == (200, 150)
    band_region = out.crop((0, 110, 200, 150))
    assert band_region.tobytes() == source.image.crop((0, 60, 200, 100)).tobytes()
    # Line 0 did draw something inside the image.
    assert out.crop((0, 60, 200, 100)).tobytes() != source.image.crop((0, 60, 200, 100)).tobytes()


def test_line_gap_rows_stay_transparent():
    source = make_source(50, 30, color=BLUE)
    out = _render(source, DrawParameters(band_height=10, line_gap=5, text="\n\n"))
    assert out.size == (50, 30 + 2 * 15)
    for y in (30, 34, 45, 49):
        assert out.getpixel((25, y))[3] == 0
    for y in (35, 44, 50, 59):
        assert out.getpixel((25, y)) == BLUE + (255,)


def test_text_is_centred_on_its_anchor():
    source = make_source(300, 120, color=GREEN)
    params = DrawParameters(band_height=60, line_gap=10, font_size=28, text="\nHHHH")
    with_text = _render(source, params)
    without_text = _render(source, DrawParameters(band_height=60, line_gap=10, font_size=28, text="\n"))

    bbox = ImageChops.difference(with_text, without_text).getbbox()
    assert bbox is not None
    left, top, right, bottom = bbox
    # Anchor for line 1: x=150, y=120 + 10 + 30 = 160
    assert abs((left + right) / 2 - 150) <= 3
    assert abs((top + bottom) / 2 - 160) <= 8
    assert top >= 130 and bottom <= 190


def test_stroke_outline_drawn_when_width_positive():
    source = make_source(200, 80, color=BLACK)
    base = dict(band_height=60, font_size=40, font_color="#ffffff", stroke_color="#ff0000", text="HI")
    is_red = lambda rgb: rgb[0] > 200 and rgb[1] < 60 and rgb[2] < 60  # noqa: E731

    stroked = _render(source, DrawParameters(stroke_width=6, **base))
    plain = _render(source, DrawParameters(stroke_width=0, **base))

    assert _count_colors(stroked, is_red) > 0
    assert _count_colors(plain, is_red) == 0


def test_fill_pass_follows_stroke_pass():
    draw = MagicMock()
    params = DrawParameters(font_color="#fff", stroke_color="#000", stroke_width=4)
    draw_subtitle_line(draw, (10.0, 20.0), "Hi", "font", params)

    assert draw.text.call_count == 2
    stroke_call, fill_call = draw.text.call_args_list
    assert stroke_call.kwargs["fill"] == "#000"
    assert stroke_call.kwargs["stroke_width"] == 2
    assert stroke_call.kwargs["stroke_fill"] == "#000"
    assert fill_call.kwargs["fill"] == "#fff"
    assert "stroke_width" not in fill_call.kwargs
    assert fill_call.kwargs["anchor"] == "mm"


def test_zero_stroke_width_is_fill_only():
    draw = MagicMock()
    draw_subtitle_line(draw, (0.0, 0.0), "Hi", "font", DrawParameters(stroke_width=0))
    assert draw.text.call_count == 1


def test_empty_line_draws_nothing():
    draw = MagicMock()
    draw_subtitle_line(draw, (0.0, 0.0), "", "font", DrawParameters(stroke_width=3))
    draw.text.assert_not_called()


def test_stroke_radius_is_half_width_rounded_up():
    assert [stroke_radius(w) for w in (1, 2, 3, 4, 9)] == [1, 1, 2, 2, 5]


def test_draw_image_clips_negative_offsets():
    canvas = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
    patch = Image.new("RGBA", (10, 6), (255, 0, 0, 255))
    draw_image(canvas, patch, 0, -4)
    assert canvas.getpixel((5, 1)) == (255, 0, 0, 255)
    assert canvas.getpixel((5, 2))[3] == 0


def test_degenerate_geometry_does_not_crash():
    source = make_source(60, 60)
    negative_band = _render(source, DrawParameters(band_height=-20, text="a\nb"))
    assert negative_band.size == (60, 40)

    collapsed = _render(source, DrawParameters(band_height=20, line_gap=-100, text="a\nb"))
    assert collapsed.size == (60, 0)


def test_collapsed_canvas_is_rejected_on_export():
    source = make_source(60, 60)
    collapsed = _render(source, DrawParameters(band_height=20, line_gap=-100, text="a\nb"))

    with pytest.raises(EmptyCanvasError):
        export_png(collapsed)


def test_collapsed_canvas_is_400_from_render_api():
    app = FastAPI()
    app.include_router(render_router.router, prefix="/render")
    client = TestClient(app)

    resp = client.post(
        "/render",
        files={"image": ("photo.png", png_bytes(60, 60), "image/png")},
        data={"band_height": "20", "line_gap": "-100", "text": "a\nb"},
    )
    assert resp.status_code == 400
    assert "60x0" in resp.json()["detail"]
