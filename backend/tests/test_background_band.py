from PIL import Image

from domain.models import SourceImage
from services.background_band import band_source_offset, synthesize_background_band

from conftest import make_source

GREEN = (0, 160, 0)
BLUE = (0, 0, 200)


def test_offset_is_bottom_of_image():
    assert band_source_offset(300, 80) == 220


def test_offset_clamps_to_zero_for_tall_bands():
    assert band_source_offset(50, 80) == 0
    assert band_source_offset(50, 50) == 0


def test_band_copies_bottom_strip():
    source = make_source(120, 100, color=BLUE, bottom=GREEN, bottom_rows=30)
    band = synthesize_background_band(source, 30)
    assert band.size == (120, 30)
    assert band.mode == "RGBA"
    assert band.tobytes() == source.image.crop((0, 70, 120, 100)).tobytes()


def test_tall_band_stretches_whole_image():
    img = Image.new("RGBA", (10, 20), BLUE + (255,))
    img.paste(Image.new("RGBA", (10, 10), GREEN + (255,)), (0, 10))
    source = SourceImage.from_image(img)

    band = synthesize_background_band(source, 80)

    assert band.size == (10, 80)
    # Top of the band comes from the top of the image, bottom from the bottom.
    assert band.getpixel((5, 2)) == BLUE + (255,)
    assert band.getpixel((5, 77)) == GREEN + (255,)


def test_band_never_touches_source():
    source = make_source(40, 40)
    before = source.image.tobytes()
    band = synthesize_background_band(source, 20)
    band.paste((255, 0, 0, 255), (0, 0, 40, 20))
    assert source.image.tobytes() == before


def test_non_positive_band_height_gives_empty_band():
    source = make_source(40, 40)
    assert synthesize_background_band(source, 0).size == (40, 0)
    assert synthesize_background_band(source, -10).size == (40, 0)
