from PIL import Image

from core.image_utils import border_match_percent, contains_color, crop_relative, encode_png

BLUE = (24, 64, 140)
GRAY = (50, 50, 50)


def test_contains_color_needs_min_pixels():
    img = Image.new("RGB", (20, 20), GRAY)
    img.putpixel((1, 1), BLUE)
    img.putpixel((2, 1), BLUE)

    assert not contains_color(img, [BLUE])
    assert contains_color(img, [BLUE], min_pixels=2)


def test_contains_color_tolerance():
    img = Image.new("RGB", (10, 10), (34, 70, 130))
    assert contains_color(img, [BLUE])
    assert not contains_color(img, [BLUE], tolerance=5)
    assert not contains_color(img, [])


def test_border_full_and_empty():
    assert border_match_percent(Image.new("RGB", (40, 20), BLUE), [BLUE], 5, 5) == 255
    assert border_match_percent(Image.new("RGB", (40, 20), GRAY), [BLUE], 5, 5) == 0


def test_border_ignores_the_inside():
    img = Image.new("RGB", (40, 20), BLUE)
    img.paste(GRAY, (2, 2, 38, 18))
    assert border_match_percent(img, [BLUE], 5, 5) == 255


def test_border_partial():
    img = Image.new("RGB", (40, 20), GRAY)
    img.paste(BLUE, (0, 0, 40, 1))
    # 5 top samples plus the top corner of each side column, out of 20
    assert border_match_percent(img, [BLUE], 5, 5) == round(255 * 7 / 20)


def test_crop_relative():
    img = Image.new("RGB", (100, 50))
    assert crop_relative(img, (0.5, 0.5, 0.5, 0.5)).size == (50, 25)
    assert crop_relative(img, (0.2, 0.2, 0.0, 0.0)).size == (1, 1)


def test_encode_png():
    data = encode_png(Image.new("RGB", (7, 3), BLUE))
    assert data.startswith(b"\x89PNG")
