# core/image_utils.py
from __future__ import annotations

import io
from typing import Sequence, Tuple

import numpy as np
from PIL import Image

Color = Tuple[int, int, int]

COLOR_TOLERANCE = 16


def _color_mask(rgb: np.ndarray, colors: Sequence[Color], tolerance: int) -> np.ndarray:
    """Boolean mask of pixels within `tolerance` (per channel) of any reference color."""
    mask = np.zeros(rgb.shape[:-1], dtype=bool)
    for c in colors:
        ref = np.asarray(c, dtype=np.int16)
        diff = np.abs(rgb.astype(np.int16) - ref)
        mask |= np.all(diff <= tolerance, axis=-1)
    return mask


def contains_color(
    image: Image.Image,
    colors: Sequence[Color],
    *,
    tolerance: int = COLOR_TOLERANCE,
    min_pixels: int = 3,
) -> bool:
    """
    True if at least `min_pixels` pixels match one of the reference colors.
    A single stray pixel from JPEG/scaling noise does not count.
    """
    if not colors:
        return False

    rgb = np.asarray(image.convert("RGB"), dtype=np.uint8)
    if rgb.size == 0:
        return False

    return int(_color_mask(rgb, colors, tolerance).sum()) >= min_pixels


def border_match_percent(
    image: Image.Image,
    colors: Sequence[Color],
    sample_w: int,
    sample_h: int,
    *,
    tolerance: int = COLOR_TOLERANCE,
) -> int:
    """
    Sample `sample_w` points along the top/bottom edge and `sample_h` points
    along the left/right edge, return the matching share scaled to 0..255.
    """
    if not colors:
        return 0

    rgb = np.asarray(image.convert("RGB"), dtype=np.uint8)
    h, w = rgb.shape[:2]
    if h == 0 or w == 0:
        return 0

    xs = np.linspace(0, w - 1, num=max(1, sample_w)).round().astype(int)
    ys = np.linspace(0, h - 1, num=max(1, sample_h)).round().astype(int)

    samples = np.concatenate(
        [
            rgb[0, xs],
            rgb[h - 1, xs],
            rgb[ys, 0],
            rgb[ys, w - 1],
        ],
        axis=0,
    )

    matched = int(_color_mask(samples, colors, tolerance).sum())
    return int(round(255 * matched / samples.shape[0]))


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def crop_relative(img: Image.Image, roi: Tuple[float, float, float, float]) -> Image.Image:
    """
    img: parent image (frame or slot crop)
    roi: position relative to the parent (x, y, w, h)
    """
    o_w, o_h = img.size
    r_x, r_y, r_w, r_h = roi
    left = int(round(o_w * r_x))
    top = int(round(o_h * r_y))
    right = int(round(o_w * (r_x + r_w)))
    bottom = int(round(o_h * (r_y + r_h)))

    return img.crop((left, top, max(left + 1, right), max(top + 1, bottom)))
