"""Diff engine — pixel comparison of a baseline and a new render."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageChops, ImageOps

MARKER_COLOR = (255, 0, 255, 255)
BACKGROUND_COLOR = (0, 0, 0, 0)
# Alpha of unchanged pixels in the diff image, so changes stand out
CONTEXT_ALPHA = 48


@dataclass
class DiffOutcome:
    equal: bool
    diff_image: Optional[Image.Image] = None


def pad_to(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Place ``image`` at the top-left of a background-filled canvas."""
    if image.size == size:
        return image
    canvas = Image.new("RGBA", size, BACKGROUND_COLOR)
    if image.width and image.height:
        canvas.paste(image, (0, 0))
    return canvas


def mismatch_mask(old: Image.Image, new: Image.Image, tolerance: int = 0) -> Image.Image:
    """L-mode mask, 255 where any channel differs by more than ``tolerance``."""
    difference = ImageChops.difference(old, new)
    r, g, b, a = difference.split()
    strongest = ImageChops.lighter(ImageChops.lighter(r, g), ImageChops.lighter(b, a))
    return strongest.point(lambda v: 255 if v > tolerance else 0)


def render_diff(new: Image.Image, mask: Image.Image) -> Image.Image:
    """Faded grayscale of the new image with mismatching pixels in the marker color."""
    context = ImageOps.grayscale(new).convert("RGBA")
    context.putalpha(CONTEXT_ALPHA)
    marker = Image.new("RGBA", new.size, MARKER_COLOR)
    return Image.composite(marker, context, mask)


class DiffEngine:
    """Compares two images; pure and deterministic."""

    def __init__(self, tolerance: int = 0):
        if not 0 <= tolerance <= 255:
            raise ValueError(f"tolerance must be within 0-255, got {tolerance}")
        self.tolerance = tolerance

    def compare(self, old: Image.Image, new: Image.Image) -> DiffOutcome:
        old = old.convert("RGBA") if old.mode != "RGBA" else old
        new = new.convert("RGBA") if new.mode != "RGBA" else new

        if old.size == new.size:
            if old.width == 0 or old.height == 0:
                return DiffOutcome(equal=True)
            mask = mismatch_mask(old, new, self.tolerance)
            if mask.getbbox() is None:
                return DiffOutcome(equal=True)
            return DiffOutcome(equal=False, diff_image=render_diff(new, mask))

        # Different canvases never match; compare on the union canvas
        size = (max(old.width, new.width), max(old.height, new.height))
        if size[0] == 0 or size[1] == 0:
            return DiffOutcome(equal=False, diff_image=Image.new("RGBA", size, BACKGROUND_COLOR))
        padded_old = pad_to(old, size)
        padded_new = pad_to(new, size)
        mask = mismatch_mask(padded_old, padded_new, self.tolerance)
        return DiffOutcome(equal=False, diff_image=render_diff(padded_new, mask))
