"""Compose one, two or three token images into a single 1024x1024 vault icon."""

from __future__ import annotations

import io
import logging
import math
from typing import Sequence

from PIL import Image, ImageDraw, ImageOps

from chainmeta.imaging.brand import WHITE, BrandFill, SolidColor

LOGGER = logging.getLogger("chainmeta.imaging.compose")

OUTPUT_SIZE = 1024
BORDER_WIDTH = 48
DIVIDER_WIDTH = 24
JPEG_QUALITY = 90


def open_image(data: bytes) -> Image.Image:
    """Decode ``data`` into an RGB image, flattening any alpha onto white."""

    with Image.open(io.BytesIO(data)) as source:
        image = ImageOps.exif_transpose(source).convert("RGBA")
    background = Image.new("RGB", image.size, WHITE)
    background.paste(image, mask=image.getchannel("A"))
    return background


def cover(image: Image.Image, width: int, height: int) -> Image.Image:
    """Resize to fill ``width`` x ``height``, cropping around the centre."""

    return ImageOps.fit(image, (width, height), method=Image.Resampling.LANCZOS, centering=(0.5, 0.5))


def to_jpeg(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.convert("RGB").save(buffer, format="JPEG", quality=JPEG_QUALITY)
    return buffer.getvalue()


def circle_mask(size: int, radius: int) -> Image.Image:
    mask = Image.new("L", (size, size), 0)
    center = size / 2
    ImageDraw.Draw(mask).ellipse(
        (center - radius, center - radius, center + radius, center + radius),
        fill=255,
    )
    return mask


def compose_single(image: Image.Image) -> Image.Image:
    return cover(image, OUTPUT_SIZE, OUTPUT_SIZE)


def compose_pair(left: Image.Image, right: Image.Image, fill: BrandFill | None = None) -> Image.Image:
    """Left half of ``left`` beside the right half of ``right`` inside a branded ring.

    Args:
        left: Image whose left half is kept.
        right: Image whose right half is kept.
        fill: Ring and divider fill; white when None.

    Returns:
        The composed 1024x1024 RGB image.
    """

    half = OUTPUT_SIZE // 2
    merged = Image.new("RGB", (OUTPUT_SIZE, OUTPUT_SIZE))
    merged.paste(cover(left, OUTPUT_SIZE, OUTPUT_SIZE).crop((0, 0, half, OUTPUT_SIZE)), (0, 0))
    merged.paste(cover(right, OUTPUT_SIZE, OUTPUT_SIZE).crop((half, 0, OUTPUT_SIZE, OUTPUT_SIZE)), (half, 0))

    brand = (fill or SolidColor(WHITE)).render(OUTPUT_SIZE)

    # Everything outside the inner edge of the ring shows the brand fill.
    result = brand.copy()
    result.paste(merged, (0, 0), circle_mask(OUTPUT_SIZE, half - BORDER_WIDTH))

    divider = (half - DIVIDER_WIDTH // 2, 0, half + DIVIDER_WIDTH // 2, OUTPUT_SIZE)
    result.paste(brand.crop(divider), divider[:2])
    return result


def compose_triple(first: Image.Image, second: Image.Image, third: Image.Image) -> Image.Image:
    """Grid approximation of a three-way split: one wide tile on top, two tall tiles below."""

    third_size = math.ceil(OUTPUT_SIZE / 3)
    two_thirds = third_size * 2
    canvas = Image.new("RGB", (OUTPUT_SIZE, OUTPUT_SIZE), WHITE)
    canvas.paste(cover(first, two_thirds, third_size), ((OUTPUT_SIZE - two_thirds) // 2, 0))
    canvas.paste(cover(second, third_size, two_thirds), (0, third_size))
    canvas.paste(cover(third, third_size, two_thirds), (two_thirds, third_size))
    return canvas


def merge_token_images(images: Sequence[bytes], fill: BrandFill | None = None) -> bytes | None:
    """Compose raw token images into JPEG bytes; None for unsupported counts."""

    if len(images) not in (1, 2, 3):
        LOGGER.error("Unsupported token count: %s", len(images))
        return None

    decoded = [open_image(data) for data in images]
    if len(decoded) == 1:
        composed = compose_single(decoded[0])
    elif len(decoded) == 2:
        composed = compose_pair(decoded[0], decoded[1], fill)
    else:
        composed = compose_triple(*decoded)
    return to_jpeg(composed)


__all__ = [
    "BORDER_WIDTH",
    "DIVIDER_WIDTH",
    "OUTPUT_SIZE",
    "compose_pair",
    "compose_single",
    "compose_triple",
    "cover",
    "merge_token_images",
    "open_image",
]
