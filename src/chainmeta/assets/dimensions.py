"""Normalize asset images to an opaque 1024x1024 PNG canvas."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageOps
from tqdm import tqdm

from chainmeta.assets.checksums import iter_image_files

LOGGER = logging.getLogger("chainmeta.assets.dimensions")

TARGET_SIZE = 1024
BACKGROUND = (255, 255, 255)


@dataclass
class DimensionReport:
    fixed: int = 0
    unchanged: int = 0
    failed: int = 0


def is_fully_opaque(image: Image.Image) -> bool:
    """True when the image carries no alpha value below 255."""

    if image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info:
        alpha = image.convert("RGBA").getchannel("A")
        return alpha.getextrema()[0] == 255
    return True


def needs_fix(image: Image.Image) -> bool:
    if image.size != (TARGET_SIZE, TARGET_SIZE) or image.format != "PNG":
        return True
    return not is_fully_opaque(image)


def flatten_to_canvas(image: Image.Image, size: int = TARGET_SIZE) -> Image.Image:
    """Fit ``image`` within a ``size`` square on a white background."""

    image = ImageOps.exif_transpose(image).convert("RGBA")
    fitted = ImageOps.contain(image, (size, size), method=Image.Resampling.LANCZOS)
    canvas = Image.new("RGB", (size, size), BACKGROUND)
    offset = ((size - fitted.width) // 2, (size - fitted.height) // 2)
    canvas.paste(fitted, offset, mask=fitted.getchannel("A"))
    return canvas


def normalize_image(path: Path) -> bool:
    """Rewrite ``path`` in place when needed; returns True when the file changed."""

    with Image.open(path) as image:
        image.load()
        if not needs_fix(image):
            return False
        fixed = flatten_to_canvas(image)

    tmp_path = path.with_name(f"{path.name}.tmp")
    try:
        fixed.save(tmp_path, format="PNG")
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)
    return True


def normalize_images(asset_root: Path, *, progress: bool = False) -> DimensionReport:
    """Normalize every image under ``asset_root``; per-file failures are counted."""

    report = DimensionReport()
    paths = iter_image_files(asset_root)
    for path in tqdm(paths, desc="Fixing images", disable=not progress):
        try:
            changed = normalize_image(path)
        except (OSError, ValueError) as exc:
            LOGGER.error("Error fixing %s: %s", path, exc)
            report.failed += 1
            continue
        if changed:
            LOGGER.info("Fixed: %s", path.relative_to(asset_root))
            report.fixed += 1
        else:
            LOGGER.debug("Already correct: %s", path.relative_to(asset_root))
            report.unchanged += 1
    return report


__all__ = ["DimensionReport", "flatten_to_canvas", "is_fully_opaque", "needs_fix", "normalize_image", "normalize_images"]
