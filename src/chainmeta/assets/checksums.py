"""Rename address-named asset files to their EIP-55 checksummed form."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from eth_utils import to_checksum_address

LOGGER = logging.getLogger("chainmeta.assets.checksums")

IMAGE_EXTENSIONS: tuple[str, ...] = (".png", ".jpg", ".jpeg")


@dataclass
class ChecksumReport:
    fixed: int = 0
    failed: int = 0


def iter_image_files(root: Path) -> list[Path]:
    """Return every image file under ``root`` (snapshot, safe to rename while iterating)."""

    found: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.suffix.lower() in IMAGE_EXTENSIONS:
                found.append(path)
    return found


def checksum_target(path: Path) -> Path | None:
    """Return the checksummed path for ``path``, or None when it is not address-named.

    Raises:
        ValueError: The stem starts with ``0x`` but is not a valid address.
    """

    stem = path.stem
    if "default" in stem or not stem.startswith("0x"):
        return None
    checksum = to_checksum_address(stem)
    if checksum == stem:
        return None
    return path.with_name(f"{checksum}{path.suffix}")


def normalize_checksums(asset_root: Path) -> ChecksumReport:
    """Rename every address-named image under ``asset_root`` to its checksum form."""

    report = ChecksumReport()
    for path in iter_image_files(asset_root):
        try:
            target = checksum_target(path)
        except ValueError:
            LOGGER.warning("Invalid address format: %s", path)
            report.failed += 1
            continue
        if target is None:
            continue
        if target.exists() and not target.samefile(path):
            LOGGER.warning("Not renaming %s: %s already exists", path, target.name)
            report.failed += 1
            continue
        path.rename(target)
        LOGGER.info("Fixed: %s -> %s", path.relative_to(asset_root), target.relative_to(asset_root))
        report.fixed += 1
    return report


__all__ = ["ChecksumReport", "IMAGE_EXTENSIONS", "checksum_target", "iter_image_files", "normalize_checksums"]
