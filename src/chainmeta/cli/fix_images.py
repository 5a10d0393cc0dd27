"""Normalize asset images to opaque 1024x1024 PNGs."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from chainmeta.assets.dimensions import normalize_images
from chainmeta.observability import configure_logging
from chainmeta.settings import get_settings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resize and flatten asset images onto a 1024x1024 canvas")
    parser.add_argument("--assets-dir", type=Path, default=None, help="Override the asset root directory")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    asset_root = args.assets_dir or settings.assets_dir
    if not asset_root.is_dir():
        print(f"Asset directory not found: {asset_root}", file=sys.stderr)
        return 1

    report = normalize_images(asset_root, progress=not args.no_progress)
    print(f"Fixed: {report.fixed}, already correct: {report.unchanged}, failed: {report.failed}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
