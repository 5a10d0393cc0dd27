"""Rename address-named asset images to their checksummed form."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from chainmeta.assets.checksums import normalize_checksums
from chainmeta.observability import configure_logging
from chainmeta.settings import get_settings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Checksum address-named asset file names")
    parser.add_argument("--assets-dir", type=Path, default=None, help="Override the asset root directory")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    asset_root = args.assets_dir or settings.assets_dir
    if not asset_root.is_dir():
        print(f"Asset directory not found: {asset_root}", file=sys.stderr)
        return 1

    report = normalize_checksums(asset_root)
    print(f"Fixed {report.fixed} files")
    if report.failed:
        print(f"Failed to fix {report.failed} files")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
