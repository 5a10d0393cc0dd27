"""Download token and vault icons that are listed but missing from the asset tree."""

from __future__ import annotations

import argparse
import sys

from chainmeta.assets.downloads import download_missing_icons
from chainmeta.observability import configure_logging
from chainmeta.settings import VALID_CHAIN_NAMES, get_settings
from chainmeta.store import MetadataFileError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Download missing token and vault icons")
    parser.add_argument("--chain", choices=VALID_CHAIN_NAMES, default="mainnet")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    try:
        reports = download_missing_icons(settings.metadata_dir, settings.assets_dir, args.chain)
    except MetadataFileError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for kind, report in reports.items():
        print(f"{kind}: downloaded {report.downloaded}, failed {report.failed}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
