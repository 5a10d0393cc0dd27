"""Validate every metadata list against its schema and report hub metadata gaps."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from chainmeta.observability import configure_logging, get_observability
from chainmeta.settings import get_settings
from chainmeta.validation import check_api_metadata, validate_metadata

LOGGER = logging.getLogger("chainmeta.cli.validate")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate token, vault and validator metadata files")
    parser.add_argument("--metadata-dir", type=Path, default=None, help="Override the metadata root directory")
    parser.add_argument(
        "--skip-api-check",
        action="store_true",
        help="Do not query the hub API for entities missing metadata",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    metadata_dir = args.metadata_dir or settings.metadata_dir
    report = validate_metadata(metadata_dir, settings.paths.schema_dir)
    if report.ok:
        print(f"All {len(report.checked)} JSON files are valid.")
    else:
        print(report.format())

    if not args.skip_api_check:
        warnings: list[str] = []
        check_api_metadata(settings.hub, warnings)
        if warnings:
            print(f"\n{len(warnings)} warnings found:")
            for message in warnings:
                print(f"  - {message}")

    get_observability(component="validate", settings=settings).emit_event(
        "validation.completed",
        files=len(report.checked),
        errors=report.error_count,
    )
    return 0 if report.ok else 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
