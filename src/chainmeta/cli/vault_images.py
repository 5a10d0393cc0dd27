"""Generate vault icons from their underlying token images."""

from __future__ import annotations

import argparse
import sys

import httpx
from eth_utils import to_checksum_address

from chainmeta.imaging.brand import parse_hex_color
from chainmeta.imaging.generator import VaultImageGenerator, select_vaults
from chainmeta.imaging.lp_tokens import build_web3
from chainmeta.imaging.upload import CloudinaryImageHost, ImageHostConfigError
from chainmeta.observability import configure_logging, get_observability
from chainmeta.settings import VALID_CHAIN_NAMES, get_settings
from chainmeta.store import MetadataFileError, load_vaults


def _hex_color(value: str) -> str:
    try:
        parse_hex_color(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate and upload vault icons")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--vault-address", help="Process a single vault")
    target.add_argument("--all", action="store_true", help="Process every vault without a logoURI")
    parser.add_argument("--chain", choices=VALID_CHAIN_NAMES, default="mainnet")
    parser.add_argument("--brand-color", type=_hex_color, default=None, help="Ring colour override (#RRGGBB)")
    parser.add_argument("--dry-run", action="store_true", help="Compose images without uploading or updating metadata")
    parser.add_argument("--force", action="store_true", help="With --all, also regenerate vaults that have a logoURI")
    parser.add_argument("--save-local", action="store_true", help="Also write composed images to the output directory")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    image_host = None
    if not args.dry_run:
        try:
            image_host = CloudinaryImageHost(settings.image_host)
        except ImageHostConfigError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    vaults_path = settings.list_file("vaults", args.chain)
    try:
        vaults = load_vaults(vaults_path)["vaults"]
    except MetadataFileError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.all:
        addresses = select_vaults(vaults, force=args.force)
        print(f"Processing {len(addresses)} vault(s) {'(forced)' if args.force else 'without logoURI'}")
    else:
        try:
            addresses = [to_checksum_address(args.vault_address)]
        except ValueError:
            print(f"Error: invalid vault address {args.vault_address}", file=sys.stderr)
            return 1

    with httpx.Client(timeout=30.0, follow_redirects=True) as http_client:
        generator = VaultImageGenerator(
            vaults_path=vaults_path,
            tokens_path=settings.list_file("tokens", args.chain),
            token_assets_dir=settings.assets_dir / "tokens",
            web3=build_web3(settings.chains.rpc_url(args.chain), settings.chains.request_timeout_seconds),
            image_host=image_host,
            http_client=http_client,
            brand_override=args.brand_color,
            dry_run=args.dry_run,
            save_local_dir=settings.paths.generated_images_dir if args.save_local else None,
            observability=get_observability(component="vault_images", settings=settings),
        )
        summary = generator.generate_many(addresses)

    print("\nSummary:")
    print(f"  Success: {summary.succeeded}")
    if summary.failed:
        print(f"  Failed: {summary.failed}")
        for result in summary.results:
            if not result.success:
                print(f"    - {result.vault_address}: {result.reason}")
    return 1 if summary.failed else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
