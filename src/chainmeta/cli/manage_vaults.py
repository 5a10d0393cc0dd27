"""Reconcile the local vault list with the GraphQL vault listing."""

from __future__ import annotations

import argparse
import sys

from chainmeta.hub.reconcile import add_vaults_from_api, find_vaults_not_in_api, remove_vaults_not_in_api
from chainmeta.hub.vaults_api import VaultsApiClient, VaultsApiError
from chainmeta.observability import configure_logging, get_observability
from chainmeta.settings import VALID_CHAIN_NAMES, get_settings
from chainmeta.store import MetadataFileError

COMMANDS = {
    "find": find_vaults_not_in_api,
    "remove": remove_vaults_not_in_api,
    "add": add_vaults_from_api,
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage the vault list against the vaults API")
    parser.add_argument("command", choices=sorted(COMMANDS), help="find, remove or add vaults")
    parser.add_argument("--chain", choices=VALID_CHAIN_NAMES, default="mainnet")
    return parser.parse_args(argv)


def _print_vaults(header: str, vaults: list[dict]) -> None:
    print(header)
    print("=" * 80)
    for vault in vaults:
        print(f"\nVault Address: {vault.get('vaultAddress')}")
        print(f"  Name: {vault.get('name') or 'N/A'}")
        print(f"  Protocol: {vault.get('protocol') or 'N/A'}")
    print("\n" + "=" * 80)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    vaults_path = settings.list_file("vaults", args.chain)
    try:
        with VaultsApiClient(settings.vaults_api) as api:
            result = COMMANDS[args.command](vaults_path, api)
    except (VaultsApiError, MetadataFileError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.command == "find":
        if result.vaults:
            _print_vaults(f"Found {result.count} vault(s) in {vaults_path.name} that are NOT returned by the API:", result.vaults)
        else:
            print(f"All vaults in {vaults_path.name} are present in the API response")
    elif args.command == "remove":
        if result.vaults:
            _print_vaults(f"Removed {result.count} vault(s) that are NOT in the API response:", result.vaults)
        else:
            print(f"All vaults in {vaults_path.name} are present in the API response. No removals needed.")
    else:
        print(f"Added {result.count} vault(s) to {vaults_path.name}; skipped {len(result.skipped)} existing")

    get_observability(component="manage_vaults", settings=settings).emit_event(
        "vaults.reconciled",
        command=args.command,
        chain=args.chain,
        count=result.count,
        written=result.written,
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
