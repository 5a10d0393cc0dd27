"""Reconcile the local vault list with the GraphQL vault listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from chainmeta.hub.vaults_api import ApiVault, VaultsApiClient
from chainmeta.models import DEFAULT_VAULT_LOGO_URI, DEFAULT_VAULT_URL
from chainmeta.store import load_vaults, write_json_atomic

LOGGER = logging.getLogger("chainmeta.hub.reconcile")

UNKNOWN_PROTOCOL = "UNKNOWN"
DEFAULT_CATEGORY = "defi/yield"

# First match wins; each rule is (protocol, name needles, symbol needles).
_PROTOCOL_RULES: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("Kodiak", ("kodi",), ("kodi",)),
    ("Infrared", ("infrared",), ("i-",)),
    ("Pendle", ("pendle",), ("pendle",)),
    ("Beradrome", ("beradrome",), ()),
    ("EVK", ("evk",), ("elbgt",)),
    ("BeraPaw", ("berapaw",), ("berapaw",)),
    ("Smilee", ("smilee",), ("smilee",)),
    ("Charm", ("alpha vault",), ("av",)),
    ("Swell", ("sweth",), ("sweth",)),
)

_CATEGORY_RULES: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("defi/amm", ("amm", "pool", "liquidity"), ()),
    ("defi/lending", ("lending", "lend"), ()),
    ("defi/liquid-staking", ("liquid", "stake"), ("elbgt",)),
    ("defi/yield", ("yield", "vault"), ()),
    ("defi/derivatives", ("derivative", "pendle"), ()),
)


@dataclass(slots=True)
class ReconcileResult:
    """Outcome of one reconciliation command."""

    vaults: List[Dict[str, Any]] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    written: bool = False

    @property
    def count(self) -> int:
        return len(self.vaults)


def _first_match(
    rules: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...],
    name: str,
    symbol: str,
) -> str | None:
    name, symbol = name.lower(), symbol.lower()
    for label, name_needles, symbol_needles in rules:
        if any(needle in name for needle in name_needles) or any(needle in symbol for needle in symbol_needles):
            return label
    return None


def infer_protocol(name: str, symbol: str) -> str:
    """Guess the protocol from the staking token's name and symbol."""

    return _first_match(_PROTOCOL_RULES, name, symbol) or UNKNOWN_PROTOCOL


def infer_category(name: str, symbol: str) -> List[str]:
    """Guess a single category slug from the staking token's name and symbol."""

    return [_first_match(_CATEGORY_RULES, name, symbol) or DEFAULT_CATEGORY]


def has_no_metadata(vault: ApiVault) -> bool:
    """True when the API carries no curated metadata at all for ``vault``."""

    metadata = vault.metadata
    if metadata is None:
        return True
    return (
        not metadata.name
        and not metadata.logo_uri
        and not metadata.url
        and not metadata.protocol_name
        and not metadata.protocol_icon
        and not metadata.description
        and not metadata.categories
        and not metadata.action
    )


def placeholder_vault(vault: ApiVault) -> Dict[str, Any]:
    """Build the placeholder entry appended for a vault without metadata."""

    token = vault.staking_token
    token_name = token.name if token else ""
    token_symbol = token.symbol if token else ""
    return {
        "stakingTokenAddress": token.address if token else "",
        "vaultAddress": vault.vault_address,
        "name": token_name or token_symbol or "Unknown Vault",
        "protocol": infer_protocol(token_name, token_symbol),
        "categories": infer_category(token_name, token_symbol),
        "logoURI": DEFAULT_VAULT_LOGO_URI,
        "url": DEFAULT_VAULT_URL,
        "description": f"Placeholder entry for {token_symbol} vault. Metadata needs to be added.",
    }


def find_vaults_not_in_api(vaults_path: Path, api: VaultsApiClient) -> ReconcileResult:
    """List local vaults the API does not return (whitelisted or not)."""

    local = load_vaults(vaults_path)["vaults"]
    LOGGER.info("Found %s vaults in %s", len(local), vaults_path.name)
    listing = api.fetch_all(include_non_whitelisted=True, full_data=False)
    missing = [vault for vault in local if str(vault.get("vaultAddress", "")).lower() not in listing.addresses]
    return ReconcileResult(vaults=missing)


def remove_vaults_not_in_api(vaults_path: Path, api: VaultsApiClient) -> ReconcileResult:
    """Drop local vaults the API does not return, preserving the order of the rest."""

    content = load_vaults(vaults_path)
    local = content["vaults"]
    LOGGER.info("Found %s vaults in %s", len(local), vaults_path.name)
    listing = api.fetch_all(include_non_whitelisted=True, full_data=False)

    kept: List[Dict[str, Any]] = []
    removed: List[Dict[str, Any]] = []
    for vault in local:
        bucket = kept if str(vault.get("vaultAddress", "")).lower() in listing.addresses else removed
        bucket.append(vault)

    result = ReconcileResult(vaults=removed)
    if removed:
        content["vaults"] = kept
        write_json_atomic(vaults_path, content)
        result.written = True
        LOGGER.info("Removed %s vault(s); %s remaining", len(removed), len(kept))
    return result


def add_vaults_from_api(vaults_path: Path, api: VaultsApiClient) -> ReconcileResult:
    """Append placeholder entries for whitelisted API vaults without metadata."""

    listing = api.fetch_all(include_non_whitelisted=False, full_data=True)
    candidates = [vault for vault in listing.vaults if has_no_metadata(vault)]
    LOGGER.info("Found %s vaults without metadata", len(candidates))

    content = load_vaults(vaults_path)
    existing = {str(vault.get("vaultAddress", "")).lower() for vault in content["vaults"]}

    result = ReconcileResult()
    for vault in candidates:
        address = vault.vault_address.lower()
        if address in existing:
            LOGGER.info("Skipping %s: already exists", vault.vault_address)
            result.skipped.append(vault.vault_address)
            continue
        entry = placeholder_vault(vault)
        content["vaults"].append(entry)
        existing.add(address)
        result.vaults.append(entry)
        LOGGER.info("Added vault: %s (%s) - Protocol: %s", entry["name"], vault.vault_address, entry["protocol"])

    if result.vaults:
        write_json_atomic(vaults_path, content)
        result.written = True
    return result


__all__ = [
    "ReconcileResult",
    "add_vaults_from_api",
    "find_vaults_not_in_api",
    "has_no_metadata",
    "infer_category",
    "infer_protocol",
    "placeholder_vault",
    "remove_vaults_not_in_api",
]
