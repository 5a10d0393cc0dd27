"""Write generated logo URLs back into the vault list."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from chainmeta.store import MetadataFileError, find_vault, load_vaults, write_json_atomic

LOGGER = logging.getLogger("chainmeta.imaging.metadata")


@dataclass(frozen=True)
class MetadataUpdateResult:
    success: bool
    file_path: Path
    vault_address: str
    error: str | None = None


def update_vault_logo_uri(vaults_path: Path, vault_address: str, logo_uri: str) -> MetadataUpdateResult:
    """Set ``logoURI`` on one vault, re-reading the file so earlier updates are kept."""

    try:
        content = load_vaults(vaults_path)
        vault = find_vault(content["vaults"], vault_address)
        if vault is None:
            return MetadataUpdateResult(
                False, vaults_path, vault_address, f"Vault with address {vault_address} not found in {vaults_path}"
            )
        vault["logoURI"] = logo_uri
        write_json_atomic(vaults_path, content)
    except (MetadataFileError, OSError) as exc:
        return MetadataUpdateResult(False, vaults_path, vault_address, str(exc))
    LOGGER.debug("Updated logoURI for %s in %s", vault_address, vaults_path)
    return MetadataUpdateResult(True, vaults_path, vault_address)


__all__ = ["MetadataUpdateResult", "update_vault_logo_uri"]
