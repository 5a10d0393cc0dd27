"""Generate, upload and record vault icons built from their tokens' images."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import httpx
from eth_utils import to_checksum_address
from pydantic import ValidationError
from web3 import Web3

from chainmeta.imaging.brand import BrandFill, resolve_brand_color
from chainmeta.imaging.compose import merge_token_images
from chainmeta.imaging.lp_tokens import fetch_lp_tokens
from chainmeta.imaging.metadata import update_vault_logo_uri
from chainmeta.imaging.token_images import load_token_images
from chainmeta.imaging.upload import ImageHost
from chainmeta.models import VaultRecord
from chainmeta.observability import Observability
from chainmeta.store import find_vault, load_token_logo_map, load_vaults

LOGGER = logging.getLogger("chainmeta.imaging.generator")


@dataclass(frozen=True)
class VaultImageResult:
    vault_address: str
    success: bool
    reason: str | None = None
    logo_uri: str | None = None
    local_path: Path | None = None


@dataclass
class BatchSummary:
    results: List[VaultImageResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.success)


def select_vaults(vaults: Iterable[Dict[str, Any]], *, force: bool = False) -> List[str]:
    """Vault addresses to process in batch mode: those without a logo unless forced.

    Entries without a usable ``vaultAddress`` are logged and skipped.
    """

    selected = []
    for index, vault in enumerate(vaults):
        if not force and str(vault.get("logoURI") or "").strip():
            continue
        try:
            selected.append(to_checksum_address(vault["vaultAddress"]))
        except (KeyError, TypeError, ValueError) as exc:
            LOGGER.warning("Skipping vault entry %s: invalid vaultAddress (%s)", index, exc)
    return selected


class VaultImageGenerator:
    """Runs the per-vault pipeline: LP lookup, image load, compose, upload, record.

    Args:
        vaults_path: Vault list that is read for staking tokens and rewritten with new logos.
        tokens_path: Token list used as the ``logoURI`` fallback for token images.
        token_assets_dir: Directory holding ``<checksum>.png|.jpg|.jpeg`` token images.
        web3: Client for the ``token0``/``token1`` calls.
        image_host: Upload target; may be None only in dry-run mode.
        http_client: Client used to download token logos.
        brand_override: Fill that replaces the owner's registered brand colour.
        dry_run: Compose only; skip upload and metadata update.
        save_local_dir: When set, every composed image is also written here as ``<address>.jpg``.
    """

    def __init__(
        self,
        *,
        vaults_path: Path,
        tokens_path: Path,
        token_assets_dir: Path,
        web3: Web3,
        image_host: Optional[ImageHost],
        http_client: httpx.Client,
        brand_override: str | BrandFill | None = None,
        dry_run: bool = False,
        save_local_dir: Path | None = None,
        observability: Optional[Observability] = None,
    ) -> None:
        if image_host is None and not dry_run:
            raise ValueError("An image host is required unless running in dry-run mode")
        self.vaults_path = vaults_path
        self.token_assets_dir = token_assets_dir
        self.web3 = web3
        self.image_host = image_host
        self.http_client = http_client
        self.brand_override = brand_override
        self.dry_run = dry_run
        self.save_local_dir = save_local_dir
        self.observability = observability
        self.logo_map = load_token_logo_map(tokens_path)

    def generate(self, vault_address: str) -> VaultImageResult:
        """Process one vault; failures are returned, never raised."""

        LOGGER.info("Processing vault: %s", vault_address)
        try:
            result = self._generate(vault_address)
        except Exception as exc:  # pragma: no cover - one bad vault must not stop a batch
            LOGGER.exception("Vault %s failed", vault_address)
            result = VaultImageResult(vault_address, False, str(exc))
        if not result.success:
            LOGGER.error("Vault %s: %s", vault_address, result.reason)
        if self.observability is not None:
            self.observability.emit_event(
                "vault_image.generated", vault=vault_address, success=result.success, reason=result.reason
            )
            self.observability.increment(
                "vault_image.result", tags={"outcome": "success" if result.success else "failure"}
            )
        return result

    def generate_many(self, vault_addresses: Iterable[str]) -> BatchSummary:
        summary = BatchSummary()
        for address in vault_addresses:
            summary.results.append(self.generate(address))
        LOGGER.info("Summary: %s succeeded, %s failed", summary.succeeded, summary.failed)
        return summary

    def _generate(self, vault_address: str) -> VaultImageResult:
        vault = find_vault(load_vaults(self.vaults_path)["vaults"], vault_address)
        if vault is None:
            return VaultImageResult(vault_address, False, f"Vault {vault_address} not found in metadata")

        try:
            record = VaultRecord.model_validate(vault)
        except ValidationError as exc:
            return VaultImageResult(vault_address, False, f"Invalid vault entry: {exc.errors()[0]['msg']}")

        staking_token = to_checksum_address(record.staking_token_address)
        LOGGER.info("Staking token: %s", staking_token)
        lp_info = fetch_lp_tokens(staking_token, self.web3)
        LOGGER.info("Found %s underlying token(s)", len(lp_info.underlying_tokens))

        images = load_token_images(lp_info.underlying_tokens, self.token_assets_dir, self.http_client, self.logo_map)
        missing = [image.token_address for image in images if not image.found]
        if missing:
            return VaultImageResult(vault_address, False, f"Missing images for token(s): {', '.join(missing)}")

        fill = resolve_brand_color(self.brand_override, record.owner)
        merged = merge_token_images([image.data for image in images if image.data is not None], fill)
        if merged is None:
            return VaultImageResult(vault_address, False, "Failed to merge images")

        local_path = None
        if self.save_local_dir is not None:
            self.save_local_dir.mkdir(parents=True, exist_ok=True)
            local_path = self.save_local_dir / f"{vault_address}.jpg"
            local_path.write_bytes(merged)
            LOGGER.info("Saved locally: %s", local_path)

        if self.dry_run:
            LOGGER.info("[DRY RUN] Would upload image and update logoURI for %s", vault_address)
            return VaultImageResult(vault_address, True, local_path=local_path)

        assert self.image_host is not None  # checked in __init__
        upload = self.image_host.upload_vault_image(merged, vault_address)
        if not upload.success or not upload.url:
            return VaultImageResult(vault_address, False, f"Upload failed - {upload.error}", local_path=local_path)
        LOGGER.info("Uploaded: %s", upload.url)

        update = update_vault_logo_uri(self.vaults_path, vault_address, upload.url)
        if not update.success:
            return VaultImageResult(
                vault_address, False, f"Metadata update failed - {update.error}", local_path=local_path
            )
        return VaultImageResult(vault_address, True, logo_uri=upload.url, local_path=local_path)


__all__ = ["BatchSummary", "VaultImageGenerator", "VaultImageResult", "select_vaults"]
