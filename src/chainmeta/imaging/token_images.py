"""Locate token images: local assets first, then the token's ``logoURI``."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Sequence

import httpx
from eth_utils import to_checksum_address

from chainmeta.assets.checksums import IMAGE_EXTENSIONS

LOGGER = logging.getLogger("chainmeta.imaging.token_images")


@dataclass(frozen=True)
class TokenImage:
    token_address: str
    data: bytes | None = None
    source: str | None = None

    @property
    def found(self) -> bool:
        return self.data is not None


def find_local_token_image(token_address: str, token_assets_dir: Path) -> Path | None:
    """Return ``<checksum>.png|.jpg|.jpeg`` under ``token_assets_dir``, in that order."""

    checksum = to_checksum_address(token_address)
    for ext in IMAGE_EXTENSIONS:
        candidate = token_assets_dir / f"{checksum}{ext}"
        if candidate.exists():
            return candidate
    return None


def download_image(client: httpx.Client, url: str) -> bytes | None:
    try:
        response = client.get(url)
    except httpx.HTTPError as exc:
        LOGGER.warning("Error downloading image from %s: %s", url, exc)
        return None
    if response.is_error:
        LOGGER.warning("Failed to download image from %s: %s", url, response.status_code)
        return None
    return response.content


def load_token_image(
    token_address: str,
    token_assets_dir: Path,
    client: httpx.Client,
    logo_uri: str | None = None,
) -> TokenImage:
    local = find_local_token_image(token_address, token_assets_dir)
    if local is not None:
        try:
            return TokenImage(token_address, local.read_bytes(), str(local))
        except OSError as exc:
            LOGGER.warning("Error reading local image at %s: %s", local, exc)

    if logo_uri:
        data = download_image(client, logo_uri)
        if data is not None:
            return TokenImage(token_address, data, logo_uri)
    return TokenImage(token_address)


def load_token_images(
    token_addresses: Sequence[str],
    token_assets_dir: Path,
    client: httpx.Client,
    logo_map: Mapping[str, str] | None = None,
) -> List[TokenImage]:
    """Load every token image concurrently, preserving input order."""

    logo_map = logo_map or {}
    if not token_addresses:
        return []
    with ThreadPoolExecutor(max_workers=len(token_addresses)) as pool:
        futures = [
            pool.submit(load_token_image, address, token_assets_dir, client, logo_map.get(address.lower()))
            for address in token_addresses
        ]
        return [future.result() for future in futures]


__all__ = ["TokenImage", "download_image", "find_local_token_image", "load_token_image", "load_token_images"]
