"""Download token and vault icons that have a ``logoURI`` but no local asset."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterable
from urllib.parse import urlparse

import httpx

from chainmeta.assets.checksums import IMAGE_EXTENSIONS
from chainmeta.store import read_list_file

LOGGER = logging.getLogger("chainmeta.assets.downloads")

_CONTENT_TYPE_EXTENSIONS = (
    ("image/png", ".png"),
    ("image/jpeg", ".jpg"),
    ("image/jpg", ".jpg"),
    ("image/webp", ".webp"),
)


@dataclass
class DownloadReport:
    downloaded: int = 0
    failed: int = 0


def file_extension(url: str, content_type: str | None) -> str:
    """Pick an extension from the content type, then the URL, then ``.png``."""

    if content_type:
        lowered = content_type.lower()
        for marker, ext in _CONTENT_TYPE_EXTENSIONS:
            if marker in lowered:
                return ext
    suffix = PurePosixPath(urlparse(url).path).suffix.lower()
    if suffix in (*IMAGE_EXTENSIONS, ".webp"):
        return suffix
    return ".png"


def find_local_asset(directory: Path, address: str) -> Path | None:
    for ext in IMAGE_EXTENSIONS:
        candidate = directory / f"{address}{ext}"
        if candidate.exists():
            return candidate
    return None


def download_icon(client: httpx.Client, url: str, destination_stem: Path) -> Path | None:
    """Fetch ``url`` and write it next to ``destination_stem``; None on failure."""

    try:
        response = client.get(url)
    except httpx.HTTPError as exc:
        LOGGER.warning("Error downloading %s: %s", url, exc)
        return None
    if response.is_error:
        LOGGER.warning("Failed to download %s: %s", url, response.status_code)
        return None

    ext = file_extension(url, response.headers.get("content-type"))
    target = destination_stem.with_name(destination_stem.name + ext)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(response.content)
    return target


def download_missing(
    client: httpx.Client,
    records: Iterable[Dict[str, Any]],
    *,
    address_key: str,
    directory: Path,
) -> DownloadReport:
    report = DownloadReport()
    for record in records:
        address = str(record.get(address_key, ""))
        if not address or find_local_asset(directory, address):
            continue
        logo_uri = record.get("logoURI")
        if not logo_uri:
            LOGGER.warning("No logoURI for %s (%s)", record.get("name", "?"), address)
            report.failed += 1
            continue
        saved = download_icon(client, logo_uri, directory / address)
        if saved is None:
            report.failed += 1
            continue
        LOGGER.info("Downloaded: %s", saved.name)
        report.downloaded += 1
    return report


def download_missing_icons(
    metadata_dir: Path,
    assets_dir: Path,
    chain: str,
    *,
    client: httpx.Client | None = None,
) -> Dict[str, DownloadReport]:
    """Download missing token and vault icons for ``chain``."""

    owns_client = client is None
    client = client or httpx.Client(timeout=30.0, follow_redirects=True)
    try:
        tokens = read_list_file(metadata_dir / "tokens" / f"{chain}.json", "tokens")["tokens"]
        vaults = read_list_file(metadata_dir / "vaults" / f"{chain}.json", "vaults")["vaults"]
        return {
            "tokens": download_missing(client, tokens, address_key="address", directory=assets_dir / "tokens"),
            "vaults": download_missing(client, vaults, address_key="vaultAddress", directory=assets_dir / "vaults"),
        }
    finally:
        if owns_client:
            client.close()


__all__ = ["DownloadReport", "download_icon", "download_missing", "download_missing_icons", "file_extension"]
