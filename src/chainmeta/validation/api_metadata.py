"""Warn about hub entities that still lack curated metadata.

The hub exposes two authenticated listings (incentive tokens and vaults
without metadata). Nothing here fails the build: every problem degrades to a
logged warning and an empty listing.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, List, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chainmeta.settings.config import HubAPISettings

LOGGER = logging.getLogger("chainmeta.validation.api_metadata")

INCENTIVES_PATH = "incentives/no-metadata/"
VAULTS_PATH = "vaults/no-metadata/"


class MissingMetadataItem(BaseModel):
    """One entity reported by the hub as lacking metadata."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    address: str | None = None
    vault_address: str | None = Field(default=None, alias="vaultAddress")
    staking_token_address: str | None = Field(default=None, alias="stakingTokenAddress")


@dataclass(frozen=True)
class MissingMetadataEnvelope:
    """Response body resolved to one of the shapes the hub has served."""

    shape: Literal["array", "data", "items", "unrecognized"]
    items: tuple[MissingMetadataItem, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> "MissingMetadataEnvelope":
        if isinstance(payload, list):
            return cls("array", _parse_items(payload))
        if isinstance(payload, dict):
            for key in ("data", "items"):
                if isinstance(payload.get(key), list):
                    return cls(key, _parse_items(payload[key]))  # type: ignore[arg-type]
        return cls("unrecognized")


def _parse_items(raw_items: List[Any]) -> tuple[MissingMetadataItem, ...]:
    parsed: list[MissingMetadataItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        try:
            parsed.append(MissingMetadataItem.model_validate(raw))
        except ValidationError:
            LOGGER.debug("Ignoring malformed missing-metadata entry: %r", raw)
    return tuple(parsed)


def fetch_missing_metadata(client: httpx.Client, path: str) -> List[MissingMetadataItem]:
    """GET one listing; any failure is logged and returns an empty list."""

    try:
        response = client.get(path)
    except httpx.HTTPError as exc:
        LOGGER.warning(
            "Failed to fetch missing metadata from %s: %s. Skipping API metadata validation.", path, exc
        )
        return []

    if response.status_code in (401, 403):
        LOGGER.warning("API authentication failed for %s. Skipping API metadata validation.", path)
        return []
    if response.is_error:
        LOGGER.warning(
            "API request failed for %s (%s). Skipping API metadata validation.", path, response.status_code
        )
        return []

    try:
        payload = response.json()
    except ValueError:
        LOGGER.warning("API response from %s is not valid JSON. Skipping API metadata validation.", path)
        return []

    envelope = MissingMetadataEnvelope.from_payload(payload)
    if envelope.shape == "unrecognized":
        LOGGER.warning("Unrecognized response shape from %s. Skipping API metadata validation.", path)
    return list(envelope.items)


def incentive_warnings(items: List[MissingMetadataItem]) -> List[str]:
    messages = []
    for item in items:
        address = item.address or item.staking_token_address
        if address:
            messages.append(
                f"Missing metadata for incentive/staking token: {address}. Consider adding metadata for this address."
            )
    return messages


def vault_warnings(items: List[MissingMetadataItem]) -> List[str]:
    messages = []
    for item in items:
        vault, staking = item.vault_address, item.staking_token_address
        if vault and staking:
            messages.append(
                f"Missing metadata for vault: {vault} (staking token: {staking}). Consider adding vault metadata."
            )
        elif vault:
            messages.append(f"Missing metadata for vault: {vault}. Consider adding vault metadata.")
        elif staking:
            messages.append(f"Missing metadata for staking token: {staking}. Consider adding vault metadata.")
    return messages


def check_api_metadata(
    hub: HubAPISettings,
    warnings: List[str],
    *,
    client: httpx.Client | None = None,
) -> None:
    """Append one warning per entity the hub reports as missing metadata."""

    if not hub.token:
        LOGGER.warning("Hub API token not set. Skipping API metadata validation.")
        return

    owns_client = client is None
    if client is None:
        client = httpx.Client(
            base_url=hub.base_url.rstrip("/") + "/",
            headers={"Authorization": f"Bearer {hub.token}", "Content-Type": "application/json"},
            timeout=hub.timeout_seconds,
        )
    try:
        with ThreadPoolExecutor(max_workers=2) as pool:
            incentives_future = pool.submit(fetch_missing_metadata, client, INCENTIVES_PATH)
            vaults_future = pool.submit(fetch_missing_metadata, client, VAULTS_PATH)
            missing_incentives = incentives_future.result()
            missing_vaults = vaults_future.result()
    finally:
        if owns_client:
            client.close()

    warnings.extend(incentive_warnings(missing_incentives))
    warnings.extend(vault_warnings(missing_vaults))


__all__ = [
    "MissingMetadataEnvelope",
    "MissingMetadataItem",
    "check_api_metadata",
    "fetch_missing_metadata",
]
