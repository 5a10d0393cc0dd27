"""Client for the public GraphQL reward-vault listing."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chainmeta.settings.config import VaultsAPISettings

LOGGER = logging.getLogger("chainmeta.hub.vaults_api")

GRAPHQL_QUERY_SIMPLE = """query GetVaults($where: GqlRewardVaultFilter, $pageSize: Int, $skip: Int) {
  polGetRewardVaults(
    where: $where
    first: $pageSize
    skip: $skip
  ) {
    pagination {
      currentPage
      totalCount
      __typename
    }
    vaults {
      vaultAddress
      isVaultWhitelisted
      __typename
    }
    __typename
  }
}"""

GRAPHQL_QUERY_FULL = """query GetVaults($where: GqlRewardVaultFilter, $pageSize: Int, $skip: Int, $orderBy: GqlRewardVaultOrderBy = bgtCapturePercentage, $orderDirection: GqlRewardVaultOrderDirection = desc, $search: String) {
  polGetRewardVaults(
    where: $where
    first: $pageSize
    skip: $skip
    orderBy: $orderBy
    orderDirection: $orderDirection
    search: $search
  ) {
    pagination {
      currentPage
      totalCount
      __typename
    }
    vaults {
      ...ApiVault
      __typename
    }
    __typename
  }
}

fragment ApiVault on GqlRewardVault {
  id: vaultAddress
  vaultAddress
  address: vaultAddress
  isVaultWhitelisted
  dynamicData {
    allTimeReceivedBGTAmount
    apr
    bgtCapturePercentage
    bgtCapturePerBlock
    activeIncentivesValueUsd
    activeIncentivesRateUsd
    tvl
    __typename
  }
  stakingTokenAmount
  stakingToken {
    address
    name
    symbol
    decimals
    __typename
  }
  metadata {
    name
    logoURI
    url
    protocolName
    protocolIcon
    description
    categories
    action
    __typename
  }
  __typename
}"""


class VaultsApiError(RuntimeError):
    """Raised when the vault listing cannot be fetched after all retries."""


class ApiStakingToken(BaseModel):
    model_config = ConfigDict(extra="ignore")

    address: str
    name: str = ""
    symbol: str = ""
    decimals: int | None = None


class ApiVaultMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    logo_uri: str | None = Field(default=None, alias="logoURI")
    url: str | None = None
    protocol_name: str | None = Field(default=None, alias="protocolName")
    protocol_icon: str | None = Field(default=None, alias="protocolIcon")
    description: str | None = None
    categories: List[str] | None = None
    action: str | None = None


class ApiDynamicData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    apr: float | None = None
    tvl: float | None = None


class ApiVault(BaseModel):
    """One vault as returned by ``polGetRewardVaults``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    vault_address: str = Field(alias="vaultAddress")
    is_whitelisted: bool | None = Field(default=None, alias="isVaultWhitelisted")
    staking_token: ApiStakingToken | None = Field(default=None, alias="stakingToken")
    metadata: ApiVaultMetadata | None = None
    dynamic_data: ApiDynamicData | None = Field(default=None, alias="dynamicData")


class ApiPagination(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    current_page: int | None = Field(default=None, alias="currentPage")
    total_count: int = Field(alias="totalCount")


class VaultsPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pagination: ApiPagination
    vaults: List[ApiVault] = Field(default_factory=list)


@dataclass(slots=True)
class VaultListing:
    """Result of a full pagination pass."""

    addresses: set[str] = field(default_factory=set)
    vaults: List[ApiVault] = field(default_factory=list)
    total_count: int = 0


def build_payload(
    skip: int,
    page_size: int,
    *,
    include_non_whitelisted: bool,
    full_data: bool,
) -> Dict[str, Any]:
    """Return the ``GetVaults`` request body."""

    variables: Dict[str, Any] = {
        "skip": skip,
        "pageSize": page_size,
        "where": {"includeNonWhitelisted": include_non_whitelisted, "protocolsIn": None},
    }
    if full_data:
        variables["orderBy"] = "bgtCapturePercentage"
        variables["orderDirection"] = "desc"
    return {
        "operationName": "GetVaults",
        "variables": variables,
        "query": GRAPHQL_QUERY_FULL if full_data else GRAPHQL_QUERY_SIMPLE,
    }


class VaultsApiClient:
    """Paginated, retrying reader for the GraphQL vault listing."""

    def __init__(
        self,
        settings: Optional[VaultsAPISettings] = None,
        *,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or VaultsAPISettings()
        self._client = client or httpx.Client(timeout=self._settings.timeout_seconds)
        self._owns_client = client is None
        self._sleep = sleep

    @property
    def graphql_url(self) -> str:
        return self._settings.graphql_url

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "VaultsApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def query_page(
        self,
        skip: int,
        page_size: int,
        *,
        include_non_whitelisted: bool,
        full_data: bool,
    ) -> VaultsPage:
        """POST one ``GetVaults`` page, retrying with exponential back-off.

        Args:
            skip: Number of vaults to skip.
            page_size: Number of vaults requested.
            include_non_whitelisted: Whether non-whitelisted vaults are listed.
            full_data: Request staking token and metadata fields as well.

        Returns:
            The parsed ``polGetRewardVaults`` page.

        Raises:
            VaultsApiError: Every attempt failed.
        """

        payload = build_payload(
            skip, page_size, include_non_whitelisted=include_non_whitelisted, full_data=full_data
        )
        retries = max(1, self._settings.max_retries)
        for attempt in range(1, retries + 1):
            try:
                response = self._client.post(self.graphql_url, json=payload)
                if response.status_code == 429 and attempt < retries:
                    delay = 2**attempt
                    LOGGER.info("Rate limited. Waiting %ss before retry %s/%s...", delay, attempt + 1, retries)
                    self._sleep(delay)
                    continue
                response.raise_for_status()
                return _parse_page(response.json())
            except (httpx.HTTPError, ValueError, ValidationError) as exc:
                if attempt == retries:
                    raise VaultsApiError(f"GetVaults failed after {retries} attempts: {exc}") from exc
                delay = 2**attempt
                LOGGER.warning("Error occurred (%s). Waiting %ss before retry %s/%s...", exc, delay, attempt + 1, retries)
                self._sleep(delay)
        raise VaultsApiError(f"GetVaults failed after {retries} attempts")

    def fetch_all(self, *, include_non_whitelisted: bool, full_data: bool) -> VaultListing:
        """Walk every page sequentially and collect the listed vaults."""

        page_size = self._settings.page_size
        LOGGER.info("Fetching all vaults from API (includeNonWhitelisted: %s)", include_non_whitelisted)

        listing = VaultListing()
        first = self.query_page(
            0, page_size, include_non_whitelisted=include_non_whitelisted, full_data=full_data
        )
        listing.total_count = first.pagination.total_count
        LOGGER.info("Total vaults in API: %s", listing.total_count)
        fetched = self._collect(listing, first, full_data)

        skip = page_size
        while skip < listing.total_count:
            self._sleep(self._settings.page_delay_seconds)
            page = self.query_page(
                skip, page_size, include_non_whitelisted=include_non_whitelisted, full_data=full_data
            )
            fetched += self._collect(listing, page, full_data)
            LOGGER.info("Fetched %s/%s vaults...", fetched, listing.total_count)
            if len(page.vaults) < page_size:
                break
            skip += page_size

        LOGGER.info("Fetched %s unique vault addresses from API", len(listing.addresses))
        return listing

    @staticmethod
    def _collect(listing: VaultListing, page: VaultsPage, full_data: bool) -> int:
        for vault in page.vaults:
            listing.addresses.add(vault.vault_address.lower())
            if full_data:
                listing.vaults.append(vault)
        return len(page.vaults)


def _parse_page(body: Any) -> VaultsPage:
    data = body.get("data") if isinstance(body, dict) else None
    raw = data.get("polGetRewardVaults") if isinstance(data, dict) else None
    if not raw:
        raise ValueError("Invalid response structure")
    return VaultsPage.model_validate(raw)


__all__ = [
    "ApiVault",
    "ApiVaultMetadata",
    "VaultListing",
    "VaultsApiClient",
    "VaultsApiError",
    "VaultsPage",
    "build_payload",
]
