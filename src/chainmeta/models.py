"""Pydantic models for the curated metadata lists."""

from __future__ import annotations

import re
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")

TRUSTED_LOGO_ORIGINS: tuple[str, ...] = (
    "https://res.cloudinary.com/duv0g402y/",
    "https://raw.githubusercontent.com/berachain/metadata/",
    "https://assets.coingecko.com/",
)

DEFAULT_VAULT_LOGO_URI = "https://res.cloudinary.com/duv0g402y/image/upload/v1746534876/tokens/default.png"
DEFAULT_VAULT_URL = "https://hub.berachain.com"


def is_address(value: Any) -> bool:
    """Return True when ``value`` is a 20-byte hex address string."""

    return isinstance(value, str) and bool(ADDRESS_PATTERN.fullmatch(value.strip()))


class _Record(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class TokenRecord(_Record):
    """Token list entry keyed by ``(chain_id, address)``."""

    chain_id: int = Field(alias="chainId")
    address: str
    symbol: str
    name: str
    decimals: int
    logo_uri: str | None = Field(default=None, alias="logoURI")
    tags: List[str] | None = None
    extensions: Dict[str, Any] | None = None

    @property
    def identity(self) -> tuple[int, str]:
        return self.chain_id, self.address.lower()


class VaultRecord(_Record):
    """Reward vault entry keyed by ``vault_address``."""

    staking_token_address: str = Field(alias="stakingTokenAddress")
    vault_address: str = Field(alias="vaultAddress")
    name: str
    protocol: str
    url: str
    categories: List[str]
    action: str | None = None
    owner: str | None = None
    logo_uri: str | None = Field(default=None, alias="logoURI")
    description: str | None = None

    @field_validator("vault_address", "staking_token_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        if not is_address(value):
            raise ValueError(f"not a 20-byte hex address: {value!r}")
        return value


class ValidatorRecord(_Record):
    """Validator entry keyed by its BLS public key."""

    id: str
    name: str
    logo_uri: str | None = Field(default=None, alias="logoURI")
    description: str | None = None
    website: str | None = None
    twitter: str | None = None


class Subcategory(_Record):
    slug: str
    description: str | None = None


class Category(_Record):
    """One node of the single-level vault category taxonomy."""

    slug: str
    description: str | None = None
    subcategories: List[Subcategory] = Field(default_factory=list)

    def slugs(self) -> List[str]:
        """Return the slugs a vault may reference for this node."""

        return [self.slug, *(f"{self.slug}/{child.slug}" for child in self.subcategories)]


class ProtocolEntry(_Record):
    name: str
    url: str
    description: str
    logo_uri: str = Field(alias="logoURI")
    tags: List[str] | None = None


__all__ = [
    "ADDRESS_PATTERN",
    "Category",
    "DEFAULT_VAULT_LOGO_URI",
    "DEFAULT_VAULT_URL",
    "ProtocolEntry",
    "Subcategory",
    "TRUSTED_LOGO_ORIGINS",
    "TokenRecord",
    "ValidatorRecord",
    "VaultRecord",
    "is_address",
]
