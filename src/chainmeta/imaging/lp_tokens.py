"""Resolve the constituent tokens of an LP staking token."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List

from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import Web3Exception

LOGGER = logging.getLogger("chainmeta.imaging.lp_tokens")

# Two-token pools (Uniswap V3 style islands) expose their pair as token0/token1.
POOL_TOKENS_ABI = [
    {
        "inputs": [],
        "name": "token0",
        "outputs": [{"internalType": "contract IERC20", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "token1",
        "outputs": [{"internalType": "contract IERC20", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
]


@dataclass(frozen=True)
class LPTokenInfo:
    staking_token_address: str
    underlying_tokens: tuple[str, ...]
    is_lp_token: bool


def build_web3(rpc_url: str, timeout_seconds: float = 20.0) -> Web3:
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout_seconds}))


def fetch_lp_tokens(staking_token_address: str, web3: Web3) -> LPTokenInfo:
    """Read ``token0()`` and ``token1()``; any failure means a single-token vault."""

    address = to_checksum_address(staking_token_address)
    contract = web3.eth.contract(address=address, abi=POOL_TOKENS_ABI)
    try:
        with ThreadPoolExecutor(max_workers=2) as pool:
            futures = [pool.submit(contract.functions.token0().call), pool.submit(contract.functions.token1().call)]
            tokens: List[str] = [to_checksum_address(future.result()) for future in futures]
    except (Web3Exception, ValueError, OSError) as exc:
        LOGGER.warning("Could not fetch LP tokens for %s, treating as single token: %s", address, exc)
        return LPTokenInfo(address, (address,), False)
    return LPTokenInfo(address, tuple(tokens), True)


__all__ = ["LPTokenInfo", "POOL_TOKENS_ABI", "build_web3", "fetch_lp_tokens"]
