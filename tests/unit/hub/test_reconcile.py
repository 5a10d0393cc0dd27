"""Tests for reconciling the local vault list with the API listing."""

from __future__ import annotations

import json
from unittest.mock import Mock

import pytest
from helpers import vault_entry, vaults_document, write_json

from chainmeta.hub.reconcile import (
    add_vaults_from_api,
    find_vaults_not_in_api,
    has_no_metadata,
    infer_category,
    infer_protocol,
    remove_vaults_not_in_api,
)
from chainmeta.hub.vaults_api import ApiVault, VaultListing
from chainmeta.models import DEFAULT_VAULT_LOGO_URI, DEFAULT_VAULT_URL

V1 = "0x" + "1" * 40
V2 = "0x" + "2" * 40
V3 = "0x" + "3" * 40
V4 = "0x" + "a" * 40


def _api(addresses=(), vaults=()):
    api = Mock()
    api.fetch_all.return_value = VaultListing(addresses={a.lower() for a in addresses}, vaults=list(vaults))
    return api


def _api_vault(address, name="", symbol="", metadata=None):
    return ApiVault.model_validate(
        {
            "vaultAddress": address,
            "stakingToken": {"address": "0x" + "f" * 40, "name": name, "symbol": symbol, "decimals": 18},
            "metadata": metadata,
        }
    )


@pytest.fixture
def vaults_file(tmp_path):
    return write_json(
        tmp_path / "vaults" / "mainnet.json",
        vaults_document([vault_entry(V1), vault_entry(V2.upper().replace("0X", "0x")), vault_entry(V3)]),
    )


@pytest.mark.parametrize(
    ("name", "symbol", "expected"),
    [
        ("Kodiak Island WBERA-HONEY", "KODI-WBERA-HONEY", "Kodiak"),
        ("Something", "i-BGT", "Infrared"),
        ("PT sUSDe", "PENDLE-LPT", "Pendle"),
        ("Beradrome LP", "", "Beradrome"),
        ("Euler Vault", "eLBGT", "EVK"),
        ("BeraPaw LBGT", "", "BeraPaw"),
        ("Alpha Vault WETH", "", "Charm"),
        ("swETH", "", "Swell"),
        ("Plain token", "TKN", "UNKNOWN"),
    ],
)
def test_infer_protocol(name, symbol, expected):
    assert infer_protocol(name, symbol) == expected


@pytest.mark.parametrize(
    ("name", "symbol", "expected"),
    [
        ("Stable Pool", "", ["defi/amm"]),
        ("Lending receipt", "", ["defi/lending"]),
        ("Staked BERA", "", ["defi/liquid-staking"]),
        ("x", "eLBGT", ["defi/liquid-staking"]),
        ("Yield token", "", ["defi/yield"]),
        ("Derivative note", "", ["defi/derivatives"]),
        ("Mystery", "MYST", ["defi/yield"]),
    ],
)
def test_infer_category(name, symbol, expected):
    assert infer_category(name, symbol) == expected


def test_has_no_metadata():
    assert has_no_metadata(_api_vault(V1))
    assert has_no_metadata(_api_vault(V1, metadata={"name": "", "categories": [], "logoURI": None}))
    assert not has_no_metadata(_api_vault(V1, metadata={"categories": ["defi/amm"]}))
    assert not has_no_metadata(_api_vault(V1, metadata={"action": "Stake"}))


def test_find_reports_local_vaults_missing_remotely(vaults_file):
    api = _api(addresses=[V1, V3])

    result = find_vaults_not_in_api(vaults_file, api)

    api.fetch_all.assert_called_once_with(include_non_whitelisted=True, full_data=False)
    assert [vault["vaultAddress"].lower() for vault in result.vaults] == [V2]
    assert result.written is False


def test_remove_preserves_order_of_survivors(vaults_file):
    result = remove_vaults_not_in_api(vaults_file, _api(addresses=[V3, V1]))

    content = json.loads(vaults_file.read_text())
    assert [vault["vaultAddress"] for vault in content["vaults"]] == [V1, V3]
    assert result.count == 1
    assert result.written is True
    assert vaults_file.read_text().endswith("}\n")


def test_remove_without_changes_leaves_file_untouched(vaults_file):
    before = vaults_file.read_bytes()
    mtime = vaults_file.stat().st_mtime_ns

    result = remove_vaults_not_in_api(vaults_file, _api(addresses=[V1, V2, V3]))

    assert result.count == 0
    assert vaults_file.read_bytes() == before
    assert vaults_file.stat().st_mtime_ns == mtime


def test_add_appends_placeholders_for_new_metadata_less_vaults(vaults_file):
    api = _api(
        vaults=[
            _api_vault(V1),
            _api_vault(V4, name="Kodiak Island WBERA-HONEY", symbol="KODI-WBERA-HONEY"),
            _api_vault("0x" + "b" * 40, name="Named", metadata={"name": "Already curated"}),
        ]
    )

    result = add_vaults_from_api(vaults_file, api)

    api.fetch_all.assert_called_once_with(include_non_whitelisted=False, full_data=True)
    content = json.loads(vaults_file.read_text())
    assert [vault["vaultAddress"] for vault in content["vaults"][:3]] == [V1, V2.upper().replace("0X", "0x"), V3]
    assert content["vaults"][3] == {
        "stakingTokenAddress": "0x" + "f" * 40,
        "vaultAddress": V4,
        "name": "Kodiak Island WBERA-HONEY",
        "protocol": "Kodiak",
        "categories": ["defi/yield"],
        "logoURI": DEFAULT_VAULT_LOGO_URI,
        "url": DEFAULT_VAULT_URL,
        "description": "Placeholder entry for KODI-WBERA-HONEY vault. Metadata needs to be added.",
    }
    assert len(content["vaults"]) == 4
    assert result.skipped == [V1]


def test_add_falls_back_to_symbol_then_unknown_name(vaults_file):
    api = _api(vaults=[_api_vault(V4, symbol="XYZ"), _api_vault("0x" + "c" * 40)])

    result = add_vaults_from_api(vaults_file, api)

    assert [vault["name"] for vault in result.vaults] == ["XYZ", "Unknown Vault"]
    assert [vault["protocol"] for vault in result.vaults] == ["UNKNOWN", "UNKNOWN"]
