"""Tests for downloading icons that are missing from the asset tree."""

from __future__ import annotations

import httpx
import pytest
from helpers import TOKEN_A, TOKEN_B, VAULT_ADDRESS, png_bytes, tokens_document, vault_entry, vaults_document, write_json

from chainmeta.assets.downloads import download_missing_icons, file_extension


@pytest.mark.parametrize(
    ("url", "content_type", "expected"),
    [
        ("https://cdn.test/logo", "image/png", ".png"),
        ("https://cdn.test/logo.png", "image/jpeg; charset=binary", ".jpg"),
        ("https://cdn.test/logo", "image/webp", ".webp"),
        ("https://cdn.test/logo.JPEG?v=2", "application/octet-stream", ".jpeg"),
        ("https://cdn.test/logo", None, ".png"),
    ],
)
def test_file_extension(url, content_type, expected):
    assert file_extension(url, content_type) == expected


def test_downloads_only_missing_assets(tmp_path):
    metadata_dir = tmp_path / "metadata"
    assets_dir = metadata_dir / "assets"
    (assets_dir / "tokens").mkdir(parents=True)
    (assets_dir / "tokens" / f"{TOKEN_A}.png").write_bytes(b"existing")

    write_json(
        metadata_dir / "tokens" / "mainnet.json",
        tokens_document(
            [
                {"chainId": 80094, "address": TOKEN_A, "symbol": "A", "name": "A", "decimals": 18,
                 "logoURI": "https://cdn.test/a.png"},
                {"chainId": 80094, "address": TOKEN_B, "symbol": "B", "name": "B", "decimals": 6,
                 "logoURI": "https://cdn.test/b"},
            ]
        ),
    )
    write_json(
        metadata_dir / "vaults" / "mainnet.json",
        vaults_document([vault_entry(VAULT_ADDRESS)]),
    )

    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=png_bytes((0, 0, 0)), headers={"content-type": "image/jpeg"})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        reports = download_missing_icons(metadata_dir, assets_dir, "mainnet", client=client)

    assert requested == ["https://cdn.test/b"]
    assert (reports["tokens"].downloaded, reports["tokens"].failed) == (1, 0)
    assert (assets_dir / "tokens" / f"{TOKEN_B}.jpg").exists()
    # the vault has no logoURI to download from
    assert (reports["vaults"].downloaded, reports["vaults"].failed) == (0, 1)


def test_http_error_counts_as_failure(tmp_path):
    metadata_dir = tmp_path
    write_json(
        metadata_dir / "tokens" / "bepolia.json",
        tokens_document(
            [{"chainId": 80069, "address": TOKEN_B, "symbol": "B", "name": "B", "decimals": 6,
              "logoURI": "https://cdn.test/b.png"}]
        ),
    )
    write_json(metadata_dir / "vaults" / "bepolia.json", vaults_document([]))

    with httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(404))) as client:
        reports = download_missing_icons(metadata_dir, tmp_path / "assets", "bepolia", client=client)

    assert reports["tokens"].failed == 1
    assert not (tmp_path / "assets" / "tokens").exists()
