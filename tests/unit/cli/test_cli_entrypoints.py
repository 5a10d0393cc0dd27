"""Smoke tests for the command line entry points."""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest
from helpers import VAULT_ADDRESS, tokens_document, vault_entry, vaults_document, write_json

from chainmeta.cli import fix_checksums, manage_vaults, validate, vault_images
from chainmeta.hub.vaults_api import VaultListing, VaultsApiError


@pytest.fixture
def metadata_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("CHAINMETA_PATHS__METADATA_DIR", str(tmp_path))
    write_json(
        tmp_path / "tokens" / "mainnet.json",
        tokens_document([{"chainId": 80094, "address": "0x" + "6" * 40, "symbol": "W", "name": "W", "decimals": 18}]),
    )
    write_json(tmp_path / "vaults" / "mainnet.json", vaults_document([vault_entry(VAULT_ADDRESS)]))
    return tmp_path


def test_validate_exit_codes(metadata_dir, capsys):
    assert validate.main(["--skip-api-check"]) == 0
    assert "valid" in capsys.readouterr().out

    (metadata_dir / "validators").mkdir()
    (metadata_dir / "validators" / "mainnet.json").write_text("{", encoding="utf-8")

    assert validate.main(["--skip-api-check"]) == 1
    assert "could not parse JSON" in capsys.readouterr().out


def test_fix_checksums_reports_counts(tmp_path, capsys):
    (tmp_path / "tokens").mkdir()
    (tmp_path / "tokens" / ("0x" + "ab" * 20 + ".png")).write_bytes(b"x")

    assert fix_checksums.main(["--assets-dir", str(tmp_path)]) == 0
    assert "Fixed 1 files" in capsys.readouterr().out


def test_fix_checksums_missing_dir(tmp_path):
    assert fix_checksums.main(["--assets-dir", str(tmp_path / "nope")]) == 1


class _FakeApiClient:
    def __init__(self, listing=None, error=None):
        self.listing = listing
        self.error = error

    def __call__(self, settings):
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return None

    def fetch_all(self, **kwargs):
        if self.error:
            raise self.error
        return self.listing


def test_manage_vaults_remove(metadata_dir, monkeypatch, capsys):
    monkeypatch.setattr(manage_vaults, "VaultsApiClient", _FakeApiClient(VaultListing(addresses=set())))

    assert manage_vaults.main(["remove"]) == 0

    assert json.loads((metadata_dir / "vaults" / "mainnet.json").read_text())["vaults"] == []
    assert "Removed 1 vault(s)" in capsys.readouterr().out


def test_manage_vaults_api_failure_is_fatal(metadata_dir, monkeypatch):
    monkeypatch.setattr(manage_vaults, "VaultsApiClient", _FakeApiClient(error=VaultsApiError("down")))

    assert manage_vaults.main(["find"]) == 1


def test_vault_images_requires_a_target():
    with pytest.raises(SystemExit):
        vault_images.main([])
    with pytest.raises(SystemExit):
        vault_images.main(["--all", "--vault-address", VAULT_ADDRESS])
    with pytest.raises(SystemExit):
        vault_images.main(["--all", "--brand-color", "blue"])


def test_vault_images_dry_run_all(metadata_dir, monkeypatch):
    captured = SimpleNamespace(addresses=None, kwargs=None)

    class FakeGenerator:
        def __init__(self, **kwargs):
            captured.kwargs = kwargs

        def generate_many(self, addresses):
            captured.addresses = list(addresses)
            return SimpleNamespace(succeeded=len(captured.addresses), failed=0, results=[])

    monkeypatch.setattr(vault_images, "VaultImageGenerator", FakeGenerator)

    assert vault_images.main(["--all", "--dry-run", "--brand-color", "#0066FF"]) == 0
    assert len(captured.addresses) == 1
    assert captured.kwargs["dry_run"] is True
    assert captured.kwargs["image_host"] is None
    assert captured.kwargs["brand_override"] == "#0066FF"
