"""Tests for checksum normalization of asset file names."""

from __future__ import annotations

from helpers import TOKEN_B
from eth_utils import to_checksum_address

from chainmeta.assets.checksums import checksum_target, iter_image_files, normalize_checksums


def _touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"img")
    return path


def test_renames_lowercase_address_files(tmp_path):
    _touch(tmp_path / "tokens" / f"{TOKEN_B}.png")
    _touch(tmp_path / "vaults" / "nested" / f"{TOKEN_B}.jpeg")

    report = normalize_checksums(tmp_path)

    checksum = to_checksum_address(TOKEN_B)
    assert report.fixed == 2
    assert report.failed == 0
    assert (tmp_path / "tokens" / f"{checksum}.png").exists()
    assert (tmp_path / "vaults" / "nested" / f"{checksum}.jpeg").exists()


def test_is_idempotent(tmp_path):
    _touch(tmp_path / "tokens" / f"{TOKEN_B}.png")
    normalize_checksums(tmp_path)
    before = sorted(path.name for path in iter_image_files(tmp_path))

    report = normalize_checksums(tmp_path)

    assert report.fixed == 0
    assert sorted(path.name for path in iter_image_files(tmp_path)) == before


def test_skips_default_and_non_address_names(tmp_path):
    _touch(tmp_path / "tokens" / "default.png")
    _touch(tmp_path / "tokens" / "0xdefault.png")
    _touch(tmp_path / "tokens" / "logo.jpg")
    _touch(tmp_path / "tokens" / f"{TOKEN_B}.svg")

    report = normalize_checksums(tmp_path)

    assert (report.fixed, report.failed) == (0, 0)
    assert checksum_target(tmp_path / "tokens" / "logo.jpg") is None


def test_invalid_hex_counts_as_failure_and_continues(tmp_path):
    _touch(tmp_path / "tokens" / "0xnothex.png")
    _touch(tmp_path / "tokens" / f"{TOKEN_B}.png")

    report = normalize_checksums(tmp_path)

    assert report.failed == 1
    assert report.fixed == 1
    assert (tmp_path / "tokens" / "0xnothex.png").exists()


def test_does_not_clobber_existing_checksum_file(tmp_path):
    checksum = to_checksum_address(TOKEN_B)
    _touch(tmp_path / f"{TOKEN_B}.png")
    (tmp_path / f"{checksum}.png").write_bytes(b"other")

    report = normalize_checksums(tmp_path)

    assert report.failed == 1
    assert (tmp_path / f"{checksum}.png").read_bytes() == b"other"
