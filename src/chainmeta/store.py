"""Read-modify-write helpers for the metadata list files."""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict, List

LOGGER = logging.getLogger("chainmeta.store")


class MetadataFileError(RuntimeError):
    """Raised when a metadata list file cannot be read or has the wrong shape."""


def read_list_file(path: Path, list_key: str) -> Dict[str, Any]:
    """Load a metadata list file and check that ``list_key`` holds an array."""

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise MetadataFileError(f"Metadata file not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise MetadataFileError(f"Could not read {path}: {exc}") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get(list_key), list):
        raise MetadataFileError(f"{path} does not contain a '{list_key}' array")
    return payload


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o644 & ~umask


def write_json_atomic(path: Path, payload: Any) -> None:
    """Write ``payload`` as two-space indented JSON via a temp file and rename.

    The rewritten file keeps the permission bits of the file it replaces; a new
    file gets 0644 minus the process umask.
    """

    text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.chmod(tmp_name, _target_mode(path))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def find_vault(vaults: List[Dict[str, Any]], vault_address: str) -> Dict[str, Any] | None:
    """Return the vault entry matching ``vault_address`` (case-insensitive)."""

    wanted = vault_address.lower()
    for vault in vaults:
        if str(vault.get("vaultAddress", "")).lower() == wanted:
            return vault
    return None


def load_vaults(path: Path) -> Dict[str, Any]:
    return read_list_file(path, "vaults")


def load_token_logo_map(path: Path) -> Dict[str, str]:
    """Map lower-cased token addresses to their ``logoURI``.

    A missing or unreadable token list yields an empty map and a warning;
    icon resolution then falls back to local assets only.
    """

    try:
        payload = read_list_file(path, "tokens")
    except MetadataFileError as exc:
        LOGGER.warning("Could not load token metadata: %s", exc)
        return {}
    logos: Dict[str, str] = {}
    for token in payload["tokens"]:
        if not isinstance(token, dict):
            continue
        address = str(token.get("address", "")).lower()
        logo_uri = token.get("logoURI")
        if address and logo_uri:
            logos[address] = logo_uri
    return logos


__all__ = [
    "MetadataFileError",
    "find_vault",
    "load_token_logo_map",
    "load_vaults",
    "read_list_file",
    "write_json_atomic",
]
