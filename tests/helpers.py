"""Builders shared by the chainmeta unit tests."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any

from PIL import Image

TOKEN_A = "0x6969696969696969696969696969696969696969"
TOKEN_B = "0x549943e04f40284185054145c6e4e9568c1d3241"
STAKING_TOKEN = "0x4a254b11810b8ebb63c5468e438fc561cb1bb1da"
VAULT_ADDRESS = "0x8ec2e5c3c1c9ef7b3e04882d42a0ba9c4c2a1b6f"


def write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return path


def png_bytes(color: tuple[int, ...], size: tuple[int, int] = (64, 64), mode: str = "RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def vault_entry(vault_address: str, staking_token: str = STAKING_TOKEN, **extra: Any) -> dict[str, Any]:
    entry = {
        "stakingTokenAddress": staking_token,
        "vaultAddress": vault_address,
        "name": "KODI WBERA-HONEY",
        "protocol": "Kodiak",
        "url": "https://app.kodiak.finance",
        "categories": ["defi/amm"],
    }
    entry.update(extra)
    return entry


def vaults_document(vaults: list[dict[str, Any]]) -> dict[str, Any]:
    return {"$schema": "../../schemas/vaults.schema.json", "name": "Reward vaults", "vaults": vaults}


def tokens_document(tokens: list[dict[str, Any]]) -> dict[str, Any]:
    return {"$schema": "../../schemas/tokens.schema.json", "name": "Tokens", "tokens": tokens}
